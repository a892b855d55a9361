"""Utility helpers to build and parse EMV-style TLV payloads."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator
from urllib.parse import quote

from .services.errors import err_decode, err_malformed

# Characters URI escaping leaves alone on top of ASCII letters, digits and "_.-~".
SAFE_CHARS = "!*'();/?:@&=+$,[]"
_ESCAPE_RE = re.compile(r"%.{2}")
MAX_VALUE_LENGTH = 99


def sanitize(value: str) -> str:
    """Percent-encode ``value`` and drop every escaped sequence.

    Characters outside the allowlist disappear from the result instead of
    being encoded: ``"Ivan Ivanov"`` becomes ``"IvanIvanov"``.
    """

    return _ESCAPE_RE.sub("", quote(value, safe=SAFE_CHARS))


@dataclass(frozen=True)
class TLVItem:
    tag: str
    value: str

    def serialize(self) -> str:
        length = f"{len(self.value):02d}"
        return f"{self.tag}{length}{self.value}"


def build_tlv(items: Iterable[TLVItem]) -> str:
    """Serialize TLV items, sanitizing values and skipping empty ones."""

    parts = []
    for item in items:
        value = sanitize(item.value)
        if not value:
            continue
        if len(value) > MAX_VALUE_LENGTH:
            raise err_malformed(f"Value of tag {item.tag} is {len(value)} characters, limit is {MAX_VALUE_LENGTH}")
        parts.append(TLVItem(tag=item.tag, value=value).serialize())
    return "".join(parts)


def serialized_length(items: Iterable[TLVItem]) -> int:
    """Length ``build_tlv`` would produce for ``items``, without length checks."""

    return sum(4 + len(value) for value in (sanitize(item.value) for item in items) if value)


def parse_tlv(payload: str) -> Iterator[TLVItem]:
    """Parse TLV payload string into TLV items.

    Scanning stops once fewer than four characters remain.
    """

    idx = 0
    total = len(payload)
    while idx + 4 <= total:
        tag = payload[idx : idx + 2]
        raw_length = payload[idx + 2 : idx + 4]
        if not (raw_length.isascii() and raw_length.isdigit()):
            raise err_decode(f"Non-numeric length {raw_length!r} for tag {tag!r} at offset {idx}")
        length = int(raw_length)
        value_start = idx + 4
        value_end = value_start + length
        if value_end > total:
            raise err_decode(f"Length {length} of tag {tag!r} exceeds remaining payload")
        yield TLVItem(tag=tag, value=payload[value_start:value_end])
        idx = value_end
