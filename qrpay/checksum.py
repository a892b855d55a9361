"""Payload checksum (tag 63)."""
from __future__ import annotations

from hashlib import sha256

from .registry import DEFAULT_REGISTRY, FieldRegistry

CHECKSUM_DIGITS = 4


def checksum_value(data: str) -> str:
    """Return the last four hex digits of SHA-256 over ``data``, uppercased."""

    return sha256(data.encode("utf-8")).hexdigest()[-CHECKSUM_DIGITS:].upper()


def checksum(payload: str, registry: FieldRegistry = DEFAULT_REGISTRY) -> str:
    """Return the checksum field (``6304XXXX``) to append to ``payload``.

    Framed like an EMV CRC16 field, but the value is a truncated digest of
    the payload as assembled before the checksum header.
    """

    return f"{registry.checksum_header}{checksum_value(payload)}"
