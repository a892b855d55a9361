"""Payment payload parsing services."""
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import unquote

from ..registry import DEFAULT_REGISTRY, FieldRegistry
from ..tlv import parse_tlv

logger = logging.getLogger("qrpay.parser")

ParsedFields = dict[str, Any]


class PayloadParser:
    """Split a TLV payload into a nested ``{tag: value}`` map.

    Only framing is checked. A tag repeated on one level keeps its last value.
    """

    def __init__(self, registry: FieldRegistry = DEFAULT_REGISTRY):
        self.registry = registry
        self.nested_tags = registry.nested_tags

    def parse(self, payload: str) -> ParsedFields:
        fields = self._parse_record(unquote(payload))
        logger.debug("payload parsed", extra={"payload_length": len(payload), "tag_count": len(fields)})
        return fields

    def _parse_record(self, payload: str) -> ParsedFields:
        fields: ParsedFields = {}
        for item in parse_tlv(payload):
            if item.tag in self.nested_tags:
                fields[item.tag] = self._parse_record(item.value)
            else:
                fields[item.tag] = item.value
        return fields


def parse(payload: str, registry: FieldRegistry = DEFAULT_REGISTRY) -> ParsedFields:
    return PayloadParser(registry).parse(payload)
