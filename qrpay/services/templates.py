"""Nested template records (tags 32, 33, 62 and 64)."""
from __future__ import annotations

from typing import Any, Mapping

from ..registry import FieldRegistry
from ..tlv import TLVItem


def _item(tag: str, value: Any) -> TLVItem:
    return TLVItem(tag=tag, value="" if value is None else str(value))


def merchant_account_32(registry: FieldRegistry, account: Mapping[str, Any]) -> list[TLVItem]:
    tags = registry.merchant_account_32
    aep = account.get("amount_edit_possibility")
    return [
        _item(tags["guid"], registry.guid_account_32),
        _item(tags["service_code_erip"], account.get("service_code_erip")),
        _item(tags["payer_unique_id"], account.get("payer_unique_id")),
        _item(tags["payer_number"], account.get("payer_number")),
        _item(
            tags["amount_edit_possibility"],
            registry.amount_edit_allowed if aep or aep is None else registry.amount_edit_denied,
        ),
    ]


def merchant_account_33(registry: FieldRegistry, aggregator_id: str, account: Mapping[str, Any]) -> list[TLVItem]:
    tags = registry.merchant_account_33
    return [
        _item(tags["guid"], f"{registry.guid_account_33_prefix}{aggregator_id}"),
        _item(tags["service_producer_code"], account.get("service_producer_code")),
        _item(tags["service_code"], account.get("service_code")),
        _item(tags["outlet"], account.get("outlet")),
        _item(tags["order_code"], account.get("order_code")),
    ]


def additional_data(registry: FieldRegistry, data: Mapping[str, Any]) -> list[TLVItem]:
    return [_item(tag, data.get(name)) for name, tag in registry.additional_data.items()]


def merchant_language(registry: FieldRegistry, data: Mapping[str, Any]) -> list[TLVItem]:
    return [_item(tag, data.get(name)) for name, tag in registry.merchant_information_language.items()]
