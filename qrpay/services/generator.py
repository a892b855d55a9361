"""Payment payload generation services."""
from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import BaseModel

from ..checksum import checksum
from ..registry import DEFAULT_REGISTRY, FieldRegistry
from ..tlv import TLVItem, build_tlv
from . import templates
from .errors import err_malformed
from .validator import PayloadValidator

logger = logging.getLogger("qrpay.generator")


def format_amount(amount: Any) -> str | None:
    """Two decimals, rounded on the binary float value."""

    if amount is None:
        return None
    return f"{float(amount):.2f}"


def format_mcc(mcc: Any) -> str | None:
    if not mcc or int(mcc) == 0:
        return None
    return f"{int(mcc):04d}"


def format_indicator(indicator: Any) -> str | None:
    if indicator is None:
        return None
    return f"0{int(indicator)}"


def format_currency(currency: Any) -> str:
    return f"{int(currency):03d}"


def _item(tag: str, value: Any) -> TLVItem:
    return TLVItem(tag=tag, value="" if value is None else str(value))


def _section(opts: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = opts.get(name)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise err_malformed(f"{name} must be a mapping, got {type(section).__name__}")
    return section


class PayloadGenerator:
    """Assemble validated payment input into a TLV payload string."""

    def __init__(self, registry: FieldRegistry = DEFAULT_REGISTRY):
        self.registry = registry

    def generate(self, opts: Mapping[str, Any] | BaseModel) -> str:
        if isinstance(opts, BaseModel):
            opts = opts.model_dump()
        if not isinstance(opts, Mapping):
            raise err_malformed(f"payload input must be a mapping, got {type(opts).__name__}")
        if opts.get("currency") is None:
            raise err_malformed("currency is missing")
        try:
            items = self._top_level(opts)
        except (TypeError, ValueError) as exc:
            raise err_malformed(f"cannot format payload input: {exc}") from exc

        payload = build_tlv(items)
        payload += checksum(payload, self.registry)
        logger.debug("payload generated", extra={"payload_length": len(payload), "checksum": payload[-4:]})
        return payload

    def _top_level(self, opts: Mapping[str, Any]) -> list[TLVItem]:
        reg = self.registry
        aggregator_id = opts.get("aggregator_id", opts.get("agregator_id"))
        items = [
            _item(reg.tag("payload_format"), reg.payload_format_value),
            _item(reg.tag("poi_method"), reg.poi_dynamic if opts.get("amount") else reg.poi_static),
            _item(reg.tag("merchant_account_32"), self.merchant_account_32(opts.get("merchant_account_32"))),
            _item(
                reg.tag("merchant_account_33"),
                self.merchant_account_33(aggregator_id, _section(opts, "merchant_account_33")),
            ),
            _item(reg.tag("merchant_category_code"), format_mcc(opts.get("merchant_category_code"))),
            _item(reg.tag("currency"), format_currency(opts["currency"])),
            _item(reg.tag("amount"), format_amount(opts.get("amount"))),
            _item(reg.tag("convenience_indicator"), format_indicator(opts.get("convenience_indicator"))),
            _item(reg.tag("country"), opts.get("country")),
            _item(reg.tag("merchant_name"), opts.get("merchant_name")),
            _item(reg.tag("merchant_city"), opts.get("merchant_city")),
            _item(reg.tag("postal_code"), opts.get("postal_code")),
            _item(reg.tag("additional_data"), self.additional_data(_section(opts, "additional_data"))),
            _item(
                reg.tag("merchant_information_language"),
                self.merchant_language(_section(opts, "merchant_information_language")),
            ),
        ]
        fee = self.convenience_fee(opts)
        if fee is not None:
            items.append(fee)
        return items

    def merchant_account_32(self, account: Any) -> str:
        if not isinstance(account, Mapping):
            raise err_malformed("merchant_account_32 is missing")
        return build_tlv(templates.merchant_account_32(self.registry, account))

    def merchant_account_33(self, aggregator_id: str | None, account: Mapping[str, Any]) -> str | None:
        """Build template 33; it exists only when an aggregator id is given."""

        if aggregator_id is None:
            return None
        return build_tlv(templates.merchant_account_33(self.registry, aggregator_id, account))

    def additional_data(self, data: Mapping[str, Any]) -> str:
        return build_tlv(templates.additional_data(self.registry, data))

    def merchant_language(self, data: Mapping[str, Any]) -> str:
        return build_tlv(templates.merchant_language(self.registry, data))

    def convenience_fee(self, opts: Mapping[str, Any]) -> TLVItem | None:
        indicator = opts.get("convenience_indicator")
        if indicator is None:
            return None
        reg = self.registry
        if int(indicator) == reg.convenience_fixed:
            return _item(reg.tag("fixed_fee"), format_amount(opts.get("fixed_fee")))
        if int(indicator) == reg.convenience_percentage:
            return _item(reg.tag("percentage_fee"), format_amount(opts.get("percentage_fee")))
        return None


def generate(opts: Mapping[str, Any] | BaseModel, registry: FieldRegistry = DEFAULT_REGISTRY) -> str:
    """Serialize already validated input."""

    return PayloadGenerator(registry).generate(opts)


def generate_payload(opts: Mapping[str, Any], registry: FieldRegistry = DEFAULT_REGISTRY) -> str:
    """Validate ``opts`` and serialize it into a TLV payload."""

    return PayloadGenerator(registry).generate(PayloadValidator(registry).validate(opts))
