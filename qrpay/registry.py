"""Field-ID registry for merchant-presented payment payloads."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


def _frozen(mapping: dict[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class FieldRegistry:
    """Immutable tag table shared by the validator, generator and parser.

    Top-level tags live in ``tags``; each nested template has its own
    name -> sub-tag table. Build one at startup and pass it around.
    """

    tags: Mapping[str, str] = field(
        default_factory=lambda: _frozen(
            {
                "payload_format": "00",
                "poi_method": "01",
                "merchant_account_32": "32",
                "merchant_account_33": "33",
                "merchant_category_code": "52",
                "currency": "53",
                "amount": "54",
                "convenience_indicator": "55",
                "fixed_fee": "56",
                "percentage_fee": "57",
                "country": "58",
                "merchant_name": "59",
                "merchant_city": "60",
                "postal_code": "61",
                "additional_data": "62",
                "checksum": "63",
                "merchant_information_language": "64",
            }
        )
    )
    merchant_account_32: Mapping[str, str] = field(
        default_factory=lambda: _frozen(
            {
                "guid": "00",
                "service_code_erip": "01",
                "payer_unique_id": "10",
                "payer_number": "11",
                "amount_edit_possibility": "12",
            }
        )
    )
    merchant_account_33: Mapping[str, str] = field(
        default_factory=lambda: _frozen(
            {
                "guid": "00",
                "service_producer_code": "03",
                "service_code": "04",
                "outlet": "05",
                "order_code": "06",
            }
        )
    )
    additional_data: Mapping[str, str] = field(
        default_factory=lambda: _frozen(
            {
                "bill_number": "01",
                "mobile_number": "02",
                "store_label": "03",
                "loyalty_number": "04",
                "reference_label": "05",
                "customer_label": "06",
                "terminal_label": "07",
                "purpose_of_transaction": "08",
                "consumer_data_request": "09",
            }
        )
    )
    merchant_information_language: Mapping[str, str] = field(
        default_factory=lambda: _frozen(
            {
                "language_reference": "00",
                "name_alternate": "01",
                "city_alternate": "02",
            }
        )
    )

    payload_format_value: str = "01"
    poi_static: str = "11"
    poi_dynamic: str = "12"
    guid_account_32: str = "by.raschet"
    guid_account_33_prefix: str = "by.epos."
    amount_edit_allowed: str = "11"
    amount_edit_denied: str = "12"
    convenience_prompt: int = 1
    convenience_fixed: int = 2
    convenience_percentage: int = 3
    checksum_length: str = "04"

    def tag(self, name: str) -> str:
        return self.tags[name]

    @property
    def checksum_header(self) -> str:
        return f"{self.tags['checksum']}{self.checksum_length}"

    @property
    def nested_tags(self) -> frozenset[str]:
        """Tags whose value is itself a TLV record."""

        return frozenset(
            self.tags[name]
            for name in (
                "merchant_account_32",
                "merchant_account_33",
                "additional_data",
                "merchant_information_language",
            )
        )


DEFAULT_REGISTRY = FieldRegistry()
