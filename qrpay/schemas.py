"""Pydantic schemas for payment payload input and API contracts."""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Literal

import pycountry
from pydantic import AliasChoices, BaseModel, Field, StrictInt, field_validator

# '*' is a sentinel value for additional data fields.
ANS_PATTERN = r'^[a-zA-Z0-9!@#$&()\-`.+,/" *]*$'
CONSUMER_DATA_REQUEST_PATTERN = r"^(A?E?M|E?M?A|M?A?E|A?M?E|M?E?A)$"

MIN_MCC = 0
MAX_MCC = 10_000
MIN_FIXED = Decimal("0.01")
MAX_FIXED = Decimal("9999999999.99")
MIN_PERCENT = Decimal("0.01")
MAX_PERCENT = Decimal("99.99")


class MerchantAccount32(BaseModel):
    service_code_erip: str = Field(min_length=1)
    payer_unique_id: str | None = None
    payer_number: str | None = None
    amount_edit_possibility: bool | None = None


class MerchantAccount33(BaseModel):
    service_producer_code: str = Field(min_length=1)
    service_code: str | None = None
    outlet: str | None = None
    order_code: str | None = None


class AdditionalData(BaseModel):
    bill_number: str | None = Field(default=None, max_length=25, pattern=ANS_PATTERN)
    mobile_number: str | None = Field(default=None, max_length=25, pattern=ANS_PATTERN)
    store_label: str | None = Field(default=None, max_length=25, pattern=ANS_PATTERN)
    loyalty_number: str | None = Field(default=None, max_length=25, pattern=ANS_PATTERN)
    reference_label: str | None = Field(default=None, max_length=25, pattern=ANS_PATTERN)
    customer_label: str | None = Field(default=None, max_length=25, pattern=ANS_PATTERN)
    terminal_label: str | None = Field(default=None, max_length=25, pattern=ANS_PATTERN)
    purpose_of_transaction: str | None = Field(default=None, max_length=25, pattern=ANS_PATTERN)
    consumer_data_request: str | None = Field(default=None, pattern=CONSUMER_DATA_REQUEST_PATTERN)


class MerchantLanguage(BaseModel):
    language_reference: str = Field(min_length=1, max_length=2)
    name_alternate: str = Field(min_length=1, max_length=25)
    city_alternate: str | None = Field(default=None, max_length=15)

    @field_validator("language_reference")
    @classmethod
    def _known_language(cls, value: str) -> str:
        if pycountry.languages.get(alpha_2=value.lower()) is None:
            raise ValueError("language_reference is not valid")
        return value


class PaymentRequest(BaseModel):
    """Caller-supplied payment attributes, checked field by field."""

    aggregator_id: str | None = Field(
        default=None,
        pattern=ANS_PATTERN,
        validation_alias=AliasChoices("aggregator_id", "agregator_id"),
    )
    merchant_account_32: MerchantAccount32
    merchant_account_33: MerchantAccount33 | None = None
    merchant_category_code: StrictInt | None = Field(default=None, ge=MIN_MCC, lt=MAX_MCC)
    currency: StrictInt
    amount: Decimal | None = Field(default=None, ge=MIN_FIXED, le=MAX_FIXED)
    convenience_indicator: StrictInt | None = Field(default=None, ge=1, le=3)
    fixed_fee: Decimal | None = Field(default=None, ge=MIN_FIXED, le=MAX_FIXED)
    percentage_fee: Decimal | None = Field(default=None, ge=MIN_PERCENT, le=MAX_PERCENT)
    country: str | None = None
    merchant_name: str | None = Field(default=None, max_length=25, pattern=ANS_PATTERN)
    merchant_city: str | None = Field(default=None, max_length=15, pattern=ANS_PATTERN)
    postal_code: str | None = Field(default=None, max_length=10, pattern=ANS_PATTERN)
    additional_data: AdditionalData | None = None
    merchant_information_language: MerchantLanguage | None = None

    @field_validator("currency")
    @classmethod
    def _known_currency(cls, value: int) -> int:
        if value < 0 or pycountry.currencies.get(numeric=f"{value:03d}") is None:
            raise ValueError("currency is not valid")
        return value

    @field_validator("country")
    @classmethod
    def _known_country(cls, value: str | None) -> str | None:
        if value is not None and pycountry.countries.get(alpha_2=value.upper()) is None:
            raise ValueError("country is not valid")
        return value


class FieldErrorResponse(BaseModel):
    field: str
    path: str
    reason: str


class GeneratePayloadRequest(BaseModel):
    payment: dict[str, Any]
    render: bool = False
    url: str | None = Field(default=None, description="Prefix embedded before the payload in the QR symbol")
    size: int | None = Field(default=None, ge=21, le=4096)
    level: Literal["L", "M", "Q", "H"] | None = None


class GeneratePayloadResponse(BaseModel):
    payload: str
    checksum: str
    qr_png_base64: str | None = None


class ParsePayloadRequest(BaseModel):
    payload: str = Field(min_length=1)


class ParsePayloadResponse(BaseModel):
    fields: dict[str, Any]


class ValidatePayloadResponse(BaseModel):
    valid: bool
    errors: list[FieldErrorResponse] = Field(default_factory=list)
