from decimal import Decimal

import pytest

from qrpay.schemas import PaymentRequest
from qrpay.services.errors import MalformedPayloadError, PayloadValidationError
from qrpay.services.generator import PayloadGenerator, format_amount, format_indicator, format_mcc, generate, generate_payload
from qrpay.services.parser import parse

from .conftest import BASIC_PAYLOAD


def test_generates_reference_payload(basic_payment):
    assert generate_payload(basic_payment) == BASIC_PAYLOAD


def test_generates_account_33_with_aggregator(basic_payment):
    basic_payment["merchant_account_33"] = {"service_producer_code": "123"}
    basic_payment["aggregator_id"] = "bepaid"

    assert generate_payload(basic_payment) == (
        "00020101021232430010by.raschet0106123456100933609575012021133250014by.epos.bepaid0303123"
        "5303933540510.055802BY5910IvanIvanov6005Minsk63047647"
    )


def test_documentation_example():
    payment = {
        "merchant_account_32": {"service_code_erip": "393931", "payer_unique_id": "336095750"},
        "currency": 933,
        "amount": 10.05,
        "country": "BY",
        "merchant_name": "mts",
        "merchant_city": "Belarus",
    }

    assert generate_payload(payment) == (
        "00020101021232430010by.raschet010639393110093360957501202115303933540510.05"
        "5802BY5903mts6007Belarus6304CA82"
    )


@pytest.mark.parametrize("aggregator_id", [None, ""])
def test_account_33_without_aggregator_fails_validation(basic_payment, aggregator_id):
    basic_payment["merchant_account_33"] = {"service_producer_code": "123"}
    if aggregator_id is not None:
        basic_payment["aggregator_id"] = aggregator_id

    with pytest.raises(PayloadValidationError):
        generate_payload(basic_payment)


def test_account_33_is_absent_without_aggregator(basic_payment):
    basic_payment["merchant_account_33"] = {"service_producer_code": "123"}

    fields = parse(generate(basic_payment))

    assert "33" not in fields


def test_static_poi_without_amount(basic_payment):
    del basic_payment["amount"]

    fields = parse(generate_payload(basic_payment))

    assert fields["01"] == "11"
    assert "54" not in fields


def test_dynamic_poi_with_amount(basic_payment):
    assert parse(generate_payload(basic_payment))["01"] == "12"


def test_sanitized_length_header(basic_payment):
    basic_payment["merchant_city"] = "Nowy Sacz"

    payload = generate_payload(basic_payment)

    assert "6008NowySacz" in payload


def test_fully_stripped_field_is_omitted(basic_payment):
    basic_payment["merchant_information_language"] = {"language_reference": "ru", "name_alternate": "Иван Иванов"}

    fields = parse(generate_payload(basic_payment))

    assert fields["64"] == {"00": "ru"}


def test_fixed_fee_appended_last(basic_payment):
    basic_payment["convenience_indicator"] = 2
    basic_payment["fixed_fee"] = 1.5
    basic_payment["percentage_fee"] = 3

    payload = generate_payload(basic_payment)
    fields = parse(payload)

    assert fields["55"] == "02"
    assert fields["56"] == "1.50"
    assert "57" not in fields
    assert payload[:-8].endswith("56041.50")


def test_percentage_fee_appended(basic_payment):
    basic_payment["convenience_indicator"] = 3
    basic_payment["percentage_fee"] = 12

    fields = parse(generate_payload(basic_payment))

    assert fields["57"] == "12.00"
    assert "56" not in fields


def test_prompt_indicator_has_no_fee(basic_payment):
    basic_payment["convenience_indicator"] = 1
    basic_payment["fixed_fee"] = 1

    fields = parse(generate_payload(basic_payment))

    assert fields["55"] == "01"
    assert "56" not in fields
    assert "57" not in fields


def test_zero_mcc_is_omitted(basic_payment):
    basic_payment["merchant_category_code"] = 0

    assert "52" not in parse(generate_payload(basic_payment))


def test_mcc_is_zero_padded(basic_payment):
    basic_payment["merchant_category_code"] = 42

    assert parse(generate_payload(basic_payment))["52"] == "0042"


def test_amount_edit_possibility_flag(basic_payment):
    basic_payment["merchant_account_32"]["amount_edit_possibility"] = False

    assert parse(generate_payload(basic_payment))["32"]["12"] == "12"


def test_full_payload_round_trip(full_payment):
    full_payment["additional_data"]["store_label"] = 'OOO "rubyQRpay"'

    payload = generate_payload(full_payment)
    fields = parse(payload)

    assert fields["32"] == {"00": "by.raschet", "01": "393931", "10": "336095750", "11": "--", "12": "11"}
    assert fields["33"] == {"00": "by.epos.bepaid", "03": "123", "04": "--", "05": "--", "06": "--"}
    assert fields["52"] == "2934"
    assert fields["62"]["03"] == "OOOrubyQRpay"
    assert fields["62"]["09"] == "AME"
    assert fields["64"] == {"00": "ru"}
    assert fields["63"] == payload[-4:]
    assert list(fields)[-1] == "63"


def test_accepts_validated_model(basic_payment):
    request = PaymentRequest.model_validate(basic_payment)

    assert generate(request) == BASIC_PAYLOAD


def test_missing_account_32_is_malformed(basic_payment):
    del basic_payment["merchant_account_32"]

    with pytest.raises(MalformedPayloadError):
        generate(basic_payment)


def test_missing_currency_is_malformed(basic_payment):
    del basic_payment["currency"]

    with pytest.raises(MalformedPayloadError):
        generate(basic_payment)


def test_unformattable_amount_is_malformed(basic_payment):
    basic_payment["amount"] = "ten"

    with pytest.raises(MalformedPayloadError):
        generate(basic_payment)


def test_non_mapping_input_is_malformed():
    with pytest.raises(MalformedPayloadError):
        PayloadGenerator().generate(None)


def test_formatters():
    assert format_amount(10.05) == "10.05"
    assert format_amount(7) == "7.00"
    assert format_amount(None) is None
    assert format_mcc(None) is None
    assert format_mcc(5999) == "5999"
    assert format_indicator(3) == "03"
    assert format_indicator(None) is None


@pytest.mark.parametrize("amount, expected", [(10.015, "10.01"), (2.675, "2.67"), (Decimal("10.05"), "10.05")])
def test_amount_rounds_on_float_value(amount, expected):
    assert format_amount(amount) == expected


def test_generated_amount_rounds_on_float_value(basic_payment):
    basic_payment["amount"] = 10.015

    assert parse(generate_payload(basic_payment))["54"] == "10.01"
