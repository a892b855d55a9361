import pytest

from qrpay.registry import FieldRegistry
from qrpay.services.errors import PayloadDecodeError
from qrpay.services.generator import generate_payload
from qrpay.services.parser import PayloadParser, parse

from .conftest import BASIC_PAYLOAD


def test_parses_nested_payload():
    payload = (
        "00020101021232430010by.raschet0106123456100933609575012021133250014by.epos.bepaid0303123"
        "5303933540510.055802BY5911Ivan%20Ivanov6005Minsk6304179F"
    )

    assert parse(payload) == {
        "00": "01",
        "01": "12",
        "32": {"00": "by.raschet", "01": "123456", "10": "336095750", "12": "11"},
        "33": {"00": "by.epos.bepaid", "03": "123"},
        "53": "933",
        "54": "10.05",
        "58": "BY",
        "59": "Ivan Ivanov",
        "60": "Minsk",
        "63": "179F",
    }


def test_round_trip_on_clean_input(basic_payment):
    basic_payment["merchant_name"] = "IvanIvanov"
    basic_payment["postal_code"] = "220000"
    basic_payment["additional_data"] = {"bill_number": "A-17", "purpose_of_transaction": "***"}

    fields = parse(generate_payload(basic_payment))

    assert fields["59"] == "IvanIvanov"
    assert fields["61"] == "220000"
    assert fields["62"] == {"01": "A-17", "08": "***"}
    assert fields["32"]["01"] == basic_payment["merchant_account_32"]["service_code_erip"]


def test_field_order_follows_payload():
    assert list(parse(BASIC_PAYLOAD)) == ["00", "01", "32", "53", "54", "58", "59", "60", "63"]


def test_duplicate_tag_keeps_last_value_at_first_position():
    fields = parse("0002010102110002AB")

    assert fields == {"00": "AB", "01": "11"}
    assert list(fields) == ["00", "01"]


def test_trailing_fragment_is_ignored():
    assert parse("0002015") == {"00": "01"}


def test_non_numeric_length_is_a_decode_fault():
    with pytest.raises(PayloadDecodeError):
        parse("00020101xx12")


def test_overrunning_length_is_a_decode_fault():
    with pytest.raises(PayloadDecodeError):
        parse("000201599910Ivan")


def test_nested_decode_fault_propagates():
    with pytest.raises(PayloadDecodeError):
        parse("32060099ab")


def test_custom_registry_controls_nesting():
    registry = FieldRegistry(tags={**FieldRegistry().tags, "additional_data": "80"})

    fields = PayloadParser(registry).parse("80060102ab620401ab")

    assert fields == {"80": {"01": "ab"}, "62": "01ab"}
