import copy

import pytest

from qrpay.registry import DEFAULT_REGISTRY

FULL_PAYMENT = {
    "aggregator_id": "bepaid",
    "merchant_account_32": {
        "service_code_erip": "393931",
        "payer_unique_id": "336095750",
        "payer_number": "--",
        "amount_edit_possibility": True,
    },
    "merchant_account_33": {
        "service_producer_code": "123",
        "service_code": "--",
        "outlet": "--",
        "order_code": "--",
    },
    "merchant_category_code": 2934,
    "currency": 933,
    "amount": 10.05,
    "convenience_indicator": 1,
    "fixed_fee": 0.01,
    "percentage_fee": 12.0,
    "country": "BY",
    "merchant_name": "Stroitel",
    "merchant_city": "Soligorsk",
    "postal_code": "222310",
    "additional_data": {
        "bill_number": "--",
        "mobile_number": "--",
        "store_label": "--",
        "loyalty_number": "***",
        "reference_label": "***",
        "customer_label": "--",
        "terminal_label": "--",
        "purpose_of_transaction": "***",
        "consumer_data_request": "AME",
    },
    "merchant_information_language": {
        "language_reference": "ru",
        "name_alternate": "Строитель",
        "city_alternate": "Солигорск",
    },
}

BASIC_PAYMENT = {
    "merchant_account_32": {
        "service_code_erip": "123456",
        "payer_unique_id": "336095750",
    },
    "currency": 933,
    "amount": 10.05,
    "country": "BY",
    "merchant_name": "Ivan Ivanov",
    "merchant_city": "Minsk",
}

BASIC_PAYLOAD = (
    "00020101021232430010by.raschet010612345610093360957501202115303933540510.05"
    "5802BY5910IvanIvanov6005Minsk6304C25A"
)


@pytest.fixture
def registry():
    return DEFAULT_REGISTRY


@pytest.fixture
def full_payment():
    return copy.deepcopy(FULL_PAYMENT)


@pytest.fixture
def basic_payment():
    return copy.deepcopy(BASIC_PAYMENT)
