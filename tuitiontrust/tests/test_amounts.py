from decimal import Decimal

import pytest

from tuitiontrust.app.errors import UnparsableAmount
from tuitiontrust.app.ledger.amounts import (
    IssuedAmount,
    NativeAmount,
    classify_delivered_amount,
    decode_currency_code,
    delivered_amount_of,
    drops_to_xrp,
    parse_delivered_amount,
    plain_decimal,
)


RLUSD_HEX = "524C555344000000000000000000000000000000"


def test_drops_string_is_native_xrp():
    parsed = parse_delivered_amount("1000000")
    assert parsed.value == "1"
    assert parsed.currency_code == "XRP"
    assert parsed.issuer is None


def test_drops_keep_full_precision():
    assert drops_to_xrp("1") == "0.000001"
    assert drops_to_xrp("12500000") == "12.5"
    assert drops_to_xrp(0) == "0"


def test_integer_drops_are_accepted():
    assert classify_delivered_amount(2500000) == NativeAmount(drops="2500000")


def test_issued_amount_with_hex_currency_decodes_mnemonic():
    parsed = parse_delivered_amount({"value": "10", "currency": RLUSD_HEX, "issuer": "rIssuer"})
    assert parsed.value == "10"
    assert parsed.currency_code == "RLUSD"
    assert parsed.issuer == "rIssuer"


def test_issued_amount_with_short_code_passes_through():
    parsed = parse_delivered_amount({"value": "3.25", "currency": "USD", "issuer": "rIssuer"})
    assert parsed.value == "3.25"
    assert parsed.currency_code == "USD"


def test_classify_keeps_raw_issued_fields():
    amount = classify_delivered_amount({"value": "1", "currency": RLUSD_HEX})
    assert amount == IssuedAmount(value="1", currency=RLUSD_HEX, issuer=None)


@pytest.mark.parametrize(
    "raw",
    [
        None,
        True,
        "",
        "-5",
        "1.5",
        "abc",
        [],
        {},
        {"value": "10"},
        {"currency": "USD"},
        {"value": 10, "currency": "USD"},
        {"value": "ten", "currency": "USD"},
        {"value": "NaN", "currency": "USD", "issuer": "rX"},
        {"value": "Infinity", "currency": "USD", "issuer": "rX"},
        {"value": "-inf", "currency": "USD"},
    ],
)
def test_unrecognized_shapes_raise(raw):
    with pytest.raises(UnparsableAmount):
        parse_delivered_amount(raw)


def test_decode_currency_code_falls_back_to_raw_hex():
    all_nul = "0" * 40
    assert decode_currency_code(all_nul) == all_nul
    not_utf8 = "FF" * 20
    assert decode_currency_code(not_utf8) == not_utf8
    assert decode_currency_code("XRP") == "XRP"


def test_plain_decimal_avoids_exponent_notation():
    assert plain_decimal(Decimal("1E+1")) == "10"
    assert plain_decimal(Decimal("1.500")) == "1.5"


def test_delivered_amount_prefers_lowercase_field():
    assert delivered_amount_of({"delivered_amount": "5", "DeliveredAmount": "6"}) == "5"
    assert delivered_amount_of({"DeliveredAmount": "6"}) == "6"
    assert delivered_amount_of("not-a-dict") is None
