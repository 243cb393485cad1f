"""Exact unit conversion and display formatting."""
from decimal import Decimal

import pytest

from xdcadapter.exceptions import InvalidAmount
from xdcadapter.units import (
    MAX_UINT256,
    Unit,
    calculate_percentage,
    convert_units,
    format_gas_price,
    format_token_amount,
    format_xdc_balance,
    from_wei,
    from_wei_decimal,
    safe_parse_int,
    to_wei,
)


def test_to_wei():
    assert to_wei("1") == 10**18
    assert to_wei("0.5") == 5 * 10**17
    assert to_wei(1) == 10**18
    assert to_wei(Decimal("1.000000000000000001")) == 10**18 + 1
    assert to_wei("1", Unit.gwei) == 10**9
    assert to_wei("1", "ether") == 10**18
    assert to_wei("12", "wei") == 12
    assert to_wei(" 2.5 ") == 25 * 10**17
    assert to_wei("0") == 0


def test_to_wei_float():
    assert to_wei(0.1) == 10**17


def test_from_wei():
    assert from_wei(10**18) == "1"
    assert from_wei(15 * 10**17) == "1.5"
    assert from_wei(1) == "0.000000000000000001"
    assert from_wei(0) == "0"
    assert from_wei("2000000000000000000") == "2"
    assert from_wei(10**9, Unit.gwei) == "1"
    assert from_wei(123, "wei") == "123"


def test_round_trip_is_exact():
    for wei in (0, 1, 10**18 - 1, 123456789012345678901234567890, MAX_UINT256):
        assert to_wei(from_wei(wei)) == wei


def test_large_amounts_are_exact():
    """No float, no 28 digit default context rounding."""
    wei = 123456789012345678901234567890123456789
    assert from_wei(wei) == "123456789012345678901.234567890123456789"
    assert to_wei("123456789012345678901.234567890123456789") == wei


@pytest.mark.parametrize("bad", ["-1", "abc", "", None, True, "NaN", "Infinity", [1], "1e999999999", "1e-999999999", "1e79"])
def test_to_wei_rejects(bad):
    with pytest.raises(InvalidAmount):
        to_wei(bad)


def test_to_wei_too_many_decimals():
    with pytest.raises(InvalidAmount):
        to_wei("0.0000000000000000001")

    with pytest.raises(InvalidAmount):
        to_wei("1.5", "wei")


def test_to_wei_overflow():
    with pytest.raises(InvalidAmount):
        to_wei(str(MAX_UINT256 + 1), "wei")


def test_unknown_unit():
    with pytest.raises(InvalidAmount):
        to_wei("1", "satoshi")

    with pytest.raises(InvalidAmount):
        from_wei(1, "satoshi")


def test_from_wei_rejects():
    with pytest.raises(InvalidAmount):
        from_wei(-1)

    with pytest.raises(InvalidAmount):
        from_wei("1.5")

    with pytest.raises(InvalidAmount):
        from_wei(1.5)


def test_from_wei_decimal():
    assert from_wei_decimal(25 * 10**16) == Decimal("0.25")


def test_convert_units():
    assert convert_units("1", Unit.xdc, Unit.gwei) == "1000000000"
    assert convert_units("1500", "finney", "xdc") == "1.5"


def test_safe_parse_int():
    assert safe_parse_int("123") == 123
    assert safe_parse_int("0x10") == 16
    assert safe_parse_int(5) == 5
    assert safe_parse_int(None) == 0
    assert safe_parse_int("foo") == 0

    with pytest.raises(InvalidAmount):
        safe_parse_int("foo", strict=True)


def test_format_token_amount():
    assert format_token_amount(0) == "0"
    assert format_token_amount(10**18) == "1"
    assert format_token_amount(1_234_567_890_123_456_789) == "1.234567"
    assert format_token_amount(1) == "<0.000001"
    assert format_token_amount(1_500_000, decimals=6, display_decimals=2) == "1.5"


def test_format_xdc_balance():
    assert format_xdc_balance(0) == "0 XDC"
    assert format_xdc_balance(to_wei("1.5")) == "1.5000 XDC"
    assert format_xdc_balance(to_wei(2_500)) == "2.50K XDC"
    assert format_xdc_balance(to_wei(12_340_000)) == "12.34M XDC"


def test_format_gas_price():
    assert format_gas_price(250_000_000) == "0.25 Gwei"


def test_calculate_percentage():
    assert calculate_percentage(1, 3) == "33.33"
    assert calculate_percentage(50, 100) == "50.00"
    assert calculate_percentage(5, 0) == "0"
