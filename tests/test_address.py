"""Dual address format handling."""
import pytest

from xdcadapter.address import (
    AddressFormat,
    addresses_equal,
    get_checksum_address,
    get_payload,
    get_zero_address,
    is_valid_address,
    is_zero_address,
    normalize_address,
    parse_address,
    to_eth_address,
    to_xdc_address,
    truncate_address,
)
from xdcadapter.exceptions import InvalidAddressFormat


CHECKSUMMED = "0x71C7656EC7ab88b098defB751B7401B5f6d8976F"
PAYLOAD = "71c7656ec7ab88b098defb751b7401b5f6d8976f"


def test_convert_eth_to_xdc():
    assert to_xdc_address(CHECKSUMMED) == "xdc" + PAYLOAD


def test_convert_xdc_to_eth():
    assert to_eth_address("xdc" + PAYLOAD) == "0x" + PAYLOAD


def test_uppercase_prefix():
    assert to_eth_address("XDC" + PAYLOAD.upper()) == "0x" + PAYLOAD


def test_bare_payload():
    assert to_xdc_address(PAYLOAD) == "xdc" + PAYLOAD


@pytest.mark.parametrize("bad", [
    "",
    None,
    123,
    "xdc1234",
    "0x" + "g" * 40,
    "xdc" + PAYLOAD + "00",
    "abc" + PAYLOAD,
])
def test_invalid_address(bad):
    assert not is_valid_address(bad)
    with pytest.raises(InvalidAddressFormat):
        get_payload(bad)


def test_invalid_address_is_value_error():
    """Callers catching ValueError keep working."""
    with pytest.raises(ValueError):
        to_xdc_address("nope")


def test_conversion_is_idempotent():
    xdc = to_xdc_address(CHECKSUMMED)
    assert to_xdc_address(xdc) == xdc
    assert to_eth_address(to_eth_address(xdc)) == to_eth_address(xdc)
    assert to_xdc_address(to_eth_address(xdc)) == xdc


def test_addresses_equal_across_formats():
    assert addresses_equal(CHECKSUMMED, "xdc" + PAYLOAD)
    assert addresses_equal("XDC" + PAYLOAD.upper(), "0x" + PAYLOAD)
    assert not addresses_equal(CHECKSUMMED, get_zero_address())
    assert not addresses_equal(CHECKSUMMED, "garbage")


def test_normalize_address():
    assert normalize_address(CHECKSUMMED, AddressFormat.xdc) == "xdc" + PAYLOAD
    assert normalize_address("xdc" + PAYLOAD, AddressFormat.eth) == "0x" + PAYLOAD
    assert normalize_address("xdc" + PAYLOAD, "0x") == "0x" + PAYLOAD


def test_checksum_address():
    # EIP-55 test vector
    assert get_checksum_address("xdc5aaeb6053f3e94c9b9a09f33669435e7ef1beaed") == "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"


def test_zero_address():
    assert get_zero_address() == "xdc" + "0" * 40
    assert get_zero_address(AddressFormat.eth) == "0x" + "0" * 40
    assert is_zero_address("0x" + "0" * 40)
    assert not is_zero_address(CHECKSUMMED)
    assert not is_zero_address("bad")


def test_truncate_address():
    assert truncate_address(CHECKSUMMED) == "xdc71c...976f"


def test_parse_address():
    assert parse_address(f"  {CHECKSUMMED}\n") == "xdc" + PAYLOAD
    assert parse_address("hello") is None
    assert parse_address(None) is None
    assert parse_address("") is None
