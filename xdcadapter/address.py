"""Address format translation.

XDC Network displays addresses with a `xdc` prefix, while the JSON-RPC API
and any EVM tooling expect the `0x` prefix. Both are views of the same 20 byte
account identifier:

.. code-block:: text

    xdc71c7656ec7ab88b098defb751b7401b5f6d8976f
    0x71c7656ec7ab88b098defb751b7401b5f6d8976f

All functions here accept either form, or a bare 40 character hex payload,
in any letter case. EIP-55 checksum casing is ignored on input
and all output is lowercased, unless explicitly asked with :py:func:`get_checksum_address`.

Never compare addresses as raw strings, use :py:func:`addresses_equal`.
"""

import enum
import re

from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from xdcadapter.exceptions import InvalidAddressFormat
from xdcadapter.types import AnyAddress, EthAddress, XdcAddress


#: Prefix for the XDC native format
XDC_PREFIX = "xdc"

#: Prefix for the EVM format
ETH_PREFIX = "0x"

#: Length of the hex payload, 20 bytes
PAYLOAD_LENGTH = 40

_PAYLOAD_PATTERN = re.compile(r"^[0-9a-f]{40}$")

_ZERO_PAYLOAD = "0" * PAYLOAD_LENGTH


class AddressFormat(str, enum.Enum):
    """Output encoding for addresses."""

    #: `xdc` prefixed
    xdc = "xdc"

    #: `0x` prefixed
    eth = "0x"


def get_payload(address: AnyAddress) -> str:
    """Extract the lowercased 40 character hex payload.

    This is the canonical identity of an address. Both encodings
    map to the same payload.

    :raise InvalidAddressFormat:
        Input is not an address in any known encoding
    """
    if not isinstance(address, str) or not address:
        raise InvalidAddressFormat(f"Address is required, got {address!r}")

    normalised = address.lower()

    if normalised.startswith(XDC_PREFIX):
        payload = normalised[len(XDC_PREFIX):]
    elif normalised.startswith(ETH_PREFIX):
        payload = normalised[len(ETH_PREFIX):]
    else:
        payload = normalised

    if not _PAYLOAD_PATTERN.match(payload):
        raise InvalidAddressFormat(f"Invalid address format: {address}")

    return payload


def to_xdc_address(address: AnyAddress) -> XdcAddress:
    """Convert any address to the lowercased `xdc` format.

    .. code-block:: python

        assert to_xdc_address("0x71C7656EC7ab88b098defB751B7401B5f6d8976F") == "xdc71c7656ec7ab88b098defb751b7401b5f6d8976f"

    :raise InvalidAddressFormat:
        Input is not an address in any known encoding
    """
    return XDC_PREFIX + get_payload(address)


def to_eth_address(address: AnyAddress) -> EthAddress:
    """Convert any address to the lowercased `0x` format.

    Use this before passing an address to web3 or to the explorer.

    :raise InvalidAddressFormat:
        Input is not an address in any known encoding
    """
    return ETH_PREFIX + get_payload(address)


def normalize_address(address: AnyAddress, format: AddressFormat = AddressFormat.xdc) -> str:
    """Render an address in the requested encoding."""
    format = AddressFormat(format)
    if format == AddressFormat.xdc:
        return to_xdc_address(address)
    return to_eth_address(address)


def is_valid_address(address: AnyAddress) -> bool:
    """Check if the input is an address in either format."""
    try:
        get_payload(address)
        return True
    except InvalidAddressFormat:
        return False


def addresses_equal(a: AnyAddress, b: AnyAddress) -> bool:
    """Format and case agnostic address comparison.

    Invalid addresses are never equal to anything.
    """
    try:
        return get_payload(a) == get_payload(b)
    except InvalidAddressFormat:
        return False


def get_checksum_address(address: AnyAddress) -> ChecksumAddress:
    """Get EIP-55 checksummed `0x` address as web3 contract calls want it."""
    return to_checksum_address(to_eth_address(address))


def is_zero_address(address: AnyAddress) -> bool:
    """Is this the all zeroes "none" address."""
    try:
        return get_payload(address) == _ZERO_PAYLOAD
    except InvalidAddressFormat:
        return False


def get_zero_address(format: AddressFormat = AddressFormat.xdc) -> str:
    return normalize_address(_ZERO_PAYLOAD, format)


def truncate_address(address: AnyAddress, start_chars=6, end_chars=4) -> str:
    """Shorten address for display.

    E.g. `xdc71c...976f`.
    """
    xdc_address = to_xdc_address(address)
    if len(xdc_address) <= start_chars + end_chars:
        return xdc_address
    return f"{xdc_address[0:start_chars]}...{xdc_address[-end_chars:]}"


def parse_address(text: str | None) -> XdcAddress | None:
    """Parse user input leniently.

    Surrounding whitespace is stripped.

    :return:
        `xdc` address or ``None`` if the input does not look like an address
    """
    if not text:
        return None

    text = text.strip()
    if is_valid_address(text):
        return to_xdc_address(text)

    return None
