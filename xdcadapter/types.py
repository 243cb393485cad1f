"""Generic units used in data models of the adapter.

Types aliases are used to give human-readable meaning for various arguments and return values.
"""
from typing import TypeAlias

#: Amount in wei, the smallest unit of XDC.
#:
#: - Arbitrary precision Python integer
#:
#: - Never negative
#:
#: - 1 XDC = 10**18 wei
#:
AmountWei: TypeAlias = int


#: Address in `xdc` prefixed format.
#:
#: - String
#:
#: - Always starts xdc
#:
#: - Lowercased, no checksum
#:
XdcAddress: TypeAlias = str


#: Address in `0x` prefixed format.
#:
#: - String
#:
#: - Always starts 0x
#:
#: - Lowercased unless explicitly checksummed with :py:func:`xdcadapter.address.get_checksum_address`
#:
#: `See EIP-55 <https://github.com/ethereum/EIPs/blob/master/EIPS/eip-55.md>`__.
#
EthAddress: TypeAlias = str


#: Address in any accepted format: `xdc` prefixed, `0x` prefixed or bare 40 hex characters
AnyAddress: TypeAlias = str


#: Block height from 0 to infinity
BlockNumber: TypeAlias = int

#: Epoch index, block height divided by epoch length
EpochNumber: TypeAlias = int

#: Raw chain id that is not a wrapped enum.
#:
#: See :py:class:`xdcadapter.chain.NetworkId` for details
RawChainId: TypeAlias = int

#: Slug is a machine friendly and URL friendly id generated from a name.
#:
#: E.g. `XDC Apothem Testnet` -> `apothem`
#:
Slug: TypeAlias = str

#: URL as a string type
#:
URL: TypeAlias = str

#: Transaction hash as 0x prefixed hex string
TxHash: TypeAlias = str
