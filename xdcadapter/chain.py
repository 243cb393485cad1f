"""Network ids and per-network configuration.

XDC Network runs the mainnet and the Apothem testnet, both EVM compatible
and both using XDPoS consensus with the same system contract layout.
See :py:class:`NetworkId` for passing the identity of a network around
and :py:class:`NetworkConfig` for everything a client needs to connect.

Configurations are resolved once with :py:func:`get_network_config`
and then handed to the transports at construction time.
"""

import dataclasses
import enum
from dataclasses import dataclass
from typing import Dict, Tuple

from xdcadapter.exceptions import XdcAdapterError
from xdcadapter.types import RawChainId, Slug, URL, XdcAddress


class UnknownNetwork(XdcAdapterError, KeyError):
    """Cannot resolve a network by the given chain id or slug."""


class NetworkId(enum.IntEnum):
    """Chain ids of XDC networks.

    The value is the native EIP-155 chain id as reported by `eth_chainId`.
    """

    #: XDC mainnet chain id
    mainnet = 50

    #: XDC Apothem testnet chain id
    apothem = 51

    def get_name(self) -> str:
        """Human readable network name."""
        return _NETWORK_CONFIGS[self.value].name

    def get_slug(self) -> Slug:
        """Machine readable name, as used in configuration files."""
        return self.name

    def is_testnet(self) -> bool:
        return _NETWORK_CONFIGS[self.value].is_testnet

    @staticmethod
    def get_by_slug(slug: Slug) -> "NetworkId":
        """Map a slug back to a network id.

        `testnet` is accepted as an alias for `apothem`.

        :raise UnknownNetwork:
            If the slug is not known
        """
        slug = slug.lower()
        try:
            return NetworkId(_SLUG_ALIASES[slug])
        except KeyError:
            raise UnknownNetwork(f"Unknown network slug: {slug}. Available: {', '.join(_SLUG_ALIASES.keys())}")


@dataclass(frozen=True, slots=True)
class NetworkConfig:
    """Connection and protocol parameters for one network."""

    #: Human readable name
    name: str

    #: EIP-155 chain id
    chain_id: RawChainId

    #: Default public JSON-RPC endpoint
    rpc_url: URL

    #: Default public websocket endpoint
    ws_url: URL

    #: Block explorer for humans
    explorer_url: URL

    #: Etherscan compatible explorer API
    explorer_api_url: URL

    #: Native currency ticker
    currency_symbol: str

    is_testnet: bool

    #: Average block time in seconds
    block_time: int

    #: Blocks per epoch for rewards distribution
    epoch_length: int

    #: XDPoS validator system contract
    validator_contract: XdcAddress

    #: Block signer system contract
    block_signer_contract: XdcAddress

    #: Alternative public JSON-RPC endpoints
    fallback_rpc_urls: Tuple[URL, ...] = ()

    def get_network_id(self) -> NetworkId | None:
        """Known network for this config, or ``None`` for custom chains."""
        try:
            return NetworkId(self.chain_id)
        except ValueError:
            return None

    def with_rpc_url(self, rpc_url: URL, chain_id: RawChainId | None = None) -> "NetworkConfig":
        """Create a custom network config pointing to a different node.

        All protocol parameters are inherited from this config.
        """
        assert rpc_url, "rpc_url missing"
        return dataclasses.replace(
            self,
            name="Custom Network",
            rpc_url=rpc_url,
            chain_id=chain_id or self.chain_id,
        )


#: XDC Mainnet Configuration
XDC_MAINNET = NetworkConfig(
    name="XDC Mainnet",
    chain_id=50,
    rpc_url="https://erpc.xinfin.network",
    ws_url="wss://ws.xinfin.network",
    explorer_url="https://explorer.xinfin.network",
    explorer_api_url="https://xdc.blocksscan.io/api",
    currency_symbol="XDC",
    is_testnet=False,
    block_time=2,
    epoch_length=900,
    validator_contract="xdc0000000000000000000000000000000000000088",
    block_signer_contract="xdc0000000000000000000000000000000000000089",
    fallback_rpc_urls=(
        "https://rpc.xinfin.network",
        "https://rpc1.xinfin.network",
        "https://xdc-mainnet.public.blastapi.io",
    ),
)

#: XDC Apothem Testnet Configuration
XDC_APOTHEM = NetworkConfig(
    name="XDC Apothem Testnet",
    chain_id=51,
    rpc_url="https://erpc.apothem.network",
    ws_url="wss://ws.apothem.network",
    explorer_url="https://explorer.apothem.network",
    explorer_api_url="https://apothem.blocksscan.io/api",
    currency_symbol="TXDC",
    is_testnet=True,
    block_time=2,
    epoch_length=900,
    validator_contract="xdc0000000000000000000000000000000000000088",
    block_signer_contract="xdc0000000000000000000000000000000000000089",
    fallback_rpc_urls=(
        "https://rpc.apothem.network",
        "https://rpc-apothem.xinfin.org",
    ),
)


_NETWORK_CONFIGS: Dict[int, NetworkConfig] = {
    50: XDC_MAINNET,
    51: XDC_APOTHEM,
}


_SLUG_ALIASES: Dict[str, int] = {
    "mainnet": 50,
    "apothem": 51,
    "testnet": 51,
}


def get_network_config(network: NetworkId | RawChainId | Slug) -> NetworkConfig:
    """Resolve network configuration by id, raw chain id or slug.

    .. code-block:: python

        config = get_network_config("apothem")
        assert config.chain_id == 51

    :raise UnknownNetwork:
        Network not supported
    """
    if isinstance(network, str):
        network = NetworkId.get_by_slug(network)

    assert isinstance(network, int), f"Got {type(network)}"

    config = _NETWORK_CONFIGS.get(int(network))
    if config is None:
        raise UnknownNetwork(f"Unknown chain id: {network}. Available: {list(_NETWORK_CONFIGS.keys())}")
    return config
