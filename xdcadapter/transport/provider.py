"""XDC JSON-RPC provider.

Manages the connection to an XDC node with :py:class:`web3.AsyncWeb3`.
Handles both read-only and signed operations.

One provider instance can serve many concurrent in-flight requests from
the same event loop.
"""
import logging

from aiohttp import ClientError, ClientTimeout
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.contract import AsyncContract
from web3.exceptions import Web3Exception

from xdcadapter.address import get_checksum_address, to_eth_address, to_xdc_address
from xdcadapter.chain import NetworkConfig, XDC_MAINNET
from xdcadapter.exceptions import SignerRequired, UpstreamQueryFailure
from xdcadapter.types import AmountWei, AnyAddress, BlockNumber, RawChainId, TxHash, URL, XdcAddress


logger = logging.getLogger(__name__)


#: Default JSON-RPC timeout in seconds
DEFAULT_TIMEOUT = 30.0


#: Errors from the JSON-RPC stack that we translate to :py:class:`UpstreamQueryFailure`
RPC_ERRORS = (Web3Exception, ClientError, TimeoutError, ValueError, OSError)


class XdcProvider:
    """Connection to one XDC node.

    .. code-block:: python

        provider = XdcProvider(get_network_config("apothem"))
        block_number = await provider.get_block_number()
    """

    def __init__(
        self,
        network: NetworkConfig = XDC_MAINNET,
        rpc_url: URL | None = None,
        private_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        :param network:
            Network parameters

        :param rpc_url:
            Override the network default JSON-RPC endpoint

        :param private_key:
            Hex private key. If given, state changing operations are enabled.

        :param timeout:
            HTTP request timeout in seconds
        """
        assert isinstance(network, NetworkConfig), f"Got {type(network)}"

        if rpc_url:
            network = network.with_rpc_url(rpc_url)

        self.network = network
        self.timeout = timeout
        self.web3 = AsyncWeb3(AsyncHTTPProvider(network.rpc_url, request_kwargs={"timeout": ClientTimeout(total=timeout)}))

        self.signer: LocalAccount | None = None
        if private_key:
            self.signer = Account.from_key(private_key)

    def __repr__(self):
        return f"<XdcProvider {self.network.name} at {self.network.rpc_url}, signer: {self.has_signer()}>"

    @classmethod
    def from_configuration(cls, config) -> "XdcProvider":
        """Create provider from :py:class:`xdcadapter.environment.config.Configuration`."""
        return XdcProvider(
            network=config.get_network_config(),
            rpc_url=config.rpc_url,
            private_key=config.private_key,
            timeout=config.timeout,
        )

    def get_network_config(self) -> NetworkConfig:
        return self.network

    def get_chain_id(self) -> RawChainId:
        return self.network.chain_id

    def has_signer(self) -> bool:
        return self.signer is not None

    def get_signer_address(self) -> XdcAddress | None:
        if not self.signer:
            return None
        return to_xdc_address(self.signer.address)

    def require_signer(self, operation: str) -> LocalAccount:
        """Get the signer or fail.

        :raise SignerRequired:
            No private key configured
        """
        if not self.signer:
            raise SignerRequired(operation)
        return self.signer

    async def get_block_number(self) -> BlockNumber:
        try:
            return await self.web3.eth.block_number
        except RPC_ERRORS as e:
            raise UpstreamQueryFailure(f"Could not read block number from {self.network.rpc_url}") from e

    async def get_balance(self, address: AnyAddress) -> AmountWei:
        checksum_address = get_checksum_address(address)
        try:
            return await self.web3.eth.get_balance(checksum_address)
        except RPC_ERRORS as e:
            raise UpstreamQueryFailure(f"Could not read balance of {address}") from e

    async def get_transaction_count(self, address: AnyAddress, block_identifier="latest") -> int:
        checksum_address = get_checksum_address(address)
        try:
            return await self.web3.eth.get_transaction_count(checksum_address, block_identifier)
        except RPC_ERRORS as e:
            raise UpstreamQueryFailure(f"Could not read nonce of {address}") from e

    async def get_code(self, address: AnyAddress) -> bytes:
        checksum_address = get_checksum_address(address)
        try:
            return bytes(await self.web3.eth.get_code(checksum_address))
        except RPC_ERRORS as e:
            raise UpstreamQueryFailure(f"Could not read code of {address}") from e

    async def is_contract(self, address: AnyAddress) -> bool:
        code = await self.get_code(address)
        return len(code) > 0

    async def get_gas_price(self) -> AmountWei:
        try:
            return await self.web3.eth.gas_price
        except RPC_ERRORS as e:
            raise UpstreamQueryFailure("Could not read gas price") from e

    def get_contract(self, address: AnyAddress, abi: list) -> AsyncContract:
        """Bind an ABI to an address.

        :param address:
            Contract address in either format
        """
        return self.web3.eth.contract(address=get_checksum_address(address), abi=abi)

    async def send_contract_transaction(self, function, value: AmountWei = 0, operation: str = "transact") -> TxHash:
        """Sign and broadcast a contract call.

        Legacy gas pricing is used, as XDC does not implement EIP-1559.

        :param function:
            Bound contract function, e.g. ``contract.functions.vote(candidate)``

        :param value:
            Attached XDC in wei

        :param operation:
            Human readable name for error messages

        :return:
            Transaction hash as 0x hex

        :raise SignerRequired:
            No private key configured
        """
        signer = self.require_signer(operation)
        try:
            nonce = await self.web3.eth.get_transaction_count(signer.address, "pending")
            gas_price = await self.web3.eth.gas_price
            tx = await function.build_transaction({
                "from": signer.address,
                "value": value,
                "nonce": nonce,
                "gasPrice": gas_price,
                "chainId": self.network.chain_id,
            })
            signed = signer.sign_transaction(tx)
            tx_hash = await self.web3.eth.send_raw_transaction(signed.raw_transaction)
        except RPC_ERRORS as e:
            raise UpstreamQueryFailure(f"Could not {operation}") from e

        tx_hash_hex = format_tx_hash(tx_hash)
        logger.info("Broadcasted %s from %s, tx %s", operation, to_eth_address(signer.address), tx_hash_hex)
        return tx_hash_hex


def format_tx_hash(value: bytes | str) -> str:
    """Render a hash returned by web3 as 0x prefixed hex."""
    if isinstance(value, str):
        return value if value.startswith("0x") else "0x" + value
    hex_value = value.hex()
    return hex_value if hex_value.startswith("0x") else "0x" + hex_value
