"""XDC block explorer API client.

Etherscan compatible `?module=...&action=...` REST API served by
XDCScan/BlocksScan. Provides data the JSON-RPC node cannot serve cheaply:
account history, token transfers, verified ABIs and block rewards.
"""
import logging
import platform
from importlib.metadata import PackageNotFoundError, version
from typing import Dict, List, Literal, Optional

import orjson
import requests
from requests import Response
from requests.adapters import HTTPAdapter
from urllib3 import Retry

from xdcadapter.address import to_eth_address
from xdcadapter.chain import NetworkConfig, XDC_MAINNET
from xdcadapter.exceptions import UpstreamQueryFailure
from xdcadapter.types import AmountWei, AnyAddress, BlockNumber, URL
from xdcadapter.units import safe_parse_int
from xdcadapter.utils.logging_retry import LoggingRetry


logger = logging.getLogger(__name__)


#: Explorer answers with status 0 and this message for empty result sets
NO_RESULTS_MESSAGES = ("No transactions found", "No records found", "No token transfers found")


class ExplorerAPIError(UpstreamQueryFailure):
    """Explorer replied with an error."""


class ExplorerDataNotAvailable(ExplorerAPIError):
    """Wraps 404 error from the explorer."""


def _get_package_version() -> str:
    try:
        return version("xdc-adapter")
    except PackageNotFoundError:
        return "dev"


class XdcExplorerApi:
    """Explorer API client.

    - Keep-alive HTTP session with a retry policy for flaky servers

    - Addresses are sent in `0x` format as the explorer expects

    .. code-block:: python

        explorer = XdcExplorerApi(get_network_config("mainnet"))
        reward = explorer.get_block_reward(80_000_000)
        print(reward["blockReward"])
    """

    def __init__(
        self,
        network: NetworkConfig = XDC_MAINNET,
        api_key: Optional[str] = None,
        base_url: Optional[URL] = None,
        timeout: float | tuple = (30.0, 30.0),
        retry_policy: Optional[Retry] = None,
    ):
        """
        :param network:
            Which network explorer to use

        :param api_key:
            Optional explorer API key, for higher rate limits

        :param base_url:
            Override the explorer API URL of the network

        :param timeout:
            Requests HTTP lib timeout.

            Passed to ``requests.get()``.

        :param retry_policy:
            How to handle failed HTTP requests.
            If not given use the default somewhat graceful retry policy.
        """
        self.network = network
        self.api_key = api_key
        self.base_url = base_url or network.explorer_api_url
        self.timeout = timeout
        self.requests = self.create_requests_client(retry_policy)

    def __repr__(self):
        return f"<XdcExplorerApi {self.base_url}>"

    def close(self):
        """Release any underlying sockets."""
        self.requests.close()

    def create_requests_client(self, retry_policy: Optional[Retry] = None) -> requests.Session:
        """Create HTTP 1.1 keep-alive connection to the explorer."""

        session = requests.Session()

        if retry_policy is None:
            retry_policy = LoggingRetry(
                total=5,
                backoff_factor=0.5,
                status_forcelist=[429, 500, 502, 503, 504],
            )

        session.mount('http://', HTTPAdapter(max_retries=retry_policy))
        session.mount('https://', HTTPAdapter(max_retries=retry_policy))

        system = platform.system()
        release = platform.release()
        session.headers.update({"User-Agent": f"xdc-adapter {_get_package_version()} on {system} {release}"})

        def exception_hook(response: Response, *args, **kwargs):
            if response.status_code == 404:
                raise ExplorerDataNotAvailable(f"Explorer error reply: code:{response.status_code} message:{response.text}")
            elif response.status_code >= 400:
                raise ExplorerAPIError(f"Explorer error reply: code:{response.status_code} message:{response.text}")

        session.hooks = {
            "response": exception_hook,
        }
        return session

    def request(self, module: str, action: str, **params) -> object:
        """Make an API request and unwrap the `result` field.

        Parameters with ``None`` value are not sent.

        :raise ExplorerAPIError:
            HTTP error, network error or `status: 0` reply
        """
        query = {"module": module, "action": action}
        if self.api_key:
            query["apikey"] = self.api_key

        for key, value in params.items():
            if value is not None:
                query[key] = str(value)

        logger.debug("Explorer request %s %s %s", self.base_url, module, action)

        try:
            response = self.requests.get(self.base_url, params=query, timeout=self.timeout)
        except requests.RequestException as e:
            raise ExplorerAPIError(f"Explorer API error: {e}") from e

        try:
            data = orjson.loads(response.content)
        except orjson.JSONDecodeError as e:
            raise ExplorerAPIError(f"Explorer returned non-JSON reply for {module}/{action}: {response.text[0:200]}") from e

        if not isinstance(data, dict) or "result" not in data:
            raise ExplorerAPIError(f"Unexpected explorer reply for {module}/{action}: {data}")

        if str(data.get("status")) == "0":
            message = data.get("message") or "API request failed"
            if message not in NO_RESULTS_MESSAGES:
                raise ExplorerAPIError(f"Explorer API error for {module}/{action}: {message}, result: {data.get('result')}")

        return data["result"]

    def get_balance(self, address: AnyAddress) -> AmountWei:
        result = self.request("account", "balance", address=to_eth_address(address), tag="latest")
        return safe_parse_int(result, strict=True)

    def get_balance_multi(self, addresses: List[AnyAddress]) -> Dict[str, AmountWei]:
        """Balances of many accounts with one request.

        :return:
            `0x` address -> balance in wei
        """
        result = self.request(
            "account",
            "balancemulti",
            address=",".join(to_eth_address(a) for a in addresses),
            tag="latest",
        )
        return {to_eth_address(r["account"]): safe_parse_int(r["balance"]) for r in result}

    def _list_account_action(
        self,
        action: str,
        address: AnyAddress,
        start_block: BlockNumber | None,
        end_block: BlockNumber | None,
        page: int,
        offset: int,
        sort: Literal["asc", "desc"],
        **extra,
    ) -> List[dict]:
        result = self.request(
            "account",
            action,
            address=to_eth_address(address),
            startblock=start_block,
            endblock=end_block,
            page=page,
            offset=offset,
            sort=sort,
            **extra,
        )
        return result or []

    def get_transactions(self, address: AnyAddress, start_block=None, end_block=None, page=1, offset=100, sort: Literal["asc", "desc"] = "desc") -> List[dict]:
        """Normal transactions of an account."""
        return self._list_account_action("txlist", address, start_block, end_block, page, offset, sort)

    def get_internal_transactions(self, address: AnyAddress, start_block=None, end_block=None, page=1, offset=100, sort: Literal["asc", "desc"] = "desc") -> List[dict]:
        return self._list_account_action("txlistinternal", address, start_block, end_block, page, offset, sort)

    def get_token_transfers(
        self,
        address: AnyAddress,
        contract_address: AnyAddress | None = None,
        start_block=None,
        end_block=None,
        page=1,
        offset=100,
        sort: Literal["asc", "desc"] = "desc",
    ) -> List[dict]:
        """XRC-20 token transfers of an account, optionally for one token only."""
        return self._list_account_action(
            "tokentx",
            address,
            start_block,
            end_block,
            page,
            offset,
            sort,
            contractaddress=to_eth_address(contract_address) if contract_address else None,
        )

    def get_token_balance(self, address: AnyAddress, contract_address: AnyAddress) -> AmountWei:
        result = self.request(
            "account",
            "tokenbalance",
            address=to_eth_address(address),
            contractaddress=to_eth_address(contract_address),
            tag="latest",
        )
        return safe_parse_int(result, strict=True)

    def get_contract_abi(self, address: AnyAddress) -> list:
        """ABI of a verified contract."""
        result = self.request("contract", "getabi", address=to_eth_address(address))
        if isinstance(result, str):
            return orjson.loads(result)
        return result

    def get_transaction_status(self, tx_hash: str) -> dict:
        return self.request("transaction", "getstatus", txhash=tx_hash)

    def get_block_reward(self, block_number: BlockNumber) -> dict:
        """Block reward information.

        :return:
            Dict with `blockNumber`, `timeStamp`, `blockMiner`, `blockReward` (wei string)
        """
        return self.request("block", "getblockreward", blockno=block_number)

    def get_block_reward_wei(self, block_number: BlockNumber) -> AmountWei:
        """Reward paid for a single block in wei.

        :raise ExplorerDataNotAvailable:
            Explorer has no reward record for the block
        """
        result = self.get_block_reward(block_number)
        if not isinstance(result, dict):
            raise ExplorerDataNotAvailable(f"No block reward for block {block_number}: {result!r}")
        return safe_parse_int(result.get("blockReward"), strict=True)

    def get_block_countdown(self, block_number: BlockNumber) -> dict:
        return self.request("block", "getblockcountdown", blockno=block_number)

    def get_block_by_timestamp(self, timestamp: int, closest: Literal["before", "after"] = "before") -> BlockNumber:
        result = self.request("block", "getblocknobytime", timestamp=timestamp, closest=closest)
        return safe_parse_int(result, strict=True)
