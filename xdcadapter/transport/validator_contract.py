"""XDPoS validator system contract reader.

:py:class:`ChainQuery` is the read-only capability the masternode
aggregator needs. :py:class:`ValidatorContract` implements it with
`eth_call` against the validator system contract.

All addresses returned are in `xdc` format. All RPC errors
are raised as :py:class:`xdcadapter.exceptions.UpstreamQueryFailure`.
"""
import logging
from abc import ABC, abstractmethod
from typing import List

from xdcadapter.abi import VALIDATOR_ABI
from xdcadapter.address import get_checksum_address, to_xdc_address
from xdcadapter.exceptions import UpstreamQueryFailure
from xdcadapter.transport.provider import RPC_ERRORS, XdcProvider
from xdcadapter.types import AmountWei, AnyAddress, BlockNumber, TxHash, XdcAddress


logger = logging.getLogger(__name__)


class ChainQuery(ABC):
    """Read-only chain state needed for masternode information.

    Implementations must tolerate many concurrent in-flight calls.
    """

    @abstractmethod
    async def get_candidates(self) -> List[XdcAddress]:
        """All candidates, in the ranked order the network uses to pick validators."""

    @abstractmethod
    async def get_candidate_stake(self, candidate: AnyAddress) -> AmountWei:
        """Total stake of a candidate, own and voted."""

    @abstractmethod
    async def get_candidate_owner(self, candidate: AnyAddress) -> XdcAddress:
        pass

    @abstractmethod
    async def is_registered_candidate(self, candidate: AnyAddress) -> bool:
        pass

    @abstractmethod
    async def get_voter_stake(self, candidate: AnyAddress, voter: AnyAddress) -> AmountWei:
        pass

    @abstractmethod
    async def get_voters_of(self, candidate: AnyAddress) -> List[XdcAddress]:
        pass

    @abstractmethod
    async def get_current_block_height(self) -> BlockNumber:
        pass

    @abstractmethod
    async def get_candidate_count(self) -> int:
        pass

    @abstractmethod
    async def get_min_candidate_stake(self) -> AmountWei:
        pass

    @abstractmethod
    async def get_min_voter_stake(self) -> AmountWei:
        pass

    @abstractmethod
    async def get_max_validators(self) -> int:
        pass

    @abstractmethod
    async def get_candidate_withdraw_delay(self) -> int:
        """Blocks a resigned candidate must wait before withdrawing."""

    @abstractmethod
    async def get_voter_withdraw_delay(self) -> int:
        """Blocks a voter must wait after unvote before withdrawing."""

    @abstractmethod
    async def get_withdraw_block_numbers(self, owner: AnyAddress) -> List[BlockNumber]:
        """Block numbers at which the owner has pending withdrawals."""

    @abstractmethod
    async def get_withdraw_stake(self, block_number: BlockNumber, owner: AnyAddress) -> AmountWei:
        """Amount pending withdrawal for the owner at a block number."""


class ValidatorContract(ChainQuery):
    """Query and transact with the validator contract through :py:class:`XdcProvider`."""

    def __init__(self, provider: XdcProvider, address: AnyAddress | None = None):
        """
        :param provider:
            Connection

        :param address:
            Override the validator contract address of the network config
        """
        self.provider = provider
        self.address = to_xdc_address(address or provider.get_network_config().validator_contract)
        self.contract = provider.get_contract(self.address, VALIDATOR_ABI)

    def __repr__(self):
        return f"<ValidatorContract {self.address} on {self.provider.get_network_config().name}>"

    async def _call(self, fn_name: str, *args, sender: AnyAddress | None = None):
        """Run eth_call and translate errors."""
        fn = getattr(self.contract.functions, fn_name)(*args)
        tx_params = {"from": get_checksum_address(sender)} if sender else None
        try:
            return await fn.call(tx_params)
        except RPC_ERRORS as e:
            raise UpstreamQueryFailure(f"Validator contract call {fn_name}{args} failed: {e}") from e

    async def get_candidates(self) -> List[XdcAddress]:
        candidates = await self._call("getCandidates")
        return [to_xdc_address(c) for c in candidates]

    async def get_candidate_count(self) -> int:
        return int(await self._call("candidateCount"))

    async def get_candidate_stake(self, candidate: AnyAddress) -> AmountWei:
        return int(await self._call("getCandidateCap", get_checksum_address(candidate)))

    async def get_candidate_owner(self, candidate: AnyAddress) -> XdcAddress:
        owner = await self._call("getCandidateOwner", get_checksum_address(candidate))
        return to_xdc_address(owner)

    async def is_registered_candidate(self, candidate: AnyAddress) -> bool:
        return bool(await self._call("isCandidate", get_checksum_address(candidate)))

    async def get_voter_stake(self, candidate: AnyAddress, voter: AnyAddress) -> AmountWei:
        return int(await self._call("getVoterCap", get_checksum_address(candidate), get_checksum_address(voter)))

    async def get_voters_of(self, candidate: AnyAddress) -> List[XdcAddress]:
        voters = await self._call("getVoters", get_checksum_address(candidate))
        return [to_xdc_address(v) for v in voters]

    async def get_current_block_height(self) -> BlockNumber:
        return await self.provider.get_block_number()

    async def get_min_candidate_stake(self) -> AmountWei:
        return int(await self._call("minCandidateCap"))

    async def get_min_voter_stake(self) -> AmountWei:
        return int(await self._call("minVoterCap"))

    async def get_max_validators(self) -> int:
        return int(await self._call("maxValidatorNumber"))

    async def get_candidate_withdraw_delay(self) -> int:
        return int(await self._call("candidateWithdrawDelay"))

    async def get_voter_withdraw_delay(self) -> int:
        return int(await self._call("voterWithdrawDelay"))

    async def get_withdraw_block_numbers(self, owner: AnyAddress) -> List[BlockNumber]:
        # The contract keys withdrawals by msg.sender
        block_numbers = await self._call("getWithdrawBlockNumbers", sender=owner)
        return [int(b) for b in block_numbers]

    async def get_withdraw_stake(self, block_number: BlockNumber, owner: AnyAddress) -> AmountWei:
        return int(await self._call("getWithdrawCap", block_number, sender=owner))

    async def propose(self, candidate: AnyAddress, stake: AmountWei) -> TxHash:
        """Register a new masternode candidate with an initial stake."""
        fn = self.contract.functions.propose(get_checksum_address(candidate))
        return await self.provider.send_contract_transaction(fn, value=stake, operation="propose candidacy")

    async def vote(self, candidate: AnyAddress, amount: AmountWei) -> TxHash:
        fn = self.contract.functions.vote(get_checksum_address(candidate))
        return await self.provider.send_contract_transaction(fn, value=amount, operation="vote")

    async def unvote(self, candidate: AnyAddress, amount: AmountWei) -> TxHash:
        fn = self.contract.functions.unvote(get_checksum_address(candidate), amount)
        return await self.provider.send_contract_transaction(fn, operation="unvote")

    async def resign(self, candidate: AnyAddress) -> TxHash:
        fn = self.contract.functions.resign(get_checksum_address(candidate))
        return await self.provider.send_contract_transaction(fn, operation="resign")

    async def withdraw(self, block_number: BlockNumber, index: int) -> TxHash:
        fn = self.contract.functions.withdraw(block_number, index)
        return await self.provider.send_contract_transaction(fn, operation="withdraw")
