"""In-memory validator contract state.

Used for unit testing the masternode aggregation without a node.

.. code-block:: python

    chain = MockChainQuery(block_height=1850)
    chain.add_candidate(address, owner, stake=to_wei(10_000_000))
    client = MasternodeClient(chain)
"""
import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Set, Tuple

from xdcadapter.address import get_zero_address, to_xdc_address
from xdcadapter.exceptions import UpstreamQueryFailure
from xdcadapter.transport.validator_contract import ChainQuery
from xdcadapter.types import AmountWei, AnyAddress, BlockNumber, XdcAddress
from xdcadapter.validator_set import MAX_VALIDATORS


def _key(address: AnyAddress) -> XdcAddress:
    return to_xdc_address(address)


@dataclass
class MockChainQuery(ChainQuery):
    """Validator contract state held in dicts.

    Addresses are accepted in either format and keyed internally in `xdc` format.
    """

    #: Chain tip
    block_height: BlockNumber = 0

    #: Candidate list in rank order
    candidates: List[XdcAddress] = field(default_factory=list)

    #: Candidates that are still registered, the rest have resigned
    registered: Set[XdcAddress] = field(default_factory=set)

    stakes: Dict[XdcAddress, AmountWei] = field(default_factory=dict)

    owners: Dict[XdcAddress, XdcAddress] = field(default_factory=dict)

    #: (candidate, voter) -> stake
    voter_stakes: Dict[Tuple[XdcAddress, XdcAddress], AmountWei] = field(default_factory=dict)

    #: owner -> {unlock block: amount}
    withdrawals: Dict[XdcAddress, Dict[BlockNumber, AmountWei]] = field(default_factory=dict)

    min_candidate_stake: AmountWei = 10_000_000 * 10**18

    min_voter_stake: AmountWei = 25_000 * 10**18

    max_validators: int = MAX_VALIDATORS

    candidate_withdraw_delay: int = 1_296_000

    voter_withdraw_delay: int = 432_000

    #: Voter stake queries on these candidates raise :py:class:`UpstreamQueryFailure`
    failing_candidates: Set[XdcAddress] = field(default_factory=set)

    #: Every query raises :py:class:`UpstreamQueryFailure`, simulating a dead node
    offline: bool = False

    #: candidate -> seconds to sleep before answering a stake query
    stake_delays: Dict[XdcAddress, float] = field(default_factory=dict)

    def add_candidate(self, candidate: AnyAddress, owner: AnyAddress, stake: AmountWei, registered=True):
        """Append a candidate to the end of the ranked list."""
        address = _key(candidate)
        self.candidates.append(address)
        self.stakes[address] = stake
        self.owners[address] = _key(owner)
        if registered:
            self.registered.add(address)

    def add_vote(self, candidate: AnyAddress, voter: AnyAddress, stake: AmountWei):
        pair = (_key(candidate), _key(voter))
        self.voter_stakes[pair] = self.voter_stakes.get(pair, 0) + stake

    def add_withdrawal(self, owner: AnyAddress, block_number: BlockNumber, amount: AmountWei):
        self.withdrawals.setdefault(_key(owner), {})[block_number] = amount

    def _check_online(self, what: str):
        if self.offline:
            raise UpstreamQueryFailure(f"Mock chain offline, cannot read {what}")

    async def get_candidates(self) -> List[XdcAddress]:
        self._check_online("candidates")
        return list(self.candidates)

    async def get_candidate_stake(self, candidate: AnyAddress) -> AmountWei:
        self._check_online("candidate stake")
        candidate = _key(candidate)
        delay = self.stake_delays.get(candidate)
        if delay:
            await asyncio.sleep(delay)
        return self.stakes.get(candidate, 0)

    async def get_candidate_owner(self, candidate: AnyAddress) -> XdcAddress:
        self._check_online("candidate owner")
        # Contract returns the zero address for unknown candidates
        return self.owners.get(_key(candidate), get_zero_address())

    async def is_registered_candidate(self, candidate: AnyAddress) -> bool:
        self._check_online("candidate registration")
        return _key(candidate) in self.registered

    async def get_voter_stake(self, candidate: AnyAddress, voter: AnyAddress) -> AmountWei:
        self._check_online("voter stake")
        candidate = _key(candidate)
        if candidate in self.failing_candidates:
            raise UpstreamQueryFailure(f"Simulated failure reading voter stake on {candidate}")
        return self.voter_stakes.get((candidate, _key(voter)), 0)

    async def get_voters_of(self, candidate: AnyAddress) -> List[XdcAddress]:
        self._check_online("voters")
        candidate = _key(candidate)
        return [voter for (c, voter), stake in self.voter_stakes.items() if c == candidate and stake > 0]

    async def get_current_block_height(self) -> BlockNumber:
        self._check_online("block height")
        return self.block_height

    async def get_candidate_count(self) -> int:
        self._check_online("candidate count")
        return len(self.candidates)

    async def get_min_candidate_stake(self) -> AmountWei:
        return self.min_candidate_stake

    async def get_min_voter_stake(self) -> AmountWei:
        return self.min_voter_stake

    async def get_max_validators(self) -> int:
        return self.max_validators

    async def get_candidate_withdraw_delay(self) -> int:
        return self.candidate_withdraw_delay

    async def get_voter_withdraw_delay(self) -> int:
        return self.voter_withdraw_delay

    async def get_withdraw_block_numbers(self, owner: AnyAddress) -> List[BlockNumber]:
        self._check_online("withdrawals")
        return sorted(self.withdrawals.get(_key(owner), {}).keys())

    async def get_withdraw_stake(self, block_number: BlockNumber, owner: AnyAddress) -> AmountWei:
        self._check_online("withdrawal amount")
        return self.withdrawals.get(_key(owner), {}).get(block_number, 0)


def make_address(n: int) -> XdcAddress:
    """Deterministic test address, `xdc000...000n` style."""
    assert n >= 0
    return "xdc" + format(n, "040x")
