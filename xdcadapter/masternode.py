"""XDPoS masternode information.

XDC Network is secured by up to 108 masternodes (validators) picked from
the registered candidates. Anyone can vote, i.e. delegate stake, for a candidate.

:py:class:`MasternodeClient` composes raw validator contract queries
into status records:

- :py:class:`MasternodeInfo` for a candidate, including its derived :py:class:`MasternodeStatus`

- :py:class:`VoterInfo` for a voter's stake across all candidates

- :py:class:`EpochInfo` for the validator set and accrued rewards of an epoch

- :py:class:`WithdrawalInfo` for pending unstakes

Example:

.. code-block:: python

    provider = XdcProvider(get_network_config("mainnet"))
    client = MasternodeClient.create(provider)

    masternodes = await client.get_masternodes_list(limit=20)
    df = masternodes_to_dataframe(masternodes)
    print(df.head())

Upstream errors propagate to the caller, with one exception:
:py:meth:`MasternodeClient.get_voter_info` records failed per-candidate queries
in :py:attr:`VoterInfo.failures` and continues.
"""
import asyncio
import datetime
import enum
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd
from tqdm_loggable.auto import tqdm

from xdcadapter.address import AddressFormat, normalize_address, to_xdc_address
from xdcadapter.epoch import EPOCH_LENGTH, blocks_elapsed_in_epoch, current_epoch, range_of
from xdcadapter.exceptions import InvalidAmount, SignerRequired, UpstreamQueryFailure
from xdcadapter.outcome import QueryFailure, QueryOutcome, QuerySuccess
from xdcadapter.rewards import BLOCKS_PER_YEAR, REWARD_PER_BLOCK, RewardEstimate, estimate_rewards
from xdcadapter.transport.explorer import XdcExplorerApi
from xdcadapter.transport.provider import XdcProvider
from xdcadapter.transport.validator_contract import ChainQuery, ValidatorContract
from xdcadapter.types import AmountWei, AnyAddress, BlockNumber, EpochNumber, TxHash, XdcAddress
from xdcadapter.units import from_wei, to_wei
from xdcadapter.validator_set import MAX_VALIDATORS, is_validator, resolve_validator_set


logger = logging.getLogger(__name__)


#: How many candidates we resolve in parallel in :py:meth:`MasternodeClient.get_masternodes_list`
DEFAULT_MAX_CONCURRENCY = 16


class MasternodeStatus(str, enum.Enum):
    """Lifecycle state of a candidate.

    Exactly one applies to any address.
    """

    #: Registered and in the validator set
    active = "active"

    #: Registered, but not ranked into the validator set
    proposed = "proposed"

    #: Not a registered candidate (anymore)
    resigned = "resigned"


def derive_status(is_registered: bool, is_in_validator_set: bool) -> MasternodeStatus:
    """Map candidate registration and validator set membership to a status."""
    if not is_registered:
        return MasternodeStatus.resigned
    if is_in_validator_set:
        return MasternodeStatus.active
    return MasternodeStatus.proposed


def _amount_fields(name: str, wei: AmountWei) -> dict:
    return {
        name: str(wei),
        f"{name}_xdc": from_wei(wei),
    }


@dataclass(slots=True)
class MasternodeInfo:
    """Status of one masternode candidate at query time."""

    address: XdcAddress

    owner: XdcAddress

    #: Total stake in wei
    stake: AmountWei

    voter_count: int

    #: In the first 108 of the candidate list
    is_validator: bool

    status: MasternodeStatus

    def __repr__(self):
        return f"<Masternode {self.address} {self.status.value} stake:{from_wei(self.stake)} XDC voters:{self.voter_count}>"

    def get_stake_xdc(self) -> str:
        return from_wei(self.stake)

    def to_dict(self, address_format: AddressFormat = AddressFormat.xdc) -> dict:
        return {
            "address": normalize_address(self.address, address_format),
            "owner": normalize_address(self.owner, address_format),
            **_amount_fields("stake", self.stake),
            "voter_count": self.voter_count,
            "is_validator": self.is_validator,
            "status": self.status.value,
        }


@dataclass(slots=True)
class VoterInfo:
    """Stake a voter has delegated, across all candidates."""

    address: XdcAddress

    #: Candidate -> stake in wei, only non-zero stakes
    stakes: Dict[XdcAddress, AmountWei] = field(default_factory=dict)

    #: Candidates whose voter stake query failed.
    #:
    #: The stake on these candidates is missing from :py:attr:`total_voted`.
    failures: List[QueryFailure] = field(default_factory=list)

    @property
    def voted_for(self) -> List[XdcAddress]:
        return list(self.stakes.keys())

    @property
    def total_voted(self) -> AmountWei:
        return sum(self.stakes.values())

    @property
    def partial(self) -> bool:
        """Some candidate queries failed and the totals may be too low."""
        return len(self.failures) > 0

    @staticmethod
    def from_outcomes(address: XdcAddress, outcomes: List[QueryOutcome[AmountWei]]) -> "VoterInfo":
        info = VoterInfo(address=address)
        for outcome in outcomes:
            if not outcome.ok:
                info.failures.append(outcome)
            elif outcome.value > 0:
                info.stakes[outcome.key] = outcome.value
        return info

    def to_dict(self, address_format: AddressFormat = AddressFormat.xdc) -> dict:
        return {
            "address": normalize_address(self.address, address_format),
            "voted_for": [normalize_address(a, address_format) for a in self.voted_for],
            "stakes": {normalize_address(a, address_format): str(v) for a, v in self.stakes.items()},
            **_amount_fields("total_voted", self.total_voted),
            "partial": self.partial,
            "failures": [{"candidate": normalize_address(f.key, address_format), "reason": f.reason} for f in self.failures],
        }


@dataclass(slots=True)
class EpochInfo:
    """Block range, validator set and rewards of one epoch."""

    number: EpochNumber

    start_block: BlockNumber

    #: Inclusive
    end_block: BlockNumber

    #: Chain tip when queried
    current_block: BlockNumber

    #: Validator set as of query time
    validator_set: List[XdcAddress]

    #: Blocks of this epoch produced so far
    blocks_elapsed: int

    #: Reward per block used in :py:attr:`rewards`
    reward_per_block: AmountWei

    #: Total block rewards accrued in this epoch so far, in wei
    rewards: AmountWei

    #: `explorer` if the reward per block came from the explorer, `estimate` if it is the protocol constant
    rewards_source: str = "estimate"

    @property
    def blocks_remaining(self) -> int:
        return max(self.end_block - self.current_block, 0)

    def to_dict(self, address_format: AddressFormat = AddressFormat.xdc) -> dict:
        return {
            "number": self.number,
            "start_block": self.start_block,
            "end_block": self.end_block,
            "blocks_per_epoch": self.end_block - self.start_block + 1,
            "current_block": self.current_block,
            "blocks_elapsed": self.blocks_elapsed,
            "blocks_remaining": self.blocks_remaining,
            "validator_count": len(self.validator_set),
            "validator_set": [normalize_address(a, address_format) for a in self.validator_set],
            **_amount_fields("rewards", self.rewards),
            "rewards_source": self.rewards_source,
        }


@dataclass(slots=True)
class WithdrawalInfo:
    """One pending withdrawal after resign or unvote."""

    #: Block height at which the funds unlock
    block_number: BlockNumber

    #: Position in the contract's withdrawal list, passed to :py:meth:`MasternodeClient.withdraw`
    index: int

    amount: AmountWei

    #: Unlock height has been reached
    available: bool

    def to_dict(self) -> dict:
        return {
            "block_number": self.block_number,
            "index": self.index,
            **_amount_fields("amount", self.amount),
            "available": self.available,
        }


class MasternodeClient:
    """Query and manage XDPoS masternodes.

    - Read operations only need a :py:class:`ChainQuery`

    - Write operations need a :py:class:`ValidatorContract` with a signer

    - The explorer is optional, without it epoch rewards are estimated from the protocol constant
    """

    def __init__(
        self,
        chain: ChainQuery,
        explorer: Optional[XdcExplorerApi] = None,
        epoch_length: int = EPOCH_LENGTH,
        max_validators: int = MAX_VALIDATORS,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ):
        """
        :param chain:
            Validator contract reader

        :param explorer:
            Optional explorer for block reward data

        :param max_concurrency:
            Limit in-flight candidate lookups in list queries,
            not to get throttled by public RPC nodes
        """
        assert isinstance(chain, ChainQuery), f"Got {type(chain)}"
        self.chain = chain
        self.explorer = explorer
        self.epoch_length = epoch_length
        self.max_validators = max_validators
        self.max_concurrency = max_concurrency

    @classmethod
    def create(cls, provider: XdcProvider, explorer: Optional[XdcExplorerApi] = None) -> "MasternodeClient":
        """Create a client for the validator contract of the provider's network."""
        network = provider.get_network_config()
        return MasternodeClient(
            ValidatorContract(provider),
            explorer=explorer,
            epoch_length=network.epoch_length,
        )

    async def get_candidates(self) -> List[XdcAddress]:
        """All masternode candidates in network rank order."""
        return await self.chain.get_candidates()

    async def get_candidate_count(self) -> int:
        return await self.chain.get_candidate_count()

    async def is_candidate(self, address: AnyAddress) -> bool:
        return await self.chain.is_registered_candidate(address)

    async def get_voters_for_candidate(self, candidate: AnyAddress) -> List[XdcAddress]:
        return await self.chain.get_voters_of(candidate)

    async def get_voter_stake(self, candidate: AnyAddress, voter: AnyAddress) -> AmountWei:
        return await self.chain.get_voter_stake(candidate, voter)

    async def get_min_candidate_stake(self) -> AmountWei:
        return await self.chain.get_min_candidate_stake()

    async def get_min_voter_stake(self) -> AmountWei:
        return await self.chain.get_min_voter_stake()

    async def get_max_validators(self) -> int:
        return await self.chain.get_max_validators()

    async def get_candidate_withdraw_delay(self) -> int:
        return await self.chain.get_candidate_withdraw_delay()

    async def get_voter_withdraw_delay(self) -> int:
        return await self.chain.get_voter_withdraw_delay()

    async def get_masternode_info(self, candidate: AnyAddress) -> MasternodeInfo:
        """Resolve full status of one candidate.

        Stake, owner, registration, voters and the candidate list are queried in parallel.

        :raise UpstreamQueryFailure:
            Any of the queries failed
        """
        return await self._get_masternode_info(to_xdc_address(candidate), candidates=None)

    async def _get_masternode_info(self, address: XdcAddress, candidates: Optional[List[XdcAddress]]) -> MasternodeInfo:
        queries = [
            self.chain.get_candidate_stake(address),
            self.chain.get_candidate_owner(address),
            self.chain.is_registered_candidate(address),
            self.chain.get_voters_of(address),
        ]

        if candidates is None:
            stake, owner, registered, voters, candidates = await asyncio.gather(*queries, self.chain.get_candidates())
        else:
            stake, owner, registered, voters = await asyncio.gather(*queries)

        in_validator_set = is_validator(address, candidates, self.max_validators)

        return MasternodeInfo(
            address=address,
            owner=to_xdc_address(owner),
            stake=stake,
            voter_count=len(voters),
            is_validator=in_validator_set,
            status=derive_status(registered, in_validator_set),
        )

    async def get_masternodes_list(self, limit: int = MAX_VALIDATORS) -> List[MasternodeInfo]:
        """Resolve the first `limit` candidates.

        :return:
            Masternodes sorted by stake, largest first
        """
        assert limit >= 0, f"Bad limit {limit}"
        started = datetime.datetime.utcnow()

        candidates = await self.chain.get_candidates()
        limited = candidates[0:limit]

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _resolve(address: XdcAddress) -> MasternodeInfo:
            async with semaphore:
                return await self._get_masternode_info(address, candidates)

        masternodes = await asyncio.gather(*(_resolve(c) for c in limited))

        logger.info(
            "Resolved %d masternodes out of %d candidates in %s",
            len(masternodes),
            len(candidates),
            datetime.datetime.utcnow() - started,
        )

        return sorted(masternodes, key=lambda m: m.stake, reverse=True)

    async def get_total_candidate_stake(self) -> AmountWei:
        """Sum of all candidate stakes.

        Can be used as `total_network_stake` for :py:meth:`calculate_estimated_rewards`.
        """
        candidates = await self.chain.get_candidates()
        stakes = await asyncio.gather(*(self.chain.get_candidate_stake(c) for c in candidates))
        return sum(stakes)

    async def _query_voter_stake(self, candidate: XdcAddress, voter: XdcAddress) -> QueryOutcome[AmountWei]:
        try:
            stake = await self.chain.get_voter_stake(candidate, voter)
            return QuerySuccess(key=candidate, value=stake)
        except UpstreamQueryFailure as e:
            logger.warning("Could not read stake of voter %s on candidate %s: %s", voter, candidate, e)
            return QueryFailure.from_exception(candidate, e)

    async def get_voter_info(self, voter: AnyAddress, progress_bar=False) -> VoterInfo:
        """Find all candidates a voter has staked on.

        Candidates are queried one by one. A failed query for one candidate
        does not fail the whole lookup, but is recorded in :py:attr:`VoterInfo.failures`.

        :param progress_bar:
            Display a progress bar over the candidate list

        :raise UpstreamQueryFailure:
            Candidate list could not be read
        """
        address = to_xdc_address(voter)
        candidates = await self.chain.get_candidates()

        outcomes = []
        for candidate in tqdm(candidates, desc=f"Scanning votes of {address}", disable=not progress_bar):
            outcomes.append(await self._query_voter_stake(candidate, address))

        info = VoterInfo.from_outcomes(address, outcomes)

        if info.partial:
            logger.warning(
                "Voter %s lookup is partial, %d / %d candidate queries failed",
                address,
                len(info.failures),
                len(candidates),
            )

        return info

    async def get_withdrawals(self, owner: AnyAddress) -> List[WithdrawalInfo]:
        """Pending withdrawals of an account.

        Zero amount entries, already withdrawn, are skipped. Each entry keeps its
        index in the contract list so it can be passed to :py:meth:`withdraw`.
        """
        current_block, block_numbers = await asyncio.gather(
            self.chain.get_current_block_height(),
            self.chain.get_withdraw_block_numbers(owner),
        )

        amounts = await asyncio.gather(*(self.chain.get_withdraw_stake(b, owner) for b in block_numbers))

        return [
            WithdrawalInfo(
                block_number=block_number,
                index=index,
                amount=amount,
                available=current_block >= block_number,
            )
            for index, (block_number, amount) in enumerate(zip(block_numbers, amounts))
            if amount > 0
        ]

    async def get_current_epoch(self) -> EpochNumber:
        block_number = await self.chain.get_current_block_height()
        return current_epoch(block_number, self.epoch_length)

    async def _get_reward_per_block(self, block_number: BlockNumber) -> tuple[AmountWei, str]:
        """Explorer block reward, falling back to the protocol constant."""
        if self.explorer is None:
            return REWARD_PER_BLOCK, "estimate"

        try:
            reward = await asyncio.to_thread(self.explorer.get_block_reward_wei, block_number)
            return reward, "explorer"
        except (UpstreamQueryFailure, InvalidAmount) as e:
            logger.warning("Explorer block reward for %d not available, using estimate: %s", block_number, e)
            return REWARD_PER_BLOCK, "estimate"

    async def get_epoch_info(self, epoch: Optional[EpochNumber] = None) -> EpochInfo:
        """Get block range, validators and accrued rewards of an epoch.

        :param epoch:
            Epoch number. If not given use the current epoch.
        """
        current_block, candidates = await asyncio.gather(
            self.chain.get_current_block_height(),
            self.chain.get_candidates(),
        )

        if epoch is None:
            epoch = current_epoch(current_block, self.epoch_length)

        block_range = range_of(epoch, self.epoch_length)
        elapsed = blocks_elapsed_in_epoch(epoch, current_block, self.epoch_length)

        if elapsed > 0:
            reward_per_block, source = await self._get_reward_per_block(block_range.start_block)
        else:
            reward_per_block, source = REWARD_PER_BLOCK, "estimate"

        return EpochInfo(
            number=epoch,
            start_block=block_range.start_block,
            end_block=block_range.end_block,
            current_block=current_block,
            validator_set=resolve_validator_set(candidates, self.max_validators),
            blocks_elapsed=elapsed,
            reward_per_block=reward_per_block,
            rewards=elapsed * reward_per_block,
            rewards_source=source,
        )

    def calculate_estimated_rewards(
        self,
        stake: AmountWei,
        total_network_stake: AmountWei,
        blocks_per_year: int = BLOCKS_PER_YEAR,
    ) -> RewardEstimate:
        """Estimate staking rewards, see :py:func:`xdcadapter.rewards.estimate_rewards`."""
        return estimate_rewards(stake, total_network_stake, blocks_per_year)

    def _get_writable_contract(self, operation: str) -> ValidatorContract:
        if not isinstance(self.chain, ValidatorContract) or not self.chain.provider.has_signer():
            raise SignerRequired(operation)
        return self.chain

    async def propose(self, candidate: AnyAddress, stake_xdc: str) -> TxHash:
        """Propose a new masternode candidacy.

        :param stake_xdc:
            Initial stake in XDC
        """
        contract = self._get_writable_contract("propose candidacy")
        return await contract.propose(candidate, to_wei(stake_xdc))

    async def vote(self, candidate: AnyAddress, amount_xdc: str) -> TxHash:
        """Stake on a candidate."""
        contract = self._get_writable_contract("vote")
        return await contract.vote(candidate, to_wei(amount_xdc))

    async def unvote(self, candidate: AnyAddress, amount_xdc: str) -> TxHash:
        """Remove stake from a candidate.

        The funds become withdrawable after the voter withdraw delay.
        """
        contract = self._get_writable_contract("unvote")
        return await contract.unvote(candidate, to_wei(amount_xdc))

    async def resign(self, candidate: AnyAddress) -> TxHash:
        contract = self._get_writable_contract("resign")
        return await contract.resign(candidate)

    async def withdraw(self, block_number: BlockNumber, index: int) -> TxHash:
        """Withdraw unlocked funds, see :py:meth:`get_withdrawals`."""
        contract = self._get_writable_contract("withdraw")
        return await contract.withdraw(block_number, index)


def masternodes_to_dataframe(masternodes: List[MasternodeInfo]) -> pd.DataFrame:
    """Tabulate masternodes for display in a notebook or console.

    Stake is converted to XDC float, so this is for presentation only.
    """
    rows = [
        {
            "Address": m.address,
            "Owner": m.owner,
            "Stake (XDC)": float(m.get_stake_xdc()),
            "Voters": m.voter_count,
            "Validator": m.is_validator,
            "Status": m.status.value,
        }
        for m in masternodes
    ]
    df = pd.DataFrame(rows, columns=["Address", "Owner", "Stake (XDC)", "Voters", "Validator", "Status"])
    return df
