"""Staking reward estimation.

Estimates what a stake earns as a proportional share of all block rewards.
This is a model, not an accounting of actually paid rewards:

- All block rewards in a year are assumed to be split by stake share

- ``total_network_stake`` must be supplied by the caller,
  e.g. by summing candidate stakes

All intermediate values are integers in wei. The only truncation point
is the yearly amount, ``floor(yearly_pool * stake / total_network_stake)``.
Daily and monthly figures are then the yearly amount integer divided by 365 and 12.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Dict

from xdcadapter.exceptions import InvalidAmount
from xdcadapter.types import AmountWei
from xdcadapter.units import from_wei


#: Blocks per year with ~2 second blocks
BLOCKS_PER_YEAR = 15_768_000

#: 0.25 XDC per block
REWARD_PER_BLOCK: AmountWei = 250_000_000_000_000_000


@dataclass(frozen=True, slots=True)
class RewardEstimate:
    """Estimated rewards for one stake."""

    daily: AmountWei

    monthly: AmountWei

    yearly: AmountWei

    #: Annual percentage yield, two decimals, without the percent sign
    apy: str

    @staticmethod
    def zero() -> "RewardEstimate":
        return RewardEstimate(0, 0, 0, "0.00")

    def to_dict(self) -> Dict[str, str]:
        """Amounts in XDC and in wei as strings."""
        return {
            "daily": from_wei(self.daily),
            "monthly": from_wei(self.monthly),
            "yearly": from_wei(self.yearly),
            "daily_wei": str(self.daily),
            "monthly_wei": str(self.monthly),
            "yearly_wei": str(self.yearly),
            "apy": self.apy,
        }


def _check_amount(value: int, name: str):
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(f"{name} must be an integer wei amount, got {value!r}")
    if value < 0:
        raise InvalidAmount(f"{name} must not be negative, got {value}")


def estimate_rewards(
    stake: AmountWei,
    total_network_stake: AmountWei,
    blocks_per_year: int = BLOCKS_PER_YEAR,
    reward_per_block: AmountWei = REWARD_PER_BLOCK,
) -> RewardEstimate:
    """Estimate daily, monthly and yearly rewards for a stake.

    Example:

    .. code-block:: python

        estimate = estimate_rewards(to_wei(10_000), to_wei(1_000_000_000))
        assert from_wei(estimate.yearly) == "39.42"
        assert estimate.apy == "0.39"

    :param stake:
        Staked amount in wei

    :param total_network_stake:
        All stake in the network in wei.
        If zero, all-zero estimate is returned.

    :return:
        Estimate where all amounts are in wei
    """
    _check_amount(stake, "stake")
    _check_amount(total_network_stake, "total_network_stake")
    _check_amount(blocks_per_year, "blocks_per_year")
    _check_amount(reward_per_block, "reward_per_block")

    if total_network_stake == 0:
        return RewardEstimate.zero()

    yearly_pool = blocks_per_year * reward_per_block
    yearly = (yearly_pool * stake) // total_network_stake

    with localcontext() as ctx:
        ctx.prec = 100
        if stake == 0:
            apy = Decimal(0)
        else:
            apy = Decimal(yearly) * 100 / Decimal(stake)
        apy = apy.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    return RewardEstimate(
        daily=yearly // 365,
        monthly=yearly // 12,
        yearly=yearly,
        apy=f"{apy}",
    )
