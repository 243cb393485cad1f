"""Epoch arithmetic.

XDPoS groups blocks into fixed length epochs. Rewards are paid and
the validator set rotates at epoch boundaries.

Epoch `n` covers block heights `[n * 900, n * 900 + 899]`.
Every non-negative block height belongs to exactly one epoch.
"""
from dataclasses import dataclass
from typing import Iterator

from xdcadapter.exceptions import InvalidBlockHeight
from xdcadapter.types import BlockNumber, EpochNumber


#: Blocks per epoch on XDC mainnet and Apothem
EPOCH_LENGTH = 900


@dataclass(frozen=True, slots=True)
class BlockRange:
    """Inclusive block range of one epoch."""

    start_block: BlockNumber

    #: Inclusive
    end_block: BlockNumber

    def __contains__(self, block_number: BlockNumber) -> bool:
        return self.start_block <= block_number <= self.end_block

    def __len__(self) -> int:
        return self.end_block - self.start_block + 1

    def __iter__(self) -> Iterator[BlockNumber]:
        return iter(range(self.start_block, self.end_block + 1))


def _check_height(value: int, name: str):
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidBlockHeight(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidBlockHeight(f"{name} must not be negative, got {value}")


def epoch_of(block_number: BlockNumber, epoch_length=EPOCH_LENGTH) -> EpochNumber:
    """Which epoch a block belongs to.

    :raise InvalidBlockHeight:
        Negative height
    """
    assert epoch_length > 0, f"Bad epoch length {epoch_length}"
    _check_height(block_number, "Block height")
    return block_number // epoch_length


def range_of(epoch: EpochNumber, epoch_length=EPOCH_LENGTH) -> BlockRange:
    """First and last block of an epoch.

    :raise InvalidBlockHeight:
        Negative epoch number
    """
    assert epoch_length > 0, f"Bad epoch length {epoch_length}"
    _check_height(epoch, "Epoch number")
    start = epoch * epoch_length
    return BlockRange(start, start + epoch_length - 1)


def current_epoch(chain_height: BlockNumber, epoch_length=EPOCH_LENGTH) -> EpochNumber:
    """Epoch of the chain tip."""
    return epoch_of(chain_height, epoch_length)


def blocks_elapsed_in_epoch(epoch: EpochNumber, chain_height: BlockNumber, epoch_length=EPOCH_LENGTH) -> int:
    """How many blocks of an epoch have been produced at the given chain height.

    - Zero for epochs in the future

    - `epoch_length` for finished epochs
    """
    block_range = range_of(epoch, epoch_length)
    _check_height(chain_height, "Chain height")
    if chain_height < block_range.start_block:
        return 0
    return min(block_range.end_block, chain_height) - block_range.start_block + 1
