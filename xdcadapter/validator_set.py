"""Validator set derivation.

The validator set is the first :py:data:`MAX_VALIDATORS` entries of the
candidate list as returned by the validator system contract.
Membership is positional. Candidates are not re-ranked by stake here:
the caller's ordering is taken as authoritative.
"""
from typing import List, Sequence

from xdcadapter.address import get_payload, to_xdc_address
from xdcadapter.types import AnyAddress, XdcAddress


#: XDPoS masternode slots
MAX_VALIDATORS = 108


def resolve_validator_set(candidates: Sequence[AnyAddress], max_validators=MAX_VALIDATORS) -> List[XdcAddress]:
    """Truncate the ordered candidate list to the active validator set.

    :return:
        At most `max_validators` addresses in `xdc` format, in the original order
    """
    assert max_validators >= 0
    return [to_xdc_address(c) for c in candidates[0:max_validators]]


def is_validator(address: AnyAddress, candidates: Sequence[AnyAddress], max_validators=MAX_VALIDATORS) -> bool:
    """Is the address in the validator prefix of the candidate list.

    Comparison is format and case insensitive.
    """
    payload = get_payload(address)
    return any(get_payload(c) == payload for c in candidates[0:max_validators])
