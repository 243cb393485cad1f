"""Masternode operations as named, parameterised calls.

Automation hosts call :py:func:`execute_masternode_operation` with an operation
name and a parameter dict, and get JSON serialisable dicts back.

Parameters:

- `masternodeAddress`, `voterAddress`: address in either format

- `stakeAmount`, `unvoteAmount`, `totalNetworkStake`: XDC decimal strings

- `withdrawBlockNumber`, `withdrawIndex`: integers

- `addressFormat`: `xdc` (default) or `0x` for rendering addresses in the output

- `epoch`: optional epoch number for `getEpochInfo`

- `limit`: optional for `getCandidates` and `getMasternodesList`
"""
import enum
import logging
from typing import List

from xdcadapter.address import AddressFormat, is_valid_address, normalize_address
from xdcadapter.exceptions import InvalidAddressFormat, XdcAdapterError
from xdcadapter.masternode import MasternodeClient
from xdcadapter.units import to_wei
from xdcadapter.validator_set import MAX_VALIDATORS


logger = logging.getLogger(__name__)


#: How many candidates `getCandidates` lists by default
DEFAULT_CANDIDATE_LIST_LIMIT = 50


class MasternodeOperation(str, enum.Enum):
    """Supported operation names."""

    get_candidates = "getCandidates"
    get_masternode_info = "getMasternodeInfo"
    get_masternodes_list = "getMasternodesList"
    get_epoch_info = "getEpochInfo"
    get_voter_info = "getVoterInfo"
    calculate_rewards = "calculateRewards"
    vote = "vote"
    unvote = "unvote"
    withdraw = "withdraw"


class MissingParameter(XdcAdapterError, ValueError):
    """A required operation parameter was not given."""

    def __init__(self, name: str):
        super().__init__(f"Missing parameter: {name}")
        self.name = name


def _get_address_param(params: dict, name: str) -> str:
    address = params.get(name)
    if not is_valid_address(address):
        raise InvalidAddressFormat(f"Invalid {name}: {address!r}")
    return address


def _get_required(params: dict, name: str):
    if params.get(name) in (None, ""):
        raise MissingParameter(name)
    return params[name]


async def execute_masternode_operation(client: MasternodeClient, operation: MasternodeOperation | str, params: dict) -> List[dict]:
    """Run one operation.

    :return:
        List of output items, usually one

    :raise InvalidAddressFormat:
        Address parameter is not an address

    :raise MissingParameter:
        Required parameter is missing or empty

    :raise InvalidAmount:
        Amount parameter is not a valid XDC amount

    :raise SignerRequired:
        Write operation without a private key
    """
    operation = MasternodeOperation(operation)
    address_format = AddressFormat(params.get("addressFormat", AddressFormat.xdc))

    logger.info("Executing masternode operation %s", operation.value)

    if operation == MasternodeOperation.get_candidates:
        limit = int(params.get("limit", DEFAULT_CANDIDATE_LIST_LIMIT))
        candidates = await client.get_candidates()
        return [{
            "total_candidates": len(candidates),
            "max_validators": client.max_validators,
            "candidates": [normalize_address(c, address_format) for c in candidates[0:limit]],
        }]

    elif operation == MasternodeOperation.get_masternode_info:
        address = _get_address_param(params, "masternodeAddress")
        info = await client.get_masternode_info(address)
        return [info.to_dict(address_format)]

    elif operation == MasternodeOperation.get_masternodes_list:
        limit = int(params.get("limit", MAX_VALIDATORS))
        masternodes = await client.get_masternodes_list(limit)
        return [m.to_dict(address_format) for m in masternodes]

    elif operation == MasternodeOperation.get_epoch_info:
        epoch = params.get("epoch")
        info = await client.get_epoch_info(int(epoch) if epoch not in (None, "") else None)
        return [info.to_dict(address_format)]

    elif operation == MasternodeOperation.get_voter_info:
        address = _get_address_param(params, "voterAddress")
        info = await client.get_voter_info(address)
        return [info.to_dict(address_format)]

    elif operation == MasternodeOperation.calculate_rewards:
        stake_amount = str(_get_required(params, "stakeAmount"))
        total_network_stake = str(_get_required(params, "totalNetworkStake"))
        estimate = client.calculate_estimated_rewards(to_wei(stake_amount), to_wei(total_network_stake))
        return [{
            "stake_amount": stake_amount,
            "total_network_stake": total_network_stake,
            **estimate.to_dict(),
            "apy": estimate.apy + "%",
        }]

    elif operation == MasternodeOperation.vote:
        address = _get_address_param(params, "masternodeAddress")
        amount = str(_get_required(params, "stakeAmount"))
        tx_hash = await client.vote(address, amount)
        return [{
            "success": True,
            "transaction_hash": tx_hash,
            "masternode": normalize_address(address, address_format),
            "amount": amount,
        }]

    elif operation == MasternodeOperation.unvote:
        address = _get_address_param(params, "masternodeAddress")
        amount = str(_get_required(params, "unvoteAmount"))
        tx_hash = await client.unvote(address, amount)
        return [{
            "success": True,
            "transaction_hash": tx_hash,
            "masternode": normalize_address(address, address_format),
            "amount": amount,
        }]

    elif operation == MasternodeOperation.withdraw:
        block_number = int(_get_required(params, "withdrawBlockNumber"))
        index = int(params.get("withdrawIndex", 0))
        tx_hash = await client.withdraw(block_number, index)
        return [{
            "success": True,
            "transaction_hash": tx_hash,
            "block_number": block_number,
            "index": index,
        }]

    raise AssertionError(f"Unhandled operation {operation}")
