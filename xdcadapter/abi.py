"""ABI of the XDPoS validator system contract.

Deployed at `xdc0000000000000000000000000000000000000088`
on both mainnet and Apothem.
"""


def _fn(name: str, inputs: list, outputs: list, mutability="view") -> dict:
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": "", "type": t} for t in outputs],
        "stateMutability": mutability,
    }


def _event(name: str, inputs: list) -> dict:
    return {
        "type": "event",
        "name": name,
        "anonymous": False,
        "inputs": [{"name": n, "type": t, "indexed": indexed} for n, t, indexed in inputs],
    }


VALIDATOR_ABI = [
    # Read functions
    _fn("getCandidates", [], ["address[]"]),
    _fn("getCandidateCap", [("_candidate", "address")], ["uint256"]),
    _fn("getCandidateOwner", [("_candidate", "address")], ["address"]),
    _fn("getVoterCap", [("_candidate", "address"), ("_voter", "address")], ["uint256"]),
    _fn("getVoters", [("_candidate", "address")], ["address[]"]),
    _fn("isCandidate", [("_candidate", "address")], ["bool"]),
    _fn("getWithdrawBlockNumbers", [], ["uint256[]"]),
    _fn("getWithdrawCap", [("_blockNumber", "uint256")], ["uint256"]),
    _fn("candidateCount", [], ["uint256"]),
    _fn("maxValidatorNumber", [], ["uint256"]),
    _fn("candidateWithdrawDelay", [], ["uint256"]),
    _fn("voterWithdrawDelay", [], ["uint256"]),
    _fn("minCandidateCap", [], ["uint256"]),
    _fn("minVoterCap", [], ["uint256"]),

    # Write functions
    _fn("propose", [("_candidate", "address")], [], "payable"),
    _fn("vote", [("_candidate", "address")], [], "payable"),
    _fn("unvote", [("_candidate", "address"), ("_cap", "uint256")], [], "nonpayable"),
    _fn("resign", [("_candidate", "address")], [], "nonpayable"),
    _fn("withdraw", [("_blockNumber", "uint256"), ("_index", "uint256")], [], "nonpayable"),

    # Events
    _event("Propose", [("_owner", "address", True), ("_candidate", "address", True), ("_cap", "uint256", False)]),
    _event("Vote", [("_voter", "address", True), ("_candidate", "address", True), ("_cap", "uint256", False)]),
    _event("Unvote", [("_voter", "address", True), ("_candidate", "address", True), ("_cap", "uint256", False)]),
    _event("Resign", [("_owner", "address", True), ("_candidate", "address", True)]),
    _event("Withdraw", [("_owner", "address", True), ("_blockNumber", "uint256", False), ("_cap", "uint256", False)]),
]
