"""Dynamic contract call results.

Reading an arbitrary contract function returns whatever the ABI says:
a single value, a list, or a tuple of named outputs.
:py:func:`classify_result` tags the raw web3 output as one of
:py:class:`Scalar`, :py:class:`Array` or :py:class:`NamedTuple`, and
:py:func:`format_contract_result` turns it into JSON friendly data:

- Integers become decimal strings, so uint256 values survive JSON

- Bytes become `0x` hex

- Addresses are rendered in the requested format

Example:

.. code-block:: python

    result = await call_contract_function(provider, token_address, "function balanceOf(address owner) view returns (uint256)", [holder])
    assert result == "1000000000000000000"
"""
import re
from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple, TypeAlias, Union

from eth_utils import is_address

from xdcadapter.address import AddressFormat, get_checksum_address, normalize_address
from xdcadapter.exceptions import UpstreamQueryFailure
from xdcadapter.transport.provider import RPC_ERRORS, XdcProvider
from xdcadapter.types import AnyAddress


class BadFunctionSignature(ValueError):
    """Human readable function signature could not be parsed."""


@dataclass(frozen=True, slots=True)
class Scalar:
    """Single return value."""
    value: Any


@dataclass(frozen=True, slots=True)
class Array:
    """List return value, e.g. `address[]`."""
    items: Tuple["ContractValue", ...]


@dataclass(frozen=True, slots=True)
class NamedTuple:
    """Multiple return values or a struct.

    Unnamed outputs are keyed by their position.
    """
    fields: Tuple[Tuple[str, "ContractValue"], ...]


ContractValue: TypeAlias = Union[Scalar, Array, NamedTuple]


def classify_result(value: Any, output_names: Sequence[str] | None = None) -> ContractValue:
    """Tag a raw web3 call result.

    :param output_names:
        ABI output names, when the function has several outputs
    """
    if isinstance(value, (list, tuple)) and output_names and len(output_names) > 1:
        assert len(output_names) == len(value), f"Got {len(value)} values for outputs {output_names}"
        return NamedTuple(tuple(
            (name or str(idx), classify_result(v))
            for idx, (name, v) in enumerate(zip(output_names, value))
        ))

    if isinstance(value, dict):
        return NamedTuple(tuple((str(k), classify_result(v)) for k, v in value.items()))

    if isinstance(value, (list, tuple)):
        return Array(tuple(classify_result(v) for v in value))

    return Scalar(value)


def _format_scalar(value: Any, address_format: AddressFormat) -> Any:
    if isinstance(value, bool):
        return value

    if isinstance(value, int):
        return str(value)

    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()

    if isinstance(value, str) and is_address(value):
        return normalize_address(value, address_format)

    return value


def format_contract_result(value: ContractValue, address_format: AddressFormat = AddressFormat.xdc) -> Any:
    """Recursively convert a tagged result to JSON friendly Python data."""
    if isinstance(value, Scalar):
        return _format_scalar(value.value, address_format)
    elif isinstance(value, Array):
        return [format_contract_result(i, address_format) for i in value.items]
    elif isinstance(value, NamedTuple):
        return {name: format_contract_result(v, address_format) for name, v in value.fields}
    raise TypeError(f"Not a contract value: {value!r}")


_SIGNATURE_PATTERN = re.compile(
    r"^\s*(?:function\s+)?(?P<name>\w+)\s*\((?P<inputs>[^)]*)\)"
    r"(?P<modifiers>[\w\s]*?)"
    r"(?:\s*returns\s*\((?P<outputs>[^)]*)\))?\s*$"
)


def _parse_params(text: str | None) -> List[dict]:
    params = []
    if not text or not text.strip():
        return params

    for part in text.split(","):
        tokens = part.split()
        if not tokens:
            raise BadFunctionSignature(f"Empty parameter in {text}")
        params.append({"type": tokens[0], "name": tokens[-1] if len(tokens) > 1 else ""})
    return params


def parse_function_signature(signature: str) -> dict:
    """Turn a human readable signature to an ABI entry.

    .. code-block:: python

        abi = parse_function_signature("function getVoterCap(address candidate, address voter) view returns (uint256)")

    Only flat types are supported, no tuples.
    """
    m = _SIGNATURE_PATTERN.match(signature)
    if not m:
        raise BadFunctionSignature(f"Cannot parse function signature: {signature}")

    modifiers = m.group("modifiers").split()
    mutability = "nonpayable"
    for modifier in ("view", "pure", "payable"):
        if modifier in modifiers:
            mutability = modifier

    return {
        "type": "function",
        "name": m.group("name"),
        "inputs": _parse_params(m.group("inputs")),
        "outputs": _parse_params(m.group("outputs")),
        "stateMutability": mutability,
    }


async def call_contract_function(
    provider: XdcProvider,
    contract_address: AnyAddress,
    signature: str,
    args: Sequence = (),
    address_format: AddressFormat = AddressFormat.xdc,
) -> Any:
    """Read a contract function with a human readable signature.

    Address arguments may be given in either format.

    :return:
        Formatted result, see :py:func:`format_contract_result`
    """
    abi_entry = parse_function_signature(signature)

    if len(args) != len(abi_entry["inputs"]):
        raise BadFunctionSignature(f"{abi_entry['name']} takes {len(abi_entry['inputs'])} arguments, got {len(args)}")

    # web3 wants checksummed addresses as arguments
    converted_args = [
        get_checksum_address(a) if param["type"] == "address" else a
        for a, param in zip(args, abi_entry["inputs"])
    ]

    contract = provider.get_contract(contract_address, [abi_entry])
    fn = getattr(contract.functions, abi_entry["name"])

    try:
        raw = await fn(*converted_args).call()
    except RPC_ERRORS as e:
        raise UpstreamQueryFailure(f"Call {abi_entry['name']} on {contract_address} failed: {e}") from e

    output_names = [o["name"] for o in abi_entry["outputs"]]
    return format_contract_result(classify_result(raw, output_names), address_format)
