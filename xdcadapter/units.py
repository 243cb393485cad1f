"""XDC unit conversion.

1 XDC = 10**18 wei = 10**9 gwei.

- Conversions between wei and other denominations are exact.
  Amounts in wei are Python ints and human amounts are passed around as
  decimal strings or :py:class:`decimal.Decimal`, never as floats.

- Display helpers that round or abbreviate are separate functions
  named `format_*`.
"""
import enum
from decimal import Decimal, DecimalException, Inexact, InvalidOperation, Overflow, ROUND_DOWN, Underflow, localcontext
from typing import Dict

from xdcadapter.exceptions import InvalidAmount
from xdcadapter.types import AmountWei


#: Largest value a uint256 contract argument can hold
MAX_UINT256 = 2**256 - 1

# Enough digits for uint256 with 18 decimals
_PRECISION = 100

_MAX_UINT256_DIGITS = len(str(MAX_UINT256))


class Unit(str, enum.Enum):
    """Named denominations of XDC."""

    wei = "wei"
    kwei = "kwei"
    mwei = "mwei"
    gwei = "gwei"
    szabo = "szabo"
    finney = "finney"
    xdc = "xdc"

    #: Alias for XDC, for EVM tooling compatibility
    ether = "ether"


#: Power of ten for each denomination
UNIT_DECIMALS: Dict[Unit, int] = {
    Unit.wei: 0,
    Unit.kwei: 3,
    Unit.mwei: 6,
    Unit.gwei: 9,
    Unit.szabo: 12,
    Unit.finney: 15,
    Unit.xdc: 18,
    Unit.ether: 18,
}


def _resolve_unit(unit: Unit | str) -> int:
    try:
        return UNIT_DECIMALS[Unit(unit.lower())]
    except (ValueError, AttributeError):
        raise InvalidAmount(f"Unknown unit: {unit}. Available: {', '.join(u.value for u in Unit)}")


def _parse_decimal(value: str | int | Decimal) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise InvalidAmount(f"Not a numeric amount: {value!r}")

    if isinstance(value, float):
        # Go through repr so 0.1 stays 0.1 and not 0.1000000000000000055511151231257827
        value = repr(value)

    if isinstance(value, str):
        value = value.strip()

    try:
        d = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(f"Not a numeric amount: {value!r}")

    if not d.is_finite():
        raise InvalidAmount(f"Amount must be finite: {value!r}")

    if d < 0:
        raise InvalidAmount(f"Amount must not be negative: {value!r}")

    return d


def to_wei(value: str | int | Decimal, unit: Unit | str = Unit.xdc) -> AmountWei:
    """Convert an amount in the given denomination to wei.

    .. code-block:: python

        assert to_wei("0.5") == 500_000_000_000_000_000
        assert to_wei("1", "gwei") == 1_000_000_000

    :raise InvalidAmount:
        Non-numeric, negative, more decimals than the unit has, or over uint256
    """
    decimals = _resolve_unit(unit)
    d = _parse_decimal(value)

    # Past uint256 digit count, overflows whatever the unit
    if d and d.adjusted() > _MAX_UINT256_DIGITS:
        raise InvalidAmount(f"Amount overflows uint256: {value}")

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        ctx.traps[Underflow] = ctx.traps[Inexact] = ctx.traps[Overflow] = True
        try:
            scaled = d.scaleb(decimals)
        except DecimalException as e:
            raise InvalidAmount(f"Amount cannot be expressed in wei: {value}") from e
        if scaled != scaled.to_integral_value():
            raise InvalidAmount(f"Too many decimals for {unit}: {value}")
        wei = int(scaled)

    if wei > MAX_UINT256:
        raise InvalidAmount(f"Amount overflows uint256: {value}")

    return wei


def from_wei(wei: AmountWei | str, unit: Unit | str = Unit.xdc) -> str:
    """Convert wei to a decimal string in the given denomination.

    The result is exact. Trailing zeroes are dropped and zero is `"0"`.

    .. code-block:: python

        assert from_wei(1_500_000_000_000_000_000) == "1.5"
        assert from_wei(0) == "0"

    :param wei:
        Integer or an integer string, as returned by JSON APIs
    """
    decimals = _resolve_unit(unit)

    if isinstance(wei, str):
        wei = safe_parse_int(wei, strict=True)

    if isinstance(wei, bool) or not isinstance(wei, int):
        raise InvalidAmount(f"wei amount must be an integer, got {wei!r}")

    if wei < 0:
        raise InvalidAmount(f"Amount must not be negative: {wei}")

    if decimals == 0:
        return str(wei)

    whole, fraction = divmod(wei, 10**decimals)
    if fraction == 0:
        return str(whole)

    fraction_str = str(fraction).rjust(decimals, "0").rstrip("0")
    return f"{whole}.{fraction_str}"


def from_wei_decimal(wei: AmountWei, unit: Unit | str = Unit.xdc) -> Decimal:
    """Same as :py:func:`from_wei`, but as a :py:class:`Decimal`."""
    return Decimal(from_wei(wei, unit))


def convert_units(value: str | int | Decimal, from_unit: Unit | str, to_unit: Unit | str) -> str:
    """Convert between any two denominations, going through wei."""
    return from_wei(to_wei(value, from_unit), to_unit)


def safe_parse_int(value, strict=False) -> int:
    """Parse an integer from JSON API output.

    :param strict:
        Raise :py:class:`InvalidAmount` instead of returning zero for bad input.
    """
    if value is None or value == "":
        if strict:
            raise InvalidAmount(f"Not an integer: {value!r}")
        return 0

    if isinstance(value, int) and not isinstance(value, bool):
        return value

    try:
        return int(value, 0) if isinstance(value, str) and value.lower().startswith("0x") else int(value)
    except (ValueError, TypeError):
        if strict:
            raise InvalidAmount(f"Not an integer: {value!r}")
        return 0


def format_token_amount(amount: AmountWei, decimals=18, display_decimals=6) -> str:
    """Human readable token amount, truncated for display.

    Unlike :py:func:`from_wei` this loses precision.

    :param decimals:
        ERC-20 decimals of the token

    :param display_decimals:
        Digits after the decimal point to show at most
    """
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        value = Decimal(amount).scaleb(-decimals)
        if value == 0:
            return "0"

        smallest = Decimal(1).scaleb(-display_decimals)
        if value < smallest:
            return f"<{smallest:f}"

        truncated = value.quantize(smallest, rounding=ROUND_DOWN)

    text = f"{truncated:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_xdc_balance(wei: AmountWei, precision=4) -> str:
    """Format XDC balance for display.

    E.g. `1.23M XDC`.
    """
    value = from_wei_decimal(wei)

    if value == 0:
        return "0 XDC"

    if value >= 1_000_000:
        return f"{value / 1_000_000:.2f}M XDC"

    if value >= 1_000:
        return f"{value / 1_000:.2f}K XDC"

    return f"{value:.{precision}f} XDC"


def format_gas_price(gas_price_wei: AmountWei) -> str:
    """Format gas price as Gwei, two decimals."""
    gwei = from_wei_decimal(gas_price_wei, Unit.gwei)
    return f"{gwei:.2f} Gwei"


def calculate_percentage(value: int, total: int) -> str:
    """Share of total as a percent string with two decimals.

    The basis point value is truncated before formatting.
    """
    if total == 0:
        return "0"
    bps = (value * 10_000) // total
    return f"{Decimal(bps) / 100:.2f}"
