"""
Exact conversion between human-readable token amounts and base units.

All arithmetic is done on integers taken from the decimal digits of the
amount, so no value is ever rounded.
"""

from decimal import Decimal, InvalidOperation

MAX_UINT256 = 2**256 - 1
MAX_UINT256_DIGITS = len(str(MAX_UINT256))

# 10**78 already exceeds uint256, so no token can use more decimals
MAX_DECIMALS = MAX_UINT256_DIGITS - 1


def parse_amount(amount: str | Decimal | int) -> Decimal:
    """Parse a human amount into a finite, non-negative Decimal.

    Raises:
        ValueError: If the amount is not a plain non-negative number
    """
    if isinstance(amount, bool) or isinstance(amount, float):
        raise ValueError(f"Amount must be a decimal string, got {type(amount).__name__}")
    try:
        value = Decimal(amount.strip() if isinstance(amount, str) else amount)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"Invalid amount: {amount!r}") from exc
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    if value < 0:
        raise ValueError(f"Amount must not be negative: {amount!r}")
    return value


def to_base_units(amount: str | Decimal | int, decimals: int) -> int:
    """Convert a human amount (e.g. "0.1") to base units (e.g. 100000 for 6 decimals).

    Raises:
        ValueError: If the amount is invalid, has more fractional digits
            than the token supports, or does not fit in a uint256
    """
    if decimals < 0:
        raise ValueError(f"Decimals must be non-negative, got {decimals}")
    if decimals > MAX_DECIMALS:
        raise ValueError(f"Decimals must be at most {MAX_DECIMALS}, got {decimals}")

    value = parse_amount(amount)
    _, digits, exponent = value.as_tuple()
    coefficient = int("".join(str(d) for d in digits)) if digits else 0
    if coefficient == 0:
        return 0

    shift = exponent + decimals
    if shift >= 0:
        # Anything with more than 78 digits is at least 10**78 > 2**256
        if len(digits) + shift > MAX_UINT256_DIGITS:
            raise ValueError(f"Amount {amount} exceeds uint256 with {decimals} decimals")
        units = coefficient * 10**shift
    else:
        if -shift > len(digits):
            raise ValueError(f"Amount {amount} cannot be represented with {decimals} decimals")
        divisor = 10**-shift
        if coefficient % divisor:
            raise ValueError(f"Amount {amount} cannot be represented with {decimals} decimals")
        units = coefficient // divisor

    if units > MAX_UINT256:
        raise ValueError(f"Amount {amount} exceeds uint256 with {decimals} decimals")
    return units


def from_base_units(value: int, decimals: int) -> str:
    """Format base units as a human amount: 100000, 6 -> "0.1"; 1000000, 6 -> "1.0"."""
    if decimals < 0:
        raise ValueError(f"Decimals must be non-negative, got {decimals}")

    sign = "-" if value < 0 else ""
    whole, fraction = divmod(abs(value), 10**decimals)
    fraction_str = str(fraction).rjust(decimals, "0").rstrip("0") if decimals else ""
    return f"{sign}{whole}.{fraction_str or '0'}"
