# PATH: core/math.py
"""
Math utilities for AquaScope.

Reserves are integers in the smallest token unit; everything derived from
them is Decimal. No float enters a price.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Union

from core.exceptions import ValidationError

MAX_AMOUNT_DIGITS = 78


def safe_decimal(value: Union[str, int, Decimal, None], default: Decimal = Decimal("0")) -> Decimal:
    """
    Safely convert value to Decimal.

    Args:
        value: Value to convert
        default: Default if conversion fails

    Returns:
        Decimal value

    Raises:
        ValidationError: If value is a float
    """
    if value is None:
        return default

    if isinstance(value, float):
        raise ValidationError(
            "Float values are not allowed",
            details={"value": repr(value)},
        )

    try:
        if isinstance(value, Decimal):
            return value
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return default


def safe_int(value: Union[str, int, Decimal, None], default: int = 0) -> int:
    """
    Safely convert a reserve-like value to int.

    Accepts ints, digit strings (as NEAR returns U128 amounts) and Decimals.
    Floats are rejected. Non-finite or fractional values return `default`.
    """
    if value is None:
        return default

    if isinstance(value, bool):
        return default

    if isinstance(value, float):
        raise ValidationError(
            "Float values are not allowed",
            details={"value": repr(value)},
        )

    if isinstance(value, int):
        return value

    try:
        parsed = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return default

    # amounts are u128 on chain; anything past u256 is garbage
    if not parsed.is_finite() or parsed.adjusted() > MAX_AMOUNT_DIGITS:
        return default

    result = int(parsed)
    if result != parsed:
        return default
    return result


def normalize_to_decimals(
    amount: Union[str, int, Decimal],
    decimals: int,
) -> Decimal:
    """
    Normalize amount to token decimals (smallest unit to token units).

    Args:
        amount: Amount in smallest unit
        decimals: Token decimals

    Returns:
        Normalized amount
    """
    amt = safe_decimal(amount)
    divisor = Decimal(10) ** decimals
    return amt / divisor


def percent_diff(low: Decimal, high: Decimal) -> Decimal:
    """
    Percentage by which `high` exceeds `low`.

    Returns Decimal("0") when low is zero.
    """
    if low == 0:
        return Decimal("0")
    return (high - low) / low * Decimal("100")


def quantize(value: Decimal, places: int = 6) -> Decimal:
    """
    Round to a fixed number of decimal places for display.

    Precision is widened to fit the integer digits, so dust pools with huge
    implied prices still render. Non-finite values are returned unchanged.
    """
    if not value.is_finite():
        return value

    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + places + 2)
        return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
