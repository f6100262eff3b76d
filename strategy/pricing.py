"""
strategy/pricing.py - Spot prices from pool reserves.

price = (reserve_out / 10^decimals_out) / (reserve_in / 10^decimals_in)

i.e. the price of one unit of the "in" token denominated in the "out"
token. All arithmetic is Decimal.
"""

from decimal import Decimal
from typing import Sequence

from core.exceptions import IllFormedPoolError, NoLiquidityError, ValidationError
from core.math import normalize_to_decimals
from core.models import PoolRecord


def compute_spot_price(
    reserve_in: int,
    reserve_out: int,
    decimals_in: int,
    decimals_out: int,
) -> Decimal:
    """
    Decimal-adjusted spot price of the input token.

    Raises:
        NoLiquidityError: If reserve_in is zero
        ValidationError: If a reserve is negative
    """
    if reserve_in < 0 or reserve_out < 0:
        raise ValidationError(
            "Reserves must be non-negative",
            details={"reserve_in": str(reserve_in), "reserve_out": str(reserve_out)},
        )

    if reserve_in == 0:
        raise NoLiquidityError(
            "Input reserve is zero",
            details={"reserve_out": str(reserve_out)},
        )

    human_in = normalize_to_decimals(reserve_in, decimals_in)
    human_out = normalize_to_decimals(reserve_out, decimals_out)
    return human_out / human_in


def price_from_arrays(
    tokens: Sequence[str],
    reserves: Sequence[int],
    decimals: Sequence[int],
    base_token: str,
) -> Decimal:
    """
    Price of `base_token` from paired token/reserve arrays.

    The reserve at the base token's index is the input reserve; the other
    index supplies the output reserve.

    Raises:
        IllFormedPoolError: If arrays are mismatched or not length 2
        ValidationError: If base_token is not in the pool
    """
    if len(tokens) != len(reserves) or len(tokens) != 2 or len(decimals) != 2:
        raise IllFormedPoolError(
            "Expected two tokens with two matching reserves",
            details={"tokens": len(tokens), "reserves": len(reserves)},
        )

    if base_token not in tokens:
        raise ValidationError(
            f"{base_token} is not in pool",
            details={"tokens": list(tokens)},
        )

    i = list(tokens).index(base_token)
    o = 1 - i
    return compute_spot_price(reserves[i], reserves[o], decimals[i], decimals[o])


def price_for_base(record: PoolRecord, base_token: str) -> Decimal:
    """Price of `base_token` in the other token of `record`."""
    return price_from_arrays(record.tokens, record.reserves, record.decimals, base_token)


class PricingEngine:
    """Thin object wrapper so the detector can take a pricing dependency."""

    def spot_price(self, reserve_in: int, reserve_out: int, decimals_in: int, decimals_out: int) -> Decimal:
        return compute_spot_price(reserve_in, reserve_out, decimals_in, decimals_out)

    def price(self, record: PoolRecord, base_token: str) -> Decimal:
        return price_for_base(record, base_token)
