# PATH: core/models.py
"""
Core data models for AquaScope.

POOL RECORD CONTRACT
====================
A PoolRecord holds exactly two tokens. `token_a`/`reserve_a`/`decimals_a`
describe the first token reported by the venue and `token_b`/`reserve_b`/
`decimals_b` the second; the positions are never reordered independently.
Records are keyed by (venue, pool_id) and are rebuilt from scratch on every
run.
====================
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Sequence, Tuple

from core.constants import OpportunityTier, POOL_SIGNATURES
from core.exceptions import IllFormedPoolError, ValidationError
from core.math import safe_int


@dataclass(frozen=True)
class Venue:
    """A contract account tested for pool functionality."""
    account_id: str
    signatures: Tuple[str, ...] = POOL_SIGNATURES
    label: str = ""

    def __str__(self) -> str:
        return self.account_id


@dataclass
class PoolRecord:
    """Two-token pool state decoded from a venue."""
    venue: str
    pool_id: int
    token_a: str
    token_b: str
    reserve_a: int
    reserve_b: int
    decimals_a: int
    decimals_b: int
    pool_kind: str = ""

    def __post_init__(self):
        if self.token_a == self.token_b:
            raise ValidationError(
                "Pool must hold two distinct tokens",
                details={"venue": self.venue, "pool_id": self.pool_id, "token": self.token_a},
            )
        if self.reserve_a < 0 or self.reserve_b < 0:
            raise ValidationError(
                "Reserves must be non-negative",
                details={"venue": self.venue, "pool_id": self.pool_id},
            )
        if self.decimals_a < 0 or self.decimals_b < 0:
            raise ValidationError(
                "Decimals must be non-negative",
                details={"venue": self.venue, "pool_id": self.pool_id},
            )

    @classmethod
    def from_arrays(
        cls,
        venue: str,
        pool_id: int,
        tokens: Sequence[str],
        reserves: Sequence[Any],
        decimals: Sequence[int],
        pool_kind: str = "",
    ) -> "PoolRecord":
        """
        Build a record from the venue's paired token/amount arrays.

        Raises:
            IllFormedPoolError: If arrays differ in length or are not length 2
        """
        if len(tokens) != len(reserves) or len(tokens) != 2 or len(decimals) != 2:
            raise IllFormedPoolError(
                "Expected two tokens with two matching reserves",
                details={
                    "venue": venue,
                    "pool_id": pool_id,
                    "tokens": len(tokens),
                    "reserves": len(reserves),
                },
            )

        return cls(
            venue=venue,
            pool_id=pool_id,
            token_a=tokens[0],
            token_b=tokens[1],
            reserve_a=safe_int(reserves[0], default=-1),
            reserve_b=safe_int(reserves[1], default=-1),
            decimals_a=decimals[0],
            decimals_b=decimals[1],
            pool_kind=pool_kind,
        )

    @property
    def key(self) -> Tuple[str, int]:
        return (self.venue, self.pool_id)

    @property
    def tokens(self) -> Tuple[str, str]:
        return (self.token_a, self.token_b)

    @property
    def reserves(self) -> Tuple[int, int]:
        return (self.reserve_a, self.reserve_b)

    @property
    def decimals(self) -> Tuple[int, int]:
        return (self.decimals_a, self.decimals_b)

    @property
    def pair_key(self) -> str:
        symbols = sorted(self.tokens)
        return f"{symbols[0]}/{symbols[1]}"

    @property
    def label(self) -> str:
        return f"{self.venue}#{self.pool_id}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "venue": self.venue,
            "pool_id": self.pool_id,
            "token_a": self.token_a,
            "token_b": self.token_b,
            "reserve_a": str(self.reserve_a),
            "reserve_b": str(self.reserve_b),
            "decimals_a": self.decimals_a,
            "decimals_b": self.decimals_b,
            "pool_kind": self.pool_kind,
        }


@dataclass
class PoolPrice:
    """Price of the base token in one pool, quoted in the other token."""
    pool: PoolRecord
    price: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "venue": self.pool.venue,
            "pool_id": self.pool.pool_id,
            "pool_kind": self.pool.pool_kind,
            "price": str(self.price),
        }


@dataclass
class ArbitrageOpportunity:
    """Buy-low/sell-high pair of pools for one token pair. Never persisted."""
    token_pair: Tuple[str, str]
    buy_pool: PoolRecord
    sell_pool: PoolRecord
    buy_price: Decimal
    sell_price: Decimal
    profit_percent: Decimal
    tier: OpportunityTier

    @property
    def price_difference(self) -> Decimal:
        return self.sell_price - self.buy_price

    def example_profit(self, amount: Decimal) -> Decimal:
        """Quote-token profit of trading `amount` base tokens across the spread."""
        return amount * self.price_difference

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token_pair": f"{self.token_pair[0]}/{self.token_pair[1]}",
            "buy_pool": self.buy_pool.label,
            "sell_pool": self.sell_pool.label,
            "buy_price": str(self.buy_price),
            "sell_price": str(self.sell_price),
            "price_difference": str(self.price_difference),
            "profit_percent": str(self.profit_percent),
            "tier": self.tier.value,
        }
