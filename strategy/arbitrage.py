"""
strategy/arbitrage.py - Cross-pool arbitrage detection.

For a token pair (base, quote):
1. Price base-in-quote in every pool holding the pair
2. Buy side = lowest price, sell side = highest price (first seen wins ties)
3. profit_percent = (sell - buy) / buy * 100
4. Tier: > high threshold -> high, > moderate threshold -> moderate, else low

The detector is venue-agnostic: pools may come from one venue or many.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable

from core.constants import ArbitrageOutcome, OpportunityTier
from core.exceptions import InsufficientPoolsError, NoLiquidityError
from core.logging import get_logger, log_opportunity
from core.math import percent_diff
from core.models import ArbitrageOpportunity, PoolPrice, PoolRecord
from strategy.config import TierThresholds
from strategy.pricing import PricingEngine

logger = get_logger(__name__)

MIN_POOLS_FOR_ARBITRAGE = 2


@dataclass
class ArbitrageAnalysis:
    """Opportunity (if any) plus every per-pool price behind it."""
    token_pair: tuple[str, str]
    outcome: ArbitrageOutcome
    opportunity: ArbitrageOpportunity | None = None
    pool_prices: list[PoolPrice] = field(default_factory=list)
    skipped: list[PoolRecord] = field(default_factory=list)

    @property
    def ranked_prices(self) -> list[PoolPrice]:
        """Per-pool prices, cheapest first. Equal prices keep input order."""
        return sorted(self.pool_prices, key=lambda p: p.price)

    @property
    def has_opportunity(self) -> bool:
        return self.outcome == ArbitrageOutcome.OPPORTUNITY

    def to_dict(self) -> dict:
        return {
            "token_pair": f"{self.token_pair[0]}/{self.token_pair[1]}",
            "outcome": self.outcome.value,
            "opportunity": self.opportunity.to_dict() if self.opportunity else None,
            "pool_prices": [p.to_dict() for p in self.pool_prices],
            "skipped": [r.label for r in self.skipped],
        }


def classify_tier(profit_percent: Decimal, thresholds: TierThresholds | None = None) -> OpportunityTier:
    """Bucket a profit percentage into high / moderate / low."""
    thresholds = thresholds or TierThresholds()
    if profit_percent > thresholds.high_percent:
        return OpportunityTier.HIGH
    if profit_percent > thresholds.moderate_percent:
        return OpportunityTier.MODERATE
    return OpportunityTier.LOW


class ArbitrageDetector:
    """
    Finds the cheapest and most expensive pool for a pair.

    Usage:
        detector = ArbitrageDetector()
        analysis = detector.detect("wrap.near", "usdc.near", registry.query_by_token_pair(...))
    """

    def __init__(
        self,
        pricing: PricingEngine | None = None,
        thresholds: TierThresholds | None = None,
    ):
        self.pricing = pricing or PricingEngine()
        self.thresholds = thresholds or TierThresholds()

    def price_pools(
        self,
        base_token: str,
        records: Iterable[PoolRecord],
    ) -> tuple[list[PoolPrice], list[PoolRecord]]:
        """
        Price every record; records without liquidity are returned separately.

        An empty reserve on either side means no liquidity: a zero price would
        otherwise become the buy side of every comparison.
        """
        prices = []
        skipped = []

        for record in records:
            try:
                price = self.pricing.price(record, base_token)
            except NoLiquidityError:
                price = None

            if not price:
                logger.warning(
                    f"Skipping {record.label}: no liquidity",
                    extra={"context": {"venue": record.venue, "pool_id": record.pool_id}},
                )
                skipped.append(record)
                continue
            prices.append(PoolPrice(pool=record, price=price))

        return prices, skipped

    def detect(
        self,
        base_token: str,
        quote_token: str,
        records: Iterable[PoolRecord],
    ) -> ArbitrageAnalysis:
        """
        Compare base-in-quote prices across pools.

        Raises:
            InsufficientPoolsError: If fewer than two pools can be priced
        """
        records = list(records)
        token_pair = (base_token, quote_token)

        if len(records) < MIN_POOLS_FOR_ARBITRAGE:
            raise InsufficientPoolsError(
                f"Need at least {MIN_POOLS_FOR_ARBITRAGE} pools for {base_token}/{quote_token}",
                found=len(records),
            )

        prices, skipped = self.price_pools(base_token, records)

        if len(prices) < MIN_POOLS_FOR_ARBITRAGE:
            raise InsufficientPoolsError(
                f"Need at least {MIN_POOLS_FOR_ARBITRAGE} priced pools for {base_token}/{quote_token}",
                found=len(prices),
                details={"skipped": [r.label for r in skipped]},
            )

        buy = prices[0]
        sell = prices[0]
        for entry in prices[1:]:
            if entry.price < buy.price:
                buy = entry
            if entry.price > sell.price:
                sell = entry

        if buy.price == sell.price:
            logger.info(
                f"No price difference across {len(prices)} pools",
                extra={"context": {"token_pair": f"{base_token}/{quote_token}"}},
            )
            return ArbitrageAnalysis(
                token_pair=token_pair,
                outcome=ArbitrageOutcome.NO_ARBITRAGE,
                pool_prices=prices,
                skipped=skipped,
            )

        profit_percent = percent_diff(buy.price, sell.price)
        opportunity = ArbitrageOpportunity(
            token_pair=token_pair,
            buy_pool=buy.pool,
            sell_pool=sell.pool,
            buy_price=buy.price,
            sell_price=sell.price,
            profit_percent=profit_percent,
            tier=classify_tier(profit_percent, self.thresholds),
        )

        log_opportunity(
            logger,
            token_pair=f"{base_token}/{quote_token}",
            buy_pool=buy.pool.label,
            sell_pool=sell.pool.label,
            profit_percent=f"{profit_percent:.2f}",
            tier=opportunity.tier.value,
        )

        return ArbitrageAnalysis(
            token_pair=token_pair,
            outcome=ArbitrageOutcome.OPPORTUNITY,
            opportunity=opportunity,
            pool_prices=prices,
            skipped=skipped,
        )
