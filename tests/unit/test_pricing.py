"""
tests/unit/test_pricing.py - Spot price computation.
"""

from decimal import Decimal

import pytest

from core.constants import ErrorCode
from core.exceptions import IllFormedPoolError, NoLiquidityError, ValidationError
from strategy.pricing import PricingEngine, compute_spot_price, price_for_base, price_from_arrays


class TestComputeSpotPrice:
    def test_decimal_adjusted_price(self):
        price = compute_spot_price(10**6 * 10**24, 2 * 10**6 * 10**6, 24, 6)
        assert price == Decimal("2")

    def test_same_decimals(self):
        assert compute_spot_price(4, 1, 0, 0) == Decimal("0.25")

    def test_zero_input_reserve(self):
        with pytest.raises(NoLiquidityError) as exc_info:
            compute_spot_price(0, 1000, 24, 6)
        assert exc_info.value.code == ErrorCode.NO_LIQUIDITY

    def test_zero_output_reserve_is_zero_price(self):
        assert compute_spot_price(1000, 0, 6, 6) == Decimal("0")

    def test_negative_reserve(self):
        with pytest.raises(ValidationError):
            compute_spot_price(-1, 10, 6, 6)

    def test_result_is_decimal(self):
        assert isinstance(compute_spot_price(3, 1, 0, 0), Decimal)


class TestPriceFromArrays:
    def test_base_in_second_position(self):
        price = price_from_arrays(
            ["usdc.near", "wrap.near"],
            [2 * 10**6, 10**24],
            [6, 24],
            "wrap.near",
        )
        assert price == Decimal("2")

    def test_inverse_direction(self):
        price = price_from_arrays(
            ["usdc.near", "wrap.near"],
            [2 * 10**6, 10**24],
            [6, 24],
            "usdc.near",
        )
        assert price == Decimal("0.5")

    def test_mismatched_arrays(self):
        with pytest.raises(IllFormedPoolError):
            price_from_arrays(["a", "b"], [1, 2, 3], [0, 0], "a")

    def test_base_not_in_pool(self):
        with pytest.raises(ValidationError):
            price_from_arrays(["a", "b"], [1, 2], [0, 0], "c")


class TestPricingEngine:
    def test_price_record(self, make_pool):
        engine = PricingEngine()
        record = make_pool()

        assert engine.price(record, "wrap.near") == Decimal("2")
        assert price_for_base(record, "usdc.fakes.testnet") == Decimal("0.5")

    def test_spot_price(self):
        assert PricingEngine().spot_price(10, 30, 1, 1) == Decimal("3")
