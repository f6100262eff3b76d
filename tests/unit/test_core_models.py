# PATH: tests/unit/test_core_models.py
"""
Unit tests for core data models.

Includes:
- POOL RECORD CONTRACT (two distinct tokens, non-negative reserves)
- from_arrays shape validation
- ArbitrageOpportunity derived values
"""

import unittest
from decimal import Decimal

from core.constants import ErrorCode, OpportunityTier, POOL_SIGNATURES
from core.exceptions import IllFormedPoolError, ValidationError
from core.models import ArbitrageOpportunity, PoolPrice, PoolRecord, Venue


def _record(**overrides) -> PoolRecord:
    values = dict(
        venue="v2.ref-finance.near",
        pool_id=7,
        token_a="wrap.near",
        token_b="usdc.fakes.testnet",
        reserve_a=1000,
        reserve_b=2000,
        decimals_a=24,
        decimals_b=6,
        pool_kind="SIMPLE_POOL",
    )
    values.update(overrides)
    return PoolRecord(**values)


class TestVenue(unittest.TestCase):

    def test_default_signatures(self):
        venue = Venue("v2.ref-finance.near")
        self.assertEqual(venue.signatures, POOL_SIGNATURES)
        self.assertEqual(str(venue), "v2.ref-finance.near")

    def test_hashable(self):
        self.assertEqual(len({Venue("a.near"), Venue("a.near")}), 1)


class TestPoolRecordContract(unittest.TestCase):

    def test_key_and_label(self):
        record = _record()
        self.assertEqual(record.key, ("v2.ref-finance.near", 7))
        self.assertEqual(record.label, "v2.ref-finance.near#7")

    def test_pair_key_is_sorted(self):
        self.assertEqual(_record().pair_key, "usdc.fakes.testnet/wrap.near")

    def test_identical_tokens_rejected(self):
        with self.assertRaises(ValidationError):
            _record(token_b="wrap.near")

    def test_negative_reserve_rejected(self):
        with self.assertRaises(ValidationError):
            _record(reserve_b=-1)

    def test_negative_decimals_rejected(self):
        with self.assertRaises(ValidationError):
            _record(decimals_a=-6)

    def test_to_dict_stringifies_reserves(self):
        data = _record(reserve_a=10**30).to_dict()
        self.assertEqual(data["reserve_a"], str(10**30))
        self.assertEqual(data["pool_kind"], "SIMPLE_POOL")


class TestFromArrays(unittest.TestCase):

    def test_builds_record_in_reported_order(self):
        record = PoolRecord.from_arrays(
            "ref.near", 1, ["b.near", "a.near"], ["10", "20"], [18, 6],
        )
        self.assertEqual(record.tokens, ("b.near", "a.near"))
        self.assertEqual(record.reserves, (10, 20))
        self.assertEqual(record.decimals, (18, 6))

    def test_mismatched_lengths(self):
        with self.assertRaises(IllFormedPoolError) as ctx:
            PoolRecord.from_arrays("ref.near", 1, ["a", "b"], ["1"], [6, 6])
        self.assertEqual(ctx.exception.code, ErrorCode.ILL_FORMED_POOL)

    def test_three_token_pool_rejected(self):
        with self.assertRaises(IllFormedPoolError):
            PoolRecord.from_arrays("ref.near", 1, ["a", "b", "c"], ["1", "2", "3"], [6, 6])

    def test_unreadable_amount_rejected(self):
        with self.assertRaises(ValidationError):
            PoolRecord.from_arrays("ref.near", 1, ["a", "b"], ["1", "x"], [6, 6])


class TestArbitrageOpportunity(unittest.TestCase):

    def setUp(self):
        self.opp = ArbitrageOpportunity(
            token_pair=("wrap.near", "usdc.fakes.testnet"),
            buy_pool=_record(pool_id=1),
            sell_pool=_record(pool_id=2),
            buy_price=Decimal("0.98"),
            sell_price=Decimal("1.05"),
            profit_percent=Decimal("7.14"),
            tier=OpportunityTier.HIGH,
        )

    def test_price_difference(self):
        self.assertEqual(self.opp.price_difference, Decimal("0.07"))

    def test_example_profit(self):
        self.assertEqual(self.opp.example_profit(Decimal("1000")), Decimal("70.00"))

    def test_to_dict(self):
        data = self.opp.to_dict()
        self.assertEqual(data["token_pair"], "wrap.near/usdc.fakes.testnet")
        self.assertEqual(data["buy_pool"], "v2.ref-finance.near#1")
        self.assertEqual(data["tier"], "high")

    def test_pool_price_to_dict(self):
        data = PoolPrice(pool=_record(), price=Decimal("2")).to_dict()
        self.assertEqual(data["price"], "2")
        self.assertEqual(data["pool_id"], 7)


if __name__ == "__main__":
    unittest.main()
