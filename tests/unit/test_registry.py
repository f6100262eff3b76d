"""
tests/unit/test_registry.py - Registry tests.
"""

import pytest

from discovery.registry import PoolRegistry


@pytest.fixture
def registry(make_pool):
    reg = PoolRegistry()
    reg.upsert(make_pool(pool_id=0))
    reg.upsert(make_pool(pool_id=1, token_b="dai.fakes.testnet", decimals_b=18))
    reg.upsert(make_pool(pool_id=2, token_a="usdc.fakes.testnet", token_b="wrap.near", decimals_a=6, decimals_b=24))
    reg.upsert(make_pool(pool_id=0, venue="jumbo_exchange.near"))
    return reg


class TestUpsert:
    def test_new_key_returns_true(self, make_pool):
        reg = PoolRegistry()
        assert reg.upsert(make_pool()) is True
        assert reg.size() == 1

    def test_existing_key_overwrites(self, make_pool):
        reg = PoolRegistry()
        reg.upsert(make_pool(pool_id=3, reserve_a=100))

        replaced = reg.upsert(make_pool(pool_id=3, reserve_a=200))

        assert replaced is False
        assert reg.size() == 1
        assert reg.get("v2.ref-finance.near", 3).reserve_a == 200

    def test_same_id_different_venue_is_distinct(self, registry):
        assert registry.get("v2.ref-finance.near", 0) is not registry.get("jumbo_exchange.near", 0)
        assert len(registry) == 4


class TestQueries:
    def test_pair_query_is_order_insensitive(self, registry):
        forward = registry.query_by_token_pair("wrap.near", "usdc.fakes.testnet")
        backward = registry.query_by_token_pair("usdc.fakes.testnet", "wrap.near")

        assert forward == backward
        assert [r.key for r in forward] == [
            ("v2.ref-finance.near", 0),
            ("v2.ref-finance.near", 2),
            ("jumbo_exchange.near", 0),
        ]

    def test_pair_query_excludes_other_pairs(self, registry):
        result = registry.query_by_token_pair("wrap.near", "dai.fakes.testnet")
        assert [r.pool_id for r in result] == [1]

    def test_unknown_pair(self, registry):
        assert registry.query_by_token_pair("a.near", "b.near") == []

    def test_query_by_venue(self, registry):
        assert [r.pool_id for r in registry.query_by_venue("jumbo_exchange.near")] == [0]

    def test_venues_in_first_seen_order(self, registry):
        assert registry.venues() == ["v2.ref-finance.near", "jumbo_exchange.near"]

    def test_contains_and_iter(self, registry):
        assert ("v2.ref-finance.near", 1) in registry
        assert ("v2.ref-finance.near", 9) not in registry
        assert len(list(registry)) == 4


class TestSummary:
    def test_summary(self, registry):
        summary = registry.get_summary()

        assert summary["total_pools"] == 4
        assert summary["venues"] == {"v2.ref-finance.near": 3, "jumbo_exchange.near": 1}
        assert summary["pairs"] == ["dai.fakes.testnet/wrap.near", "usdc.fakes.testnet/wrap.near"]

    def test_clear(self, registry):
        registry.clear()
        assert registry.size() == 0
