# PATH: tests/conftest.py
"""
Pytest configuration and fixtures for AquaScope tests.
"""

import base64
import json
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.exceptions import FetchError  # noqa: E402
from core.models import PoolRecord  # noqa: E402


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


# =============================================================================
# RPC RESPONSE BUILDERS
# =============================================================================

def to_bytes(text: str) -> list[int]:
    """Encode text the way NEAR view calls return it."""
    return [ord(ch) for ch in text]


def data_response(payload) -> dict:
    """`query` response carrying `payload` (str or JSON-able) as a byte array."""
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return {"jsonrpc": "2.0", "id": 1, "result": {"result": to_bytes(text), "logs": []}}


def error_response(message: str) -> dict:
    """`query` response with an inline `result.error` string."""
    return {"jsonrpc": "2.0", "id": 1, "result": {"error": message, "logs": []}}


def method_not_found_response(method: str = "get_pools") -> dict:
    return error_response(
        f"wasm execution failed with error: FunctionCallError(MethodResolveError(MethodNotFound)) {method}"
    )


def code_response(code: bytes) -> dict:
    return {
        "jsonrpc": "2.0",
        "id": 1,
        "result": {"code_base64": base64.b64encode(code).decode("ascii"), "hash": "h"},
    }


def pool_payload(tokens, amounts, pool_kind="SIMPLE_POOL") -> dict:
    return {
        "pool_kind": pool_kind,
        "token_account_ids": list(tokens),
        "amounts": [str(a) for a in amounts],
        "total_fee": 30,
        "shares_total_supply": "1000",
    }


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def make_pool():
    """Factory for PoolRecords with sensible defaults."""
    def _make(
        pool_id=0,
        venue="v2.ref-finance.near",
        token_a="wrap.near",
        token_b="usdc.fakes.testnet",
        reserve_a=10**6 * 10**24,
        reserve_b=2 * 10**6 * 10**6,
        decimals_a=24,
        decimals_b=6,
        pool_kind="SIMPLE_POOL",
    ):
        return PoolRecord(
            venue=venue,
            pool_id=pool_id,
            token_a=token_a,
            token_b=token_b,
            reserve_a=reserve_a,
            reserve_b=reserve_b,
            decimals_a=decimals_a,
            decimals_b=decimals_b,
            pool_kind=pool_kind,
        )
    return _make


@pytest.fixture
def wasm_listing():
    """Disassembled listing with a mix of pool and non-pool exports."""
    return "\n".join([
        "(module",
        ' (export "new" (func $new))',
        ' (export "get_pools" (func $get_pools))',
        ' (export "add_liquidity" (func $add_liquidity))',
        ' (export "storage_deposit" (func $storage_deposit))',
        ' (export "get_return" (func $get_return))',
        ' (export "memory" (memory $0))',
        ' (export "swap" (func $swap))',
        ")",
    ])


# =============================================================================
# FAKE CHAIN
# =============================================================================

POOL_CODE = b"\x00asm\x00get_pool\x00add_liquidity\x00"
TOKEN_CODE = b"\x00asm\x00ft_metadata\x00"


class FakeChain:
    """Routes view_code and call_function by (account, method) to canned responses."""

    def __init__(self):
        self.code = {}
        self.counts = {}
        self.pools = {}
        self.returns = {}
        self.calls = []

    async def view_code(self, account_id):
        if account_id not in self.code:
            raise FetchError(f"Contract not found: {account_id}")
        return self.code[account_id]

    async def call_function(self, account_id, method_name, args=None):
        self.calls.append((account_id, method_name, args))
        if method_name in self.counts.get(account_id, {}):
            value = self.counts[account_id][method_name]
            if isinstance(value, Exception):
                raise value
            return value
        if method_name == "get_pool":
            pool = self.pools.get(account_id, {}).get(args["pool_id"])
            if pool is None:
                return error_response("Smart contract panicked: ERR_NO_POOL")
            return data_response(pool)
        if method_name == "get_return" and account_id in self.returns:
            return data_response(self.returns[account_id])
        return method_not_found_response(method_name)


class FakeProvider:
    """Stands in for NearRpcProvider; every instance serves the same FakeChain."""

    chain: FakeChain = FakeChain()

    def __init__(self, *args, **kwargs):
        self.args = args
        self.kwargs = kwargs

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return None

    async def view_code(self, account_id):
        return await self.chain.view_code(account_id)

    async def call_function(self, account_id, method_name, args=None):
        return await self.chain.call_function(account_id, method_name, args)

    def get_stats_summary(self):
        return {}


@pytest.fixture
def ref_chain():
    """Ref-like venue with two wNEAR/USDC pools at different prices and one DAI pool."""
    chain = FakeChain()
    chain.code = {"v2.ref-finance.near": POOL_CODE, "token.v2.ref-finance.near": TOKEN_CODE}
    chain.counts = {"v2.ref-finance.near": {"get_number_of_pools": data_response("3")}}
    chain.pools = {
        "v2.ref-finance.near": {
            0: pool_payload(["wrap.near", "usdc.fakes.testnet"], [10**24, 2 * 10**6]),
            1: pool_payload(["wrap.near", "usdc.fakes.testnet"], [10**24, 2_100_000]),
            2: pool_payload(["dai.fakes.testnet", "usdc.fakes.testnet"], [10**18, 10**6]),
        }
    }
    chain.returns = {"v2.ref-finance.near": '"1987654"'}
    return chain
