# PATH: core/constants.py
"""
Constants for AquaScope.

Contains enums, defaults, and the signature lists used by the scanner.
"""

from decimal import Decimal
from enum import Enum
from typing import Final, Tuple

# =============================================================================
# RPC DEFAULTS
# =============================================================================

DEFAULT_RPC_URL: Final[str] = "https://rpc.mainnet.near.org"
DEFAULT_RPC_TIMEOUT_SECONDS: Final[int] = 10
DEFAULT_RPC_MAX_RETRIES: Final[int] = 1

# base64 of "{}"
EMPTY_ARGS_BASE64: Final[str] = "e30="

# =============================================================================
# DISCOVERY LIMITS
# =============================================================================

DEFAULT_PER_VENUE_CAP: Final[int] = 5
DEFAULT_TOTAL_SCAN_CAP: Final[int] = 100
DEFAULT_PROGRESS_INTERVAL: Final[int] = 20
DEFAULT_MAX_CONCURRENCY: Final[int] = 1

# Tried in order; first numeric answer wins
POOL_COUNT_METHODS: Final[Tuple[str, ...]] = (
    "get_number_of_pools",
    "get_pools",
    "get_pool_info",
    "pools",
)

POOL_METHOD: Final[str] = "get_pool"
POOL_ID_ARG: Final[str] = "pool_id"

# =============================================================================
# SCANNER SIGNATURES
# =============================================================================

POOL_SIGNATURES: Final[Tuple[str, ...]] = (
    "get_pool",
    "get_pools",
    "add_liquidity",
    "remove_liquidity",
    "swap",
    "get_return",
    "get_reserves",
    "get_pool_info",
    "pool_info",
    "ft_transfer_call",
    "get_deposit",
    "get_deposits",
)

FALLBACK_KEYWORDS: Final[Tuple[str, ...]] = ("pool", "swap", "liquidity", "reserve")
FALLBACK_MATCH_CAP: Final[int] = 10
MIN_STRING_LENGTH: Final[int] = 4

# =============================================================================
# PRICING / ARBITRAGE
# =============================================================================

# NEAR fungible tokens default to 24 decimals (wrap.near)
DEFAULT_TOKEN_DECIMALS: Final[int] = 24

HIGH_TIER_PERCENT: Final[Decimal] = Decimal("1")
MODERATE_TIER_PERCENT: Final[Decimal] = Decimal("0.1")
EXAMPLE_TRADE_AMOUNT: Final[Decimal] = Decimal("1000")

# 1 token with 24 decimals
DEFAULT_PROBE_AMOUNT: Final[int] = 10**24

DEFAULT_ARBITRAGE_VENUE: Final[str] = "v2.ref-finance.near"
DEFAULT_MONITOR_PAIR: Final[str] = "wrap.near/usdc.fakes.testnet"

DEFAULT_MONITOR_ROUNDS: Final[int] = 3
DEFAULT_MONITOR_INTERVAL_SECONDS: Final[int] = 2
DEFAULT_MONITOR_VENUES: Final[int] = 2


class ErrorCode(str, Enum):
    """Error codes carried by every AquaScope exception."""
    # Infrastructure
    INFRA_RPC_ERROR = "INFRA_RPC_ERROR"
    INFRA_TIMEOUT = "INFRA_TIMEOUT"

    # Contract / method calls
    FETCH_FAILED = "FETCH_FAILED"
    RPC_CALL_ERROR = "RPC_CALL_ERROR"
    METHOD_NOT_FOUND = "METHOD_NOT_FOUND"

    # Decoding
    DECODE_FAILED = "DECODE_FAILED"
    PARTIAL_PARSE = "PARTIAL_PARSE"

    # Pricing / arbitrage
    VALIDATION_FAILED = "VALIDATION_FAILED"
    ILL_FORMED_POOL = "ILL_FORMED_POOL"
    NO_LIQUIDITY = "NO_LIQUIDITY"
    INSUFFICIENT_POOLS = "INSUFFICIENT_POOLS"

    UNKNOWN = "UNKNOWN"


class QueryKind(str, Enum):
    """Classification of a NEAR `query` response."""
    DATA = "DATA"
    EMPTY = "EMPTY"
    ERROR = "ERROR"


class ScanSource(str, Enum):
    """Where scanner matches came from."""
    EXPORTS = "EXPORTS"
    STRINGS = "STRINGS"
    NONE = "NONE"


class ScanConfidence(str, Enum):
    """Confidence of a scanner classification."""
    HIGH = "HIGH"
    LOW = "LOW"


class OpportunityTier(str, Enum):
    """Profit tier of an arbitrage opportunity."""
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"


class ArbitrageOutcome(str, Enum):
    """Result of comparing pool prices for a pair."""
    OPPORTUNITY = "OPPORTUNITY"
    NO_ARBITRAGE = "NO_ARBITRAGE"


class VenueStatus(str, Enum):
    """Status of one venue after a discovery pass."""
    ACTIVE = "ACTIVE"
    POOL_LIKE = "POOL_LIKE"
    NOT_POOL_LIKE = "NOT_POOL_LIKE"
    UNREACHABLE = "UNREACHABLE"
