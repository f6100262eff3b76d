"""
core - Core utilities and models for AquaScope.

This package contains:
- models.py: Data models (Venue, PoolRecord, PoolPrice, ArbitrageOpportunity)
- constants.py: Enums, defaults and scanner signature lists
- exceptions.py: Typed exceptions with error codes
- math.py: Decimal helpers (no float)
- logging.py: Structured JSON logging
"""

from core.constants import (
    ArbitrageOutcome,
    ErrorCode,
    OpportunityTier,
    QueryKind,
    ScanConfidence,
    ScanSource,
    VenueStatus,
    POOL_SIGNATURES,
)
from core.exceptions import (
    DecodeError,
    FetchError,
    IllFormedPoolError,
    InfraError,
    InsufficientPoolsError,
    MethodNotFoundError,
    NoLiquidityError,
    PartialParseError,
    RpcCallError,
    RpcTimeoutError,
    ScannerError,
    ValidationError,
)
from core.logging import get_logger, setup_logging, set_global_context
from core.models import (
    ArbitrageOpportunity,
    PoolPrice,
    PoolRecord,
    Venue,
)

__all__ = [
    # Constants
    "ArbitrageOutcome",
    "ErrorCode",
    "OpportunityTier",
    "QueryKind",
    "ScanConfidence",
    "ScanSource",
    "VenueStatus",
    "POOL_SIGNATURES",
    # Exceptions
    "DecodeError",
    "FetchError",
    "IllFormedPoolError",
    "InfraError",
    "InsufficientPoolsError",
    "MethodNotFoundError",
    "NoLiquidityError",
    "PartialParseError",
    "RpcCallError",
    "RpcTimeoutError",
    "ScannerError",
    "ValidationError",
    # Models
    "ArbitrageOpportunity",
    "PoolPrice",
    "PoolRecord",
    "Venue",
    # Logging
    "get_logger",
    "setup_logging",
    "set_global_context",
]
