# PATH: core/exceptions.py
"""
Typed exceptions for AquaScope.

Every failure degrades to "no result for this unit of work"; the codes let
callers decide whether to try the next method, pool, or venue.
"""

from typing import Optional

from core.constants import ErrorCode


class ScannerError(Exception):
    """Base exception for AquaScope."""

    def __init__(
        self,
        message: str = "",
        code: ErrorCode = ErrorCode.UNKNOWN,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self):
        return f"[{self.code.value}] {self.message}"


class InfraError(ScannerError):
    """Infrastructure-related errors (transport, HTTP status, endpoints)."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.INFRA_RPC_ERROR, details)


class RpcTimeoutError(InfraError):
    """RPC call timed out."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, details)
        self.code = ErrorCode.INFRA_TIMEOUT


class FetchError(ScannerError):
    """Venue unreachable or contract code not found."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.FETCH_FAILED, details)


class RpcCallError(ScannerError):
    """A view call returned an explicit error object."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None,
        code: ErrorCode = ErrorCode.RPC_CALL_ERROR,
    ):
        super().__init__(message, code, details)


class MethodNotFoundError(RpcCallError):
    """Contract does not export the called method. Expected during probing."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, details, ErrorCode.METHOD_NOT_FOUND)


class DecodeError(ScannerError):
    """Byte-array result could not be decoded."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.DECODE_FAILED, details)


class PartialParseError(ScannerError):
    """
    Decoded pool text is missing expected fields.

    Carries whatever was extracted in `partial` so it can still be surfaced.
    """

    def __init__(
        self,
        message: str,
        partial: object = None,
        missing: Optional[list] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, ErrorCode.PARTIAL_PARSE, details)
        self.partial = partial
        self.missing = missing or []


class ValidationError(ScannerError):
    """Invalid record or arguments."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.VALIDATION_FAILED, details)


class IllFormedPoolError(ValidationError):
    """Token and reserve arrays are not a matching pair of length two."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, details)
        self.code = ErrorCode.ILL_FORMED_POOL


class NoLiquidityError(ScannerError):
    """Input reserve is zero; no price can be implied."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.NO_LIQUIDITY, details)


class InsufficientPoolsError(ScannerError):
    """Fewer than two pools available for an arbitrage comparison."""

    def __init__(self, message: str, found: int = 0, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.INSUFFICIENT_POOLS, details)
        self.found = found
