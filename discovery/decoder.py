"""
discovery/decoder.py - RPC result decoding.

NEAR view calls return their payload as a JSON array of byte values. This
module:
1. Classifies a raw `query` response as DATA, EMPTY or ERROR
2. Decodes byte arrays to text (one value per code point)
3. Reads pool fields from the decoded text, tolerating partial or
   malformed JSON

Decoding maps each value straight to a code point, which is only faithful
for ASCII payloads. Contract view results seen so far are ASCII JSON.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from core.constants import QueryKind
from core.exceptions import DecodeError, MethodNotFoundError, RpcCallError
from core.logging import get_logger
from core.math import safe_int

logger = get_logger(__name__)

METHOD_NOT_FOUND_MARKERS = ("MethodNotFound", "MethodResolveError")

COUNT_PATTERN = re.compile(r"^\s*(\d+)\s*$")

# Field patterns for the fallback reader
POOL_KIND_PATTERN = re.compile(r'"pool_kind"\s*:\s*"([^"]*)"')
TOKEN_IDS_PATTERN = re.compile(r'"token_account_ids"\s*:\s*\[([^\]]*)')
AMOUNTS_PATTERN = re.compile(r'"amounts"\s*:\s*\[([^\]]*)')
TOTAL_FEE_PATTERN = re.compile(r'"total_fee"\s*:\s*(\d+)')
SHARES_PATTERN = re.compile(r'"shares_total_supply"\s*:\s*"?(\d+)')
QUOTED_PATTERN = re.compile(r'"([^"]*)"')
DIGITS_PATTERN = re.compile(r"\d+")
UNSIGNED_PATTERN = re.compile(r"[0-9]+")
AMOUNT_TOKEN_PATTERN = re.compile(r'"?([0-9]+)"?')


# =============================================================================
# RESPONSE CLASSIFICATION
# =============================================================================

@dataclass
class QueryResult:
    """Classified `query` response."""
    kind: QueryKind
    data: list[Any] | None = None
    error_message: str | None = None
    logs: list[str] = field(default_factory=list)

    @property
    def is_error(self) -> bool:
        return self.kind == QueryKind.ERROR

    @property
    def is_empty(self) -> bool:
        return self.kind == QueryKind.EMPTY

    @property
    def is_method_not_found(self) -> bool:
        if not self.is_error or not self.error_message:
            return False
        return any(marker in self.error_message for marker in METHOD_NOT_FOUND_MARKERS)


def _error_text(error: Any) -> str:
    """Flatten a JSON-RPC error object into one message."""
    if not isinstance(error, dict):
        return str(error)

    parts = []
    for key in ("message", "data"):
        value = error.get(key)
        if value:
            parts.append(value if isinstance(value, str) else json.dumps(value))

    cause = error.get("cause")
    if isinstance(cause, dict):
        parts.append(json.dumps(cause))

    return " | ".join(parts) or json.dumps(error)


def classify_response(response: dict | None) -> QueryResult:
    """
    Classify a raw `query` response.

    - Top-level `error` object or `result.error` string -> ERROR
    - Missing, null or empty `result.result` -> EMPTY
    - Otherwise -> DATA with the byte array
    """
    if not response:
        return QueryResult(kind=QueryKind.EMPTY)

    if response.get("error") is not None:
        return QueryResult(kind=QueryKind.ERROR, error_message=_error_text(response["error"]))

    result = response.get("result")
    if not isinstance(result, dict):
        return QueryResult(kind=QueryKind.EMPTY)

    logs = result.get("logs") or []

    if result.get("error"):
        return QueryResult(kind=QueryKind.ERROR, error_message=str(result["error"]), logs=logs)

    data = result.get("result")
    if not data:
        return QueryResult(kind=QueryKind.EMPTY, logs=logs)

    return QueryResult(kind=QueryKind.DATA, data=data, logs=logs)


# =============================================================================
# BYTE DECODING
# =============================================================================

def decode_bytes(values: Sequence[Any]) -> str:
    """
    Map each byte value to the code point of the same number.

    Raises:
        DecodeError: If the payload is not a list of integers in 0..255
    """
    if not isinstance(values, (list, tuple)):
        raise DecodeError(
            "Result payload is not a byte array",
            details={"type": type(values).__name__},
        )

    chars = []
    for index, value in enumerate(values):
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 255:
            raise DecodeError(
                "Byte array contains a non-byte value",
                details={"index": index, "value": repr(value)[:20]},
            )
        chars.append(chr(value))
    return "".join(chars)


def decode_result(result: QueryResult) -> str | None:
    """
    Decode a classified result.

    Returns:
        Decoded text, or None when the result carries no data

    Raises:
        MethodNotFoundError: If the contract does not export the method
        RpcCallError: For any other explicit error
        DecodeError: If the byte array is malformed
    """
    if result.is_error:
        if result.is_method_not_found:
            raise MethodNotFoundError(result.error_message or "MethodNotFound")
        raise RpcCallError(result.error_message or "Unknown RPC error")

    if result.is_empty or result.data is None:
        return None

    text = decode_bytes(result.data)
    if not text or text == "null":
        return None
    return text


def parse_count(text: str | None) -> int | None:
    """Bare non-negative integer, or None."""
    if text is None:
        return None
    match = COUNT_PATTERN.match(text)
    return int(match.group(1)) if match else None


def has_digits(text: str | None) -> bool:
    return bool(text) and DIGITS_PATTERN.search(text) is not None


# =============================================================================
# POOL FIELD READER
# =============================================================================

REQUIRED_POOL_FIELDS = ("token_account_ids", "amounts")


@dataclass
class PoolFields:
    """Pool fields read from decoded text. Every field is optional."""
    pool_kind: str | None = None
    token_account_ids: list[str] | None = None
    amounts: list[int] | None = None
    total_fee: int | None = None
    shares_total_supply: int | None = None
    strict: bool = False

    def missing_fields(self) -> list[str]:
        return [name for name in REQUIRED_POOL_FIELDS if getattr(self, name) is None]

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields()


def _string_list(value: Any) -> list[str] | None:
    if not isinstance(value, list):
        return None
    return [str(v) for v in value]


def _as_int(value: Any) -> int:
    # -1 marks an unreadable amount; PoolRecord rejects it
    if isinstance(value, float):
        return -1
    if isinstance(value, str) and not UNSIGNED_PATTERN.fullmatch(value):
        return -1
    return safe_int(value, default=-1)


def _int_list(value: Any) -> list[int] | None:
    if not isinstance(value, list):
        return None
    return [_as_int(v) for v in value]


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    parsed = _as_int(value)
    return parsed if parsed >= 0 else None


def _read_json(text: str) -> PoolFields | None:
    try:
        payload = json.loads(text)
    except ValueError:
        return None

    if not isinstance(payload, dict):
        return None

    pool_kind = payload.get("pool_kind")
    return PoolFields(
        pool_kind=str(pool_kind) if pool_kind is not None else None,
        token_account_ids=_string_list(payload.get("token_account_ids")),
        amounts=_int_list(payload.get("amounts")),
        total_fee=_optional_int(payload.get("total_fee")),
        shares_total_supply=_optional_int(payload.get("shares_total_supply")),
        strict=True,
    )


def _pattern_amounts(body: str) -> list[int]:
    amounts = []
    for token in body.split(","):
        token = token.strip()
        if not token:
            continue
        match = AMOUNT_TOKEN_PATTERN.fullmatch(token)
        # anything but plain digits maps to -1, as in the JSON reader
        amounts.append(int(match.group(1)) if match else -1)
    return amounts


def _read_patterns(text: str) -> PoolFields:
    fields = PoolFields()

    match = POOL_KIND_PATTERN.search(text)
    if match:
        fields.pool_kind = match.group(1)

    match = TOKEN_IDS_PATTERN.search(text)
    if match:
        fields.token_account_ids = QUOTED_PATTERN.findall(match.group(1))

    match = AMOUNTS_PATTERN.search(text)
    if match:
        fields.amounts = _pattern_amounts(match.group(1))

    match = TOTAL_FEE_PATTERN.search(text)
    if match:
        fields.total_fee = int(match.group(1))

    match = SHARES_PATTERN.search(text)
    if match:
        fields.shares_total_supply = int(match.group(1))

    return fields


def extract_pool_fields(text: str | None) -> PoolFields:
    """
    Read pool fields from decoded view-call text.

    Tries a strict JSON parse first; truncated or malformed text falls back
    to per-field patterns. Never raises; absent fields stay None.
    """
    if not text:
        return PoolFields()

    fields = _read_json(text)
    if fields is not None:
        return fields

    logger.debug(
        "Pool payload is not valid JSON, reading fields individually",
        extra={"context": {"length": len(text)}},
    )
    return _read_patterns(text)


def mentions_tokens(text: str | None, tokens: Iterable[str]) -> bool:
    """True if every token appears quoted in the text."""
    if not text:
        return False
    return all(f'"{token}"' in text for token in tokens)
