"""
chains/providers.py - NEAR JSON-RPC provider with failover.

Provides RPC access with:
- Multiple endpoint failover
- Explicit per-call timeout
- At most one retry, on transient network failures only
- Latency tracking per endpoint
"""

import base64
import json
import os
import time
from dataclasses import dataclass
from typing import Any

import httpx
from dotenv import load_dotenv

from core.constants import (
    DEFAULT_RPC_MAX_RETRIES,
    DEFAULT_RPC_TIMEOUT_SECONDS,
    DEFAULT_RPC_URL,
    EMPTY_ARGS_BASE64,
)
from core.exceptions import FetchError, InfraError, RpcTimeoutError
from core.logging import get_logger

logger = get_logger(__name__)

# Load environment variables
load_dotenv()


@dataclass
class RPCStats:
    """Statistics for an RPC endpoint."""
    url: str
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_latency_ms: int = 0
    last_error: str | None = None
    last_success_ts: int | None = None

    @property
    def avg_latency_ms(self) -> int:
        if self.successful_requests == 0:
            return 0
        return self.total_latency_ms // self.successful_requests

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.successful_requests / self.total_requests


def encode_args(args: dict | None) -> str:
    """Base64-encode JSON view-call arguments. `{}` encodes to "e30="."""
    if not args:
        return EMPTY_ARGS_BASE64
    raw = json.dumps(args, separators=(",", ":")).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def resolve_rpc_urls(urls: list[str] | None) -> list[str]:
    """NEAR_RPC_URL (comma separated) overrides the configured endpoints."""
    env_urls = os.getenv("NEAR_RPC_URL", "")
    if env_urls:
        return [u.strip() for u in env_urls.split(",") if u.strip()]
    return list(urls) if urls else [DEFAULT_RPC_URL]


class NearRpcProvider:
    """
    NEAR RPC provider with failover support.

    Every call is bounded by `timeout_seconds`. A transient failure
    (transport error, timeout, HTTP 5xx) is retried at most `max_retries`
    times, rotating to the next endpoint. JSON-RPC error objects are
    returned to the caller untouched; they are never retried.
    """

    def __init__(
        self,
        rpc_urls: list[str] | None = None,
        timeout_seconds: float = DEFAULT_RPC_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_RPC_MAX_RETRIES,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.rpc_urls = resolve_rpc_urls(rpc_urls)
        self.timeout_seconds = timeout_seconds
        self.max_retries = max(0, max_retries)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._request_id = 0

        self.stats: dict[str, RPCStats] = {
            url: RPCStats(url=url) for url in self.rpc_urls
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                limits=httpx.Limits(max_connections=10),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "NearRpcProvider":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def _next_request_id(self) -> int:
        self._request_id += 1
        return self._request_id

    async def call(self, method: str, params: dict) -> dict:
        """
        Make a JSON-RPC call.

        Args:
            method: RPC method name
            params: Method parameters

        Returns:
            Parsed JSON-RPC response (may contain an "error" object)

        Raises:
            RpcTimeoutError: If the final attempt timed out
            InfraError: If every attempt failed at the transport level
        """
        client = await self._get_client()
        attempts = self.max_retries + 1
        last_error: Exception | None = None

        for attempt in range(attempts):
            url = self.rpc_urls[attempt % len(self.rpc_urls)]
            stats = self.stats[url]
            stats.total_requests += 1

            payload = {
                "jsonrpc": "2.0",
                "id": str(self._next_request_id()),
                "method": method,
                "params": params,
            }

            start_ms = int(time.time() * 1000)

            try:
                resp = await client.post(url, json=payload)
                latency_ms = int(time.time() * 1000) - start_ms

                if resp.status_code >= 500:
                    raise httpx.HTTPStatusError(
                        f"HTTP {resp.status_code}",
                        request=resp.request,
                        response=resp,
                    )

                body = resp.json()

            except httpx.TimeoutException as e:
                stats.failed_requests += 1
                stats.last_error = f"Timeout after {self.timeout_seconds}s"
                last_error = e
                logger.debug(
                    f"RPC timeout for {url}",
                    extra={"context": {"attempt": attempt + 1, "method": method}},
                )
                continue

            except (httpx.TransportError, httpx.HTTPStatusError) as e:
                stats.failed_requests += 1
                stats.last_error = str(e)
                last_error = e
                logger.debug(
                    f"RPC transport failure for {url}: {e}",
                    extra={"context": {"attempt": attempt + 1, "method": method}},
                )
                continue

            except ValueError as e:
                # Non-JSON body: the endpoint answered, so do not retry
                stats.failed_requests += 1
                stats.last_error = "Invalid JSON response"
                raise InfraError(
                    f"Invalid JSON from {url}",
                    details={"url": url, "method": method, "error": str(e)},
                ) from e

            stats.successful_requests += 1
            stats.total_latency_ms += latency_ms
            stats.last_success_ts = int(time.time() * 1000)
            return body

        details = {
            "endpoints_tried": attempts,
            "method": method,
            "last_error": str(last_error),
        }
        if isinstance(last_error, httpx.TimeoutException):
            raise RpcTimeoutError(f"RPC {method} timed out", details=details)
        raise InfraError(f"RPC {method} failed on all attempts", details=details)

    async def query(self, params: dict) -> dict:
        """NEAR `query` call at final finality."""
        return await self.call("query", {"finality": "final", **params})

    async def view_code(self, account_id: str) -> bytes:
        """
        Fetch compiled contract bytes for an account.

        Raises:
            FetchError: If the account has no code or the RPC is unreachable
        """
        try:
            response = await self.query({
                "request_type": "view_code",
                "account_id": account_id,
            })
        except InfraError as e:
            raise FetchError(
                f"Could not reach RPC for {account_id}",
                details={"account_id": account_id, "cause": str(e)},
            ) from e

        if "error" in response:
            error = response["error"]
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            raise FetchError(
                f"Contract not found: {account_id}",
                details={"account_id": account_id, "error": message},
            )

        code_base64 = (response.get("result") or {}).get("code_base64")
        if not code_base64:
            raise FetchError(
                f"Contract not found: {account_id}",
                details={"account_id": account_id},
            )

        try:
            return base64.b64decode(code_base64)
        except (ValueError, TypeError) as e:
            raise FetchError(
                f"Invalid code payload for {account_id}",
                details={"account_id": account_id},
            ) from e

    async def call_function(
        self,
        account_id: str,
        method_name: str,
        args: dict | None = None,
    ) -> dict:
        """
        Call a read-only contract method.

        Returns the raw JSON-RPC response; classification is left to
        discovery.decoder.classify_response.
        """
        return await self.query({
            "request_type": "call_function",
            "account_id": account_id,
            "method_name": method_name,
            "args_base64": encode_args(args),
        })

    def get_stats_summary(self) -> dict:
        """Get statistics summary for all endpoints."""
        return {
            url: {
                "total_requests": s.total_requests,
                "success_rate": round(s.success_rate, 3),
                "avg_latency_ms": s.avg_latency_ms,
                "last_error": s.last_error,
            }
            for url, s in self.stats.items()
        }
