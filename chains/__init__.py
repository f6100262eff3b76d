"""
chains/ - Blockchain interaction layer.

Modules:
- providers: NEAR JSON-RPC provider with failover, timeout and retry
"""

from chains.providers import (
    NearRpcProvider,
    RPCStats,
    encode_args,
    resolve_rpc_urls,
)

__all__ = [
    "NearRpcProvider",
    "RPCStats",
    "encode_args",
    "resolve_rpc_urls",
]
