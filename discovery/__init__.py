"""
discovery/ - Venue classification and pool enumeration.

Modules:
- scanner: Bytecode signature scanner (export listing or string fallback)
- decoder: RPC result classification and tolerant pool-field reader
- registry: In-memory pool registry keyed by (venue, pool_id)
- orchestrator: Drives discovery, pair scans, return probes and monitoring
"""

from discovery.decoder import (
    PoolFields,
    QueryResult,
    classify_response,
    decode_bytes,
    decode_result,
    extract_pool_fields,
)
from discovery.registry import PoolRegistry
from discovery.scanner import (
    BytecodeSignatureScanner,
    NullDisassembler,
    ScanResult,
    WasmDisassembler,
    select_disassembler,
)
from discovery.orchestrator import (
    DiscoveryOrchestrator,
    DiscoverySummary,
    MonitorRound,
    PairScanResult,
    ReturnProbe,
    VenueReport,
)

__all__ = [
    "PoolFields",
    "QueryResult",
    "classify_response",
    "decode_bytes",
    "decode_result",
    "extract_pool_fields",
    "PoolRegistry",
    "BytecodeSignatureScanner",
    "NullDisassembler",
    "ScanResult",
    "WasmDisassembler",
    "select_disassembler",
    "DiscoveryOrchestrator",
    "DiscoverySummary",
    "MonitorRound",
    "PairScanResult",
    "ReturnProbe",
    "VenueReport",
]
