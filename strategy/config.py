"""
strategy/config.py - Scanner configuration.

RPC settings, discovery limits, tier thresholds and token decimals, read
from config/*.yaml with code defaults for anything missing.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any

from config import load_scanner, load_tokens, load_venues
from core import constants as c
from core.math import safe_decimal
from core.models import Venue


@dataclass
class RpcSettings:
    """NEAR RPC endpoint settings."""
    urls: list[str] = field(default_factory=lambda: [c.DEFAULT_RPC_URL])
    timeout_seconds: float = c.DEFAULT_RPC_TIMEOUT_SECONDS
    max_retries: int = c.DEFAULT_RPC_MAX_RETRIES


@dataclass
class DiscoveryLimits:
    """Bounds on RPC fan-out during discovery."""
    per_venue_cap: int = c.DEFAULT_PER_VENUE_CAP
    total_scan_cap: int = c.DEFAULT_TOTAL_SCAN_CAP
    progress_interval: int = c.DEFAULT_PROGRESS_INTERVAL
    max_concurrency: int = c.DEFAULT_MAX_CONCURRENCY
    count_methods: tuple[str, ...] = c.POOL_COUNT_METHODS
    pool_method: str = c.POOL_METHOD
    pool_id_arg: str = c.POOL_ID_ARG


@dataclass
class ScannerSettings:
    """Signature scanner settings."""
    disassembler: str = "wasm-dis"
    signatures: tuple[str, ...] = c.POOL_SIGNATURES
    fallback_keywords: tuple[str, ...] = c.FALLBACK_KEYWORDS
    fallback_cap: int = c.FALLBACK_MATCH_CAP
    min_string_length: int = c.MIN_STRING_LENGTH


@dataclass
class TierThresholds:
    """Profit percentage thresholds for opportunity tiers."""
    high_percent: Decimal = c.HIGH_TIER_PERCENT
    moderate_percent: Decimal = c.MODERATE_TIER_PERCENT


@dataclass
class ArbitrageSettings:
    """Pair scan and return-probe settings."""
    default_venue: str = c.DEFAULT_ARBITRAGE_VENUE
    tiers: TierThresholds = field(default_factory=TierThresholds)
    example_trade_amount: Decimal = c.EXAMPLE_TRADE_AMOUNT
    probe_method: str = "get_return"
    probe_amount: int = c.DEFAULT_PROBE_AMOUNT


@dataclass
class MonitorSettings:
    """Bounded pair monitoring."""
    default_pair: str = c.DEFAULT_MONITOR_PAIR
    rounds: int = c.DEFAULT_MONITOR_ROUNDS
    interval_seconds: float = c.DEFAULT_MONITOR_INTERVAL_SECONDS
    venues: int = c.DEFAULT_MONITOR_VENUES


@dataclass
class TokenDecimals:
    """Token account id -> decimals, with a default for unknown tokens."""
    decimals: dict[str, int] = field(default_factory=dict)
    default: int = c.DEFAULT_TOKEN_DECIMALS

    def get(self, token: str) -> int:
        return self.decimals.get(token, self.default)

    def for_pair(self, token_a: str, token_b: str) -> tuple[int, int]:
        return (self.get(token_a), self.get(token_b))


@dataclass
class ScannerConfig:
    """Full scanner configuration."""
    rpc: RpcSettings = field(default_factory=RpcSettings)
    discovery: DiscoveryLimits = field(default_factory=DiscoveryLimits)
    scanner: ScannerSettings = field(default_factory=ScannerSettings)
    arbitrage: ArbitrageSettings = field(default_factory=ArbitrageSettings)
    monitor: MonitorSettings = field(default_factory=MonitorSettings)
    tokens: TokenDecimals = field(default_factory=TokenDecimals)
    venues: list[Venue] = field(default_factory=list)


def _tuple(value: Any, default: tuple[str, ...]) -> tuple[str, ...]:
    if not value:
        return default
    return tuple(str(v) for v in value)


def _positive(value: Any, default: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def parse_scanner_config(data: dict, tokens_data: dict | None = None, venues_data: list | None = None) -> ScannerConfig:
    """Build a ScannerConfig from already-loaded YAML dicts."""
    rpc_data = data.get("rpc", {}) or {}
    rpc = RpcSettings(
        urls=list(rpc_data.get("urls") or [c.DEFAULT_RPC_URL]),
        timeout_seconds=rpc_data.get("timeout_seconds", c.DEFAULT_RPC_TIMEOUT_SECONDS),
        max_retries=min(int(rpc_data.get("max_retries", c.DEFAULT_RPC_MAX_RETRIES)), 1),
    )

    disc_data = data.get("discovery", {}) or {}
    discovery = DiscoveryLimits(
        per_venue_cap=_positive(disc_data.get("per_venue_cap"), c.DEFAULT_PER_VENUE_CAP),
        total_scan_cap=_positive(disc_data.get("total_scan_cap"), c.DEFAULT_TOTAL_SCAN_CAP),
        progress_interval=_positive(disc_data.get("progress_interval"), c.DEFAULT_PROGRESS_INTERVAL),
        max_concurrency=_positive(disc_data.get("max_concurrency"), c.DEFAULT_MAX_CONCURRENCY),
        count_methods=_tuple(disc_data.get("count_methods"), c.POOL_COUNT_METHODS),
        pool_method=disc_data.get("pool_method", c.POOL_METHOD),
        pool_id_arg=disc_data.get("pool_id_arg", c.POOL_ID_ARG),
    )

    scan_data = data.get("scanner", {}) or {}
    scanner = ScannerSettings(
        disassembler=scan_data.get("disassembler", "wasm-dis"),
        signatures=_tuple(scan_data.get("signatures"), c.POOL_SIGNATURES),
        fallback_keywords=_tuple(scan_data.get("fallback_keywords"), c.FALLBACK_KEYWORDS),
        fallback_cap=_positive(scan_data.get("fallback_cap"), c.FALLBACK_MATCH_CAP),
        min_string_length=_positive(scan_data.get("min_string_length"), c.MIN_STRING_LENGTH),
    )

    arb_data = data.get("arbitrage", {}) or {}
    arbitrage = ArbitrageSettings(
        default_venue=arb_data.get("default_venue", c.DEFAULT_ARBITRAGE_VENUE),
        tiers=TierThresholds(
            high_percent=safe_decimal(arb_data.get("high_tier_percent"), c.HIGH_TIER_PERCENT),
            moderate_percent=safe_decimal(arb_data.get("moderate_tier_percent"), c.MODERATE_TIER_PERCENT),
        ),
        example_trade_amount=safe_decimal(arb_data.get("example_trade_amount"), c.EXAMPLE_TRADE_AMOUNT),
        probe_method=arb_data.get("probe_method", "get_return"),
        probe_amount=int(arb_data.get("probe_amount", c.DEFAULT_PROBE_AMOUNT)),
    )

    mon_data = data.get("monitor", {}) or {}
    monitor = MonitorSettings(
        default_pair=mon_data.get("default_pair", c.DEFAULT_MONITOR_PAIR),
        rounds=_positive(mon_data.get("rounds"), c.DEFAULT_MONITOR_ROUNDS),
        interval_seconds=mon_data.get("interval_seconds", c.DEFAULT_MONITOR_INTERVAL_SECONDS),
        venues=_positive(mon_data.get("venues"), c.DEFAULT_MONITOR_VENUES),
    )

    tokens_data = tokens_data or {}
    tokens = TokenDecimals(
        decimals={
            account_id: int(entry.get("decimals", c.DEFAULT_TOKEN_DECIMALS))
            for account_id, entry in (tokens_data.get("tokens") or {}).items()
        },
        default=int(tokens_data.get("default_decimals", c.DEFAULT_TOKEN_DECIMALS)),
    )

    venues = [
        Venue(
            account_id=entry["account_id"],
            signatures=_tuple(entry.get("signatures"), scanner.signatures),
            label=entry.get("label", ""),
        )
        for entry in (venues_data or [])
        if entry.get("account_id")
    ]

    return ScannerConfig(
        rpc=rpc,
        discovery=discovery,
        scanner=scanner,
        arbitrage=arbitrage,
        monitor=monitor,
        tokens=tokens,
        venues=venues,
    )


def load_scanner_config(config_dir: Path | None = None) -> ScannerConfig:
    """
    Load scanner configuration from YAML files.

    Args:
        config_dir: Directory holding scanner.yaml, tokens.yaml and
            venues.yaml (default: the bundled config package)

    Returns:
        ScannerConfig; missing files fall back to code defaults
    """
    try:
        data = load_scanner(config_dir)
    except FileNotFoundError:
        data = {}

    try:
        tokens_data = load_tokens(config_dir)
    except FileNotFoundError:
        tokens_data = {}

    try:
        venues_data = load_venues(config_dir)
    except FileNotFoundError:
        venues_data = []

    return parse_scanner_config(data, tokens_data, venues_data)
