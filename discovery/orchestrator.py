"""
discovery/orchestrator.py - Drives pool discovery across venues.

Per venue:
1. Fetch contract code (view_code)
2. Classify with the signature scanner
3. If pool-like, find the pool count via the first candidate method that
   answers with a number
4. Fetch individual pools (bounded), decode, and upsert into the registry

Every failure is scoped to its unit of work (method, pool, venue); the run
always continues and always produces a summary. Venue tasks run under a
semaphore of size `max_concurrency` (1 = strictly sequential); each task
owns its VenueReport and aggregates are computed after all tasks finish.
"""

import asyncio
from dataclasses import dataclass, field
from typing import AsyncIterator, Awaitable, Callable, Iterable, Sequence, TypeVar

from chains.providers import NearRpcProvider
from core.constants import VenueStatus
from core.exceptions import (
    DecodeError,
    FetchError,
    IllFormedPoolError,
    InfraError,
    InsufficientPoolsError,
    MethodNotFoundError,
    PartialParseError,
    RpcCallError,
    ValidationError,
)
from core.logging import get_logger, log_error, log_pool
from core.models import PoolRecord, Venue
from discovery.decoder import (
    PoolFields,
    classify_response,
    decode_result,
    extract_pool_fields,
    has_digits,
    mentions_tokens,
    parse_count,
)
from discovery.registry import PoolRegistry
from discovery.scanner import BytecodeSignatureScanner, ScanResult
from strategy.arbitrage import ArbitrageAnalysis, ArbitrageDetector
from strategy.config import ScannerConfig

logger = get_logger(__name__)

T = TypeVar("T")


# =============================================================================
# REPORTS
# =============================================================================

@dataclass
class PartialPool:
    """A pool whose payload decoded but lacked required fields."""
    venue: str
    pool_id: int
    fields: PoolFields
    missing: list[str]


@dataclass
class VenueReport:
    """Everything learned about one venue in one pass."""
    venue: Venue
    status: VenueStatus = VenueStatus.UNREACHABLE
    scan: ScanResult | None = None
    pool_count: int | None = None
    count_method: str | None = None
    pools: list[PoolRecord] = field(default_factory=list)
    partial_pools: list[PartialPool] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.status == VenueStatus.ACTIVE

    def to_dict(self) -> dict:
        return {
            "venue": self.venue.account_id,
            "status": self.status.value,
            "scan": self.scan.to_dict() if self.scan else None,
            "pool_count": self.pool_count,
            "count_method": self.count_method,
            "pools": [p.to_dict() for p in self.pools],
            "partial_pools": [
                {"pool_id": p.pool_id, "missing": p.missing} for p in self.partial_pools
            ],
            "errors": self.errors,
        }


@dataclass
class DiscoverySummary:
    """Aggregate of a discovery pass."""
    reports: list[VenueReport] = field(default_factory=list)

    @property
    def venues_total(self) -> int:
        return len(self.reports)

    @property
    def active_venues(self) -> int:
        return sum(1 for r in self.reports if r.is_active)

    @property
    def total_pools(self) -> int:
        return sum(r.pool_count or 0 for r in self.reports)

    @property
    def pools_fetched(self) -> int:
        return sum(len(r.pools) for r in self.reports)

    def to_dict(self) -> dict:
        return {
            "venues_total": self.venues_total,
            "active_venues": self.active_venues,
            "total_pools": self.total_pools,
            "pools_fetched": self.pools_fetched,
            "reports": [r.to_dict() for r in self.reports],
        }


@dataclass
class PairScanResult:
    """Outcome of scanning venues for one token pair."""
    token_a: str
    token_b: str
    venues: list[str] = field(default_factory=list)
    pools_checked: int = 0
    matching: list[PoolRecord] = field(default_factory=list)
    analysis: ArbitrageAnalysis | None = None
    reason: str | None = None


@dataclass
class ReturnProbe:
    """Result of asking one venue for a swap return."""
    venue: str
    has_pricing: bool
    value: str | None = None
    error: str | None = None


@dataclass
class ScanBudget:
    """Pools a pair scan may still fetch, shared by every venue it covers."""
    remaining: int

    def take(self) -> bool:
        if self.remaining <= 0:
            return False
        self.remaining -= 1
        return True


@dataclass
class MonitorRound:
    """One monitoring pass over a pair."""
    round_number: int
    result: PairScanResult


# =============================================================================
# ORCHESTRATOR
# =============================================================================

class DiscoveryOrchestrator:
    """
    Runs scanner, decoder, registry and detector over a venue list.

    Usage:
        async with NearRpcProvider(urls) as provider:
            orchestrator = DiscoveryOrchestrator(provider, scanner, config=config)
            summary = await orchestrator.discover()
    """

    def __init__(
        self,
        provider: NearRpcProvider,
        scanner: BytecodeSignatureScanner,
        config: ScannerConfig | None = None,
        registry: PoolRegistry | None = None,
        detector: ArbitrageDetector | None = None,
    ):
        self.provider = provider
        self.scanner = scanner
        self.config = config or ScannerConfig()
        self.registry = registry if registry is not None else PoolRegistry()
        self.detector = detector or ArbitrageDetector(thresholds=self.config.arbitrage.tiers)
        self.limits = self.config.discovery

    async def _bounded(self, items: Sequence[T], worker: Callable[[T], Awaitable]) -> list:
        """Run `worker` over items with at most max_concurrency in flight."""
        semaphore = asyncio.Semaphore(max(1, self.limits.max_concurrency))

        async def run(item: T):
            async with semaphore:
                return await worker(item)

        return await asyncio.gather(*(run(item) for item in items))

    # -------------------------------------------------------------------------
    # RPC helpers
    # -------------------------------------------------------------------------

    async def fetch_text(self, account_id: str, method: str, args: dict | None = None) -> str | None:
        """
        Call a view method and decode the result.

        Returns None for empty results and for byte arrays that fail to
        decode.

        Raises:
            MethodNotFoundError, RpcCallError: Explicit call errors
            InfraError: Transport failure after retries
        """
        response = await self.provider.call_function(account_id, method, args)
        result = classify_response(response)

        try:
            return decode_result(result)
        except DecodeError as e:
            logger.warning(
                f"{method} on {account_id}: {e.message}",
                extra={"context": {"account_id": account_id, "method": method, **e.details}},
            )
            return None

    async def enumerate_pool_count(self, account_id: str) -> tuple[str, int] | None:
        """First (method, count) whose answer is a bare number, or None."""
        for method in self.limits.count_methods:
            logger.debug(f"Trying {method} on {account_id}")
            try:
                text = await self.fetch_text(account_id, method)
            except MethodNotFoundError:
                logger.debug(f"{method} not exported by {account_id}")
                continue
            except (RpcCallError, InfraError) as e:
                logger.warning(
                    f"{method} on {account_id} failed: {e.message}",
                    extra={"context": {"account_id": account_id, "method": method}},
                )
                continue

            count = parse_count(text)
            if count is not None:
                logger.info(
                    f"{account_id}: {count} pools via {method}",
                    extra={"context": {"account_id": account_id, "method": method, "count": count}},
                )
                return method, count

            if text is not None:
                logger.debug(f"{method} on {account_id} returned non-numeric data")

        return None

    async def fetch_pool_text(self, account_id: str, pool_id: int) -> str | None:
        return await self.fetch_text(
            account_id,
            self.limits.pool_method,
            {self.limits.pool_id_arg: pool_id},
        )

    def build_record(self, account_id: str, pool_id: int, fields: PoolFields) -> PoolRecord:
        """
        Turn decoded fields into a PoolRecord.

        Raises:
            PartialParseError: If tokens or amounts are missing
            IllFormedPoolError: If tokens and amounts are not a matching pair
            ValidationError: If values are out of range
        """
        missing = fields.missing_fields()
        if missing:
            raise PartialParseError(
                f"Pool {pool_id} on {account_id} is missing {', '.join(missing)}",
                partial=fields,
                missing=missing,
                details={"account_id": account_id, "pool_id": pool_id},
            )

        tokens = fields.token_account_ids
        decimals = [self.config.tokens.get(t) for t in tokens]
        return PoolRecord.from_arrays(
            venue=account_id,
            pool_id=pool_id,
            tokens=tokens,
            reserves=fields.amounts,
            decimals=decimals,
            pool_kind=fields.pool_kind or "",
        )

    def load_pool(self, report: VenueReport, pool_id: int, text: str) -> PoolRecord | None:
        """Decode one pool payload into the registry, recording partial ones on the report."""
        account_id = report.venue.account_id
        fields = extract_pool_fields(text)

        try:
            record = self.build_record(account_id, pool_id, fields)
        except PartialParseError as e:
            logger.warning(
                str(e),
                extra={"context": {"account_id": account_id, "pool_id": pool_id, "missing": e.missing}},
            )
            report.partial_pools.append(PartialPool(account_id, pool_id, fields, e.missing))
            return None
        except (IllFormedPoolError, ValidationError) as e:
            logger.warning(
                f"Pool {pool_id} on {account_id} rejected: {e.message}",
                extra={"context": {"account_id": account_id, "pool_id": pool_id}},
            )
            report.errors.append(str(e))
            return None

        self.registry.upsert(record)
        log_pool(
            logger,
            venue=record.venue,
            pool_id=record.pool_id,
            token_a=record.token_a,
            token_b=record.token_b,
            reserve_a=record.reserve_a,
            reserve_b=record.reserve_b,
            pool_kind=record.pool_kind,
        )
        return record

    # -------------------------------------------------------------------------
    # Venue discovery
    # -------------------------------------------------------------------------

    async def classify_venue(self, venue: Venue) -> VenueReport:
        """Fetch and classify a venue without enumerating pools."""
        report = VenueReport(venue=venue)

        try:
            code = await self.provider.view_code(venue.account_id)
        except FetchError as e:
            log_error(logger, e.code.value, e.message, account_id=venue.account_id)
            report.errors.append(str(e))
            return report

        report.scan = self.scanner.scan(venue.account_id, code, venue.signatures)
        report.status = VenueStatus.POOL_LIKE if report.scan.is_pool_like else VenueStatus.NOT_POOL_LIKE
        return report

    async def scan_venue(self, venue: Venue) -> VenueReport:
        """Classify a venue and, if pool-like, enumerate up to per_venue_cap pools."""
        report = await self.classify_venue(venue)
        if report.status != VenueStatus.POOL_LIKE:
            if report.status == VenueStatus.NOT_POOL_LIKE:
                logger.warning(f"No pool functions detected on {venue.account_id}")
            return report

        found = await self.enumerate_pool_count(venue.account_id)
        if found is None:
            return report

        report.count_method, report.pool_count = found
        report.status = VenueStatus.ACTIVE

        limit = min(report.pool_count, self.limits.per_venue_cap)
        for pool_id in range(limit):
            try:
                text = await self.fetch_pool_text(venue.account_id, pool_id)
            except (RpcCallError, InfraError) as e:
                logger.warning(
                    f"Pool {pool_id} on {venue.account_id} unavailable: {e.message}",
                    extra={"context": {"account_id": venue.account_id, "pool_id": pool_id}},
                )
                report.errors.append(str(e))
                continue

            if text is None:
                continue

            record = self.load_pool(report, pool_id, text)
            if record is not None:
                report.pools.append(record)

        return report

    async def discover(self, venues: Iterable[Venue] | None = None) -> DiscoverySummary:
        """Scan every venue and aggregate the results."""
        venues = list(venues if venues is not None else self.config.venues)
        reports = await self._bounded(venues, self.scan_venue)
        summary = DiscoverySummary(reports=list(reports))

        logger.info(
            "Discovery complete",
            extra={
                "context": {
                    "active_venues": summary.active_venues,
                    "venues_total": summary.venues_total,
                    "total_pools": summary.total_pools,
                }
            },
        )
        return summary

    # -------------------------------------------------------------------------
    # Pair scanning
    # -------------------------------------------------------------------------

    async def _scan_venue_for_pair(
        self,
        account_id: str,
        token_a: str,
        token_b: str,
        budget: ScanBudget,
    ) -> tuple[int, list[PoolRecord]]:
        report = VenueReport(venue=Venue(account_id), status=VenueStatus.ACTIVE)

        found = await self.enumerate_pool_count(account_id)
        if found is None:
            logger.warning(f"Could not get pool count for {account_id}")
            return 0, []

        _, count = found
        limit = min(count, budget.remaining)
        logger.info(f"Searching first {limit} pools on {account_id}")

        checked = 0
        matching = []
        for pool_id in range(limit):
            # venues running concurrently draw from the same budget
            if not budget.take():
                break
            checked += 1

            if pool_id % self.limits.progress_interval == 0:
                logger.info(
                    f"Progress: {pool_id}/{limit} pools checked",
                    extra={"context": {"account_id": account_id}},
                )

            try:
                text = await self.fetch_pool_text(account_id, pool_id)
            except (RpcCallError, InfraError) as e:
                logger.debug(f"Pool {pool_id} on {account_id} unavailable: {e.message}")
                continue

            if not mentions_tokens(text, (token_a, token_b)):
                continue

            record = self.load_pool(report, pool_id, text)
            if record is not None and frozenset(record.tokens) == frozenset((token_a, token_b)):
                matching.append(record)

        return checked, matching

    async def scan_pair(
        self,
        token_a: str,
        token_b: str,
        venues: Sequence[str] | None = None,
    ) -> PairScanResult:
        """
        Collect every pool for the pair across `venues` and compare prices.

        Prices are token_a denominated in token_b.
        """
        venues = list(venues or [self.config.arbitrage.default_venue])
        result = PairScanResult(token_a=token_a, token_b=token_b, venues=venues)
        budget = ScanBudget(remaining=self.limits.total_scan_cap)

        async def worker(account_id: str):
            return await self._scan_venue_for_pair(account_id, token_a, token_b, budget)

        for checked, matching in await self._bounded(venues, worker):
            result.pools_checked += checked
            result.matching.extend(matching)

        logger.info(
            f"Found {len(result.matching)} pools with {token_a}/{token_b}",
            extra={"context": {"venues": venues, "pools_checked": result.pools_checked}},
        )

        try:
            result.analysis = self.detector.detect(
                token_a,
                token_b,
                self.registry.query_by_token_pair(token_a, token_b),
            )
        except InsufficientPoolsError as e:
            logger.warning(
                e.message,
                extra={"context": {"found": e.found}},
            )
            result.reason = e.message

        return result

    async def probe_returns(
        self,
        token_in: str,
        token_out: str,
        venues: Iterable[Venue] | None = None,
        amount_in: int | None = None,
    ) -> list[ReturnProbe]:
        """Ask each venue for a swap return; venues answering with digits have pricing data."""
        venues = list(venues if venues is not None else self.config.venues)
        settings = self.config.arbitrage
        args = {
            "token_in": token_in,
            "token_out": token_out,
            "amount_in": str(amount_in if amount_in is not None else settings.probe_amount),
        }

        async def worker(venue: Venue) -> ReturnProbe:
            try:
                text = await self.fetch_text(venue.account_id, settings.probe_method, args)
            except (RpcCallError, InfraError) as e:
                return ReturnProbe(venue=venue.account_id, has_pricing=False, error=e.message)

            return ReturnProbe(venue=venue.account_id, has_pricing=has_digits(text), value=text)

        probes = await self._bounded(venues, worker)
        logger.info(
            f"{sum(1 for p in probes if p.has_pricing)}/{len(probes)} venues returned pricing data",
            extra={"context": {"token_in": token_in, "token_out": token_out}},
        )
        return list(probes)

    async def monitor_pair(
        self,
        token_a: str,
        token_b: str,
        rounds: int | None = None,
        interval_seconds: float | None = None,
        venues: Sequence[str] | None = None,
    ) -> AsyncIterator[MonitorRound]:
        """Re-scan the pair a bounded number of times, yielding each round."""
        settings = self.config.monitor
        rounds = settings.rounds if rounds is None else rounds
        interval = settings.interval_seconds if interval_seconds is None else interval_seconds
        if venues is None:
            venues = [v.account_id for v in self.config.venues[:settings.venues]] or None

        for number in range(1, rounds + 1):
            result = await self.scan_pair(token_a, token_b, venues)
            yield MonitorRound(round_number=number, result=result)

            if number < rounds and interval > 0:
                await asyncio.sleep(interval)
