"""
monitoring/report.py - Human-readable run summaries.

Everything here writes to stdout via click.echo; structured logs go to
stderr through core.logging.
"""

from decimal import Decimal
from typing import Iterable

import click

from core.constants import OpportunityTier
from core.math import quantize
from discovery.orchestrator import DiscoverySummary, MonitorRound, PairScanResult, ReturnProbe, VenueReport
from discovery.scanner import ScanResult
from strategy.arbitrage import ArbitrageAnalysis

RULE = "=" * 60

TIER_LABELS = {
    OpportunityTier.HIGH: "HIGH PROFIT OPPORTUNITY",
    OpportunityTier.MODERATE: "Moderate opportunity",
    OpportunityTier.LOW: "Small spread",
}

SUGGESTED_PAIRS = (
    ("wrap.near", "usdc.fakes.testnet"),
    ("wrap.near", "dai.fakes.testnet"),
    ("token.skyward.near", "wrap.near"),
)


def _header(title: str) -> None:
    click.echo("\n" + RULE)
    click.echo(title)
    click.echo(RULE)


def _pool_label(pool_id: int, pool_kind: str) -> str:
    return f"Pool {pool_id} ({pool_kind or 'unknown'})"


def print_scan_result(result: ScanResult) -> None:
    """Pool functions found on one contract."""
    _header("POOL FUNCTION ANALYSIS")
    click.echo(f"Contract: {result.account_id}")
    click.echo(f"Source: {result.source.value} ({result.confidence.value} confidence)")
    click.echo(f"Pool Functions Found: {len(result.matches)}")
    for match in result.matches:
        click.echo(f"  - {match.name}")


def print_venue_report(report: VenueReport) -> None:
    """Scan result plus enumeration outcome for one venue."""
    if report.scan is not None:
        print_scan_result(report.scan)
    else:
        _header("POOL FUNCTION ANALYSIS")
        click.echo(f"Contract: {report.venue.account_id}")

    click.echo(f"Status: {report.status.value}")
    if report.pool_count is not None:
        click.echo(f"Found {report.pool_count} pools via {report.count_method}")

    for record in report.pools:
        click.echo(
            f"  {_pool_label(record.pool_id, record.pool_kind)}: "
            f"{record.token_a}/{record.token_b} reserves {record.reserve_a} : {record.reserve_b}"
        )
    for partial in report.partial_pools:
        click.echo(f"  Pool {partial.pool_id}: partial data, missing {', '.join(partial.missing)}")
    for error in report.errors:
        click.echo(f"  ! {error}")


def print_discovery_summary(summary: DiscoverySummary) -> None:
    """One line per venue, then totals."""
    _header("POOL DISCOVERY")
    for report in summary.reports:
        count = report.pool_count if report.pool_count is not None else "-"
        click.echo(f"  {report.venue.account_id:<32} {report.status.value:<14} pools: {count}")

    click.echo("")
    click.echo(f"Active venues: {summary.active_venues}/{summary.venues_total}")
    click.echo(f"Total pools discovered: {summary.total_pools}")
    click.echo(f"Pools fetched: {summary.pools_fetched}")
    click.echo(RULE)


def print_arbitrage(analysis: ArbitrageAnalysis, example_amount: Decimal = Decimal("1000")) -> None:
    """BUY/SELL table, profit analysis and every pool price."""
    base, quote = analysis.token_pair
    _header("ARBITRAGE ANALYSIS")

    opportunity = analysis.opportunity
    if opportunity is None:
        click.echo("No significant price differences found")
        click.echo("All pools are efficiently priced!")
    else:
        buy_label = _pool_label(opportunity.buy_pool.pool_id, opportunity.buy_pool.pool_kind)
        sell_label = _pool_label(opportunity.sell_pool.pool_id, opportunity.sell_pool.pool_kind)

        click.echo("ARBITRAGE OPPORTUNITY FOUND!")
        click.echo(f"{'Action':<20} | {'Pool':<32} | Price")
        click.echo("-" * 80)
        click.echo(
            f"{'BUY ' + base:<20} | {buy_label:<32} | "
            f"1 {base} = {quantize(opportunity.buy_price)} {quote}"
        )
        click.echo(
            f"{'SELL ' + base:<20} | {sell_label:<32} | "
            f"1 {base} = {quantize(opportunity.sell_price)} {quote}"
        )

        click.echo("")
        click.echo("PROFIT ANALYSIS:")
        click.echo(f"  - Price difference: {quantize(opportunity.price_difference)} {quote} per {base}")
        click.echo(f"  - Profit percentage: {quantize(opportunity.profit_percent, 2)}%")
        click.echo(f"  - Strategy: Buy in {opportunity.buy_pool.label}, Sell in {opportunity.sell_pool.label}")
        click.echo(
            f"  - Example: Trade {example_amount} {base} -> "
            f"Profit: {quantize(opportunity.example_profit(example_amount), 2)} {quote}"
        )
        click.echo(TIER_LABELS[opportunity.tier])

    click.echo("")
    click.echo("ALL POOL PRICES:")
    for entry in analysis.ranked_prices:
        click.echo(
            f"  {entry.pool.venue} {_pool_label(entry.pool.pool_id, entry.pool.pool_kind)}: "
            f"1 {base} = {quantize(entry.price)} {quote}"
        )
    for record in analysis.skipped:
        click.echo(f"  {record.label}: no liquidity, skipped")


def print_pair_scan(result: PairScanResult, example_amount: Decimal = Decimal("1000")) -> None:
    """Pair scan outcome; falls back to suggested pairs when too few pools matched."""
    _header(f"SCANNING FOR {result.token_a}/{result.token_b} POOLS")
    click.echo(f"Venues: {', '.join(result.venues)}")
    click.echo(f"Pools checked: {result.pools_checked}")
    click.echo(f"FOUND {len(result.matching)} POOLS WITH {result.token_a}/{result.token_b}")

    if result.analysis is not None:
        print_arbitrage(result.analysis, example_amount)
        return

    click.echo("")
    click.echo(result.reason or "Need at least 2 pools for arbitrage analysis")
    click.echo("Could not find sufficient pools for analysis")
    click.echo("Try common pairs like:")
    for token_a, token_b in SUGGESTED_PAIRS:
        click.echo(f"  - {token_a} {token_b}")


def print_probes(token_in: str, token_out: str, probes: Iterable[ReturnProbe]) -> None:
    """Which venues answered a swap-return probe with numbers."""
    probes = list(probes)
    _header(f"RETURN PROBE {token_in} -> {token_out}")
    for probe in probes:
        if probe.has_pricing:
            click.echo(f"  {probe.venue}: pricing data {probe.value}")
        elif probe.error:
            click.echo(f"  {probe.venue}: {probe.error}")
        else:
            click.echo(f"  {probe.venue}: no pricing data")

    click.echo("")
    click.echo(f"Venues with pricing data: {sum(1 for p in probes if p.has_pricing)}/{len(probes)}")


def print_monitor_round(entry: MonitorRound, rounds: int) -> None:
    result = entry.result
    click.echo(f"\n[round {entry.round_number}/{rounds}] {result.token_a}/{result.token_b}")

    analysis = result.analysis
    if analysis is None:
        click.echo(f"  {result.reason or 'Not enough pools'}")
        return

    for price in analysis.ranked_prices:
        click.echo(f"  {price.pool.label}: {quantize(price.price)}")

    if analysis.opportunity is not None:
        opp = analysis.opportunity
        click.echo(
            f"  spread {quantize(opp.profit_percent, 2)}% ({opp.tier.value}): "
            f"buy {opp.buy_pool.label}, sell {opp.sell_pool.label}"
        )
    else:
        click.echo("  no price difference")
