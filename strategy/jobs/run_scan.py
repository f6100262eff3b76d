#!/usr/bin/env python3
"""
strategy/jobs/run_scan.py - CLI entrypoint for AquaScope.

Commands:
- scan <contract>     Classify one contract and enumerate its pools
- discover            Scan every configured venue and summarize
- arbitrage [PAIR]    Pair scan on the default venue, or a get_return probe
- monitor [PAIR]      Bounded re-scans of one pair

Usage:
    python -m strategy.jobs.run_scan scan v2.ref-finance.near
    python -m strategy.jobs.run_scan --log-level DEBUG discover
    python -m strategy.jobs.run_scan arbitrage wrap.near/usdc.fakes.testnet
"""

import asyncio
from pathlib import Path
from typing import Any, Awaitable, Callable

import click

from chains.providers import NearRpcProvider
from core.exceptions import ScannerError
from core.logging import get_logger, setup_logging, set_global_context
from core.models import Venue
from discovery.orchestrator import DiscoveryOrchestrator
from discovery.scanner import BytecodeSignatureScanner, select_disassembler
from monitoring.report import (
    print_discovery_summary,
    print_monitor_round,
    print_pair_scan,
    print_probes,
    print_venue_report,
)
from strategy.config import ScannerConfig, load_scanner_config

logger = get_logger("aquascope.cli")

VERSION = "0.1.0"

Job = Callable[[DiscoveryOrchestrator], Awaitable[Any]]


def parse_pair(value: str) -> tuple[str, str]:
    """Split "A/B" into two distinct token account ids."""
    parts = [p.strip() for p in value.split("/")]
    if len(parts) != 2 or not all(parts):
        raise click.BadParameter(f"expected TOKEN_A/TOKEN_B, got {value!r}", param_hint="PAIR")
    if parts[0] == parts[1]:
        raise click.BadParameter("pair tokens must differ", param_hint="PAIR")
    return parts[0], parts[1]


def run_job(config: ScannerConfig, job: Job) -> Any:
    """
    Build provider, scanner and orchestrator, run `job`, tear everything down.

    Returns the job's result, or None if the run was interrupted or failed
    with a ScannerError. The disassembler's workspace is removed on every
    path.
    """
    disassembler = select_disassembler(config.scanner.disassembler)
    scanner = BytecodeSignatureScanner(
        signatures=config.scanner.signatures,
        disassembler=disassembler,
        fallback_keywords=config.scanner.fallback_keywords,
        fallback_cap=config.scanner.fallback_cap,
        min_string_length=config.scanner.min_string_length,
    )

    async def run():
        async with NearRpcProvider(
            config.rpc.urls,
            timeout_seconds=config.rpc.timeout_seconds,
            max_retries=config.rpc.max_retries,
        ) as provider:
            orchestrator = DiscoveryOrchestrator(provider, scanner, config=config)
            try:
                return await job(orchestrator)
            finally:
                logger.info("RPC stats", extra={"context": provider.get_stats_summary()})

    try:
        return asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Run interrupted")
    except ScannerError as e:
        logger.error(f"Run aborted: {e}", extra={"context": {"error_code": e.code.value}})
    finally:
        disassembler.close()
    return None


@click.group()
@click.option(
    "--config",
    "config_dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Directory holding scanner.yaml, venues.yaml and tokens.yaml",
)
@click.option(
    "--log-level",
    "-l",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Log level",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=False,
    help="Use JSON log format",
)
@click.version_option(VERSION, prog_name="aquascope")
@click.pass_context
def cli(ctx: click.Context, config_dir: Path | None, log_level: str, json_logs: bool) -> None:
    """AquaScope - NEAR AMM pool scanner."""
    setup_logging(level=log_level, json_output=json_logs)
    set_global_context(service="aquascope", version=VERSION)
    ctx.obj = load_scanner_config(config_dir)


@cli.command()
@click.argument("contract")
@click.pass_obj
def scan(config: ScannerConfig, contract: str) -> None:
    """Analyze one contract for pool functions."""
    logger.info(f"Scanning {contract}")
    venue = next((v for v in config.venues if v.account_id == contract), Venue(contract))

    report = run_job(config, lambda orchestrator: orchestrator.scan_venue(venue))

    if report is None:
        click.echo(f"Scan of {contract} did not complete")
        return
    print_venue_report(report)


@cli.command()
@click.pass_obj
def discover(config: ScannerConfig) -> None:
    """Auto-discover pools across the configured venues."""
    logger.info(
        "Starting discovery",
        extra={"context": {"venues": len(config.venues), "max_concurrency": config.discovery.max_concurrency}},
    )

    summary = run_job(config, lambda orchestrator: orchestrator.discover())

    if summary is None:
        click.echo("Discovery did not complete")
        return
    print_discovery_summary(summary)


@cli.command()
@click.argument("pair", required=False)
@click.pass_obj
def arbitrage(config: ScannerConfig, pair: str | None) -> None:
    """
    Find arbitrage between pools of PAIR (TOKEN_A/TOKEN_B).

    Without PAIR, asks every venue for a swap return on the default pair
    and reports which ones have pricing data.
    """
    if pair:
        token_a, token_b = parse_pair(pair)
        result = run_job(config, lambda orchestrator: orchestrator.scan_pair(token_a, token_b))
        if result is None:
            click.echo(f"Arbitrage scan for {token_a}/{token_b} did not complete")
            return
        print_pair_scan(result, config.arbitrage.example_trade_amount)
        return

    token_in, token_out = parse_pair(config.monitor.default_pair)
    probes = run_job(config, lambda orchestrator: orchestrator.probe_returns(token_in, token_out))
    if probes is None:
        click.echo("Return probe did not complete")
        return
    print_probes(token_in, token_out, probes)


@cli.command()
@click.argument("pair", required=False)
@click.option("--rounds", "-r", type=click.IntRange(min=1), default=None, help="Number of scan rounds")
@click.option("--interval", "-i", type=click.FloatRange(min=0), default=None, help="Seconds between rounds")
@click.pass_obj
def monitor(config: ScannerConfig, pair: str | None, rounds: int | None, interval: float | None) -> None:
    """Re-scan PAIR a bounded number of times."""
    token_a, token_b = parse_pair(pair or config.monitor.default_pair)
    rounds = rounds or config.monitor.rounds

    async def job(orchestrator: DiscoveryOrchestrator) -> int:
        completed = 0
        async for entry in orchestrator.monitor_pair(token_a, token_b, rounds=rounds, interval_seconds=interval):
            print_monitor_round(entry, rounds)
            completed += 1
        return completed

    click.echo(f"MONITORING: {token_a}/{token_b}")
    completed = run_job(config, job)
    click.echo(f"Monitoring complete: {completed or 0}/{rounds} rounds")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
