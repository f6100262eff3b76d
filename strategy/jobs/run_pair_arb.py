#!/usr/bin/env python3
"""
strategy/jobs/run_pair_arb.py - Arbitrage between pools of one token pair.

Scans the default venue for every pool holding both tokens and compares
their spot prices.

Usage:
    python -m strategy.jobs.run_pair_arb wrap.near usdc.fakes.testnet
    python -m strategy.jobs.run_pair_arb --venue v2.ref-finance.near wrap.near dai.fakes.testnet
"""

from datetime import datetime, timezone
from pathlib import Path

import click

from core.logging import get_logger, setup_logging, set_global_context
from monitoring.report import print_pair_scan
from strategy.config import load_scanner_config
from strategy.jobs.run_scan import VERSION, run_job

logger = get_logger("aquascope.pair_arb")


@click.command()
@click.argument("token_a")
@click.argument("token_b")
@click.option(
    "--venue",
    "-v",
    "venues",
    multiple=True,
    help="Venue account to scan (repeatable; default: arbitrage.default_venue)",
)
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
def main(
    token_a: str,
    token_b: str,
    venues: tuple[str, ...],
    config_dir: Path | None,
    log_level: str,
    json_logs: bool,
) -> None:
    """Find arbitrage between pools holding TOKEN_A and TOKEN_B."""
    if token_a == token_b:
        raise click.BadParameter("tokens must differ", param_hint="TOKEN_B")

    setup_logging(level=log_level, json_output=json_logs)
    set_global_context(service="aquascope-pair-arb", version=VERSION)
    config = load_scanner_config(config_dir)

    click.echo(f"Analyzing arbitrage opportunities for {token_a}/{token_b}")
    click.echo(f"Analysis time: {datetime.now(timezone.utc).isoformat()}")

    result = run_job(
        config,
        lambda orchestrator: orchestrator.scan_pair(token_a, token_b, list(venues) or None),
    )

    if result is None:
        click.echo("Pair scan did not complete")
    else:
        print_pair_scan(result, config.arbitrage.example_trade_amount)
        if result.analysis is not None:
            click.echo("\nArbitrage analysis complete!")

    click.echo("=" * 60)


if __name__ == "__main__":
    main()
