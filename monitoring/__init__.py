# PATH: monitoring/__init__.py
"""
Monitoring package for AquaScope.

Human-readable rendering of scan, discovery, arbitrage and monitor results.
"""

from monitoring.report import (
    print_arbitrage,
    print_discovery_summary,
    print_monitor_round,
    print_pair_scan,
    print_probes,
    print_scan_result,
    print_venue_report,
)

__all__ = [
    "print_arbitrage",
    "print_discovery_summary",
    "print_monitor_round",
    "print_pair_scan",
    "print_probes",
    "print_scan_result",
    "print_venue_report",
]
