# PATH: strategy/jobs/__init__.py
"""
Strategy jobs package.

Available entry points:
    python -m strategy.jobs.run_scan        # aquascope CLI (scan/discover/arbitrage/monitor)
    python -m strategy.jobs.run_pair_arb    # Pair arbitrage between pools of two tokens

NOTE: This __init__.py does NOT import the job modules, so importing the
package has no side effects. Import them directly when needed:

    from strategy.jobs.run_scan import cli
"""

__all__: list[str] = []
