# PATH: strategy/__init__.py
"""Strategy package for AquaScope: pricing, arbitrage detection and settings."""

from strategy.config import ScannerConfig, TierThresholds, load_scanner_config
from strategy.pricing import PricingEngine, compute_spot_price, price_for_base
from strategy.arbitrage import ArbitrageAnalysis, ArbitrageDetector, classify_tier

__all__ = [
    "ScannerConfig",
    "TierThresholds",
    "load_scanner_config",
    "PricingEngine",
    "compute_spot_price",
    "price_for_base",
    "ArbitrageAnalysis",
    "ArbitrageDetector",
    "classify_tier",
]
