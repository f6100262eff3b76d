# PATH: config/__init__.py
"""
Configuration loading utilities for AquaScope.
"""

from pathlib import Path
from typing import Any, Dict, List

import yaml


CONFIG_DIR = Path(__file__).parent


def load_yaml(filename: str, config_dir: Path | None = None) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        filename: Name of file in config directory
        config_dir: Directory to read from (default: this package)

    Returns:
        Parsed YAML as dict
    """
    filepath = (config_dir or CONFIG_DIR) / filename
    if not filepath.exists():
        raise FileNotFoundError(f"Config file not found: {filepath}")

    with open(filepath, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_scanner(config_dir: Path | None = None) -> Dict[str, Any]:
    """Load scanner configuration (RPC, limits, thresholds)."""
    return load_yaml("scanner.yaml", config_dir)


def load_venues(config_dir: Path | None = None) -> List[Dict[str, Any]]:
    """
    Load known venues.

    Returns:
        List of venue dicts with at least `account_id`
    """
    data = load_yaml("venues.yaml", config_dir)
    return data.get("venues", [])


def load_tokens(config_dir: Path | None = None) -> Dict[str, Any]:
    """Load token decimals configuration."""
    return load_yaml("tokens.yaml", config_dir)
