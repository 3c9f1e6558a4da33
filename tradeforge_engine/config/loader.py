"""Configuration loader with JSON file and environment variable support."""

import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import BacktestConfig

logger = logging.getLogger(__name__)


def _env_bool(raw: str) -> bool:
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_config(config_path: str | Path | None = None) -> BacktestConfig:
    """
    Load configuration from JSON file with environment variable overrides.

    Priority: env vars > config file > defaults

    Args:
        config_path: Path to JSON config file. If None, uses TRADEFORGE_CONFIG_PATH
                     env var; when neither is set, defaults are used.

    Returns:
        Validated BacktestConfig instance

    Raises:
        FileNotFoundError: If an explicitly given config file doesn't exist
        json.JSONDecodeError: If config file has invalid JSON
        pydantic.ValidationError: If config values are invalid
    """
    if config_path is None:
        config_path = os.environ.get("TRADEFORGE_CONFIG_PATH")

    config_data: dict[str, Any] = {}
    if config_path is not None:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")
        with open(config_file) as f:
            config_data = json.load(f)
        logger.debug("Loaded config from %s", config_file)

    # Format: TRADEFORGE_INITIAL_BALANCE, TRADEFORGE_COMMISSION_RATE, etc.
    if balance := os.environ.get("TRADEFORGE_INITIAL_BALANCE"):
        config_data["initial_balance"] = float(balance)

    if commission := os.environ.get("TRADEFORGE_COMMISSION_RATE"):
        config_data["commission_rate"] = float(commission)

    if slippage := os.environ.get("TRADEFORGE_SLIPPAGE_RATE"):
        config_data["slippage_rate"] = float(slippage)

    if strict := os.environ.get("TRADEFORGE_STRICT_MODE"):
        config_data["strict_mode"] = _env_bool(strict)

    if seed := os.environ.get("TRADEFORGE_SEED"):
        config_data["seed"] = int(seed)

    return BacktestConfig(**config_data)
