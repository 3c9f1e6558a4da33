"""Configuration package for the backtest engine."""

from .loader import load_config
from .models import BacktestConfig, IndicatorConfig

__all__ = [
    "BacktestConfig",
    "IndicatorConfig",
    "load_config",
]
