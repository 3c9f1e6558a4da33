"""Streaming technical indicators."""

from .base import Indicator, ensure_numeric
from .crossover import (
    CrossDirection,
    detect_crossover,
    is_bearish_crossover,
    is_bullish_crossover,
)
from .ema import EMA, calculate_ema
from .engine import INDICATOR_TYPES, IndicatorEngine
from .rsi import RSI, calculate_rsi
from .sma import SMA, calculate_sma

__all__ = [
    "CrossDirection",
    "EMA",
    "INDICATOR_TYPES",
    "Indicator",
    "IndicatorEngine",
    "RSI",
    "SMA",
    "calculate_ema",
    "calculate_rsi",
    "calculate_sma",
    "detect_crossover",
    "ensure_numeric",
    "is_bearish_crossover",
    "is_bullish_crossover",
]
