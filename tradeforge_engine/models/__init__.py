"""Data models for candles, advice, ledger records and results."""

from .advice import ALL, Advice, AdviceAction
from .candle import Candle, CandleHistory, validate_series
from .result import BacktestResult, RunStatus
from .trade import Diagnostic, DiagnosticKind, EquitySample, Trade, TradeSide

__all__ = [
    "ALL",
    "Advice",
    "AdviceAction",
    "BacktestResult",
    "Candle",
    "CandleHistory",
    "Diagnostic",
    "DiagnosticKind",
    "EquitySample",
    "RunStatus",
    "Trade",
    "TradeSide",
    "validate_series",
]
