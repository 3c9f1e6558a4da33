"""Optional storage of backtest results."""

from .models import Base, BacktestRun, EquityRecord, TradeRecord
from .repository import ResultRepository, create_session

__all__ = [
    "BacktestRun",
    "Base",
    "EquityRecord",
    "ResultRepository",
    "TradeRecord",
    "create_session",
]
