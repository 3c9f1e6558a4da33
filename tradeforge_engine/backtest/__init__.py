"""Backtesting framework.

Replays candles through a strategy and a simulated single-asset portfolio
and reports trades, the equity curve and performance metrics.

Key Components:
    - PortfolioSimulator: Cash plus one long position, fees and slippage
    - MetricsCalculator: ROI, drawdown, win rate, profit factor, Sharpe
    - BacktestRunner / run: The candle loop
    - EventChannel: Bounded queue of trade/report events for async consumers

Example:
    >>> from tradeforge_engine.backtest import run
    >>> result = run(candles, SmaRsiStrategy(), BacktestConfig())
    >>> print(f"ROI: {result.roi:.2%}")
"""

from tradeforge_engine.backtest.context import CancellationToken, RunContext
from tradeforge_engine.backtest.events import (
    BacktestEvent,
    BacktestObserver,
    CallbackObserver,
    ChannelConsumer,
    EventChannel,
    EventType,
)
from tradeforge_engine.backtest.metrics import BacktestMetrics, MetricsCalculator
from tradeforge_engine.backtest.portfolio import PortfolioSimulator, PositionSnapshot
from tradeforge_engine.backtest.report import (
    json_safe,
    result_to_json,
    save_report,
    to_api_payload,
)
from tradeforge_engine.backtest.runner import BacktestRunner, run

__all__ = [
    "BacktestEvent",
    "BacktestMetrics",
    "BacktestObserver",
    "BacktestRunner",
    "CallbackObserver",
    "CancellationToken",
    "ChannelConsumer",
    "EventChannel",
    "EventType",
    "MetricsCalculator",
    "PortfolioSimulator",
    "PositionSnapshot",
    "RunContext",
    "json_safe",
    "result_to_json",
    "run",
    "save_report",
    "to_api_payload",
]
