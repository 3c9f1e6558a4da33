"""Terminal aggregate returned by a backtest run."""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from tradeforge_engine.models.trade import (
    Diagnostic,
    DiagnosticKind,
    EquitySample,
    Trade,
    TradeSide,
)

if TYPE_CHECKING:
    from tradeforge_engine.backtest.metrics import BacktestMetrics


class RunStatus(str, Enum):
    """How a run ended."""

    COMPLETED = "completed"
    CANCELLED = "cancelled"  # Partial result, loop stopped between candles


@dataclass(frozen=True)
class BacktestResult:
    """Immutable outcome of one backtest run."""

    trades: tuple[Trade, ...]
    equity_curve: tuple[EquitySample, ...]
    metrics: "BacktestMetrics"
    status: RunStatus
    diagnostics: tuple[Diagnostic, ...]
    initial_balance: float
    final_cash: float
    final_position: float
    candles_processed: int
    total_candles: int

    @property
    def roi(self) -> float:
        return self.metrics.roi

    @property
    def max_drawdown(self) -> float:
        return self.metrics.max_drawdown

    @property
    def win_rate(self) -> float:
        return self.metrics.win_rate

    @property
    def profit_factor(self) -> float | None:
        return self.metrics.profit_factor

    @property
    def sharpe_ratio(self) -> float | None:
        return self.metrics.sharpe_ratio

    @property
    def final_equity(self) -> float:
        return self.metrics.final_equity

    @property
    def is_cancelled(self) -> bool:
        return self.status is RunStatus.CANCELLED

    @property
    def sell_trades(self) -> list[Trade]:
        return [t for t in self.trades if t.side is TradeSide.SELL]

    @property
    def total_realized_pnl(self) -> float:
        return sum(t.realized_pnl for t in self.sell_trades if t.realized_pnl is not None)

    def diagnostics_of(self, kind: DiagnosticKind) -> list[Diagnostic]:
        """Return recorded diagnostics of one kind."""
        return [d for d in self.diagnostics if d.kind is kind]

    def to_dict(self) -> dict[str, Any]:
        """Full-fidelity dictionary form (snake_case keys)."""
        return {
            "status": self.status.value,
            "initial_balance": self.initial_balance,
            "final_cash": self.final_cash,
            "final_position": self.final_position,
            "candles_processed": self.candles_processed,
            "total_candles": self.total_candles,
            "metrics": self.metrics.to_dict(),
            "trades": [t.to_dict() for t in self.trades],
            "equity_curve": [s.to_dict() for s in self.equity_curve],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }
