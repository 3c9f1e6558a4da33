"""Performance metrics calculator for backtesting results."""

import math
import statistics
from dataclasses import dataclass
from typing import Any

from tradeforge_engine.models.trade import EquitySample, Trade, TradeSide


@dataclass(frozen=True)
class BacktestMetrics:
    """Container for backtest performance metrics.

    Ratios are fractions (0.2 == 20%) unless the name ends in ``_pct``.

    Attributes:
        roi: (final_equity - initial_balance) / initial_balance
        max_drawdown: Largest peak-to-trough decline as a fraction of the peak
        max_drawdown_amount: That decline in quote currency
        win_rate: Share of sell trades with positive realized P&L (0.0 with no sells)
        profit_factor: Gross profit / gross loss; inf with no losing sells,
            None with no winning or losing sells
        sharpe_ratio: Annualized mean/stdev of per-candle equity returns;
            None with fewer than two returns or zero deviation
        sortino_ratio: Same with downside deviation; inf with no losing periods
        buy_and_hold_return: Price change from the first to the last close
    """

    initial_balance: float = 0.0
    final_equity: float = 0.0
    roi: float = 0.0
    total_return_pct: float = 0.0
    net_profit: float = 0.0
    realized_pnl: float = 0.0
    max_drawdown: float = 0.0
    max_drawdown_amount: float = 0.0
    win_rate: float = 0.0
    profit_factor: float | None = None
    sharpe_ratio: float | None = None
    sortino_ratio: float | None = None
    total_trades: int = 0
    buy_trades: int = 0
    sell_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    gross_profit: float = 0.0
    gross_loss: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0
    total_commission: float = 0.0
    total_slippage: float = 0.0
    buy_and_hold_return: float = 0.0
    start_time: int | None = None
    end_time: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert metrics to dictionary."""
        return {
            "initial_balance": self.initial_balance,
            "final_equity": self.final_equity,
            "roi": self.roi,
            "total_return_pct": self.total_return_pct,
            "net_profit": self.net_profit,
            "realized_pnl": self.realized_pnl,
            "max_drawdown": self.max_drawdown,
            "max_drawdown_amount": self.max_drawdown_amount,
            "win_rate": self.win_rate,
            "profit_factor": self.profit_factor,
            "sharpe_ratio": self.sharpe_ratio,
            "sortino_ratio": self.sortino_ratio,
            "total_trades": self.total_trades,
            "buy_trades": self.buy_trades,
            "sell_trades": self.sell_trades,
            "winning_trades": self.winning_trades,
            "losing_trades": self.losing_trades,
            "gross_profit": self.gross_profit,
            "gross_loss": self.gross_loss,
            "avg_win": self.avg_win,
            "avg_loss": self.avg_loss,
            "largest_win": self.largest_win,
            "largest_loss": self.largest_loss,
            "total_commission": self.total_commission,
            "total_slippage": self.total_slippage,
            "buy_and_hold_return": self.buy_and_hold_return,
            "start_time": self.start_time,
            "end_time": self.end_time,
        }


class MetricsCalculator:
    """Calculator for backtest performance metrics.

    Example:
        >>> calculator = MetricsCalculator(initial_balance=10000.0)
        >>> calculator.add_trade(trade)
        >>> calculator.add_equity_point(sample)
        >>> metrics = calculator.calculate()
    """

    def __init__(self, initial_balance: float = 10000.0, annualization_factor: float = 252.0):
        """Initialize metrics calculator.

        Args:
            initial_balance: Starting equity
            annualization_factor: Periods per year for Sharpe/Sortino scaling
        """
        self.initial_balance = initial_balance
        self.annualization_factor = annualization_factor
        self.trades: list[Trade] = []
        self.equity_curve: list[EquitySample] = []

    def add_trade(self, trade: Trade) -> None:
        self.trades.append(trade)

    def add_equity_point(self, sample: EquitySample) -> None:
        self.equity_curve.append(sample)

    def _calculate_drawdown(self) -> tuple[float, float]:
        """Calculate maximum drawdown in one forward pass.

        The running peak starts at the initial balance.

        Returns:
            Tuple of (max_drawdown fraction, max_drawdown amount)
        """
        peak = self.initial_balance
        max_drawdown = 0.0
        max_drawdown_amount = 0.0

        for sample in self.equity_curve:
            if sample.equity > peak:
                peak = sample.equity

            drawdown_amount = peak - sample.equity
            drawdown = drawdown_amount / peak if peak > 0 else 0.0

            if drawdown > max_drawdown:
                max_drawdown = drawdown
                max_drawdown_amount = drawdown_amount

        return max_drawdown, max_drawdown_amount

    def _period_returns(self) -> list[float]:
        returns = []
        for i in range(1, len(self.equity_curve)):
            prev_equity = self.equity_curve[i - 1].equity
            curr_equity = self.equity_curve[i].equity
            if prev_equity > 0:
                returns.append((curr_equity - prev_equity) / prev_equity)
        return returns

    def _calculate_sharpe_ratio(self, returns: list[float]) -> float | None:
        """Annualized Sharpe ratio with a zero risk-free rate.

        Uses the population standard deviation of per-candle returns.

        Returns:
            Sharpe ratio, or None when undefined
        """
        if len(returns) < 2:
            return None

        std = statistics.pstdev(returns)
        if std == 0:
            return None

        return statistics.fmean(returns) / std * math.sqrt(self.annualization_factor)

    def _calculate_sortino_ratio(self, returns: list[float]) -> float | None:
        """Annualized Sortino ratio.

        Uses downside deviation instead of standard deviation.
        """
        if len(returns) < 2:
            return None

        mean_return = statistics.fmean(returns)
        downside_returns = [r for r in returns if r < 0]
        if not downside_returns:
            return math.inf if mean_return > 0 else None

        downside_std = math.sqrt(sum(r ** 2 for r in downside_returns) / len(downside_returns))
        return mean_return / downside_std * math.sqrt(self.annualization_factor)

    def _calculate_trade_stats(self) -> dict[str, Any]:
        sells = [t for t in self.trades if t.side is TradeSide.SELL]
        pnls = [t.realized_pnl or 0.0 for t in sells]
        wins = [p for p in pnls if p > 0]
        losses = [p for p in pnls if p < 0]

        gross_profit = sum(wins)
        gross_loss = abs(sum(losses))

        if gross_loss > 0:
            profit_factor: float | None = gross_profit / gross_loss
        elif gross_profit > 0:
            profit_factor = math.inf
        else:
            profit_factor = None

        return {
            "total_trades": len(self.trades),
            "buy_trades": len(self.trades) - len(sells),
            "sell_trades": len(sells),
            "winning_trades": len(wins),
            "losing_trades": len(losses),
            "win_rate": len(wins) / len(sells) if sells else 0.0,
            "gross_profit": gross_profit,
            "gross_loss": gross_loss,
            "profit_factor": profit_factor,
            "avg_win": gross_profit / len(wins) if wins else 0.0,
            "avg_loss": sum(losses) / len(losses) if losses else 0.0,
            "largest_win": max(wins, default=0.0),
            "largest_loss": min(losses, default=0.0),
            "realized_pnl": sum(pnls),
            "total_commission": sum(t.commission for t in self.trades),
            "total_slippage": sum(t.slippage for t in self.trades),
        }

    def calculate(self) -> BacktestMetrics:
        """Calculate all metrics and return results."""
        final_equity = (
            self.equity_curve[-1].equity if self.equity_curve else self.initial_balance
        )
        net_profit = final_equity - self.initial_balance
        roi = net_profit / self.initial_balance if self.initial_balance > 0 else 0.0

        max_drawdown, max_drawdown_amount = self._calculate_drawdown()
        returns = self._period_returns()
        trade_stats = self._calculate_trade_stats()

        buy_and_hold = 0.0
        if self.equity_curve and self.equity_curve[0].price > 0:
            first_price = self.equity_curve[0].price
            buy_and_hold = (self.equity_curve[-1].price - first_price) / first_price

        return BacktestMetrics(
            initial_balance=self.initial_balance,
            final_equity=final_equity,
            roi=roi,
            total_return_pct=roi * 100.0,
            net_profit=net_profit,
            max_drawdown=max_drawdown,
            max_drawdown_amount=max_drawdown_amount,
            sharpe_ratio=self._calculate_sharpe_ratio(returns),
            sortino_ratio=self._calculate_sortino_ratio(returns),
            buy_and_hold_return=buy_and_hold,
            start_time=self.equity_curve[0].timestamp if self.equity_curve else None,
            end_time=self.equity_curve[-1].timestamp if self.equity_curve else None,
            **trade_stats,
        )
