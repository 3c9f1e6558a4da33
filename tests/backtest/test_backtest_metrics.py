"""Tests for backtest metrics calculator."""

import math
import statistics

import pytest

from tradeforge_engine.backtest.metrics import BacktestMetrics, MetricsCalculator
from tradeforge_engine.models.trade import EquitySample, Trade, TradeSide


def _sample(equity: float, ts: int = 0, price: float = 100.0) -> EquitySample:
    return EquitySample(timestamp=ts, equity=equity, cash=equity, position=0.0, price=price)


def _trade(side: TradeSide, realized: float | None = None, commission: float = 0.0) -> Trade:
    return Trade(
        id=1,
        candle_index=0,
        timestamp=0,
        side=side,
        price=100.0,
        quantity=1.0,
        commission=commission,
        slippage=0.0,
        market_price=100.0,
        cash_after=0.0,
        position_after=0.0,
        realized_pnl=realized,
    )


class TestMetricsCalculator:
    """Test suite for MetricsCalculator."""

    @pytest.fixture
    def calculator(self) -> MetricsCalculator:
        """Create a metrics calculator fixture."""
        return MetricsCalculator(initial_balance=10000.0)

    def test_empty_calculator(self, calculator: MetricsCalculator) -> None:
        """Test calculator with no data."""
        metrics = calculator.calculate()

        assert metrics.final_equity == 10000.0
        assert metrics.roi == 0.0
        assert metrics.total_trades == 0
        assert metrics.max_drawdown == 0.0
        assert metrics.win_rate == 0.0
        assert metrics.profit_factor is None
        assert metrics.sharpe_ratio is None
        assert metrics.start_time is None

    def test_roi_is_fraction(self, calculator: MetricsCalculator) -> None:
        calculator.add_equity_point(_sample(10000.0, ts=1))
        calculator.add_equity_point(_sample(12000.0, ts=2))

        metrics = calculator.calculate()

        assert metrics.roi == pytest.approx(0.2)
        assert metrics.total_return_pct == pytest.approx(20.0)
        assert metrics.net_profit == pytest.approx(2000.0)
        assert metrics.start_time == 1
        assert metrics.end_time == 2

    def test_max_drawdown(self, calculator: MetricsCalculator) -> None:
        """Test drawdown is measured from the running peak."""
        for equity in (10000.0, 12000.0, 9000.0, 11000.0):
            calculator.add_equity_point(_sample(equity))

        metrics = calculator.calculate()

        assert metrics.max_drawdown == pytest.approx(0.25)
        assert metrics.max_drawdown_amount == pytest.approx(3000.0)

    def test_drawdown_peak_starts_at_initial_balance(self, calculator: MetricsCalculator) -> None:
        calculator.add_equity_point(_sample(9000.0))
        calculator.add_equity_point(_sample(9500.0))

        assert calculator.calculate().max_drawdown == pytest.approx(0.1)

    def test_trade_stats(self, calculator: MetricsCalculator) -> None:
        calculator.add_trade(_trade(TradeSide.BUY, commission=1.0))
        calculator.add_trade(_trade(TradeSide.SELL, 150.0, commission=1.0))
        calculator.add_trade(_trade(TradeSide.BUY, commission=1.0))
        calculator.add_trade(_trade(TradeSide.SELL, -50.0, commission=1.0))
        calculator.add_trade(_trade(TradeSide.SELL, 50.0))

        metrics = calculator.calculate()

        assert metrics.total_trades == 5
        assert metrics.buy_trades == 2
        assert metrics.sell_trades == 3
        assert metrics.winning_trades == 2
        assert metrics.losing_trades == 1
        assert metrics.win_rate == pytest.approx(2 / 3)
        assert metrics.gross_profit == pytest.approx(200.0)
        assert metrics.gross_loss == pytest.approx(50.0)
        assert metrics.profit_factor == pytest.approx(4.0)
        assert metrics.avg_win == pytest.approx(100.0)
        assert metrics.avg_loss == pytest.approx(-50.0)
        assert metrics.largest_win == pytest.approx(150.0)
        assert metrics.largest_loss == pytest.approx(-50.0)
        assert metrics.realized_pnl == pytest.approx(150.0)
        assert metrics.total_commission == pytest.approx(4.0)

    def test_profit_factor_infinite_without_losses(self, calculator: MetricsCalculator) -> None:
        calculator.add_trade(_trade(TradeSide.SELL, 10.0))
        metrics = calculator.calculate()
        assert math.isinf(metrics.profit_factor)
        assert metrics.win_rate == 1.0

    def test_profit_factor_undefined_for_breakeven(self, calculator: MetricsCalculator) -> None:
        calculator.add_trade(_trade(TradeSide.SELL, 0.0))
        metrics = calculator.calculate()
        assert metrics.profit_factor is None
        assert metrics.win_rate == 0.0

    def test_sharpe_ratio(self) -> None:
        calculator = MetricsCalculator(initial_balance=100.0, annualization_factor=365.0)
        for equity in (100.0, 102.0, 101.0, 104.0):
            calculator.add_equity_point(_sample(equity))

        returns = [0.02, -1.0 / 102.0, 3.0 / 101.0]
        expected = statistics.fmean(returns) / statistics.pstdev(returns) * math.sqrt(365.0)
        assert calculator.calculate().sharpe_ratio == pytest.approx(expected)

    def test_sharpe_undefined_for_constant_returns(self, calculator: MetricsCalculator) -> None:
        for equity in (10000.0, 10000.0, 10000.0):
            calculator.add_equity_point(_sample(equity))
        metrics = calculator.calculate()
        assert metrics.sharpe_ratio is None
        assert metrics.sortino_ratio is None

    def test_sharpe_needs_two_returns(self, calculator: MetricsCalculator) -> None:
        calculator.add_equity_point(_sample(10000.0))
        calculator.add_equity_point(_sample(11000.0))
        assert calculator.calculate().sharpe_ratio is None

    def test_sortino_infinite_without_losing_periods(self, calculator: MetricsCalculator) -> None:
        for equity in (10000.0, 10100.0, 10300.0):
            calculator.add_equity_point(_sample(equity))
        assert math.isinf(calculator.calculate().sortino_ratio)

    def test_buy_and_hold_return(self, calculator: MetricsCalculator) -> None:
        calculator.add_equity_point(_sample(10000.0, price=50.0))
        calculator.add_equity_point(_sample(10000.0, price=75.0))
        assert calculator.calculate().buy_and_hold_return == pytest.approx(0.5)


def test_metrics_to_dict() -> None:
    """Test conversion to dictionary."""
    metrics = BacktestMetrics(initial_balance=100.0, roi=0.1, profit_factor=math.inf)
    data = metrics.to_dict()
    assert data["roi"] == 0.1
    assert data["profit_factor"] == math.inf
    assert set(data) >= {"max_drawdown", "win_rate", "sharpe_ratio", "total_trades"}
