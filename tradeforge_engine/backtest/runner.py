"""Backtest runner driving the candle-by-candle loop."""

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from tradeforge_engine.backtest.context import CancellationToken, RunContext
from tradeforge_engine.backtest.events import BacktestObserver
from tradeforge_engine.backtest.metrics import MetricsCalculator
from tradeforge_engine.backtest.portfolio import PortfolioSimulator
from tradeforge_engine.config.models import BacktestConfig
from tradeforge_engine.errors import InvalidInputError
from tradeforge_engine.indicators.engine import IndicatorEngine
from tradeforge_engine.models.candle import Candle, CandleHistory, validate_series
from tradeforge_engine.models.result import BacktestResult, RunStatus
from tradeforge_engine.models.trade import Diagnostic, DiagnosticKind, EquitySample, Trade
from tradeforge_engine.strategies.facade import IndicatorFacade
from tradeforge_engine.strategies.runtime import StrategyRuntime

logger = logging.getLogger(__name__)


class BacktestRunner:
    """Replays a candle series through a strategy and a simulated portfolio.

    Each candle is processed strictly in order: indicators update, the
    strategy evaluates, the portfolio applies any advice, and an equity
    sample is taken at the close against the post-trade position. Every
    call to ``run`` builds fresh indicator, portfolio and RNG state, so
    identical inputs give identical trades and equity curves.

    Example:
        >>> runner = BacktestRunner(SmaRsiStrategy(), BacktestConfig(initial_balance=10000.0))
        >>> result = runner.run(candles)
        >>> print(f"ROI: {result.roi:.2%}")
    """

    def __init__(
        self,
        strategy: Any,
        config: BacktestConfig | None = None,
        cancel_token: CancellationToken | None = None,
        observers: Sequence[BacktestObserver] | None = None,
    ):
        """Initialize backtest runner.

        Args:
            strategy: Object implementing on_candle, or update and check
            config: Run settings (defaults when None)
            cancel_token: Checked between candles; when set the run stops
                and returns a partial result
            observers: Receive on_trade and on_report events
        """
        self.strategy = strategy
        self.config = config or BacktestConfig()
        self.cancel_token = cancel_token or CancellationToken()
        self.observers = tuple(observers or ())

    def run(self, candles: Iterable[Candle | Mapping[str, Any]]) -> BacktestResult:
        """Run the backtest.

        Raises:
            InvalidSeriesError: If the series is malformed
            StrategyInitError: If the strategy fails to initialize
            StrategyEvaluationError: If the strategy raises in strict mode
            InvalidInputError: If a non-finite value reaches an indicator
            InvariantViolationError: If portfolio bookkeeping breaks
        """
        series = validate_series(candles)
        context = RunContext.create(self.config, self.cancel_token, self.observers)
        config = context.config

        engine = IndicatorEngine()
        for ind in config.indicators:
            engine.register(ind.kind, ind.period, ind.source)

        portfolio = PortfolioSimulator.from_config(
            config, rng=context.rng, diagnostics=context.diagnostics
        )
        runtime = StrategyRuntime(
            self.strategy, strict=config.strict_mode, diagnostics=context.diagnostics
        )
        runtime.initialize(config.strategy_config())

        metrics = MetricsCalculator(config.initial_balance, config.annualization_factor)
        equity_curve: list[EquitySample] = []
        status = RunStatus.COMPLETED
        processed = 0

        logger.info(
            "Starting backtest: %d candles, strategy=%s, balance=%.2f",
            len(series), runtime.name, config.initial_balance,
        )

        for index, candle in enumerate(series):
            if context.cancel_token.cancelled:
                status = RunStatus.CANCELLED
                logger.info("Backtest cancelled after %d of %d candles", processed, len(series))
                break

            try:
                engine.update(candle)
            except InvalidInputError as exc:
                raise InvalidInputError(
                    exc.message, candle_index=index, timestamp=candle.timestamp
                ) from exc

            history = CandleHistory(series, index + 1)
            facade = IndicatorFacade(engine, history)
            advice = runtime.evaluate(candle, history, facade, index)

            if not advice.is_none:
                trade = portfolio.apply_advice(advice, candle, index)
                if trade is not None:
                    metrics.add_trade(trade)
                    self._notify_trade(context, trade)

            sample = EquitySample(
                timestamp=candle.timestamp,
                equity=portfolio.equity(candle.close),
                cash=portfolio.cash,
                position=portfolio.quantity,
                price=candle.close,
            )
            equity_curve.append(sample)
            metrics.add_equity_point(sample)
            processed += 1

            if config.progress_interval and processed % config.progress_interval == 0:
                logger.info(
                    "Candle %d/%d | equity %.2f | trades %d",
                    processed, len(series), sample.equity, len(portfolio.trades),
                )

        result = BacktestResult(
            trades=tuple(portfolio.trades),
            equity_curve=tuple(equity_curve),
            metrics=metrics.calculate(),
            status=status,
            diagnostics=tuple(context.diagnostics),
            initial_balance=config.initial_balance,
            final_cash=portfolio.cash,
            final_position=portfolio.quantity,
            candles_processed=processed,
            total_candles=len(series),
        )

        logger.info(
            "Backtest %s: %d candles, %d trades, ROI %.4f, %d diagnostics",
            status.value, processed, len(result.trades), result.roi, len(result.diagnostics),
        )
        self._notify_report(context, result)
        return result

    def _notify_trade(self, context: RunContext, trade: Trade) -> None:
        for observer in context.observers:
            try:
                observer.on_trade(trade)
            except Exception as exc:
                logger.error("Observer %r failed on trade %d", observer, trade.id, exc_info=True)
                context.diagnostics.append(
                    Diagnostic(
                        DiagnosticKind.OBSERVER_ERROR,
                        f"{type(exc).__name__}: {exc}",
                        candle_index=trade.candle_index,
                        timestamp=trade.timestamp,
                    )
                )

    def _notify_report(self, context: RunContext, result: BacktestResult) -> None:
        for observer in context.observers:
            try:
                observer.on_report(result)
            except Exception:
                logger.error("Observer %r failed on report", observer, exc_info=True)


def run(
    candles: Iterable[Candle | Mapping[str, Any]],
    strategy: Any,
    config: BacktestConfig | None = None,
    *,
    cancel_token: CancellationToken | None = None,
    observers: Sequence[BacktestObserver] | None = None,
) -> BacktestResult:
    """Run one backtest. See BacktestRunner.run for the errors raised."""
    return BacktestRunner(strategy, config, cancel_token, observers).run(candles)
