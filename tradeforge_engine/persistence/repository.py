"""Repository storing backtest results in a SQL database."""

import logging
from typing import Any

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker

from tradeforge_engine.backtest.report import json_safe
from tradeforge_engine.models.result import BacktestResult
from tradeforge_engine.persistence.models import Base, BacktestRun, EquityRecord, TradeRecord

logger = logging.getLogger(__name__)


def create_session(url: str = "sqlite:///:memory:") -> Session:
    """Open a session on ``url``, creating tables when missing."""
    engine = create_engine(url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)()


class ResultRepository:
    """Repository wrapping database operations for backtest results."""

    def __init__(self, session: Session):
        """
        Initialize repository with database session.

        Args:
            session: SQLAlchemy session
        """
        self.session = session

    def save_result(
        self,
        result: BacktestResult,
        strategy: str,
        label: str | None = None,
        config: dict[str, Any] | None = None,
    ) -> int:
        """
        Save a result with its trades and equity curve.

        Args:
            result: Backtest result
            strategy: Strategy name or reference
            label: Optional free-text label
            config: Run configuration to store alongside

        Returns:
            Run ID
        """
        metrics = result.metrics
        run = BacktestRun(
            strategy=strategy,
            label=label,
            status=result.status.value,
            initial_balance=result.initial_balance,
            final_equity=metrics.final_equity,
            roi=metrics.roi,
            max_drawdown=metrics.max_drawdown,
            win_rate=metrics.win_rate,
            total_trades=metrics.total_trades,
            candles_processed=result.candles_processed,
            metrics=json_safe(metrics.to_dict()),
            config=json_safe(config) if config is not None else None,
            diagnostics=json_safe([d.to_dict() for d in result.diagnostics]),
        )
        run.trades = [
            TradeRecord(
                seq=t.id,
                candle_index=t.candle_index,
                ts=t.timestamp,
                side=t.side.value,
                price=t.price,
                quantity=t.quantity,
                commission=t.commission,
                slippage=t.slippage,
                realized_pnl=t.realized_pnl,
                reason=t.reason,
            )
            for t in result.trades
        ]
        run.equity = [
            EquityRecord(
                seq=i, ts=s.timestamp, equity=s.equity, cash=s.cash, position=s.position
            )
            for i, s in enumerate(result.equity_curve)
        ]

        self.session.add(run)
        self.session.commit()
        self.session.refresh(run)
        logger.info("Stored backtest run %d (%s, %d trades)", run.id, strategy, len(run.trades))
        return run.id

    def get_run(self, run_id: int) -> BacktestRun | None:
        return self.session.get(BacktestRun, run_id)

    def list_runs(self, strategy: str | None = None) -> list[BacktestRun]:
        """
        List stored runs, newest first.

        Args:
            strategy: Only runs of this strategy when given

        Returns:
            Stored runs
        """
        stmt = select(BacktestRun).order_by(BacktestRun.id.desc())
        if strategy is not None:
            stmt = stmt.where(BacktestRun.strategy == strategy)
        return list(self.session.scalars(stmt))

    def delete_run(self, run_id: int) -> bool:
        run = self.get_run(run_id)
        if run is None:
            return False
        self.session.delete(run)
        self.session.commit()
        return True
