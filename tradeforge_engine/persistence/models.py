"""SQLAlchemy models for stored backtest runs."""

import datetime as dt
from typing import Any

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# Generic JSON for SQLite compatibility (SQLAlchemy handles mapping)
JSON_TYPE = sa.JSON().with_variant(JSONB, "postgresql")


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""
    pass


class BacktestRun(Base):
    """One stored backtest result."""
    __tablename__ = "backtest_runs"

    id: Mapped[int] = mapped_column(sa.Integer(), primary_key=True, autoincrement=True)
    strategy: Mapped[str] = mapped_column(sa.Text(), nullable=False)
    label: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    status: Mapped[str] = mapped_column(sa.Text(), nullable=False)
    initial_balance: Mapped[float] = mapped_column(sa.Float(), nullable=False)
    final_equity: Mapped[float] = mapped_column(sa.Float(), nullable=False)
    roi: Mapped[float] = mapped_column(sa.Float(), nullable=False)
    max_drawdown: Mapped[float] = mapped_column(sa.Float(), nullable=False)
    win_rate: Mapped[float] = mapped_column(sa.Float(), nullable=False)
    total_trades: Mapped[int] = mapped_column(sa.Integer(), nullable=False)
    candles_processed: Mapped[int] = mapped_column(sa.Integer(), nullable=False)
    metrics: Mapped[dict[str, Any]] = mapped_column(JSON_TYPE, nullable=False)
    config: Mapped[dict[str, Any] | None] = mapped_column(JSON_TYPE, nullable=True)
    diagnostics: Mapped[list[Any]] = mapped_column(JSON_TYPE, nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: dt.datetime.now(dt.timezone.utc), nullable=False
    )

    trades: Mapped[list["TradeRecord"]] = relationship(
        back_populates="run", cascade="all, delete-orphan", order_by="TradeRecord.seq"
    )
    equity: Mapped[list["EquityRecord"]] = relationship(
        back_populates="run", cascade="all, delete-orphan", order_by="EquityRecord.seq"
    )


class TradeRecord(Base):
    """Stored ledger entry."""
    __tablename__ = "backtest_trades"

    id: Mapped[int] = mapped_column(sa.Integer(), primary_key=True, autoincrement=True)
    run_id: Mapped[int] = mapped_column(
        sa.Integer(), sa.ForeignKey("backtest_runs.id", ondelete="CASCADE"), nullable=False
    )
    seq: Mapped[int] = mapped_column(sa.Integer(), nullable=False)
    candle_index: Mapped[int] = mapped_column(sa.Integer(), nullable=False)
    ts: Mapped[int] = mapped_column(sa.BigInteger(), nullable=False)
    side: Mapped[str] = mapped_column(sa.Text(), nullable=False)
    price: Mapped[float] = mapped_column(sa.Float(), nullable=False)
    quantity: Mapped[float] = mapped_column(sa.Float(), nullable=False)
    commission: Mapped[float] = mapped_column(sa.Float(), nullable=False)
    slippage: Mapped[float] = mapped_column(sa.Float(), nullable=False)
    realized_pnl: Mapped[float | None] = mapped_column(sa.Float(), nullable=True)
    reason: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)

    run: Mapped[BacktestRun] = relationship(back_populates="trades")


class EquityRecord(Base):
    """Stored equity curve sample."""
    __tablename__ = "backtest_equity"

    id: Mapped[int] = mapped_column(sa.Integer(), primary_key=True, autoincrement=True)
    run_id: Mapped[int] = mapped_column(
        sa.Integer(), sa.ForeignKey("backtest_runs.id", ondelete="CASCADE"), nullable=False
    )
    seq: Mapped[int] = mapped_column(sa.Integer(), nullable=False)
    ts: Mapped[int] = mapped_column(sa.BigInteger(), nullable=False)
    equity: Mapped[float] = mapped_column(sa.Float(), nullable=False)
    cash: Mapped[float] = mapped_column(sa.Float(), nullable=False)
    position: Mapped[float] = mapped_column(sa.Float(), nullable=False)

    run: Mapped[BacktestRun] = relationship(back_populates="equity")
