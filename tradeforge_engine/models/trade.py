"""Ledger records produced during a run: trades, equity samples, diagnostics."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class TradeSide(str, Enum):
    """Fill direction."""

    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class Trade:
    """Executed fill appended to the trade ledger."""

    id: int
    candle_index: int
    timestamp: int
    side: TradeSide
    price: float  # Fill price after slippage
    quantity: float
    commission: float
    slippage: float  # Cost of slippage in quote currency
    market_price: float  # Candle close the fill was derived from
    cash_after: float
    position_after: float
    realized_pnl: float | None = None  # Sell only
    reason: str | None = None
    confidence: float = 1.0

    @property
    def notional(self) -> float:
        return self.price * self.quantity

    @property
    def is_profitable(self) -> bool:
        return self.realized_pnl is not None and self.realized_pnl > 0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["side"] = self.side.value
        return data


@dataclass(frozen=True)
class EquitySample:
    """Mark-to-market equity after the step for one candle."""

    timestamp: int
    equity: float
    cash: float
    position: float
    price: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class DiagnosticKind(str, Enum):
    """Categories of non-fatal problems recorded during a run."""

    STRATEGY_ERROR = "strategy_error"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INSUFFICIENT_POSITION = "insufficient_position"
    OBSERVER_ERROR = "observer_error"


@dataclass(frozen=True)
class Diagnostic:
    """Non-fatal problem recorded on the result for auditing."""

    kind: DiagnosticKind
    message: str
    candle_index: int | None = None
    timestamp: int | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "candle_index": self.candle_index,
            "timestamp": self.timestamp,
            "details": dict(self.details),
        }
