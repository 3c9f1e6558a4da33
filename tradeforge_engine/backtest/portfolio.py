"""Portfolio simulator: one cash balance and one long-only asset position."""

import logging
import math
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from tradeforge_engine.errors import (
    InsufficientFundsError,
    InsufficientPositionError,
    InvariantViolationError,
)
from tradeforge_engine.models.advice import ALL, Advice, AdviceAction
from tradeforge_engine.models.candle import Candle
from tradeforge_engine.models.trade import Diagnostic, DiagnosticKind, Trade, TradeSide

if TYPE_CHECKING:
    from tradeforge_engine.config.models import BacktestConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PositionSnapshot:
    """Point-in-time copy of the simulator's position."""

    cash: float
    quantity: float
    entry_price: float | None

    def equity(self, price: float) -> float:
        return self.cash + self.quantity * price


class PortfolioSimulator:
    """Converts advice into fills against the candle close.

    Fills are priced at ``close * (1 + s)`` for buys and ``close * (1 - s)``
    for sells, so slippage always works against the trader. Commission is
    ``commission_rate`` times the cash spent on a buy or the gross proceeds
    of a sell. Cash and quantity can never go negative; a breach raises
    InvariantViolationError.

    Example:
        >>> sim = PortfolioSimulator(initial_balance=10000.0, commission_rate=0.0)
        >>> sim.apply_advice(Advice.buy(), candle)
        >>> sim.equity(candle.close)
    """

    def __init__(
        self,
        initial_balance: float = 10000.0,
        commission_rate: float = 0.001,
        slippage_rate: float = 0.0,
        slippage_model: Literal["fixed", "random"] = "fixed",
        min_lot_size: float = 0.0,
        rng: random.Random | None = None,
        diagnostics: list[Diagnostic] | None = None,
    ):
        """Initialize simulator.

        Args:
            initial_balance: Starting cash
            commission_rate: Commission as a fraction of notional
            slippage_rate: Maximum adverse price adjustment as a fraction
            slippage_model: "fixed" uses slippage_rate on every fill,
                "random" draws uniformly from [0, slippage_rate]
            min_lot_size: Buy quantities are floored to multiples of this (0 disables)
            rng: Seeded generator for random slippage
            diagnostics: Sink receiving rejected-order diagnostics
        """
        if initial_balance <= 0:
            raise ValueError("Initial balance must be positive")
        if not 0.0 <= commission_rate < 1.0:
            raise ValueError("Commission rate must be in [0, 1)")
        if not 0.0 <= slippage_rate < 1.0:
            raise ValueError("Slippage rate must be in [0, 1)")
        if slippage_model not in ("fixed", "random"):
            raise ValueError(f"Unknown slippage model: {slippage_model}")
        if min_lot_size < 0:
            raise ValueError("Minimum lot size must be non-negative")

        self.initial_balance = initial_balance
        self.commission_rate = commission_rate
        self.slippage_rate = slippage_rate
        self.slippage_model = slippage_model
        self.min_lot_size = min_lot_size
        self.rng = rng if rng is not None else random.Random(0)
        self.diagnostics: list[Diagnostic] = diagnostics if diagnostics is not None else []

        self.cash = initial_balance
        self.quantity = 0.0
        self.entry_price: float | None = None
        self.trades: list[Trade] = []

        self.total_commission = 0.0
        self.buy_commission = 0.0
        self.total_slippage = 0.0
        self.realized_pnl = 0.0

    @classmethod
    def from_config(
        cls,
        config: "BacktestConfig",
        rng: random.Random | None = None,
        diagnostics: list[Diagnostic] | None = None,
    ) -> "PortfolioSimulator":
        return cls(
            initial_balance=config.initial_balance,
            commission_rate=config.commission_rate,
            slippage_rate=config.slippage_rate,
            slippage_model=config.slippage_model,
            min_lot_size=config.min_lot_size,
            rng=rng,
            diagnostics=diagnostics,
        )

    # Queries

    def equity(self, price: float) -> float:
        """Cash plus position marked at ``price``."""
        return self.cash + self.quantity * price

    def unrealized_pnl(self, price: float) -> float:
        if self.entry_price is None:
            return 0.0
        return self.quantity * (price - self.entry_price)

    def snapshot(self) -> PositionSnapshot:
        return PositionSnapshot(self.cash, self.quantity, self.entry_price)

    def max_buy_quantity(self, price: float) -> float:
        """Largest quantity a buy of all cash would return at ``price``."""
        if self.cash <= 0 or price <= 0:
            return 0.0
        return self.cash * (1 - self.commission_rate) / (price * (1 + self.slippage_rate))

    def can_buy(self, price: float, amount: float | str = ALL) -> bool:
        if self.cash <= 0:
            return False
        if amount == ALL:
            return self.max_buy_quantity(price) > 0
        return float(amount) * price <= self.cash

    def can_sell(self, amount: float | str = ALL) -> bool:
        if self.quantity <= 0:
            return False
        return amount == ALL or float(amount) > 0

    def allocation(self, price: float) -> dict[str, float]:
        """Cash and asset share of equity, in percent."""
        total = self.equity(price)
        if total <= 0:
            return {"cash_pct": 0.0, "asset_pct": 0.0}
        return {
            "cash_pct": self.cash / total * 100.0,
            "asset_pct": self.quantity * price / total * 100.0,
        }

    def statistics(self) -> dict[str, Any]:
        buys = sum(1 for t in self.trades if t.side is TradeSide.BUY)
        return {
            "total_trades": len(self.trades),
            "buy_trades": buys,
            "sell_trades": len(self.trades) - buys,
            "total_commission": self.total_commission,
            "total_slippage": self.total_slippage,
            "realized_pnl": self.realized_pnl,
            "rejected_orders": len(self.diagnostics),
        }

    # Mutations

    def apply_advice(
        self, advice: Advice, candle: Candle, candle_index: int | None = None
    ) -> Trade | None:
        """Apply one advice at the candle close.

        Rejected orders are recorded in ``diagnostics`` and return None.

        Raises:
            InvariantViolationError: If bookkeeping left cash or quantity negative
        """
        trade: Trade | None = None

        if advice.action is AdviceAction.BUY:
            try:
                trade = self.buy(advice.amount, candle, candle_index, advice)
            except InsufficientFundsError as exc:
                logger.warning("Buy rejected at candle %s: %s", candle_index, exc.message)
                self._record(
                    DiagnosticKind.INSUFFICIENT_FUNDS,
                    exc.message,
                    candle_index,
                    candle.timestamp,
                    {"requested": advice.amount, "cash": self.cash},
                )
        elif advice.action is AdviceAction.SELL:
            try:
                self._check_position(advice.amount, candle, candle_index)
            except InsufficientPositionError as exc:
                logger.warning("Sell clipped at candle %s: %s", candle_index, exc.message)
                self._record(
                    DiagnosticKind.INSUFFICIENT_POSITION,
                    exc.message,
                    candle_index,
                    candle.timestamp,
                    {"requested": advice.amount, "position": self.quantity},
                )
            trade = self.sell(advice.amount, candle, candle_index, advice)

        self._check_invariants(candle_index, candle.timestamp)
        return trade

    def buy(
        self,
        amount: float | str,
        candle: Candle,
        candle_index: int | None = None,
        advice: Advice | None = None,
    ) -> Trade | None:
        """Buy ``amount`` units, or spend all cash when ``amount`` is "all".

        Returns None without error when "all" finds no cash or the quantity
        rounds to zero under the minimum lot size.

        Raises:
            InsufficientFundsError: If ``amount * close`` exceeds cash
        """
        close = candle.close
        if close <= 0:
            logger.debug("Buy skipped at candle %s: non-positive price", candle_index)
            return None
        if amount == ALL:
            if self.cash <= 0:
                logger.debug("Buy skipped at candle %s: no cash", candle_index)
                return None
            spend = self.cash
        else:
            spend = float(amount) * close
            if spend > self.cash:
                raise InsufficientFundsError(
                    f"Insufficient funds: {self.cash:.2f} < {spend:.2f}",
                    candle_index=candle_index,
                    timestamp=candle.timestamp,
                )

        rate = self._draw_slippage()
        fill_price = close * (1 + rate)
        quantity = spend * (1 - self.commission_rate) / fill_price

        if self.min_lot_size > 0:
            # 0.3 / 0.1 is 2.9999999999999996 in binary floating point
            lots = math.floor(round(quantity / self.min_lot_size, 9))
            rounded = lots * self.min_lot_size
            if rounded < quantity:
                quantity = rounded
                spend = min(spend, quantity * fill_price / (1 - self.commission_rate))

        if quantity <= 0:
            logger.debug("Buy skipped at candle %s: quantity below lot size", candle_index)
            return None

        commission = spend * self.commission_rate
        slippage = quantity * (fill_price - close)

        if self.quantity == 0:
            self.entry_price = fill_price
        else:
            assert self.entry_price is not None
            held_cost = self.entry_price * self.quantity
            self.entry_price = (held_cost + fill_price * quantity) / (self.quantity + quantity)

        self.cash -= spend
        self.quantity += quantity
        self.total_commission += commission
        self.buy_commission += commission
        self.total_slippage += slippage

        return self._append_trade(
            TradeSide.BUY, candle, candle_index, fill_price, quantity, commission, slippage,
            None, advice,
        )

    def sell(
        self,
        amount: float | str,
        candle: Candle,
        candle_index: int | None = None,
        advice: Advice | None = None,
    ) -> Trade | None:
        """Sell ``min(amount, position)`` units, or everything for "all".

        Returns None without error when there is no position.
        """
        held = self.quantity
        if held <= 0:
            logger.debug("Sell skipped at candle %s: no position", candle_index)
            return None

        quantity = held if amount == ALL else min(float(amount), held)
        assert self.entry_price is not None

        close = candle.close
        rate = self._draw_slippage()
        fill_price = close * (1 - rate)
        gross = quantity * fill_price
        commission = gross * self.commission_rate
        proceeds = gross - commission
        realized = proceeds - quantity * self.entry_price
        slippage = quantity * (close - fill_price)

        self.cash += proceeds
        self.quantity = 0.0 if quantity == held else held - quantity
        if self.quantity == 0:
            self.entry_price = None
        self.total_commission += commission
        self.total_slippage += slippage
        self.realized_pnl += realized

        return self._append_trade(
            TradeSide.SELL, candle, candle_index, fill_price, quantity, commission, slippage,
            realized, advice,
        )

    # Internals

    def _check_position(
        self, amount: float | str, candle: Candle, candle_index: int | None
    ) -> None:
        """Raise when a sized sell asks for more than a held position."""
        if amount == ALL or self.quantity <= 0:
            return
        if float(amount) > self.quantity:
            raise InsufficientPositionError(
                f"Sell of {amount} exceeds position of {self.quantity}; "
                "selling the full position",
                candle_index=candle_index,
                timestamp=candle.timestamp,
            )

    def _draw_slippage(self) -> float:
        if self.slippage_rate == 0:
            return 0.0
        if self.slippage_model == "random":
            return self.rng.uniform(0.0, self.slippage_rate)
        return self.slippage_rate

    def _append_trade(
        self,
        side: TradeSide,
        candle: Candle,
        candle_index: int | None,
        price: float,
        quantity: float,
        commission: float,
        slippage: float,
        realized_pnl: float | None,
        advice: Advice | None,
    ) -> Trade:
        trade = Trade(
            id=len(self.trades) + 1,
            candle_index=-1 if candle_index is None else candle_index,
            timestamp=candle.timestamp,
            side=side,
            price=price,
            quantity=quantity,
            commission=commission,
            slippage=slippage,
            market_price=candle.close,
            cash_after=self.cash,
            position_after=self.quantity,
            realized_pnl=realized_pnl,
            reason=advice.reason if advice else None,
            confidence=advice.confidence if advice else 1.0,
        )
        self.trades.append(trade)
        logger.debug(
            "%s %.8f @ %.8f (commission=%.8f, cash=%.8f)",
            side.value.upper(), quantity, price, commission, self.cash,
        )
        return trade

    def _record(
        self,
        kind: DiagnosticKind,
        message: str,
        candle_index: int | None,
        timestamp: int,
        details: dict[str, Any],
    ) -> None:
        self.diagnostics.append(
            Diagnostic(kind, message, candle_index=candle_index, timestamp=timestamp, details=details)
        )

    def _check_invariants(self, candle_index: int | None, timestamp: int | None) -> None:
        if not (self.cash >= 0 and math.isfinite(self.cash)):
            raise InvariantViolationError(
                f"Cash went invalid: {self.cash}", candle_index=candle_index, timestamp=timestamp
            )
        if not (self.quantity >= 0 and math.isfinite(self.quantity)):
            raise InvariantViolationError(
                f"Position went invalid: {self.quantity}",
                candle_index=candle_index,
                timestamp=timestamp,
            )
        if (self.quantity == 0) != (self.entry_price is None):
            raise InvariantViolationError(
                "Entry price out of sync with position",
                candle_index=candle_index,
                timestamp=timestamp,
            )
