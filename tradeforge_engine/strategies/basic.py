"""Baseline strategies."""

from typing import Any

from tradeforge_engine.models.advice import Advice
from tradeforge_engine.models.candle import Candle, CandleHistory
from tradeforge_engine.strategies.facade import IndicatorFacade
from tradeforge_engine.strategies.interface import BaseStrategy
from tradeforge_engine.strategies.registry import register_strategy


@register_strategy("hold")
class HoldStrategy(BaseStrategy):
    """Never trades."""

    name = "hold"
    description = "Returns no advice on every candle."

    def on_candle(
        self, candle: Candle, history: CandleHistory, engine: IndicatorFacade
    ) -> Advice | None:
        return None


@register_strategy("buy_and_hold")
class BuyAndHoldStrategy(BaseStrategy):
    """Buys with all cash on the first candle, optionally exits on the last."""

    name = "buy_and_hold"
    description = "Buy everything on the first candle and hold."
    defaults: dict[str, Any] = {"exit_at": None}

    def init(self, config: dict[str, Any]) -> None:
        super().init(config)
        self._bought = False

    def on_candle(
        self, candle: Candle, history: CandleHistory, engine: IndicatorFacade
    ) -> Advice | None:
        if not self._bought:
            self._bought = True
            return Advice.buy(reason="Initial entry")
        exit_at = self.params["exit_at"]
        if exit_at is not None and candle.timestamp >= exit_at:
            return Advice.sell(reason="Scheduled exit")
        return None
