"""SMA crossover strategy with an RSI filter and stop-loss/take-profit exits."""

import logging
from typing import Any

from tradeforge_engine.core.state_machine import PositionStateMachine
from tradeforge_engine.models.advice import Advice
from tradeforge_engine.models.candle import Candle, CandleHistory
from tradeforge_engine.strategies.facade import IndicatorFacade
from tradeforge_engine.strategies.interface import BaseStrategy
from tradeforge_engine.strategies.registry import register_strategy

logger = logging.getLogger(__name__)


@register_strategy("sma_rsi")
class SmaRsiStrategy(BaseStrategy):
    """SMA crossover with RSI filter.

    Rules:
        - Entry: fast SMA crosses above slow SMA, RSI below overbought and
          close above the slow SMA.
        - Exit: fast SMA crosses below slow SMA or RSI above overbought.
        - Risk: stop-loss and take-profit measured from the entry close,
          checked before the exit rules.
    """

    name = "sma_rsi"
    description = (
        "Buy when fast SMA crosses above slow SMA and RSI is not overbought. "
        "Sell when fast SMA crosses below slow SMA or RSI is overbought."
    )
    defaults: dict[str, Any] = {
        "fast_sma": 10,
        "slow_sma": 20,
        "rsi_period": 14,
        "rsi_overbought": 70.0,
        "rsi_oversold": 30.0,
        "stop_loss_pct": 5.0,
        "take_profit_pct": 10.0,
    }

    def __init__(self, **params: Any) -> None:
        super().__init__(**params)
        self.position = PositionStateMachine()

    def validate_params(self) -> None:
        if self.params["fast_sma"] >= self.params["slow_sma"]:
            raise ValueError(
                f"fast_sma ({self.params['fast_sma']}) must be less than "
                f"slow_sma ({self.params['slow_sma']})"
            )
        if not 0 <= self.params["rsi_oversold"] < self.params["rsi_overbought"] <= 100:
            raise ValueError("RSI thresholds must satisfy 0 <= oversold < overbought <= 100")

    def init(self, config: dict[str, Any]) -> None:
        super().init(config)
        self.position.reset()
        logger.info(
            "Initialized %s for %s/%s (fast=%s, slow=%s, rsi=%s)",
            self.name,
            config.get("asset", "BTC"),
            config.get("currency", "USD"),
            self.params["fast_sma"],
            self.params["slow_sma"],
            self.params["rsi_period"],
        )

    def on_candle(
        self, candle: Candle, history: CandleHistory, engine: IndicatorFacade
    ) -> Advice | None:
        p = self.params
        if len(history) < max(p["slow_sma"], p["rsi_period"] + 1):
            return None

        fast = engine.sma(p["fast_sma"])
        slow = engine.sma(p["slow_sma"])
        rsi = engine.rsi(p["rsi_period"])
        if fast is None or slow is None or rsi is None:
            return None

        if self.position.is_long:
            risk_exit = self._check_risk(candle)
            if risk_exit is not None:
                return risk_exit
            return self._check_exit(engine, fast, slow, rsi)

        return self._check_entry(engine, candle, fast, slow, rsi)

    def _check_entry(
        self, engine: IndicatorFacade, candle: Candle, fast: float, slow: float, rsi: float
    ) -> Advice | None:
        if not engine.is_bullish_crossover("sma", self.params["fast_sma"], self.params["slow_sma"]):
            return None
        if rsi >= self.params["rsi_overbought"] or candle.close <= slow:
            return None

        self.position.enter(candle.close, candle.timestamp)
        return Advice.buy(
            reason=f"Bullish SMA crossover ({fast:.2f} > {slow:.2f}), RSI: {rsi:.2f}",
            confidence=self._confidence(engine, rsi),
        )

    def _check_exit(
        self, engine: IndicatorFacade, fast: float, slow: float, rsi: float
    ) -> Advice | None:
        bearish = engine.is_bearish_crossover("sma", self.params["fast_sma"], self.params["slow_sma"])
        overbought = rsi > self.params["rsi_overbought"]
        if not (bearish or overbought):
            return None

        self.position.exit()
        if bearish:
            reason = f"Bearish SMA crossover ({fast:.2f} < {slow:.2f})"
        else:
            reason = f"RSI overbought ({rsi:.2f} > {self.params['rsi_overbought']})"
        return Advice.sell(reason=reason, confidence=self._confidence(engine, rsi))

    def _check_risk(self, candle: Candle) -> Advice | None:
        change = self.position.change_pct(candle.close)
        if change is None:
            return None

        if change <= -self.params["stop_loss_pct"]:
            self.position.exit()
            return Advice.sell(reason=f"Stop loss triggered ({change:.2f}%)")
        if change >= self.params["take_profit_pct"]:
            self.position.exit()
            return Advice.sell(reason=f"Take profit triggered ({change:.2f}%)")
        return None

    def _confidence(self, engine: IndicatorFacade, rsi: float) -> float:
        confidence = 0.5
        if self.params["rsi_oversold"] < rsi < self.params["rsi_overbought"]:
            confidence += 0.2

        change = engine.percentage_change()
        if change is not None and abs(change) > 1:
            confidence += 0.1

        current = engine.current_candle
        if current.volume:
            volumes = engine.volumes(10)
            avg_volume = sum(volumes) / len(volumes)
            if current.volume > avg_volume * 1.5:
                confidence += 0.1

        return min(confidence, 1.0)

    def info(self) -> dict[str, Any]:
        data = super().info()
        data.update(
            {
                "current_position": self.position.current_state.value,
                "entry_price": self.position.entry_price,
                "entry_time": self.position.entry_time,
            }
        )
        return data
