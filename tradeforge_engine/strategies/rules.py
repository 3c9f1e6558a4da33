"""Declarative rule strategy loaded from JSON.

Rules only reference indicator lookups on the facade, so a rule file can
come from an untrusted source without any of its content being executed.

Example rule file::

    {
        "name": "ema_cross",
        "entry": {"mode": "all", "conditions": [
            {"type": "bullish_crossover", "kind": "ema", "fast": 12, "slow": 26},
            {"type": "rsi_below", "period": 14, "threshold": 70}
        ]},
        "exit": {"conditions": [
            {"type": "bearish_crossover", "kind": "ema", "fast": 12, "slow": 26}
        ]},
        "stop_loss_pct": 5,
        "take_profit_pct": 10
    }
"""

import json
import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

from tradeforge_engine.core.state_machine import PositionStateMachine
from tradeforge_engine.models.advice import Advice
from tradeforge_engine.models.candle import Candle, CandleHistory
from tradeforge_engine.strategies.facade import IndicatorFacade

logger = logging.getLogger(__name__)

ConditionType = Literal[
    "bullish_crossover",
    "bearish_crossover",
    "price_above_ma",
    "price_below_ma",
    "rsi_below",
    "rsi_above",
]


class Condition(BaseModel):
    """Single boolean check against the indicator facade."""

    type: ConditionType = Field(description="Condition kind")
    kind: Literal["sma", "ema"] = Field(default="sma", description="Moving average type")
    fast: int | None = Field(default=None, ge=1, description="Fast period for crossovers")
    slow: int | None = Field(default=None, ge=1, description="Slow period for crossovers")
    period: int | None = Field(default=None, ge=1, description="Period for MA/RSI checks")
    threshold: float | None = Field(default=None, ge=0.0, le=100.0, description="RSI threshold")

    @model_validator(mode="after")
    def _required_fields(self) -> "Condition":
        if self.type in ("bullish_crossover", "bearish_crossover"):
            if self.fast is None or self.slow is None:
                raise ValueError(f"{self.type} requires fast and slow")
            if self.fast >= self.slow:
                raise ValueError(f"fast ({self.fast}) must be less than slow ({self.slow})")
        elif self.type in ("price_above_ma", "price_below_ma"):
            if self.period is None:
                raise ValueError(f"{self.type} requires period")
        else:
            if self.threshold is None:
                raise ValueError(f"{self.type} requires threshold")
        return self

    def evaluate(self, engine: IndicatorFacade) -> bool:
        if self.type == "bullish_crossover":
            return engine.is_bullish_crossover(self.kind, self.fast, self.slow)
        if self.type == "bearish_crossover":
            return engine.is_bearish_crossover(self.kind, self.fast, self.slow)
        if self.type == "price_above_ma":
            return engine.is_price_above_ma(self.kind, self.period)
        if self.type == "price_below_ma":
            return engine.is_price_below_ma(self.kind, self.period)

        rsi = engine.rsi(self.period or 14)
        if rsi is None:
            return False
        if self.type == "rsi_below":
            return rsi < self.threshold
        return rsi > self.threshold

    def describe(self) -> str:
        if self.fast is not None:
            return f"{self.type}({self.kind} {self.fast}/{self.slow})"
        if self.threshold is not None:
            return f"{self.type}({self.period or 14}, {self.threshold})"
        return f"{self.type}({self.kind} {self.period})"


class RuleSet(BaseModel):
    """Conditions combined with all/any."""

    mode: Literal["all", "any"] = Field(default="all", description="How conditions combine")
    conditions: list[Condition] = Field(min_length=1, description="Conditions to check")

    def matches(self, engine: IndicatorFacade) -> list[Condition] | None:
        """Return the conditions that fired when the set matches, else None."""
        fired = [c for c in self.conditions if c.evaluate(engine)]
        if self.mode == "all":
            return fired if len(fired) == len(self.conditions) else None
        return fired or None


class RuleStrategyConfig(BaseModel):
    """Schema of a rule strategy file."""

    name: str = Field(default="rules", min_length=1)
    description: str = ""
    entry: RuleSet
    exit: RuleSet | None = None
    stop_loss_pct: float | None = Field(default=None, gt=0.0)
    take_profit_pct: float | None = Field(default=None, gt=0.0)
    buy_amount: float | Literal["all"] = Field(default="all")
    sell_amount: float | Literal["all"] = Field(default="all")

    @model_validator(mode="after")
    def _has_exit(self) -> "RuleStrategyConfig":
        if self.exit is None and self.stop_loss_pct is None and self.take_profit_pct is None:
            raise ValueError("Rules need an exit rule set, a stop loss or a take profit")
        for field_name in ("buy_amount", "sell_amount"):
            value = getattr(self, field_name)
            if value != "all" and value <= 0:
                raise ValueError(f"{field_name} must be positive or 'all'")
        return self


class RuleStrategy:
    """Strategy evaluating a validated rule configuration."""

    def __init__(self, rules: RuleStrategyConfig):
        self.rules = rules
        self.name = rules.name
        self.position = PositionStateMachine()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuleStrategy":
        """Validate a rules mapping.

        Raises:
            pydantic.ValidationError: If the rules are invalid
        """
        return cls(RuleStrategyConfig.model_validate(data))

    @classmethod
    def from_file(cls, path: str | Path) -> "RuleStrategy":
        """Load rules from a JSON file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            json.JSONDecodeError: If the file has invalid JSON
            pydantic.ValidationError: If the rules are invalid
        """
        with open(path) as f:
            data = json.load(f)
        return cls.from_dict(data)

    def init(self, config: dict[str, Any]) -> None:
        self.position.reset()
        logger.info("Initialized rule strategy %s", self.name)

    def on_candle(
        self, candle: Candle, history: CandleHistory, engine: IndicatorFacade
    ) -> Advice | None:
        if self.position.is_flat:
            fired = self.rules.entry.matches(engine)
            if fired is None:
                return None
            self.position.enter(candle.close, candle.timestamp)
            return Advice.buy(self.rules.buy_amount, reason=self._reason("Entry", fired))

        change = self.position.change_pct(candle.close)
        if change is not None:
            if self.rules.stop_loss_pct is not None and change <= -self.rules.stop_loss_pct:
                self.position.exit()
                return Advice.sell(
                    self.rules.sell_amount, reason=f"Stop loss triggered ({change:.2f}%)"
                )
            if self.rules.take_profit_pct is not None and change >= self.rules.take_profit_pct:
                self.position.exit()
                return Advice.sell(
                    self.rules.sell_amount, reason=f"Take profit triggered ({change:.2f}%)"
                )

        if self.rules.exit is not None:
            fired = self.rules.exit.matches(engine)
            if fired is not None:
                self.position.exit()
                return Advice.sell(self.rules.sell_amount, reason=self._reason("Exit", fired))
        return None

    @staticmethod
    def _reason(prefix: str, fired: list[Condition]) -> str:
        return f"{prefix}: " + ", ".join(c.describe() for c in fired)
