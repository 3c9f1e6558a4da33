"""Pydantic configuration models with type safety and validation."""

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator


class IndicatorConfig(BaseModel):
    """Indicator updated on every candle regardless of strategy lookups."""

    kind: Literal["sma", "ema", "rsi"] = Field(description="Indicator type")
    period: int = Field(ge=1, description="Look-back period in candles")
    source: Literal["open", "high", "low", "close", "volume"] = Field(
        default="close",
        description="Candle field fed to the indicator",
    )


class BacktestConfig(BaseModel):
    """Settings for a single backtest run."""

    initial_balance: float = Field(
        default=10000.0,
        gt=0.0,
        description="Starting cash in quote currency",
    )
    commission_rate: float = Field(
        default=0.001,  # 0.1%
        ge=0.0,
        lt=1.0,
        description="Commission as a fraction of notional charged on every fill",
    )
    slippage_rate: float = Field(
        default=0.0,
        ge=0.0,
        lt=1.0,
        description="Adverse fill price adjustment as a fraction of the close",
    )
    slippage_model: Literal["fixed", "random"] = Field(
        default="fixed",
        description="fixed: always slippage_rate; random: uniform in [0, slippage_rate] from the seeded RNG",
    )
    min_lot_size: float = Field(
        default=0.0,
        ge=0.0,
        description="Buy quantities are floored to a multiple of this size (0 disables)",
    )
    strict_mode: bool = Field(
        default=False,
        description="Abort the run when the strategy raises during evaluation",
    )
    annualization_factor: float = Field(
        default=252.0,
        gt=0.0,
        description="Periods per year used to annualize the Sharpe ratio",
    )
    seed: int = Field(
        default=42,
        description="Seed for the per-run random generator",
    )
    indicators: list[IndicatorConfig] = Field(
        default_factory=list,
        description="Indicators updated on every candle",
    )
    currency: str = Field(default="USD", min_length=1, description="Quote currency label")
    asset: str = Field(default="BTC", min_length=1, description="Traded asset label")
    strategy_params: dict[str, Any] = Field(
        default_factory=dict,
        description="Free-form parameters handed to the strategy's init",
    )
    progress_interval: int = Field(
        default=0,
        ge=0,
        description="Log progress every N candles (0 disables)",
    )

    @model_validator(mode="after")
    def _unique_indicators(self) -> "BacktestConfig":
        seen: set[tuple[str, int, str]] = set()
        for ind in self.indicators:
            key = (ind.kind, ind.period, ind.source)
            if key in seen:
                raise ValueError(f"Duplicate indicator: {ind.kind}({ind.period}) on {ind.source}")
            seen.add(key)
        return self

    def strategy_config(self) -> dict[str, Any]:
        """Configuration mapping passed to the strategy's init."""
        return {
            "currency": self.currency,
            "asset": self.asset,
            "initial_balance": self.initial_balance,
            "commission_rate": self.commission_rate,
            "slippage_rate": self.slippage_rate,
            **self.strategy_params,
        }
