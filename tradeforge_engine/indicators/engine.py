"""Indicator engine: one streaming calculator per (kind, period, source)."""

import logging

from tradeforge_engine.models.candle import Candle

from .base import Indicator, ensure_numeric
from .crossover import CrossDirection, detect_crossover
from .ema import EMA
from .rsi import RSI
from .sma import SMA

logger = logging.getLogger(__name__)

INDICATOR_TYPES: dict[str, type[Indicator]] = {
    "sma": SMA,
    "ema": EMA,
    "rsi": RSI,
}

IndicatorKey = tuple[str, int, str]


class IndicatorEngine:
    """Owns the indicator state for a single run.

    Every registered indicator is updated exactly once per candle, in
    registration order. Indicators registered mid-run are warmed up by
    replaying the candles already consumed, which yields the same readings
    as if they had been registered at the start.

    Example:
        >>> engine = IndicatorEngine()
        >>> engine.register("sma", 20)
        >>> for candle in candles:
        ...     engine.update(candle)
        >>> engine.value("sma", 20)
    """

    def __init__(self) -> None:
        self._indicators: dict[IndicatorKey, Indicator] = {}
        self._candles: list[Candle] = []

    @property
    def candles_seen(self) -> int:
        return len(self._candles)

    @property
    def keys(self) -> list[IndicatorKey]:
        return list(self._indicators)

    @staticmethod
    def make_key(kind: str, period: int, source: str = "close") -> IndicatorKey:
        kind = kind.lower()
        if kind not in INDICATOR_TYPES:
            raise ValueError(
                f"Unknown indicator kind: {kind}. Available: {sorted(INDICATOR_TYPES)}"
            )
        if source not in ("open", "high", "low", "close", "volume"):
            raise ValueError(f"Unknown price source: {source}")
        return (kind, period, source)

    def register(self, kind: str, period: int, source: str = "close") -> Indicator:
        """Return the indicator for the key, creating and warming it if needed."""
        key = self.make_key(kind, period, source)
        indicator = self._indicators.get(key)
        if indicator is None:
            indicator = INDICATOR_TYPES[key[0]](period)
            for candle in self._candles:
                indicator.update(candle.price(source))
            self._indicators[key] = indicator
            logger.debug("Registered %s(%d) on %s after %d candles", *key, len(self._candles))
        return indicator

    def update(self, candle: Candle) -> None:
        """Feed one candle to every registered indicator.

        Raises:
            InvalidInputError: If the close (or a tracked source) is not a
                finite number
        """
        ensure_numeric(candle.close, "close")
        for (_, _, source), indicator in self._indicators.items():
            indicator.update(candle.price(source))
        self._candles.append(candle)

    def value(self, kind: str, period: int, source: str = "close") -> float | None:
        return self.register(kind, period, source).value

    def previous(self, kind: str, period: int, source: str = "close") -> float | None:
        return self.register(kind, period, source).previous

    def crossover(
        self, kind: str, fast: int, slow: int, source: str = "close"
    ) -> CrossDirection | None:
        """Detect a cross of the fast line over the slow line on the last candle."""
        fast_ind = self.register(kind, fast, source)
        slow_ind = self.register(kind, slow, source)
        return detect_crossover(
            fast_ind.previous, slow_ind.previous, fast_ind.value, slow_ind.value
        )

    def reset(self) -> None:
        self._indicators.clear()
        self._candles.clear()
