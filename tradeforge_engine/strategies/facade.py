"""Read-only indicator lookups handed to strategies."""

from tradeforge_engine.indicators.crossover import CrossDirection
from tradeforge_engine.indicators.engine import IndicatorEngine
from tradeforge_engine.models.candle import Candle, CandleHistory


class IndicatorFacade:
    """Strategy-facing view of the indicator engine for one candle.

    Built fresh for each candle from an engine that has consumed candles up
    to and including the current one and a history view bounded at the same
    point. Nothing reachable from here knows about later candles.
    """

    def __init__(self, engine: IndicatorEngine, history: CandleHistory):
        if len(history) != engine.candles_seen:
            raise ValueError(
                f"History length {len(history)} does not match "
                f"{engine.candles_seen} consumed candles"
            )
        self._engine = engine
        self._history = history

    @property
    def current_candle(self) -> Candle:
        return self._history.current

    @property
    def candle_index(self) -> int:
        return len(self._history) - 1

    # Indicators

    def indicator(self, kind: str, period: int, source: str = "close") -> float | None:
        """Current reading for any registered kind, None while warming up."""
        return self._engine.value(kind, period, source)

    def previous(self, kind: str, period: int, source: str = "close") -> float | None:
        """Reading as of the previous candle."""
        return self._engine.previous(kind, period, source)

    def sma(self, period: int, source: str = "close") -> float | None:
        return self._engine.value("sma", period, source)

    def ema(self, period: int, source: str = "close") -> float | None:
        return self._engine.value("ema", period, source)

    def rsi(self, period: int = 14, source: str = "close") -> float | None:
        return self._engine.value("rsi", period, source)

    # Signals

    def crossover(self, kind: str, fast: int, slow: int) -> CrossDirection | None:
        return self._engine.crossover(kind, fast, slow)

    def is_bullish_crossover(self, kind: str, fast: int, slow: int) -> bool:
        """Fast line crossed above the slow line on this candle."""
        return self._engine.crossover(kind, fast, slow) is CrossDirection.BULLISH

    def is_bearish_crossover(self, kind: str, fast: int, slow: int) -> bool:
        """Fast line crossed below the slow line on this candle."""
        return self._engine.crossover(kind, fast, slow) is CrossDirection.BEARISH

    def is_price_above_ma(self, kind: str, period: int, source: str = "close") -> bool:
        """Current ``source`` price above its own moving average."""
        average = self.indicator(kind, period, source)
        return average is not None and self.current_candle.price(source) > average

    def is_price_below_ma(self, kind: str, period: int, source: str = "close") -> bool:
        average = self.indicator(kind, period, source)
        return average is not None and self.current_candle.price(source) < average

    def is_oversold(self, period: int = 14, threshold: float = 30.0) -> bool:
        value = self.rsi(period)
        return value is not None and value < threshold

    def is_overbought(self, period: int = 14, threshold: float = 70.0) -> bool:
        value = self.rsi(period)
        return value is not None and value > threshold

    # Price history

    def price_change(self, periods: int = 1, source: str = "close") -> float | None:
        """``source`` price now minus ``periods`` candles ago."""
        if periods < 1 or len(self._history) <= periods:
            return None
        return self.current_candle.price(source) - self._history[-1 - periods].price(source)

    def percentage_change(self, periods: int = 1, source: str = "close") -> float | None:
        """Percent change of the ``source`` price over ``periods`` candles."""
        if periods < 1 or len(self._history) <= periods:
            return None
        past = self._history[-1 - periods].price(source)
        if past == 0:
            return None
        return (self.current_candle.price(source) - past) / past * 100.0

    def historical_candles(self, count: int | None = None) -> list[Candle]:
        """Most recent ``count`` candles (all when None), oldest first."""
        if count is None:
            return self._history[:]
        return self._history.last(count)

    def close_prices(self, count: int | None = None) -> list[float]:
        return [c.close for c in self.historical_candles(count)]

    def high_prices(self, count: int | None = None) -> list[float]:
        return [c.high for c in self.historical_candles(count)]

    def low_prices(self, count: int | None = None) -> list[float]:
        return [c.low for c in self.historical_candles(count)]

    def volumes(self, count: int | None = None) -> list[float]:
        return [c.volume for c in self.historical_candles(count)]
