"""Candle model, bounded history view and series validation."""

import logging
import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, overload

from tradeforge_engine.errors import InvalidSeriesError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candle:
    """OHLCV candle with an epoch-millisecond timestamp."""

    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    def __post_init__(self) -> None:
        """Validate candle data integrity."""
        if self.high < max(self.open, self.close, self.low):
            raise ValueError("High must be >= open, close, and low")
        if self.low > min(self.open, self.close, self.high):
            raise ValueError("Low must be <= open, close, and high")
        if self.volume < 0:
            raise ValueError("Volume must be non-negative")

    @property
    def dt(self) -> datetime:
        """Timestamp as an aware UTC datetime."""
        return datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc)

    def price(self, source: str = "close") -> float:
        """Return one of the OHLCV fields by name."""
        if source not in ("open", "high", "low", "close", "volume"):
            raise ValueError(f"Unknown price source: {source}")
        return getattr(self, source)

    def same_prices(self, other: "Candle") -> bool:
        """True when both candles carry identical OHLCV values."""
        return (self.open, self.high, self.low, self.close, self.volume) == (
            other.open,
            other.high,
            other.low,
            other.close,
            other.volume,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Candle":
        """Build a candle from a mapping with OHLCV keys.

        Raises:
            KeyError: If a required key is missing
            ValueError: If a value cannot be converted or prices are inconsistent
        """
        return cls(
            timestamp=int(data["timestamp"]),
            open=float(data["open"]),
            high=float(data["high"]),
            low=float(data["low"]),
            close=float(data["close"]),
            volume=float(data.get("volume", 0.0)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }


class CandleHistory(Sequence[Candle]):
    """Read-only view of a series truncated at the current candle.

    Indexing past the bound raises IndexError, so a strategy holding the view
    cannot reach candles that have not been replayed yet.
    """

    __slots__ = ("_candles", "_end")

    def __init__(self, candles: Sequence[Candle], end: int):
        if end < 0 or end > len(candles):
            raise ValueError(f"History bound {end} outside series of {len(candles)}")
        self._candles = candles
        self._end = end

    def __len__(self) -> int:
        return self._end

    @overload
    def __getitem__(self, index: int) -> Candle: ...

    @overload
    def __getitem__(self, index: slice) -> list[Candle]: ...

    def __getitem__(self, index: int | slice) -> Candle | list[Candle]:
        if isinstance(index, slice):
            return [self._candles[i] for i in range(*index.indices(self._end))]
        if index < 0:
            index += self._end
        if index < 0 or index >= self._end:
            raise IndexError("history index out of range")
        return self._candles[index]

    @property
    def current(self) -> Candle:
        """Most recent visible candle."""
        return self[-1]

    def last(self, count: int) -> list[Candle]:
        """Return up to ``count`` most recent candles, oldest first."""
        if count <= 0:
            return []
        return self[max(0, self._end - count):]

    def __repr__(self) -> str:
        return f"CandleHistory(len={self._end})"


def validate_series(candles: Iterable[Candle | Mapping[str, Any]]) -> tuple[Candle, ...]:
    """Validate ordering and shape of a candle series.

    Mappings are converted to candles. Identical duplicates (same timestamp
    and prices) are collapsed to one candle.

    Args:
        candles: Candles in time order

    Returns:
        Immutable tuple of validated candles

    Raises:
        InvalidSeriesError: On empty input, malformed or non-finite candles,
            decreasing timestamps, or duplicate timestamps with differing prices
    """
    validated: list[Candle] = []
    collapsed = 0

    for index, raw in enumerate(candles):
        if isinstance(raw, Candle):
            candle = raw
        elif isinstance(raw, Mapping):
            try:
                candle = Candle.from_dict(raw)
            except (KeyError, TypeError, ValueError) as exc:
                raise InvalidSeriesError(
                    f"Malformed candle: {exc}", candle_index=index
                ) from exc
        else:
            raise InvalidSeriesError(
                f"Expected Candle or mapping, got {type(raw).__name__}",
                candle_index=index,
            )

        if isinstance(candle.timestamp, bool) or not isinstance(candle.timestamp, int):
            raise InvalidSeriesError(
                "Timestamp must be an integer (epoch ms)", candle_index=index
            )

        # close is checked where it is consumed, as an indicator input
        for field in ("open", "high", "low", "volume"):
            if not math.isfinite(getattr(candle, field)):
                raise InvalidSeriesError(
                    f"Non-finite {field}: {getattr(candle, field)}",
                    candle_index=index,
                    timestamp=candle.timestamp,
                )

        if validated:
            previous = validated[-1]
            if candle.timestamp < previous.timestamp:
                raise InvalidSeriesError(
                    f"Timestamp decreases from {previous.timestamp}",
                    candle_index=index,
                    timestamp=candle.timestamp,
                )
            if candle.timestamp == previous.timestamp:
                if not candle.same_prices(previous):
                    raise InvalidSeriesError(
                        "Duplicate timestamp with differing prices",
                        candle_index=index,
                        timestamp=candle.timestamp,
                    )
                collapsed += 1
                continue

        validated.append(candle)

    if not validated:
        raise InvalidSeriesError("Candle series is empty")

    if collapsed:
        logger.warning("Collapsed %d identical duplicate candles", collapsed)

    return tuple(validated)
