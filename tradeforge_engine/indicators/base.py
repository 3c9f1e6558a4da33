"""Base class for streaming indicators."""

import math
from abc import ABC, abstractmethod
from typing import Any

from tradeforge_engine.errors import InvalidInputError


def ensure_numeric(value: Any, name: str = "value") -> float:
    """Return ``value`` as float or raise InvalidInputError.

    Booleans, non-numbers, NaN and infinities are rejected.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(f"Indicator {name} must be numeric, got {value!r}")
    if not math.isfinite(value):
        raise InvalidInputError(f"Indicator {name} must be finite, got {value!r}")
    return float(value)


class Indicator(ABC):
    """Stateful calculator consuming one value per candle.

    ``None`` is the not-ready sentinel: ``update`` returns it until the
    warm-up period has been observed. The last two readings are kept so
    that crossovers can be detected without storing more history.
    """

    kind: str = ""

    def __init__(self, period: int):
        if isinstance(period, bool) or not isinstance(period, int) or period < 1:
            raise ValueError(f"Period must be a positive integer, got {period!r}")
        self.period = period
        self._count = 0
        self._value: float | None = None
        self._previous: float | None = None

    @property
    def value(self) -> float | None:
        """Current reading, or None while warming up."""
        return self._value

    @property
    def previous(self) -> float | None:
        """Reading before the most recent update."""
        return self._previous

    @property
    def is_ready(self) -> bool:
        return self._value is not None

    @property
    def count(self) -> int:
        """Number of values observed."""
        return self._count

    @property
    def warmup(self) -> int:
        """Number of inputs needed before the first reading."""
        return self.period

    def update(self, value: Any) -> float | None:
        """Consume one input and return the new reading."""
        number = ensure_numeric(value, self.kind or "input")
        self._count += 1
        self._previous = self._value
        self._value = self._compute(number)
        return self._value

    def reset(self) -> None:
        self._count = 0
        self._value = None
        self._previous = None
        self._reset_state()

    @abstractmethod
    def _compute(self, value: float) -> float | None:
        """Advance internal state with a validated input."""

    @abstractmethod
    def _reset_state(self) -> None:
        """Clear subclass accumulators."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(period={self.period}, value={self._value})"
