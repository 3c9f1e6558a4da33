"""Simple Moving Average (SMA) indicator."""

from collections import deque

from .base import Indicator


class SMA(Indicator):
    """Arithmetic mean of the last ``period`` inputs.

    Example:
        >>> sma = SMA(3)
        >>> [sma.update(v) for v in (1.0, 2.0, 3.0, 4.0)]
        [None, None, 2.0, 3.0]
    """

    kind = "sma"

    def __init__(self, period: int):
        super().__init__(period)
        self._window: deque[float] = deque(maxlen=period)

    def _compute(self, value: float) -> float | None:
        self._window.append(value)
        if len(self._window) < self.period:
            return None
        return sum(self._window) / self.period

    def _reset_state(self) -> None:
        self._window.clear()


def calculate_sma(values: list[float], period: int) -> list[float | None]:
    """
    Calculate Simple Moving Average over a list.

    Args:
        values: List of values (e.g., closing prices).
        period: SMA period.

    Returns:
        List of SMA values (same length as input), None during warm-up.
    """
    sma = SMA(period)
    return [sma.update(v) for v in values]
