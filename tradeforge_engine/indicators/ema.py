"""Exponential Moving Average (EMA) indicator."""

from .base import Indicator


class EMA(Indicator):
    """Exponential average seeded with the SMA of the first ``period`` inputs.

    Smoothing factor is ``2 / (period + 1)``.
    """

    kind = "ema"

    def __init__(self, period: int):
        super().__init__(period)
        self.multiplier = 2.0 / (period + 1)
        self._seed_sum = 0.0

    def _compute(self, value: float) -> float | None:
        if self._value is None:
            self._seed_sum += value
            if self._count < self.period:
                return None
            return self._seed_sum / self.period
        return (value - self._value) * self.multiplier + self._value

    def _reset_state(self) -> None:
        self._seed_sum = 0.0


def calculate_ema(values: list[float], period: int) -> list[float | None]:
    """
    Calculate Exponential Moving Average (EMA).

    Args:
        values: List of values (e.g., closing prices).
        period: EMA period.

    Returns:
        List of EMA values (same length as input). The first valid value is at
        index ``period - 1`` and equals the SMA of the first ``period`` values;
        preceding entries are None.
    """
    ema = EMA(period)
    return [ema.update(v) for v in values]
