"""Relative Strength Index (RSI) indicator."""

from .base import Indicator


class RSI(Indicator):
    """Wilder's RSI, bounded to [0, 100].

    Needs ``period`` price changes, so the first reading arrives on input
    ``period + 1``. Initial averages are simple means of the first
    ``period`` gains and losses; after that both are Wilder-smoothed.
    When the average loss is zero the reading is 100.
    """

    kind = "rsi"

    def __init__(self, period: int = 14):
        super().__init__(period)
        self._last: float | None = None
        self._gains = 0.0
        self._losses = 0.0
        self._changes = 0
        self.avg_gain: float | None = None
        self.avg_loss: float | None = None

    @property
    def warmup(self) -> int:
        return self.period + 1

    def _compute(self, value: float) -> float | None:
        last, self._last = self._last, value
        if last is None:
            return None

        change = value - last
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0
        self._changes += 1

        if self.avg_gain is None or self.avg_loss is None:
            self._gains += gain
            self._losses += loss
            if self._changes < self.period:
                return None
            self.avg_gain = self._gains / self.period
            self.avg_loss = self._losses / self.period
        else:
            self.avg_gain = (self.avg_gain * (self.period - 1) + gain) / self.period
            self.avg_loss = (self.avg_loss * (self.period - 1) + loss) / self.period

        if self.avg_loss == 0:
            return 100.0
        rs = self.avg_gain / self.avg_loss
        return 100.0 - (100.0 / (1.0 + rs))

    def _reset_state(self) -> None:
        self._last = None
        self._gains = 0.0
        self._losses = 0.0
        self._changes = 0
        self.avg_gain = None
        self.avg_loss = None


def calculate_rsi(values: list[float], period: int = 14) -> list[float | None]:
    """
    Calculate Relative Strength Index (RSI).

    Args:
        values: List of closing prices.
        period: RSI period (default 14).

    Returns:
        List of RSI values, None for initial insufficient data points.
    """
    rsi = RSI(period)
    return [rsi.update(v) for v in values]
