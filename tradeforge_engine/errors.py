"""Exception taxonomy for backtest runs.

Fatal errors carry the candle index and timestamp at which they occurred.
Recoverable problems are recorded as diagnostics on the result instead of
being raised.
"""


class BacktestError(Exception):
    """Base exception for the backtest engine."""

    def __init__(
        self,
        message: str,
        candle_index: int | None = None,
        timestamp: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.candle_index = candle_index
        self.timestamp = timestamp

    def __str__(self) -> str:
        if self.candle_index is None:
            return self.message
        location = f"candle {self.candle_index}"
        if self.timestamp is not None:
            location += f" (ts={self.timestamp})"
        return f"{self.message} at {location}"


class InvalidSeriesError(BacktestError):
    """Candle series is malformed, out of order, or contradicts itself."""


class StrategyLoadError(BacktestError):
    """Strategy reference could not be resolved to a strategy object."""


class StrategyInitError(BacktestError):
    """Strategy failed during initialization."""


class StrategyEvaluationError(BacktestError):
    """Strategy raised while evaluating a candle."""


class InsufficientFundsError(BacktestError):
    """Buy order notional exceeds available cash."""


class InsufficientPositionError(BacktestError):
    """Sell order quantity exceeds the held position."""


class InvalidInputError(BacktestError):
    """Non-numeric or non-finite value fed to an indicator."""


class InvariantViolationError(BacktestError):
    """Portfolio bookkeeping invariant broken. Always a simulator bug."""
