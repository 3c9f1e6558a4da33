"""Crossover detection between two indicator readings."""

from enum import Enum


class CrossDirection(str, Enum):
    """Direction of a fast/slow line cross."""

    BULLISH = "bullish"  # Fast crosses above slow
    BEARISH = "bearish"  # Fast crosses below slow


def detect_crossover(
    prev_fast: float | None,
    prev_slow: float | None,
    curr_fast: float | None,
    curr_slow: float | None,
) -> CrossDirection | None:
    """Compare the previous and current pair of readings.

    Touching counts as the starting side, so a move from equal to strictly
    above is a bullish cross. Any missing reading means no cross.
    """
    if prev_fast is None or prev_slow is None or curr_fast is None or curr_slow is None:
        return None
    if prev_fast <= prev_slow and curr_fast > curr_slow:
        return CrossDirection.BULLISH
    if prev_fast >= prev_slow and curr_fast < curr_slow:
        return CrossDirection.BEARISH
    return None


def is_bullish_crossover(
    prev_fast: float | None,
    prev_slow: float | None,
    curr_fast: float | None,
    curr_slow: float | None,
) -> bool:
    return detect_crossover(prev_fast, prev_slow, curr_fast, curr_slow) is CrossDirection.BULLISH


def is_bearish_crossover(
    prev_fast: float | None,
    prev_slow: float | None,
    curr_fast: float | None,
    curr_slow: float | None,
) -> bool:
    return detect_crossover(prev_fast, prev_slow, curr_fast, curr_slow) is CrossDirection.BEARISH
