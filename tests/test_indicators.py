"""Tests for streaming indicators, crossovers and the indicator engine."""

import math

import pytest

from tradeforge_engine.errors import InvalidInputError
from tradeforge_engine.indicators import (
    EMA,
    RSI,
    SMA,
    CrossDirection,
    IndicatorEngine,
    calculate_ema,
    calculate_rsi,
    calculate_sma,
    detect_crossover,
    is_bearish_crossover,
    is_bullish_crossover,
)


def test_sma_calculation() -> None:
    sma = calculate_sma([1.0, 2.0, 3.0, 4.0, 5.0], 3)
    assert sma == [None, None, 2.0, 3.0, 4.0]


@pytest.mark.parametrize("period", [1, 2, 5, 13])
@pytest.mark.parametrize(
    "values",
    [
        [float(i) for i in range(1, 41)],
        [100.0 + 0.37 * i for i in range(60)],
        [1.5**i for i in range(25)],
        [10.0 + i * i * 0.01 for i in range(50)],
    ],
)
def test_sma_matches_window_mean_on_rising_series(values: list[float], period: int) -> None:
    sma = SMA(period)
    for i, value in enumerate(values):
        result = sma.update(value)
        if i < period - 1:
            assert result is None
        else:
            window = values[i - period + 1 : i + 1]
            assert result == pytest.approx(sum(window) / period)


def test_ema_calculation() -> None:
    values = [10.0, 11.0, 12.0, 13.0, 14.0]
    # SMA(3) = 11.0 at index 2, k = 0.5
    # EMA[3] = (13 - 11) * 0.5 + 11 = 12.0
    # EMA[4] = (14 - 12) * 0.5 + 12 = 13.0
    ema = calculate_ema(values, 3)
    assert ema[0] is None
    assert ema[1] is None
    assert ema[2] == 11.0
    assert ema[3] == 12.0
    assert ema[4] == 13.0


def test_rsi_calculation() -> None:
    # changes: +2, -1, +2, +2
    values = [10.0, 12.0, 11.0, 13.0, 15.0]
    rsi = calculate_rsi(values, 2)

    # First reading needs period + 1 inputs
    assert rsi[0] is None
    assert rsi[1] is None
    # AvgGain = 1.0, AvgLoss = 0.5, RS = 2
    assert math.isclose(rsi[2], 66.66666666, rel_tol=1e-5)
    # AvgGain = 1.5, AvgLoss = 0.25, RS = 6
    assert math.isclose(rsi[3], 85.714285, rel_tol=1e-5)


def test_rsi_is_100_without_losses() -> None:
    rsi = calculate_rsi([1.0, 2.0, 3.0, 4.0], 3)
    assert rsi[-1] == 100.0


def test_rsi_flat_series_is_100() -> None:
    rsi = calculate_rsi([5.0] * 6, 3)
    assert rsi[-1] == 100.0


def test_rsi_falling_series_is_zero() -> None:
    rsi = calculate_rsi([10.0, 9.0, 8.0, 7.0], 3)
    assert rsi[-1] == 0.0


def test_rsi_bounded() -> None:
    values = [100.0 + ((i * 7) % 11) - 5 for i in range(60)]
    readings = [r for r in calculate_rsi(values, 14) if r is not None]
    assert readings
    assert all(0.0 <= r <= 100.0 for r in readings)


def test_warmup_lengths() -> None:
    assert SMA(5).warmup == 5
    assert EMA(5).warmup == 5
    assert RSI(5).warmup == 6


@pytest.mark.parametrize("period", [0, -3, 2.5, True])
def test_invalid_period_rejected(period: object) -> None:
    with pytest.raises(ValueError, match="Period"):
        SMA(period)  # type: ignore[arg-type]


@pytest.mark.parametrize("value", [float("nan"), float("inf"), "10", None, False])
def test_non_numeric_input_rejected(value: object) -> None:
    sma = SMA(2)
    with pytest.raises(InvalidInputError):
        sma.update(value)
    assert sma.count == 0


def test_indicator_keeps_previous_and_resets() -> None:
    sma = SMA(2)
    sma.update(1.0)
    sma.update(3.0)
    sma.update(5.0)
    assert sma.previous == 2.0
    assert sma.value == 4.0
    assert sma.is_ready

    sma.reset()
    assert sma.value is None
    assert sma.previous is None
    assert sma.count == 0
    assert sma.update(1.0) is None


class TestCrossover:
    """Test suite for crossover detection."""

    def test_bullish(self) -> None:
        assert detect_crossover(9.0, 10.0, 11.0, 10.0) is CrossDirection.BULLISH
        assert is_bullish_crossover(9.0, 10.0, 11.0, 10.0)
        assert not is_bearish_crossover(9.0, 10.0, 11.0, 10.0)

    def test_bearish(self) -> None:
        assert detect_crossover(11.0, 10.0, 9.0, 10.0) is CrossDirection.BEARISH
        assert is_bearish_crossover(11.0, 10.0, 9.0, 10.0)

    def test_touching_counts_as_starting_side(self) -> None:
        assert detect_crossover(10.0, 10.0, 11.0, 10.0) is CrossDirection.BULLISH
        assert detect_crossover(10.0, 10.0, 9.0, 10.0) is CrossDirection.BEARISH

    def test_no_cross(self) -> None:
        assert detect_crossover(11.0, 10.0, 12.0, 10.0) is None
        assert detect_crossover(10.0, 10.0, 10.0, 10.0) is None

    def test_missing_reading_means_no_cross(self) -> None:
        assert detect_crossover(None, 10.0, 11.0, 10.0) is None
        assert detect_crossover(9.0, 10.0, 11.0, None) is None


class TestIndicatorEngine:
    """Test suite for IndicatorEngine."""

    def test_register_and_update(self, make_candles) -> None:
        engine = IndicatorEngine()
        engine.register("sma", 3)
        for candle in make_candles([1.0, 2.0, 3.0, 4.0]):
            engine.update(candle)

        assert engine.candles_seen == 4
        assert engine.value("sma", 3) == 3.0
        assert engine.previous("sma", 3) == 2.0

    def test_lazy_registration_matches_eager(self, make_candles) -> None:
        closes = [10.0, 11.0, 12.5, 11.0, 13.0, 14.0, 12.0, 15.0]
        candles = make_candles(closes)

        eager = IndicatorEngine()
        eager.register("ema", 3)
        eager.register("rsi", 3)
        lazy = IndicatorEngine()
        for candle in candles:
            eager.update(candle)
            lazy.update(candle)

        assert lazy.value("ema", 3) == pytest.approx(eager.value("ema", 3))
        assert lazy.previous("ema", 3) == pytest.approx(eager.previous("ema", 3))
        assert lazy.value("rsi", 3) == pytest.approx(eager.value("rsi", 3))

    def test_register_is_idempotent(self) -> None:
        engine = IndicatorEngine()
        first = engine.register("SMA", 5)
        second = engine.register("sma", 5, "close")
        assert first is second
        assert engine.keys == [("sma", 5, "close")]

    def test_unknown_kind_rejected(self) -> None:
        engine = IndicatorEngine()
        with pytest.raises(ValueError, match="Unknown indicator kind"):
            engine.register("macd", 12)

    def test_unknown_source_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unknown price source"):
            IndicatorEngine.make_key("sma", 5, "typical")

    def test_volume_source(self, make_candles) -> None:
        engine = IndicatorEngine()
        for candle in make_candles([1.0, 2.0], volumes=[10.0, 30.0]):
            engine.update(candle)
        assert engine.value("sma", 2, "volume") == 20.0

    def test_crossover(self, make_candles) -> None:
        engine = IndicatorEngine()
        engine.register("sma", 2)
        engine.register("sma", 3)
        # sma2/sma3 at index 2: 9.0 / 9.33; index 3: 10.5 / 10.0
        for candle in make_candles([10.0, 9.0, 9.0, 12.0]):
            engine.update(candle)
        assert engine.crossover("sma", 2, 3) is CrossDirection.BULLISH

    def test_non_finite_close_rejected(self, make_candles) -> None:
        engine = IndicatorEngine()
        engine.register("sma", 2)
        candle = make_candles([1.0])[0]
        bad = type(candle)(
            timestamp=candle.timestamp + 1,
            open=1.0,
            high=1.0,
            low=1.0,
            close=float("nan"),
        )
        with pytest.raises(InvalidInputError, match="finite"):
            engine.update(bad)
        assert engine.candles_seen == 0

    def test_reset(self, make_candles) -> None:
        engine = IndicatorEngine()
        engine.register("sma", 1)
        engine.update(make_candles([1.0])[0])
        engine.reset()
        assert engine.candles_seen == 0
        assert engine.keys == []
