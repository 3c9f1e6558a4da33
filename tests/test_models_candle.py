"""Tests for Candle, CandleHistory and series validation."""

from datetime import datetime, timezone

import pytest

from tradeforge_engine.errors import InvalidSeriesError
from tradeforge_engine.models.candle import Candle, CandleHistory, validate_series


def _candle(ts: int, close: float = 100.0) -> Candle:
    return Candle(timestamp=ts, open=close, high=close + 1, low=close - 1, close=close, volume=5.0)


class TestCandle:
    """Test suite for Candle."""

    def test_valid_candle(self) -> None:
        candle = Candle(timestamp=0, open=100.0, high=110.0, low=90.0, close=105.0, volume=1.0)
        assert candle.close == 105.0
        assert candle.dt == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_high_below_close_rejected(self) -> None:
        with pytest.raises(ValueError, match="High must be"):
            Candle(timestamp=0, open=100.0, high=101.0, low=90.0, close=105.0)

    def test_low_above_open_rejected(self) -> None:
        with pytest.raises(ValueError, match="Low must be"):
            Candle(timestamp=0, open=95.0, high=110.0, low=96.0, close=105.0)

    def test_negative_volume_rejected(self) -> None:
        with pytest.raises(ValueError, match="Volume"):
            Candle(timestamp=0, open=100.0, high=100.0, low=100.0, close=100.0, volume=-1.0)

    def test_from_dict_and_to_dict(self) -> None:
        data = {"timestamp": 1000, "open": "1", "high": "2", "low": "0.5", "close": "1.5"}
        candle = Candle.from_dict(data)
        assert candle.volume == 0.0
        assert candle.to_dict()["close"] == 1.5

    def test_price_source(self) -> None:
        candle = _candle(0, 100.0)
        assert candle.price("high") == 101.0
        assert candle.price("volume") == 5.0
        with pytest.raises(ValueError, match="Unknown price source"):
            candle.price("vwap")


class TestCandleHistory:
    """Test suite for the bounded history view."""

    def test_length_and_current(self) -> None:
        candles = [_candle(i) for i in range(5)]
        history = CandleHistory(candles, 3)
        assert len(history) == 3
        assert history.current is candles[2]
        assert history[-1] is candles[2]

    def test_cannot_index_future_candles(self) -> None:
        candles = [_candle(i) for i in range(5)]
        history = CandleHistory(candles, 2)
        with pytest.raises(IndexError):
            history[2]
        assert history[1:10] == candles[:2]
        assert list(history) == candles[:2]

    def test_last(self) -> None:
        candles = [_candle(i) for i in range(5)]
        history = CandleHistory(candles, 4)
        assert history.last(2) == candles[2:4]
        assert history.last(10) == candles[:4]
        assert history.last(0) == []

    def test_bound_outside_series_rejected(self) -> None:
        with pytest.raises(ValueError):
            CandleHistory([_candle(0)], 2)


class TestValidateSeries:
    """Test suite for validate_series."""

    def test_returns_tuple(self) -> None:
        series = validate_series([_candle(0), _candle(1000)])
        assert isinstance(series, tuple)
        assert len(series) == 2

    def test_empty_series_rejected(self) -> None:
        with pytest.raises(InvalidSeriesError, match="empty"):
            validate_series([])

    def test_decreasing_timestamp_reports_index(self) -> None:
        with pytest.raises(InvalidSeriesError) as exc_info:
            validate_series([_candle(0), _candle(2000), _candle(1000)])
        assert exc_info.value.candle_index == 2
        assert exc_info.value.timestamp == 1000
        assert "candle 2" in str(exc_info.value)

    def test_duplicate_timestamp_with_different_prices_rejected(self) -> None:
        with pytest.raises(InvalidSeriesError, match="Duplicate timestamp"):
            validate_series([_candle(0, 100.0), _candle(0, 101.0)])

    def test_identical_duplicates_collapsed(self) -> None:
        series = validate_series([_candle(0), _candle(0), _candle(1000)])
        assert [c.timestamp for c in series] == [0, 1000]

    def test_mappings_converted(self) -> None:
        series = validate_series(
            [{"timestamp": 0, "open": 1, "high": 2, "low": 1, "close": 2, "volume": 3}]
        )
        assert isinstance(series[0], Candle)

    def test_malformed_mapping_reports_index(self) -> None:
        with pytest.raises(InvalidSeriesError) as exc_info:
            validate_series(
                [
                    {"timestamp": 0, "open": 1, "high": 2, "low": 1, "close": 2},
                    {"timestamp": 1, "open": 1, "high": 0.5, "low": 1, "close": 2},
                ]
            )
        assert exc_info.value.candle_index == 1

    def test_non_integer_timestamp_rejected(self) -> None:
        candle = Candle(timestamp=1.5, open=1.0, high=1.0, low=1.0, close=1.0)  # type: ignore[arg-type]
        with pytest.raises(InvalidSeriesError, match="integer"):
            validate_series([candle])

    def test_unsupported_item_rejected(self) -> None:
        with pytest.raises(InvalidSeriesError, match="Expected Candle"):
            validate_series([(0, 1, 1, 1, 1)])  # type: ignore[list-item]

    @pytest.mark.parametrize(
        ("field", "values"),
        [
            ("open", {"open": float("nan")}),
            ("open", {"open": float("inf"), "high": float("inf")}),
            ("high", {"high": float("nan")}),
            ("high", {"high": float("inf")}),
            ("low", {"low": float("nan")}),
            ("low", {"low": float("-inf")}),
            ("volume", {"volume": float("nan")}),
            ("volume", {"volume": float("inf")}),
        ],
    )
    def test_non_finite_fields_rejected(self, field: str, values: dict) -> None:
        fields = {"open": 100.0, "high": 101.0, "low": 99.0, "close": 100.0, "volume": 5.0}
        bad = Candle(timestamp=1, **{**fields, **values})
        with pytest.raises(InvalidSeriesError, match=f"Non-finite {field}") as exc_info:
            validate_series([_candle(0), bad])
        assert exc_info.value.candle_index == 1
        assert exc_info.value.timestamp == 1
