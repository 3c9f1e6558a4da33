"""Load candle series from CSV or JSON files."""

import csv
import json
import logging
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from pathlib import Path

from tradeforge_engine.errors import InvalidSeriesError
from tradeforge_engine.models.candle import Candle

logger = logging.getLogger(__name__)

# Numeric timestamps below this are epoch seconds, otherwise epoch ms
_SECONDS_CUTOFF = 10_000_000_000

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_COLUMN_ALIASES = {
    "timestamp": ("timestamp", "time", "date", "datetime"),
    "open": ("open", "o"),
    "high": ("high", "h"),
    "low": ("low", "l"),
    "close": ("close", "c"),
    "volume": ("volume", "vol", "v"),
}


def parse_timestamp(value: str | int | float) -> int:
    """Convert epoch seconds, epoch ms or an ISO-8601 string to epoch ms.

    Naive ISO strings are taken as UTC.

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = int(value)
        return number * 1000 if abs(number) < _SECONDS_CUTOFF else number

    text = str(value).strip()
    if not text:
        raise ValueError("Empty timestamp")
    if text.lstrip("-").isdigit():
        return parse_timestamp(int(text))

    dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - _EPOCH) // timedelta(milliseconds=1)


def _resolve_columns(fieldnames: Sequence[str] | None, path: Path) -> dict[str, str]:
    if not fieldnames:
        raise InvalidSeriesError(f"No header row in {path}")
    lowered = {name.strip().lower(): name for name in fieldnames}
    columns: dict[str, str] = {}
    for field, aliases in _COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in lowered:
                columns[field] = lowered[alias]
                break
        else:
            if field != "volume":
                raise InvalidSeriesError(f"Missing '{field}' column in {path}")
    return columns


def load_csv(path: str | Path) -> list[Candle]:
    """Load candles from a CSV file with a header row.

    Rows are returned in file order; ordering is validated by the runner.

    Raises:
        FileNotFoundError: If the file doesn't exist
        InvalidSeriesError: If a header is missing or a row is malformed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    candles: list[Candle] = []
    with open(path, "r", newline="") as f:
        reader = csv.DictReader(f)
        columns = _resolve_columns(reader.fieldnames, path)
        for row_number, row in enumerate(reader, start=2):
            if not any((v or "").strip() for v in row.values()):
                continue
            try:
                volume_col = columns.get("volume")
                candle = Candle(
                    timestamp=parse_timestamp(row[columns["timestamp"]]),
                    open=float(row[columns["open"]]),
                    high=float(row[columns["high"]]),
                    low=float(row[columns["low"]]),
                    close=float(row[columns["close"]]),
                    volume=float(row[volume_col] or 0.0) if volume_col else 0.0,
                )
            except (TypeError, ValueError) as exc:
                raise InvalidSeriesError(f"Malformed row {row_number} in {path}: {exc}") from exc
            candles.append(candle)

    logger.info("Loaded %d candles from %s", len(candles), path.name)
    return candles


def load_json(path: str | Path) -> list[Candle]:
    """Load candles from a JSON array of OHLCV objects.

    Raises:
        FileNotFoundError: If the file doesn't exist
        InvalidSeriesError: If the content is not a list of valid candles
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise InvalidSeriesError(f"Invalid JSON in {path}: {exc}") from exc

    if isinstance(data, dict):
        data = data.get("candles")
    if not isinstance(data, list):
        raise InvalidSeriesError(f"Expected a list of candles in {path}")

    candles: list[Candle] = []
    for index, item in enumerate(data):
        try:
            candle = Candle(
                timestamp=parse_timestamp(item["timestamp"]),
                open=float(item["open"]),
                high=float(item["high"]),
                low=float(item["low"]),
                close=float(item["close"]),
                volume=float(item.get("volume", 0.0)),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise InvalidSeriesError(
                f"Malformed candle in {path}: {exc}", candle_index=index
            ) from exc
        candles.append(candle)

    logger.info("Loaded %d candles from %s", len(candles), path.name)
    return candles


def load_candles(path: str | Path) -> list[Candle]:
    """Load candles, choosing the parser from the file extension."""
    suffix = Path(path).suffix.lower()
    if suffix == ".csv":
        return load_csv(path)
    if suffix == ".json":
        return load_json(path)
    raise ValueError(f"Unsupported file format: {suffix}")


def filter_by_date(
    candles: Sequence[Candle],
    start: int | str | None = None,
    end: int | str | None = None,
) -> list[Candle]:
    """Keep candles with ``start <= timestamp <= end``.

    Bounds accept anything ``parse_timestamp`` does; None leaves a side open.
    """
    start_ms = parse_timestamp(start) if start is not None else None
    end_ms = parse_timestamp(end) if end is not None else None
    if start_ms is not None and end_ms is not None and start_ms > end_ms:
        raise ValueError("Start date must not be after end date")

    return [
        c
        for c in candles
        if (start_ms is None or c.timestamp >= start_ms)
        and (end_ms is None or c.timestamp <= end_ms)
    ]
