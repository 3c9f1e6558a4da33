"""Candle data sources."""

from .csv_loader import filter_by_date, load_candles, load_csv, load_json, parse_timestamp

__all__ = ["filter_by_date", "load_candles", "load_csv", "load_json", "parse_timestamp"]
