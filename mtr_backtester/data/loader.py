"""
Load daily OHLCV bars from CSV into a PriceSeries.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from mtr_backtester.core.exceptions import DataError
from mtr_backtester.core.types import PriceSeries

logger = logging.getLogger("mtr_backtester.data")

REQUIRED_COLUMNS = ("date", "open", "high", "low", "close", "volume")


def normalize_frame(
    df: pd.DataFrame,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> pd.DataFrame:
    """
    Lower-case columns, parse dates, sort ascending, drop duplicate dates (keep last)
    and rows with missing prices, then clip to [start, end].
    """
    df = df.rename(columns={c: str(c).strip().lower() for c in df.columns})
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise DataError(f"price data is missing columns: {', '.join(missing)}")
    df = df[list(REQUIRED_COLUMNS)].copy()
    try:
        df["date"] = pd.to_datetime(df["date"]).dt.normalize()
    except (ValueError, TypeError) as e:
        raise DataError(f"unparseable date column: {e}") from e
    dropped = int(df[["open", "high", "low", "close"]].isna().any(axis=1).sum())
    if dropped:
        logger.warning("Dropping %d rows with missing prices", dropped)
        df = df.dropna(subset=["open", "high", "low", "close"])
    df["volume"] = df["volume"].fillna(0).astype("int64")
    df = df.sort_values("date", kind="mergesort").drop_duplicates(subset="date", keep="last")
    if start:
        df = df[df["date"] >= pd.Timestamp(start)]
    if end:
        df = df[df["date"] <= pd.Timestamp(end)]
    if (df[["open", "high", "low", "close"]] <= 0).any().any():
        raise DataError("prices must be positive")
    return df.reset_index(drop=True)


def load_price_csv(
    path: Union[str, Path],
    symbol: str = "",
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> PriceSeries:
    """Read a CSV with date/open/high/low/close/volume columns (any case)."""
    path = Path(path)
    if not path.exists():
        raise DataError(f"price file not found: {path}")
    try:
        raw = pd.read_csv(path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise DataError(f"could not parse {path}: {e}") from e
    df = normalize_frame(raw, start, end)
    series = PriceSeries.from_frame(df, symbol=symbol or path.stem.upper())
    logger.info("Loaded %d bars for %s from %s", len(series), series.symbol, path)
    return series
