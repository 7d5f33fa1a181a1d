"""Per-bar results table and CSV export."""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional, Sequence, Union

import pandas as pd

from mtr_backtester.core.types import IndicatorOutput, PriceSeries

logger = logging.getLogger("mtr_backtester.reports")


def band_place(price: float, base: Optional[float], upper: Optional[float], lower: Optional[float]) -> str:
    """Where price sits relative to the bands: upper+, upper-mid, mid-low, low- or ''."""
    if upper is None or base is None or lower is None:
        return ""
    if price >= upper:
        return "upper+"
    if price >= base:
        return "upper-mid"
    if price >= lower:
        return "mid-low"
    return "low-"


def results_frame(
    series: PriceSeries,
    indicators: Optional[IndicatorOutput],
    signals: Sequence[int],
    equity_curve: Sequence[float],
) -> pd.DataFrame:
    n = len(series)
    if len(signals) != n or len(equity_curve) != n:
        raise ValueError("signals and equity_curve must match the price series length")
    empty = [None] * n
    base = indicators.base if indicators else empty
    upper = indicators.upper if indicators else empty
    lower = indicators.lower if indicators else empty
    return pd.DataFrame({
        "Date": series.dates,
        "Close_Price": [round(c, 2) for c in series.close],
        "Should_Buy": [s == 1 for s in signals],
        "Should_Sell": [s == -1 for s in signals],
        "Signal_Raw": list(signals),
        "MTR_Place": [band_place(c, b, u, lo) for c, b, u, lo in zip(series.close, base, upper, lower)],
        "MTR_Base": base,
        "MTR_Upper": upper,
        "MTR_Lower": lower,
        "Equity_Worth": [round(e, 2) for e in equity_curve],
    })


def export_results_csv(frame: pd.DataFrame, path: Union[str, Path]) -> Path:
    """Write the frame to CSV, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(path, index=False)
    logger.info("Exported %d rows to %s", len(frame), path)
    return path
