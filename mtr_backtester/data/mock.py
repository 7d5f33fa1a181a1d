"""
Synthetic daily bars (weekdays only) for demos and offline runs.
"""

from __future__ import annotations
import logging
from datetime import date
from typing import Optional, Union

import numpy as np
import pandas as pd

from mtr_backtester.core.exceptions import DataError
from mtr_backtester.core.types import PriceSeries

logger = logging.getLogger("mtr_backtester.data")

BASE_PRICES = {
    "U": 120.0,
    "AAPL": 180.0,
    "MSFT": 300.0,
    "GOOGL": 150.0,
    "TSLA": 200.0,
    "NVDA": 450.0,
}


def generate_mock_series(
    symbol: str,
    start: Union[str, date] = "2020-01-01",
    end: Optional[Union[str, date]] = None,
    seed: Optional[int] = None,
    base_price: Optional[float] = None,
) -> PriceSeries:
    """
    Random walk: open drifts up to +/-1.2% from the prior close, intraday range up to 3%,
    close uniform inside [low, high]. Prices rounded to cents.
    """
    rng = np.random.default_rng(seed)
    end = end or date.today()
    days = pd.bdate_range(start=start, end=end)
    if len(days) == 0:
        raise DataError(f"no weekdays between {start} and {end}")

    price = base_price or BASE_PRICES.get(symbol.upper(), 100.0 + rng.random() * 100.0)
    rows = {"open": [], "high": [], "low": [], "close": [], "volume": []}
    for _ in days:
        daily_change = (rng.random() - 0.5) * 0.08
        open_price = price * (1 + daily_change * 0.3)
        volatility = rng.random() * 0.03
        high = open_price * (1 + rng.random() * volatility)
        low = open_price * (1 - rng.random() * volatility)
        close = low + rng.random() * (high - low)
        rows["open"].append(round(open_price, 2))
        rows["high"].append(round(high, 2))
        rows["low"].append(round(low, 2))
        rows["close"].append(round(close, 2))
        rows["volume"].append(int(1_000_000 + rng.random() * 5_000_000))
        price = close

    logger.info("Generated %d mock bars for %s", len(days), symbol)
    return PriceSeries(
        symbol=symbol.upper(),
        dates=[d.date() for d in days],
        **rows,
    )
