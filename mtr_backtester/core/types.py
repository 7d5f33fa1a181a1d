"""
Core data types: price series, indicator output, signals, positions, and trades.
"""

from __future__ import annotations
import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum, IntEnum
from typing import List, Optional, Sequence

import pandas as pd

OptionalFloats = List[Optional[float]]


class SignalAction(IntEnum):
    SELL = -1
    HOLD = 0
    BUY = 1
    SCALE_OUT = 2  # engine-only; the band strategy never emits it


class PositionSide(str, Enum):
    FLAT = "flat"
    LONG = "long"
    SHORT = "short"


class TradeType(str, Enum):
    OPEN_LONG = "open_long"
    CLOSE_LONG = "close_long"
    SCALE_OUT = "scale_out"
    COVER_SHORT = "cover_short"
    STOP_LOSS = "stop_loss"


@dataclass
class PriceSeries:
    """Daily OHLCV bars for one symbol as parallel lists (ascending dates)."""
    symbol: str
    dates: List[date]
    open: List[float]
    high: List[float]
    low: List[float]
    close: List[float]
    volume: List[int]

    def __post_init__(self) -> None:
        n = len(self.dates)
        for name in ("open", "high", "low", "close", "volume"):
            if len(getattr(self, name)) != n:
                raise ValueError(f"PriceSeries.{name} has length {len(getattr(self, name))}, expected {n}")
        for prev, cur in zip(self.dates, self.dates[1:]):
            if cur <= prev:
                raise ValueError(f"dates must be strictly ascending ({prev} -> {cur})")

    def __len__(self) -> int:
        return len(self.dates)

    @classmethod
    def from_frame(cls, df: pd.DataFrame, symbol: str = "") -> "PriceSeries":
        """Build from a DataFrame with date, open, high, low, close, volume columns."""
        return cls(
            symbol=symbol,
            dates=[pd.Timestamp(d).date() for d in df["date"]],
            open=[float(v) for v in df["open"]],
            high=[float(v) for v in df["high"]],
            low=[float(v) for v in df["low"]],
            close=[float(v) for v in df["close"]],
            volume=[int(v) for v in df["volume"]],
        )

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            "date": self.dates,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        })


@dataclass(frozen=True)
class BaselineChange:
    """A step of the sticky baseline at bar `index`."""
    index: int
    old_baseline: float
    new_baseline: float


@dataclass
class IndicatorOutput:
    """Band arrays aligned to the price series; None marks an undefined slot."""
    base: OptionalFloats
    upper: OptionalFloats
    lower: OptionalFloats
    atr_pct: OptionalFloats
    baseline_changes: List[BaselineChange] = field(default_factory=list)

    @property
    def is_defined(self) -> bool:
        """True if at least one bar has bands."""
        return any(v is not None for v in self.base)


@dataclass
class PositionState:
    """Position held during one backtest run."""
    cash: float
    side: PositionSide = PositionSide.FLAT
    shares: int = 0
    entry_price: float = 0.0

    @property
    def is_long(self) -> bool:
        return self.side == PositionSide.LONG and self.shares > 0

    def market_value(self, price: float) -> float:
        """
        Cash plus position value at `price`. A short carries no proceeds in cash
        (covering credits only its profit), so it is marked by unrealized profit.
        """
        if self.side == PositionSide.LONG:
            return self.cash + self.shares * price
        if self.side == PositionSide.SHORT:
            return self.cash + abs(self.shares) * (self.entry_price - price)
        return self.cash


@dataclass
class StrategyState:
    """Signal generator runtime state for one pass over the bars."""
    in_position: bool = False
    last_trade_index: int = -10000
    prev_upper: Optional[float] = None
    prev_lower: Optional[float] = None


@dataclass(frozen=True)
class Trade:
    """Ledger entry. pnl is net of commission; tax is charged to cash only."""
    date: date
    type: TradeType
    price: float
    shares: int  # signed delta: + bought, - sold
    commission: float
    pnl: float


def to_optional(values: Sequence[float]) -> OptionalFloats:
    """Replace NaN/None with None and cast the rest to float."""
    out: OptionalFloats = []
    for v in values:
        if v is None or (isinstance(v, float) and math.isnan(v)):
            out.append(None)
        else:
            out.append(float(v))
    return out
