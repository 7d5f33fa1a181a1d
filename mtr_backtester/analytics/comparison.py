"""Buy-and-hold baseline for comparing a strategy run."""

from __future__ import annotations
import math
from dataclasses import asdict, dataclass
from typing import Sequence

from mtr_backtester.core.exceptions import InsufficientDataError


@dataclass
class BuyHoldComparison:
    shares: int
    commission: float
    final_equity: float
    total_return_pct: float
    outperformance_pct: float

    def to_dict(self) -> dict:
        return asdict(self)


def buy_and_hold(
    close: Sequence[float],
    initial_capital: float,
    strategy_return_pct: float,
    commission_per_share: float = 0.01,
    min_commission: float = 7.0,
) -> BuyHoldComparison:
    """
    Buy floor(capital / first close) shares on bar 0 and hold to the last bar.
    Only the entry commission is charged.
    """
    if len(close) == 0:
        raise InsufficientDataError("buy-and-hold needs at least one bar")
    first, last = close[0], close[-1]
    shares = math.floor(initial_capital / first)
    commission = max(shares * commission_per_share, min_commission)
    leftover = initial_capital - (shares * first + commission)
    final_equity = shares * last + leftover
    bh_return = (final_equity - initial_capital) / initial_capital * 100.0
    return BuyHoldComparison(
        shares=shares,
        commission=commission,
        final_equity=final_equity,
        total_return_pct=bh_return,
        outperformance_pct=strategy_return_pct - bh_return,
    )
