"""
Performance metrics from a trade ledger and a per-bar equity curve.
Ratios (Sharpe, Sortino) use daily equity returns, 252 periods per year.
"""

from __future__ import annotations
from dataclasses import asdict, dataclass
from typing import List, Sequence

import numpy as np

from mtr_backtester.core.types import Trade

ANNUALIZATION = 252.0


@dataclass
class SummaryMetrics:
    """Aggregate backtest statistics. Rates are percentages."""
    initial_capital: float
    final_equity: float
    total_return_pct: float
    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: float
    loss_rate: float
    avg_win: float
    avg_loss: float
    total_commissions: float
    max_drawdown_pct: float
    sharpe_ratio: float
    sortino_ratio: float
    profit_factor: float

    def to_dict(self) -> dict:
        return asdict(self)


def period_returns(equity: Sequence[float]) -> List[float]:
    """Simple returns between consecutive equity samples."""
    if len(equity) < 2:
        return []
    arr = np.asarray(equity, dtype="float64")
    prev = np.where(arr[:-1] != 0, arr[:-1], np.nan)
    rets = np.diff(arr) / prev
    return np.nan_to_num(rets, nan=0.0).tolist()


def _excess(returns: Sequence[float], risk_free_rate: float, periods_per_year: float) -> np.ndarray:
    return np.asarray(returns, dtype="float64") - risk_free_rate / periods_per_year


def sharpe_ratio(
    returns: Sequence[float], risk_free_rate: float = 0.0, periods_per_year: float = ANNUALIZATION
) -> float:
    """Annualized mean excess daily return over its volatility; 0 for flat equity."""
    if len(returns) == 0:
        return 0.0
    excess = _excess(returns, risk_free_rate, periods_per_year)
    vol = excess.std()
    if vol <= 1e-12:
        return 0.0
    return float(excess.mean() / vol * np.sqrt(periods_per_year))


def sortino_ratio(
    returns: Sequence[float], risk_free_rate: float = 0.0, periods_per_year: float = ANNUALIZATION
) -> float:
    """Like sharpe_ratio but divided by the spread of losing days only."""
    if len(returns) == 0:
        return 0.0
    excess = _excess(returns, risk_free_rate, periods_per_year)
    losing = np.asarray(returns, dtype="float64")
    losing = losing[losing < 0]
    # no losing days (or one repeated loss): fall back to total volatility
    if losing.size == 0 or losing.std() <= 1e-12:
        return sharpe_ratio(returns, risk_free_rate, periods_per_year)
    return float(excess.mean() / losing.std() * np.sqrt(periods_per_year))


def max_drawdown(equity: Sequence[float]) -> float:
    """Max drawdown in percent, as a non-positive number (-15.0 = 15%)."""
    if len(equity) == 0:
        return 0.0
    arr = np.asarray(equity, dtype="float64")
    peak = np.maximum.accumulate(arr)
    dd = (arr - peak) / np.where(peak != 0, peak, 1)
    return float(np.min(dd)) * 100.0


def profit_factor(pnls: List[float]) -> float:
    """Gross profit / gross loss. inf with no losses, 0 with neither."""
    wins = sum(p for p in pnls if p > 0)
    losses = sum(-p for p in pnls if p < 0)
    if losses <= 0:
        return float("inf") if wins > 0 else 0.0
    return wins / losses


def compute_summary(
    trades: Sequence[Trade],
    equity_curve: Sequence[float],
    initial_capital: float,
) -> SummaryMetrics:
    """
    Summary of one backtest. A trade wins if pnl > 0 and loses if pnl < 0
    (entries carry -commission, so they count as losses).
    """
    final_equity = float(equity_curve[-1]) if len(equity_curve) else float(initial_capital)
    pnls = [t.pnl for t in trades]
    wins = [p for p in pnls if p > 0]
    losses = [p for p in pnls if p < 0]
    total = len(pnls)
    rets = period_returns(equity_curve)
    return SummaryMetrics(
        initial_capital=float(initial_capital),
        final_equity=final_equity,
        total_return_pct=(final_equity - initial_capital) / initial_capital * 100.0,
        total_trades=total,
        winning_trades=len(wins),
        losing_trades=len(losses),
        win_rate=len(wins) / total * 100.0 if total else 0.0,
        loss_rate=len(losses) / total * 100.0 if total else 0.0,
        avg_win=sum(wins) / len(wins) if wins else 0.0,
        avg_loss=sum(losses) / len(losses) if losses else 0.0,
        total_commissions=sum(t.commission for t in trades),
        max_drawdown_pct=max_drawdown(equity_curve),
        sharpe_ratio=sharpe_ratio(rets),
        sortino_ratio=sortino_ratio(rets),
        profit_factor=profit_factor(pnls),
    )
