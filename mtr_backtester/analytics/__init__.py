"""Analytics: backtest summary metrics and buy-and-hold comparison."""

from mtr_backtester.analytics.metrics import (
    SummaryMetrics,
    compute_summary,
    period_returns,
    sharpe_ratio,
    sortino_ratio,
    max_drawdown,
    profit_factor,
)
from mtr_backtester.analytics.comparison import BuyHoldComparison, buy_and_hold

__all__ = [
    "SummaryMetrics",
    "compute_summary",
    "period_returns",
    "sharpe_ratio",
    "sortino_ratio",
    "max_drawdown",
    "profit_factor",
    "BuyHoldComparison",
    "buy_and_hold",
]
