"""Unit tests for analytics.metrics and analytics.comparison."""

from datetime import date

import pytest
from mtr_backtester.analytics.comparison import buy_and_hold
from mtr_backtester.analytics.metrics import (
    compute_summary,
    max_drawdown,
    period_returns,
    profit_factor,
    sharpe_ratio,
    sortino_ratio,
)
from mtr_backtester.core.exceptions import InsufficientDataError
from mtr_backtester.core.types import Trade, TradeType


def trade(pnl, commission=7.0):
    return Trade(date=date(2024, 1, 1), type=TradeType.CLOSE_LONG, price=10.0, shares=-100,
                 commission=commission, pnl=pnl)


def test_sharpe_ratio_empty():
    assert sharpe_ratio([]) == 0.0


def test_sharpe_ratio_constant():
    assert sharpe_ratio([0.01] * 10) == 0.0  # zero std


def test_sortino_falls_back_to_sharpe_without_losses():
    rets = [0.01, 0.02, 0.03]
    assert sortino_ratio(rets) == pytest.approx(sharpe_ratio(rets))


def test_sortino_uses_losing_day_spread():
    rets = [0.02, -0.01, 0.03, -0.03]
    # mean 0.0025, losing days [-0.01, -0.03] have std 0.01
    assert sortino_ratio(rets) == pytest.approx(0.25 * 252 ** 0.5)
    assert sortino_ratio(rets) > sharpe_ratio(rets)


def test_profit_factor():
    assert profit_factor([10, -5, 10, -5]) == 2.0
    assert profit_factor([10, 10]) == float("inf")
    assert profit_factor([-5, -5]) == 0.0


def test_max_drawdown():
    # peak 12000, trough 10000 => -16.67%
    assert max_drawdown([10000.0, 12000.0, 10000.0, 11000.0]) == pytest.approx(-16.666, rel=0.01)
    assert max_drawdown([]) == 0.0


def test_period_returns():
    assert period_returns([100.0, 110.0, 99.0]) == pytest.approx([0.1, -0.1])
    assert period_returns([100.0]) == []


def test_compute_summary():
    trades = [trade(-7.0), trade(100.0), trade(-7.0), trade(-50.0)]
    m = compute_summary(trades, [10000.0, 10100.0, 10036.0], 10000.0)
    assert m.total_trades == 4
    assert m.winning_trades == 1
    assert m.losing_trades == 3
    assert m.win_rate == pytest.approx(25.0)
    assert m.loss_rate == pytest.approx(75.0)
    assert m.avg_win == pytest.approx(100.0)
    assert m.avg_loss == pytest.approx(-64.0 / 3)
    assert m.total_commissions == pytest.approx(28.0)
    assert m.final_equity == 10036.0
    assert m.total_return_pct == pytest.approx(0.36)
    assert m.to_dict()["total_trades"] == 4


def test_compute_summary_without_trades():
    m = compute_summary([], [10000.0, 10000.0], 10000.0)
    assert m.total_trades == 0
    assert m.win_rate == 0.0
    assert m.avg_win == 0.0
    assert m.total_return_pct == 0.0
    assert m.profit_factor == 0.0


def test_buy_and_hold():
    bh = buy_and_hold([20.0, 22.0, 25.0], 10000.0, strategy_return_pct=30.0)
    assert bh.shares == 500
    assert bh.commission == 7.0
    # entry commission pushes leftover cash to -7
    assert bh.final_equity == pytest.approx(12493.0)
    assert bh.total_return_pct == pytest.approx(24.93)
    assert bh.outperformance_pct == pytest.approx(30.0 - 24.93)


def test_buy_and_hold_empty():
    with pytest.raises(InsufficientDataError):
        buy_and_hold([], 10000.0, 0.0)
