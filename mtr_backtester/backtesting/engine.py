"""
Backtest engine: long/flat replay of signals at the close with per-share commission,
tax on realized gains, partial scale-out and a hard stop-loss.
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence

from mtr_backtester.analytics.metrics import SummaryMetrics, compute_summary
from mtr_backtester.core.exceptions import ConfigError
from mtr_backtester.core.types import PositionSide, PositionState, SignalAction, Trade, TradeType
from mtr_backtester.strategies.base import BaseStrategy

logger = logging.getLogger("mtr_backtester.backtest")


@dataclass
class BacktestResult:
    """Backtest output: trades, equity per bar, and metrics."""
    trades: List[Trade] = field(default_factory=list)
    equity_curve: List[float] = field(default_factory=list)
    metrics: Optional[SummaryMetrics] = None


class BacktestEngine:
    """
    Replays a signal series bar by bar. Each run() owns a fresh BacktestRun,
    so one engine can be reused across runs.
    """

    def __init__(
        self,
        initial_capital: float = 10000.0,
        commission_per_share: float = 0.01,
        min_commission: float = 7.0,
        tax_rate: float = 0.25,
    ):
        if initial_capital <= 0:
            raise ConfigError(f"initial_capital must be positive, got {initial_capital}")
        if commission_per_share < 0 or min_commission < 0:
            raise ConfigError("commission settings must be >= 0")
        if not 0 <= tax_rate < 1:
            raise ConfigError(f"tax_rate must be in [0, 1), got {tax_rate}")
        self.initial_capital = initial_capital
        self.commission_per_share = commission_per_share
        self.min_commission = min_commission
        self.tax_rate = tax_rate

    def commission(self, shares: int) -> float:
        return max(shares * self.commission_per_share, self.min_commission)

    def max_affordable_shares(self, cash: float, price: float) -> int:
        """Largest integer quantity whose cost plus commission fits in cash."""
        if price <= 0 or cash <= 0:
            return 0
        # q*price + max(q*cps, min_c) <= cash  <=>  both terms fit separately
        qty = min(
            math.floor(cash / (price + self.commission_per_share)),
            math.floor((cash - self.min_commission) / price),
        )
        qty = max(qty, 0)
        while qty > 0 and qty * price + self.commission(qty) > cash:
            qty -= 1
        return qty

    def run(
        self,
        dates: Sequence[date],
        close: Sequence[float],
        signals: Sequence[Optional[int]],
        strategy: BaseStrategy,
    ) -> BacktestResult:
        """Run the replay and compute summary metrics."""
        n = len(close)
        if len(dates) != n or len(signals) != n:
            raise ValueError("dates, close and signals must have the same length")
        bt = BacktestRun(self, strategy)
        for i in range(n):
            bt.process_bar(dates[i], close[i], signals[i])
        metrics = compute_summary(bt.trades, bt.equity_curve, self.initial_capital)
        logger.info(
            "Backtest done: %d bars, %d trades, final equity %.2f (%.2f%%)",
            n, metrics.total_trades, metrics.final_equity, metrics.total_return_pct,
        )
        return BacktestResult(trades=bt.trades, equity_curve=bt.equity_curve, metrics=metrics)


class BacktestRun:
    """Mutable state of a single replay: position, ledger, equity curve."""

    def __init__(self, engine: BacktestEngine, strategy: BaseStrategy, position: Optional[PositionState] = None):
        self.engine = engine
        self.stop_loss_pct = strategy.stop_loss_pct
        self.scale_out_pct = getattr(strategy, "scale_out_pct", None) or 0.5
        self.position = position or PositionState(cash=engine.initial_capital)
        self.trades: List[Trade] = []
        self.equity_curve: List[float] = []

    def process_bar(self, bar_date: date, price: float, signal: Optional[int]) -> None:
        pos = self.position
        self.equity_curve.append(pos.market_value(price))

        if signal is None or (isinstance(signal, float) and math.isnan(signal)) or signal == SignalAction.HOLD:
            self._check_stop_loss(bar_date, price)
            return

        if signal == SignalAction.SCALE_OUT and pos.is_long:
            qty = min(max(1, math.floor(pos.shares * self.scale_out_pct)), pos.shares)
            self._sell(bar_date, price, qty, TradeType.SCALE_OUT)
            return

        if signal == SignalAction.BUY and pos.side != PositionSide.LONG:
            if pos.side == PositionSide.SHORT:
                self._cover_short(bar_date, price)
            self._open_long(bar_date, price)
            return

        if signal == SignalAction.SELL and pos.is_long:
            self._sell(bar_date, price, pos.shares, TradeType.CLOSE_LONG)

        self._check_stop_loss(bar_date, price)

    def _check_stop_loss(self, bar_date: date, price: float) -> None:
        """Liquidate a long whose close fell to entry * (1 - stop_loss_pct) or below."""
        pos = self.position
        stop_price = pos.entry_price * (1 - self.stop_loss_pct)
        if pos.is_long and price <= stop_price:
            logger.debug("Stop-loss on %s: %.2f <= %.2f", bar_date, price, stop_price)
            self._sell(bar_date, price, pos.shares, TradeType.STOP_LOSS)

    def _mark(self, price: float) -> None:
        self.equity_curve[-1] = self.position.market_value(price)

    def _settle(self, profit: float, commission: float) -> float:
        """Cash effect beyond proceeds: commission always, tax only on gains."""
        tax = profit * self.engine.tax_rate if profit > 0 else 0.0
        return -commission - tax

    def _sell(self, bar_date: date, price: float, qty: int, trade_type: TradeType) -> None:
        pos = self.position
        commission = self.engine.commission(qty)
        profit = qty * (price - pos.entry_price)
        pos.cash += qty * price + self._settle(profit, commission)
        pos.shares -= qty
        if pos.shares == 0:
            pos.side = PositionSide.FLAT
        self.trades.append(Trade(
            date=bar_date,
            type=trade_type,
            price=price,
            shares=-qty,
            commission=commission,
            pnl=profit - commission,
        ))
        self._mark(price)

    def _cover_short(self, bar_date: date, price: float) -> None:
        pos = self.position
        qty = abs(pos.shares)
        commission = self.engine.commission(qty)
        profit = qty * (pos.entry_price - price)
        pos.cash += profit + self._settle(profit, commission)
        pos.shares = 0
        pos.side = PositionSide.FLAT
        self.trades.append(Trade(
            date=bar_date,
            type=TradeType.COVER_SHORT,
            price=price,
            shares=qty,
            commission=commission,
            pnl=profit - commission,
        ))
        self._mark(price)

    def _open_long(self, bar_date: date, price: float) -> None:
        pos = self.position
        qty = self.engine.max_affordable_shares(pos.cash, price)
        if qty <= 0:
            logger.debug("Skipping entry on %s: cash %.2f cannot buy at %.2f", bar_date, pos.cash, price)
            return
        commission = self.engine.commission(qty)
        pos.cash -= qty * price + commission
        pos.shares = qty
        pos.entry_price = price
        pos.side = PositionSide.LONG
        self.trades.append(Trade(
            date=bar_date,
            type=TradeType.OPEN_LONG,
            price=price,
            shares=qty,
            commission=commission,
            pnl=-commission,
        ))
        self._mark(price)
