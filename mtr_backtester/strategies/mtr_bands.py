"""
MTR band strategy (long/flat, all-in).
Above upper: buy on the first upward cross. Below lower: sell on the first downward cross.
Inside the band: mean-revert around margin levels near each band.
A band step re-evaluates the position immediately.
"""

from __future__ import annotations
import logging
from typing import List, Optional, Sequence

from mtr_backtester.core.exceptions import ConfigError
from mtr_backtester.core.types import SignalAction, StrategyState
from mtr_backtester.strategies.base import BaseStrategy

logger = logging.getLogger("mtr_backtester.strategy")

MIN_BAND_WIDTH = 1e-9


class MTRBandStrategy(BaseStrategy):
    """
    Emits 1 = buy, -1 = sell, 0 = hold. Never emits scale-out.
    Runtime state lives in a StrategyState built per generate_signals call.
    """

    def __init__(
        self,
        inside_margin_ratio: float = 0.10,
        min_days_between_trades: int = 2,
        band_change_epsilon: float = 1e-6,
        reassess_on_band_change: bool = True,
        stop_loss_pct: float = 0.10,
        scale_out_pct: float = 0.5,
    ):
        if not 0 <= inside_margin_ratio < 0.5:
            raise ConfigError(f"inside_margin_ratio must be in [0, 0.5), got {inside_margin_ratio}")
        if min_days_between_trades < 0:
            raise ConfigError(f"min_days_between_trades must be >= 0, got {min_days_between_trades}")
        if not 0 < stop_loss_pct < 1:
            raise ConfigError(f"stop_loss_pct must be in (0, 1), got {stop_loss_pct}")
        if not 0 < scale_out_pct <= 1:
            raise ConfigError(f"scale_out_pct must be in (0, 1], got {scale_out_pct}")
        self.inside_margin_ratio = inside_margin_ratio
        self.min_days_between_trades = min_days_between_trades
        self.band_change_epsilon = band_change_epsilon
        self.reassess_on_band_change = reassess_on_band_change
        self.stop_loss_pct = stop_loss_pct
        self.scale_out_pct = scale_out_pct

    def levels(self, upper: float, lower: float) -> tuple[float, float]:
        """Inside-band (buy_level, sell_level)."""
        width = max(MIN_BAND_WIDTH, upper - lower)
        return lower + self.inside_margin_ratio * width, upper - self.inside_margin_ratio * width

    def band_changed(self, state: StrategyState, upper: float, lower: float) -> bool:
        if state.prev_upper is None or state.prev_lower is None:
            return False
        return (
            abs(upper - state.prev_upper) > self.band_change_epsilon
            or abs(lower - state.prev_lower) > self.band_change_epsilon
        )

    def step(
        self,
        state: StrategyState,
        i: int,
        close: Sequence[float],
        upper: Sequence[Optional[float]],
        lower: Sequence[Optional[float]],
    ) -> SignalAction:
        """Decide bar i (i >= 1) and advance state."""
        price, prev_price = close[i], close[i - 1]
        up, low = upper[i], lower[i]
        try:
            if up is None or low is None:
                return SignalAction.HOLD
            if i - state.last_trade_index < self.min_days_between_trades:
                return SignalAction.HOLD

            if self.reassess_on_band_change and self.band_changed(state, up, low):
                if state.in_position and price < low:
                    return self._trade(state, i, SignalAction.SELL)
                if not state.in_position and price > up:
                    return self._trade(state, i, SignalAction.BUY)

            prev_up, prev_low = upper[i - 1], lower[i - 1]
            if price > up:
                crossed_above = prev_up is not None and prev_price <= prev_up
                if not state.in_position and crossed_above:
                    return self._trade(state, i, SignalAction.BUY)
            elif price < low:
                crossed_below = prev_low is not None and prev_price >= prev_low
                if state.in_position and crossed_below:
                    return self._trade(state, i, SignalAction.SELL)
            else:
                buy_level, sell_level = self.levels(up, low)
                if not state.in_position:
                    if prev_price < buy_level <= price:
                        return self._trade(state, i, SignalAction.BUY)
                elif prev_price > sell_level >= price:
                    return self._trade(state, i, SignalAction.SELL)
            return SignalAction.HOLD
        finally:
            state.prev_upper = up
            state.prev_lower = low

    @staticmethod
    def _trade(state: StrategyState, i: int, action: SignalAction) -> SignalAction:
        state.in_position = action == SignalAction.BUY
        state.last_trade_index = i
        return action

    def generate_signals(
        self,
        close: Sequence[float],
        upper: Sequence[Optional[float]],
        lower: Sequence[Optional[float]],
    ) -> List[int]:
        n = len(close)
        if len(upper) != n or len(lower) != n:
            raise ValueError("close, upper and lower must have the same length")
        if n == 0:
            return []
        state = StrategyState()
        signals: List[int] = [int(SignalAction.HOLD)]
        for i in range(1, n):
            signals.append(int(self.step(state, i, close, upper, lower)))
        logger.info(
            "Signals: buys=%d, sells=%d",
            sum(1 for s in signals if s == SignalAction.BUY),
            sum(1 for s in signals if s == SignalAction.SELL),
        )
        return signals
