"""Abstract strategy: band arrays in, one signal per bar out."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence


class BaseStrategy(ABC):
    """
    Strategy turns closes and band arrays into signals (-1 sell, 0 hold, 1 buy, 2 scale-out).
    The backtest engine also reads stop_loss_pct and scale_out_pct from it.
    """

    stop_loss_pct: float = 0.10
    scale_out_pct: float = 0.5

    @abstractmethod
    def generate_signals(
        self,
        close: Sequence[float],
        upper: Sequence[Optional[float]],
        lower: Sequence[Optional[float]],
    ) -> List[int]:
        """Return a list of len(close) signals; index 0 is always 0."""
        pass
