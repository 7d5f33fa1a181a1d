"""Strategies: base interface and the MTR band strategy."""

from mtr_backtester.strategies.base import BaseStrategy
from mtr_backtester.strategies.mtr_bands import MTRBandStrategy

__all__ = ["BaseStrategy", "MTRBandStrategy"]
