"""Indicators: MTR sticky baseline and ATR bands."""

from mtr_backtester.indicators.mtr import MTRIndicator, true_range

__all__ = ["MTRIndicator", "true_range"]
