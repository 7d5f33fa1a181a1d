"""Backtesting engine: bar-by-bar replay with commission, tax and stop-loss."""

from mtr_backtester.backtesting.engine import BacktestEngine, BacktestResult, BacktestRun

__all__ = ["BacktestEngine", "BacktestResult", "BacktestRun"]
