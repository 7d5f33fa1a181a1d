"""MTR band backtester: sticky ATR bands, band signals, long/flat backtest."""

from mtr_backtester.simulator import TradingSimulator

__version__ = "0.1.0"

__all__ = ["TradingSimulator", "__version__"]
