"""
Session orchestrator: load data -> indicator -> signals -> backtest -> results.
One TradingSimulator per session; instances share nothing.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from mtr_backtester.analytics.comparison import BuyHoldComparison, buy_and_hold
from mtr_backtester.backtesting.engine import BacktestEngine, BacktestResult
from mtr_backtester.core.config import Config
from mtr_backtester.core.exceptions import PipelineStateError
from mtr_backtester.core.types import IndicatorOutput, PriceSeries
from mtr_backtester.data.loader import load_price_csv, normalize_frame
from mtr_backtester.data.mock import generate_mock_series
from mtr_backtester.indicators.mtr import MTRIndicator
from mtr_backtester.reports.export import export_results_csv, results_frame
from mtr_backtester.strategies.mtr_bands import MTRBandStrategy

logger = logging.getLogger("mtr_backtester.simulator")


class TradingSimulator:
    """
    Holds the components and the outputs of each stage. A stage called before its
    prerequisite raises PipelineStateError; earlier outputs stay available.
    """

    def __init__(
        self,
        indicator_params: Optional[Dict[str, Any]] = None,
        strategy_params: Optional[Dict[str, Any]] = None,
        backtest_params: Optional[Dict[str, Any]] = None,
    ):
        self.indicator = MTRIndicator(**(indicator_params or {}))
        self.strategy = MTRBandStrategy(**(strategy_params or {}))
        self.engine = BacktestEngine(**(backtest_params or {}))
        self.market_data: Optional[PriceSeries] = None
        self.indicators: Optional[IndicatorOutput] = None
        self.signals: Optional[List[int]] = None
        self.backtest_result: Optional[BacktestResult] = None

    @classmethod
    def from_config(cls, config: Config) -> "TradingSimulator":
        return cls(
            indicator_params=config.indicator_params(),
            strategy_params=config.strategy_params(),
            backtest_params=config.backtest_params(),
        )

    # --- data ---

    def load_data(self, data: Union[PriceSeries, pd.DataFrame], symbol: str = "") -> PriceSeries:
        """Set the price series; downstream outputs are cleared."""
        if isinstance(data, pd.DataFrame):
            data = PriceSeries.from_frame(normalize_frame(data), symbol=symbol)
        self.market_data = data
        self.indicators = None
        self.signals = None
        self.backtest_result = None
        logger.info("Loaded %d bars for %s", len(data), data.symbol or "<unnamed>")
        return data

    def load_csv(self, path: Union[str, Path], symbol: str = "", start: Optional[str] = None,
                 end: Optional[str] = None) -> PriceSeries:
        return self.load_data(load_price_csv(path, symbol, start, end))

    def load_mock(self, symbol: str, start: str = "2020-01-01", end: Optional[str] = None,
                  seed: Optional[int] = None) -> PriceSeries:
        return self.load_data(generate_mock_series(symbol, start, end, seed=seed))

    # --- pipeline stages ---

    def calculate_indicator(self, params: Optional[Dict[str, Any]] = None) -> IndicatorOutput:
        if self.market_data is None:
            raise PipelineStateError("No market data loaded. Call load_data() first.")
        if params:
            self.indicator = MTRIndicator(**params)
        data = self.market_data
        self.indicators = self.indicator.calculate(data.high, data.low, data.close)
        self.signals = None
        self.backtest_result = None
        return self.indicators

    def generate_signals(self, params: Optional[Dict[str, Any]] = None) -> List[int]:
        if self.indicators is None:
            raise PipelineStateError("No indicators calculated. Call calculate_indicator() first.")
        if params:
            self.strategy = MTRBandStrategy(**params)
        self.signals = self.strategy.generate_signals(
            self.market_data.close, self.indicators.upper, self.indicators.lower,
        )
        self.backtest_result = None
        return self.signals

    def run_backtest(self, params: Optional[Dict[str, Any]] = None) -> BacktestResult:
        if self.signals is None:
            raise PipelineStateError("No signals generated. Call generate_signals() first.")
        if params:
            self.engine = BacktestEngine(**params)
        data = self.market_data
        self.backtest_result = self.engine.run(data.dates, data.close, self.signals, self.strategy)
        return self.backtest_result

    def run(self, data: Union[PriceSeries, pd.DataFrame, None] = None) -> Dict[str, Any]:
        """Run every stage in order and return results()."""
        if data is not None:
            self.load_data(data)
        self.calculate_indicator()
        self.generate_signals()
        self.run_backtest()
        return self.results()

    # --- results ---

    def buy_hold_comparison(self) -> BuyHoldComparison:
        if self.market_data is None or self.backtest_result is None:
            raise PipelineStateError("No backtest results available. Run backtest first.")
        return buy_and_hold(
            self.market_data.close,
            self.engine.initial_capital,
            self.backtest_result.metrics.total_return_pct,
            commission_per_share=self.engine.commission_per_share,
            min_commission=self.engine.min_commission,
        )

    def basic_results(self) -> Dict[str, Any]:
        """Data plus whatever indicator/signal output exists so far."""
        if self.market_data is None:
            raise PipelineStateError("No market data available. Load data first.")
        return {
            "market_data": self.market_data,
            "indicators": self.indicators,
            "signals": self.signals,
        }

    def results(self) -> Dict[str, Any]:
        if self.backtest_result is None:
            raise PipelineStateError("No backtest results available. Run backtest first.")
        return {
            "strategy": self.backtest_result.metrics,
            "buy_hold": self.buy_hold_comparison(),
            "trades": self.backtest_result.trades,
            "equity_curve": self.backtest_result.equity_curve,
            "market_data": self.market_data,
            "indicators": self.indicators,
            "signals": self.signals,
        }

    def results_frame(self) -> pd.DataFrame:
        if self.backtest_result is None:
            raise PipelineStateError("No data available for export. Run simulation first.")
        return results_frame(
            self.market_data, self.indicators, self.signals, self.backtest_result.equity_curve,
        )

    def export_csv(self, path: Union[str, Path]) -> Path:
        return export_results_csv(self.results_frame(), path)
