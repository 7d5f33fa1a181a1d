"""Tests for the TradingSimulator pipeline."""

import pandas as pd
import pytest
from mtr_backtester.analytics.comparison import BuyHoldComparison
from mtr_backtester.analytics.metrics import SummaryMetrics
from mtr_backtester.core.config import Config
from mtr_backtester.core.exceptions import PipelineStateError
from mtr_backtester.data.mock import generate_mock_series
from mtr_backtester.simulator import TradingSimulator


@pytest.fixture
def series():
    return generate_mock_series("AAPL", "2019-01-01", "2022-12-31", seed=42)


def test_stages_require_prerequisites(series):
    sim = TradingSimulator()
    with pytest.raises(PipelineStateError):
        sim.calculate_indicator()
    sim.load_data(series)
    with pytest.raises(PipelineStateError):
        sim.run_backtest()
    with pytest.raises(PipelineStateError):
        sim.generate_signals()
    sim.calculate_indicator()
    with pytest.raises(PipelineStateError):
        sim.results()
    # earlier outputs survive the failed call
    assert sim.basic_results()["indicators"] is not None
    assert sim.basic_results()["signals"] is None


def test_full_run(series):
    sim = TradingSimulator(indicator_params={"band_multiplier": 1.0})
    results = sim.run(series)
    assert isinstance(results["strategy"], SummaryMetrics)
    assert isinstance(results["buy_hold"], BuyHoldComparison)
    assert len(results["equity_curve"]) == len(series)
    assert len(results["signals"]) == len(series)
    assert results["strategy"].final_equity == results["equity_curve"][-1]
    bh = results["buy_hold"]
    assert bh.outperformance_pct == pytest.approx(results["strategy"].total_return_pct - bh.total_return_pct)


def test_short_series_runs_without_trades():
    short = generate_mock_series("AAPL", "2024-01-01", "2024-01-10", seed=1)
    results = TradingSimulator().run(short)
    assert results["trades"] == []
    assert results["signals"] == [0] * len(short)
    assert results["strategy"].final_equity == pytest.approx(10000.0)


def test_stage_params_replace_component(series):
    sim = TradingSimulator()
    sim.load_data(series)
    sim.calculate_indicator({"serenity_window": 30})
    assert sim.indicator.serenity_window == 30
    sim.generate_signals({"min_days_between_trades": 5, "stop_loss_pct": 0.05})
    assert sim.strategy.min_days_between_trades == 5
    sim.run_backtest({"initial_capital": 50000.0})
    assert sim.results()["strategy"].initial_capital == 50000.0


def test_reloading_data_clears_outputs(series):
    sim = TradingSimulator()
    sim.run(series)
    sim.load_data(series)
    assert sim.indicators is None
    assert sim.signals is None
    with pytest.raises(PipelineStateError):
        sim.results()


def test_load_dataframe(series):
    df = series.to_frame().rename(columns=str.upper)
    sim = TradingSimulator()
    loaded = sim.load_data(df, symbol="AAPL")
    assert len(loaded) == len(series)
    assert loaded.close == series.close


def test_from_config():
    sim = TradingSimulator.from_config(Config(atr_window=10, tax_rate=0.3, min_days_between_trades=4))
    assert sim.indicator.atr_window == 10
    assert sim.engine.tax_rate == 0.3
    assert sim.strategy.min_days_between_trades == 4


def test_export_csv(series, tmp_path):
    sim = TradingSimulator()
    sim.run(series)
    path = sim.export_csv(tmp_path / "out" / "results.csv")
    df = pd.read_csv(path)
    assert len(df) == len(series)
    assert list(df.columns) == [
        "Date", "Close_Price", "Should_Buy", "Should_Sell", "Signal_Raw",
        "MTR_Place", "MTR_Base", "MTR_Upper", "MTR_Lower", "Equity_Worth",
    ]
    assert df["Should_Buy"].sum() == sum(1 for s in sim.signals if s == 1)
