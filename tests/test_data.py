"""Unit tests for data.loader and data.mock."""

from datetime import date

import pandas as pd
import pytest
from mtr_backtester.core.exceptions import DataError
from mtr_backtester.core.types import PriceSeries
from mtr_backtester.data.loader import load_price_csv
from mtr_backtester.data.mock import generate_mock_series


def write_csv(path, rows, columns=("Date", "Open", "High", "Low", "Close", "Volume")):
    pd.DataFrame(rows, columns=list(columns)).to_csv(path, index=False)
    return path


def test_load_price_csv_sorts_and_dedupes(tmp_path):
    path = write_csv(tmp_path / "spy.csv", [
        ("2024-01-03", 11, 12, 10, 11.5, 200),
        ("2024-01-02", 10, 11, 9, 10.5, 100),
        ("2024-01-03", 11, 12, 10, 11.8, 300),
    ])
    s = load_price_csv(path)
    assert s.symbol == "SPY"
    assert s.dates == [date(2024, 1, 2), date(2024, 1, 3)]
    assert s.close == [10.5, 11.8]
    assert s.volume == [100, 300]


def test_load_price_csv_date_filter(tmp_path):
    path = write_csv(tmp_path / "x.csv", [
        ("2024-01-02", 10, 11, 9, 10, 1),
        ("2024-01-03", 10, 11, 9, 10, 1),
        ("2024-01-04", 10, 11, 9, 10, 1),
    ])
    s = load_price_csv(path, "X", start="2024-01-03", end="2024-01-03")
    assert s.dates == [date(2024, 1, 3)]


def test_load_price_csv_missing_column(tmp_path):
    path = write_csv(tmp_path / "bad.csv", [("2024-01-02", 10, 11, 9, 10)],
                     columns=("date", "open", "high", "low", "close"))
    with pytest.raises(DataError, match="volume"):
        load_price_csv(path)


def test_load_price_csv_missing_file(tmp_path):
    with pytest.raises(DataError):
        load_price_csv(tmp_path / "nope.csv")


def test_price_series_validates_lengths():
    with pytest.raises(ValueError):
        PriceSeries("X", [date(2024, 1, 2)], [1.0], [1.0], [1.0], [1.0, 2.0], [1])
    with pytest.raises(ValueError):
        PriceSeries("X", [date(2024, 1, 3), date(2024, 1, 2)], [1.0] * 2, [1.0] * 2, [1.0] * 2, [1.0] * 2, [1, 1])


def test_mock_series_is_seeded_and_weekday_only():
    a = generate_mock_series("aapl", "2024-01-01", "2024-03-31", seed=7)
    b = generate_mock_series("AAPL", "2024-01-01", "2024-03-31", seed=7)
    assert a.symbol == "AAPL"
    assert a.close == b.close
    assert all(d.weekday() < 5 for d in a.dates)
    assert len(a) == len(pd.bdate_range("2024-01-01", "2024-03-31"))
    for o, h, lo, c in zip(a.open, a.high, a.low, a.close):
        assert lo <= c <= h
        assert lo <= o <= h
        assert c > 0


def test_mock_series_base_price():
    s = generate_mock_series("ZZZ", "2024-01-01", "2024-01-05", seed=1, base_price=50.0)
    assert s.open[0] == pytest.approx(50.0, rel=0.02)


def test_mock_series_empty_range():
    with pytest.raises(DataError):
        generate_mock_series("X", "2024-01-06", "2024-01-07")  # weekend
