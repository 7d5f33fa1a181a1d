"""Data: CSV loading and synthetic price generation."""

from mtr_backtester.data.loader import load_price_csv, normalize_frame
from mtr_backtester.data.mock import generate_mock_series

__all__ = ["load_price_csv", "normalize_frame", "generate_mock_series"]
