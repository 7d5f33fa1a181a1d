"""
Load configuration from config.yaml and .env. Environment variables win over the file.
"""

from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from mtr_backtester.core.exceptions import ConfigError


def _env_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path(__file__).resolve().parents[2]
    return root / ".env"


def load_dotenv_if_exists(project_root: Optional[Path] = None) -> None:
    """Load .env from project root if present."""
    path = _env_path(project_root)
    if path.exists():
        load_dotenv(path)


def load_config(config_path: Optional[Path] = None, project_root: Optional[Path] = None) -> "Config":
    """Load config.yaml and overlay with env. Returns Config."""
    load_dotenv_if_exists(project_root)
    root = project_root or Path(__file__).resolve().parents[2]
    path = config_path or root / "config.yaml"
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"invalid YAML in {path}: {e}") from e
    elif config_path is not None:
        raise ConfigError(f"config file not found: {path}")

    def env(key: str, default: Any = "") -> str:
        return os.getenv(key, str(default if default is not None else "")).strip()

    def env_bool(key: str, default: bool = False) -> bool:
        return os.getenv(key, str(default)).lower() in ("true", "1", "yes")

    def env_int(key: str, default: int = 0) -> int:
        raw = os.getenv(key)
        if raw is None:
            return int(default)
        try:
            return int(raw)
        except ValueError as e:
            raise ConfigError(f"{key} must be an integer, got {raw!r}") from e

    def env_float(key: str, default: float = 0.0) -> float:
        raw = os.getenv(key)
        if raw is None:
            return float(default)
        try:
            return float(raw)
        except ValueError as e:
            raise ConfigError(f"{key} must be a number, got {raw!r}") from e

    indicator = data.get("indicator", {}) or {}
    strategy = data.get("strategy", {}) or {}
    backtest = data.get("backtest", {}) or {}
    dataset = data.get("data", {}) or {}
    logging_cfg = data.get("logging", {}) or {}

    initial_baseline = os.getenv("INITIAL_BASELINE", indicator.get("initial_baseline"))

    return Config(
        # Data
        symbol=env("SYMBOL", dataset.get("symbol", "AAPL")).upper(),
        start_date=env("START_DATE", dataset.get("start_date")) or None,
        end_date=env("END_DATE", dataset.get("end_date")) or None,
        csv_path=env("CSV_PATH", dataset.get("csv_path")) or None,
        # Indicator
        serenity_window=env_int("SERENITY_WINDOW", indicator.get("serenity_window", 20)),
        atr_window=env_int("ATR_WINDOW", indicator.get("atr_window", 14)),
        band_multiplier=env_float("BAND_MULTIPLIER", indicator.get("band_multiplier", 2.0)),
        stability_confirmation_bars=env_int(
            "STABILITY_CONFIRMATION_BARS", indicator.get("stability_confirmation_bars", 10)
        ),
        initial_baseline=float(initial_baseline) if initial_baseline not in (None, "") else None,
        # Strategy
        inside_margin_ratio=env_float("INSIDE_MARGIN_RATIO", strategy.get("inside_margin_ratio", 0.10)),
        min_days_between_trades=env_int("MIN_DAYS_BETWEEN_TRADES", strategy.get("min_days_between_trades", 2)),
        band_change_epsilon=env_float("BAND_CHANGE_EPSILON", strategy.get("band_change_epsilon", 1e-6)),
        reassess_on_band_change=env_bool("REASSESS_ON_BAND_CHANGE", strategy.get("reassess_on_band_change", True)),
        stop_loss_pct=env_float("STOP_LOSS_PCT", strategy.get("stop_loss_pct", 0.10)),
        scale_out_pct=env_float("SCALE_OUT_PCT", strategy.get("scale_out_pct", 0.5)),
        # Backtest
        initial_capital=env_float("INITIAL_CAPITAL", backtest.get("initial_capital", 10000.0)),
        commission_per_share=env_float("COMMISSION_PER_SHARE", backtest.get("commission_per_share", 0.01)),
        min_commission=env_float("MIN_COMMISSION", backtest.get("min_commission", 7.0)),
        tax_rate=env_float("TAX_RATE", backtest.get("tax_rate", 0.25)),
        # Logging
        log_level=env("LOG_LEVEL", logging_cfg.get("level", "INFO")),
        log_dir=Path(logging_cfg.get("log_dir", "logs")),
        log_file=logging_cfg.get("log_file"),
    )


class Config:
    """Unified configuration. Immutable after load by convention."""

    __slots__ = (
        "symbol", "start_date", "end_date", "csv_path",
        "serenity_window", "atr_window", "band_multiplier", "stability_confirmation_bars", "initial_baseline",
        "inside_margin_ratio", "min_days_between_trades", "band_change_epsilon", "reassess_on_band_change",
        "stop_loss_pct", "scale_out_pct",
        "initial_capital", "commission_per_share", "min_commission", "tax_rate",
        "log_level", "log_dir", "log_file",
    )

    def __init__(
        self,
        symbol: str = "AAPL",
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        csv_path: Optional[str] = None,
        serenity_window: int = 20,
        atr_window: int = 14,
        band_multiplier: float = 2.0,
        stability_confirmation_bars: int = 10,
        initial_baseline: Optional[float] = None,
        inside_margin_ratio: float = 0.10,
        min_days_between_trades: int = 2,
        band_change_epsilon: float = 1e-6,
        reassess_on_band_change: bool = True,
        stop_loss_pct: float = 0.10,
        scale_out_pct: float = 0.5,
        initial_capital: float = 10000.0,
        commission_per_share: float = 0.01,
        min_commission: float = 7.0,
        tax_rate: float = 0.25,
        log_level: str = "INFO",
        log_dir: Path = None,
        log_file: Optional[str] = None,
    ):
        self.symbol = symbol
        self.start_date = start_date
        self.end_date = end_date
        self.csv_path = csv_path
        self.serenity_window = serenity_window
        self.atr_window = atr_window
        self.band_multiplier = band_multiplier
        self.stability_confirmation_bars = stability_confirmation_bars
        self.initial_baseline = initial_baseline
        self.inside_margin_ratio = inside_margin_ratio
        self.min_days_between_trades = min_days_between_trades
        self.band_change_epsilon = band_change_epsilon
        self.reassess_on_band_change = reassess_on_band_change
        self.stop_loss_pct = stop_loss_pct
        self.scale_out_pct = scale_out_pct
        self.initial_capital = initial_capital
        self.commission_per_share = commission_per_share
        self.min_commission = min_commission
        self.tax_rate = tax_rate
        self.log_level = log_level
        self.log_dir = Path(log_dir) if log_dir else Path("logs")
        self.log_file = log_file

    def indicator_params(self) -> dict[str, Any]:
        return {
            "serenity_window": self.serenity_window,
            "atr_window": self.atr_window,
            "band_multiplier": self.band_multiplier,
            "stability_confirmation_bars": self.stability_confirmation_bars,
            "initial_baseline": self.initial_baseline,
        }

    def strategy_params(self) -> dict[str, Any]:
        return {
            "inside_margin_ratio": self.inside_margin_ratio,
            "min_days_between_trades": self.min_days_between_trades,
            "band_change_epsilon": self.band_change_epsilon,
            "reassess_on_band_change": self.reassess_on_band_change,
            "stop_loss_pct": self.stop_loss_pct,
            "scale_out_pct": self.scale_out_pct,
        }

    def backtest_params(self) -> dict[str, Any]:
        return {
            "initial_capital": self.initial_capital,
            "commission_per_share": self.commission_per_share,
            "min_commission": self.min_commission,
            "tax_rate": self.tax_rate,
        }
