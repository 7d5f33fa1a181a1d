"""Core: config, types, logging, exceptions."""

from mtr_backtester.core.config import load_config, Config
from mtr_backtester.core.types import (
    BaselineChange,
    IndicatorOutput,
    PositionSide,
    PositionState,
    PriceSeries,
    SignalAction,
    StrategyState,
    Trade,
    TradeType,
)
from mtr_backtester.core.logger import setup_logging
from mtr_backtester.core.exceptions import (
    MTRBacktesterError,
    ConfigError,
    DataError,
    InsufficientDataError,
    PipelineStateError,
)

__all__ = [
    "load_config",
    "Config",
    "BaselineChange",
    "IndicatorOutput",
    "PositionSide",
    "PositionState",
    "PriceSeries",
    "SignalAction",
    "StrategyState",
    "Trade",
    "TradeType",
    "setup_logging",
    "MTRBacktesterError",
    "ConfigError",
    "DataError",
    "InsufficientDataError",
    "PipelineStateError",
]
