"""
Exception hierarchy. Length mismatches and other argument errors stay ValueError.
"""

from __future__ import annotations


class MTRBacktesterError(Exception):
    """Base exception for mtr_backtester."""


class ConfigError(MTRBacktesterError):
    """Configuration value is missing or out of range."""


class DataError(MTRBacktesterError):
    """Price data could not be loaded or is malformed."""


class InsufficientDataError(DataError):
    """Not enough bars for the requested computation."""


class PipelineStateError(MTRBacktesterError):
    """A pipeline stage was called before the stage it depends on."""
