"""
MTR band indicator: ATR-scaled bands around a sticky, mostly horizontal baseline.
The baseline moves only on large, confirmed regime shifts.
"""

from __future__ import annotations
import logging
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from mtr_backtester.core.exceptions import ConfigError
from mtr_backtester.core.types import BaselineChange, IndicatorOutput, OptionalFloats, to_optional

logger = logging.getLogger("mtr_backtester.indicators")

# Baseline change thresholds (fixed, not configurable)
MIN_BASELINE_DEVIATION = 0.25
MIN_BARS_BETWEEN_CHANGES = 30
MAX_STABILITY_RANGE = 0.15


def true_range(high: Sequence[float], low: Sequence[float], close: Sequence[float]) -> pd.Series:
    """True range per bar; bar 0 is high - low."""
    high_s = pd.Series(high, dtype="float64")
    low_s = pd.Series(low, dtype="float64")
    prev_close = pd.Series(close, dtype="float64").shift()
    high_low = high_s - low_s
    high_close = (high_s - prev_close).abs()
    low_close = (low_s - prev_close).abs()
    return pd.concat([high_low, high_close, low_close], axis=1).max(axis=1)


class MTRIndicator:
    """
    Computes base/upper/lower bands.
    Bands stay undefined until max(serenity_window, atr_window) bars exist.
    """

    def __init__(
        self,
        serenity_window: int = 20,
        atr_window: int = 14,
        band_multiplier: float = 2.0,
        stability_confirmation_bars: int = 10,
        initial_baseline: Optional[float] = None,
    ):
        if serenity_window < 1 or atr_window < 1 or stability_confirmation_bars < 1:
            raise ConfigError("indicator windows must be >= 1")
        if band_multiplier < 0:
            raise ConfigError(f"band_multiplier must be >= 0, got {band_multiplier}")
        if initial_baseline is not None and initial_baseline <= 0:
            raise ConfigError(f"initial_baseline must be positive, got {initial_baseline}")
        self.serenity_window = serenity_window
        self.atr_window = atr_window
        self.band_multiplier = band_multiplier
        self.stability_confirmation_bars = stability_confirmation_bars
        self.initial_baseline = initial_baseline

    @property
    def start_index(self) -> int:
        return max(self.serenity_window, self.atr_window)

    def average_true_range(
        self, high: Sequence[float], low: Sequence[float], close: Sequence[float]
    ) -> OptionalFloats:
        """Simple moving average of true range; None for the first atr_window - 1 bars."""
        atr = true_range(high, low, close).rolling(self.atr_window).mean()
        return to_optional(atr.tolist())

    def _band(self, baseline: float, atr_pct: Optional[float]) -> tuple[float, float]:
        half_width = self.band_multiplier * (atr_pct or 0.0)
        return baseline * (1 + half_width), baseline * (1 - half_width)

    def calculate(
        self, high: Sequence[float], low: Sequence[float], close: Sequence[float]
    ) -> IndicatorOutput:
        n = len(close)
        if len(high) != n or len(low) != n:
            raise ValueError("high, low and close must have the same length")

        atr = self.average_true_range(high, low, close)
        atr_pct: OptionalFloats = [
            a / c if a is not None else None for a, c in zip(atr, close)
        ]
        base: OptionalFloats = [None] * n
        upper: OptionalFloats = [None] * n
        lower: OptionalFloats = [None] * n
        changes: List[BaselineChange] = []

        start = self.start_index
        if n <= start:
            logger.warning("Insufficient data for MTR bands: %d bars, need more than %d", n, start)
            return IndicatorOutput(base=base, upper=upper, lower=lower, atr_pct=atr_pct)

        baseline = float(self.initial_baseline or close[start])
        band_upper, band_lower = self._band(baseline, atr_pct[start])
        logger.debug("MTR starting baseline %.2f at index %d", baseline, start)

        closes = np.asarray(close, dtype="float64")
        bars_since_change = 0
        for i in range(start, n):
            bars_since_change += 1
            deviation = abs(closes[i] - baseline) / baseline
            if deviation > MIN_BASELINE_DEVIATION and bars_since_change > MIN_BARS_BETWEEN_CHANGES:
                window = closes[max(0, i - self.stability_confirmation_bars): i + 1]
                mean = float(window.mean())
                if (window.max() - window.min()) / mean < MAX_STABILITY_RANGE:
                    changes.append(BaselineChange(index=i, old_baseline=baseline, new_baseline=mean))
                    logger.debug("MTR baseline change at index %d: %.2f -> %.2f", i, baseline, mean)
                    baseline = mean
                    band_upper, band_lower = self._band(baseline, atr_pct[i])
                    bars_since_change = 0
            base[i] = baseline
            upper[i] = band_upper
            lower[i] = band_lower

        logger.info(
            "MTR bands computed: %d bars, %d baseline changes, final baseline %.2f",
            n, len(changes), baseline,
        )
        return IndicatorOutput(
            base=base, upper=upper, lower=lower, atr_pct=atr_pct, baseline_changes=changes,
        )
