"""Market regime classification from rolling correlation."""

import math

from ..core.types import Regime


class RegimeClassifier:
    """Maps a returns correlation to a regime using two fixed thresholds.

    Thresholds are exclusive on the extreme side: a value exactly at a
    threshold is ``transition``. Undefined correlation (zero-variance
    window) is also ``transition``.
    """

    def __init__(self, high_threshold: float = 0.7, low_threshold: float = 0.3):
        if low_threshold >= high_threshold:
            raise ValueError(
                f"low_threshold ({low_threshold}) must be below high_threshold ({high_threshold})"
            )
        self.high_threshold = high_threshold
        self.low_threshold = low_threshold

    @classmethod
    def from_config(cls, config) -> "RegimeClassifier":
        return cls(config.high_corr_threshold, config.low_corr_threshold)

    def classify(self, correlation: float) -> Regime:
        if correlation is None or not math.isfinite(correlation):
            return Regime.TRANSITION
        if correlation > self.high_threshold:
            return Regime.HIGH_CORRELATION
        if correlation < self.low_threshold:
            return Regime.LOW_CORRELATION
        return Regime.TRANSITION
