"""Entry signal generation conditioned on the market regime."""

from __future__ import annotations

import math
from typing import Dict, Optional, Tuple

from ..core.types import HOLD, Direction, Regime, Signal, SignalType, StrategyKind

MAX_SIGNAL_STRENGTH = 2.0

# regime -> (strategy, direction when z > 0, direction when z < 0);
# None means the regime never opens positions
_REGIME_PLAYBOOK: Dict[Regime, Optional[Tuple[StrategyKind, Direction, Direction]]] = {
    # fade the spread
    Regime.HIGH_CORRELATION: (
        StrategyKind.MEAN_REVERSION,
        Direction.SHORT_A_LONG_B,
        Direction.LONG_A_SHORT_B,
    ),
    # follow the spread
    Regime.LOW_CORRELATION: (
        StrategyKind.MOMENTUM,
        Direction.LONG_A_SHORT_B,
        Direction.SHORT_A_LONG_B,
    ),
    Regime.TRANSITION: None,
}


class SignalGenerator:
    """Turns today's z-score and regime into an entry signal or a hold."""

    def __init__(self, entry_threshold: float = 2.5, momentum_entry_threshold: float | None = None):
        if entry_threshold <= 0:
            raise ValueError("entry_threshold must be positive")
        self.entry_threshold = entry_threshold
        self.momentum_entry_threshold = momentum_entry_threshold or entry_threshold

    @classmethod
    def from_config(cls, config) -> "SignalGenerator":
        return cls(config.zscore_entry_threshold, config.momentum_entry_threshold)

    def threshold_for(self, strategy: StrategyKind) -> float:
        if strategy is StrategyKind.MOMENTUM:
            return self.momentum_entry_threshold
        return self.entry_threshold

    def generate(self, zscore: float, regime: Regime) -> Signal:
        if not math.isfinite(zscore):
            return HOLD

        playbook = _REGIME_PLAYBOOK[regime]
        if playbook is None:
            return HOLD

        strategy, direction_up, direction_down = playbook
        threshold = self.threshold_for(strategy)
        if abs(zscore) <= threshold:
            return HOLD

        return Signal(
            type=SignalType.ENTRY,
            direction=direction_up if zscore > 0 else direction_down,
            strategy=strategy,
            strength=min(abs(zscore) / threshold, MAX_SIGNAL_STRENGTH),
        )
