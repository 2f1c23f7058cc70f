"""Regime-dependent position sizing."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from ..core.types import PositionSize, Regime

logger = logging.getLogger(__name__)

BASE_ALLOCATION: Dict[Regime, float] = {
    Regime.HIGH_CORRELATION: 0.4,
    Regime.LOW_CORRELATION: 0.5,
    Regime.TRANSITION: 0.2,
}


class PositionSizer:
    """Allocates capital to a signal and picks its leverage.

    Allocation is ``base(regime) * strength * capital`` capped at
    ``max_position_size * capital``. Allocations under ``min_position_size``
    are rejected.
    """

    def __init__(
        self,
        leverage: Dict[Regime, float],
        max_position_size: float = 0.5,
        min_position_size: float = 1000.0,
    ):
        missing = set(Regime) - set(leverage)
        if missing:
            raise ValueError(f"Leverage not defined for regimes: {sorted(r.value for r in missing)}")
        self.leverage = dict(leverage)
        self.max_position_size = max_position_size
        self.min_position_size = min_position_size

    @classmethod
    def from_config(cls, config) -> "PositionSizer":
        return cls(
            leverage={
                Regime.HIGH_CORRELATION: config.mean_reversion_leverage,
                Regime.LOW_CORRELATION: config.momentum_leverage,
                Regime.TRANSITION: config.transition_leverage,
            },
            max_position_size=config.max_position_size,
            min_position_size=config.min_position_size,
        )

    def size(self, regime: Regime, strength: float, available_capital: float) -> Optional[PositionSize]:
        if available_capital <= 0 or strength <= 0:
            return None

        allocation = BASE_ALLOCATION[regime] * strength * available_capital
        allocation = min(allocation, self.max_position_size * available_capital)

        if allocation < self.min_position_size:
            logger.debug(
                f"Allocation ${allocation:,.2f} below minimum ${self.min_position_size:,.2f}, signal dropped"
            )
            return None

        return PositionSize(capital_allocated=allocation, leverage=self.leverage[regime])
