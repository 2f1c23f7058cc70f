"""Domain records shared by the core and the engine."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional


class Regime(str, Enum):
    """Market regime derived from the rolling returns correlation."""
    HIGH_CORRELATION = "high-correlation"
    LOW_CORRELATION = "low-correlation"
    TRANSITION = "transition"


class Direction(str, Enum):
    """Which leg is bought and which is sold."""
    LONG_A_SHORT_B = "long_A_short_B"
    SHORT_A_LONG_B = "short_A_long_B"


class StrategyKind(str, Enum):
    MEAN_REVERSION = "mean_reversion"
    MOMENTUM = "momentum"


class SignalType(str, Enum):
    ENTRY = "entry"
    HOLD = "hold"


class ExitReason(str, Enum):
    """Why a position was closed."""
    MAX_HOLDING_PERIOD = "max_holding_period"
    STOP_LOSS = "stop_loss"
    ZSCORE_STOP = "zscore_stop"
    MEAN_REVERSION_TARGET = "mean_reversion_target"
    MOMENTUM_REVERSAL = "momentum_reversal"
    PROFIT_TARGET = "profit_target"
    BACKTEST_END = "backtest_end"


class PositionStatus(str, Enum):
    PENDING = "pending"
    OPEN = "open"
    CLOSED = "closed"


@dataclass(frozen=True)
class Signal:
    """Output of the signal generator for a single day."""
    type: SignalType
    direction: Optional[Direction] = None
    strategy: Optional[StrategyKind] = None
    strength: float = 0.0

    @property
    def is_entry(self) -> bool:
        return self.type is SignalType.ENTRY


HOLD = Signal(type=SignalType.HOLD)


@dataclass(frozen=True)
class PositionSize:
    """Capital allocation accepted by the position sizer."""
    capital_allocated: float
    leverage: float


@dataclass
class Position:
    """Open pairs trade. Mutated only by the portfolio that owns it."""
    id: str
    entry_day: int
    entry_price_a: float
    entry_price_b: float
    entry_zscore: float
    direction: Direction
    strategy: StrategyKind
    regime: Regime
    position_size: float
    leverage: float
    commission: float
    slippage: float
    total_costs: float
    status: PositionStatus = PositionStatus.PENDING
    # экстремумы mark-to-market PnL до издержек, % от position_size
    max_favorable_excursion: float = 0.0
    max_adverse_excursion: float = 0.0

    @property
    def exposure(self) -> float:
        return self.position_size * self.leverage


@dataclass(frozen=True)
class Trade:
    """Closed position. Never mutated after it enters the trade history."""
    id: str
    entry_day: int
    entry_price_a: float
    entry_price_b: float
    entry_zscore: float
    direction: Direction
    strategy: StrategyKind
    regime: Regime
    position_size: float
    leverage: float
    commission: float
    slippage: float
    total_costs: float
    exit_day: int
    exit_price_a: float
    exit_price_b: float
    exit_zscore: float
    exit_reason: ExitReason
    pnl: float
    pnl_pct: float
    holding_period: int
    max_favorable_excursion: float = 0.0
    max_adverse_excursion: float = 0.0
    status: PositionStatus = PositionStatus.CLOSED

    @property
    def is_win(self) -> bool:
        return self.pnl > 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, Enum):
                data[key] = value.value
        return data


@dataclass(frozen=True)
class EquityPoint:
    """One equity-curve sample, recorded at the end of a simulated day."""
    day: int
    equity: float
    cash: float
    unrealized_pnl: float
    drawdown: float
    regime: Regime
    active_positions: int

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["regime"] = self.regime.value
        return data
