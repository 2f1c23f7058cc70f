"""Pure state transitions of a single pairs position.

Nothing here touches portfolio state: every function returns the new
record together with the cash movement it implies, and the portfolio
applies it.
"""

from __future__ import annotations

from typing import NamedTuple, Optional, Tuple

from .types import (
    Direction,
    ExitReason,
    Position,
    PositionSize,
    PositionStatus,
    Regime,
    Signal,
    StrategyKind,
    Trade,
)

# +1 when the position profits from A outperforming B
_DIRECTION_SIGN = {
    Direction.LONG_A_SHORT_B: 1.0,
    Direction.SHORT_A_LONG_B: -1.0,
}


class Settlement(NamedTuple):
    trade: Trade
    cash_delta: float


def leg_returns(position: Position, price_a: float, price_b: float) -> Tuple[float, float]:
    """Simple returns of both legs since entry."""
    return_a = (price_a - position.entry_price_a) / position.entry_price_a
    return_b = (price_b - position.entry_price_b) / position.entry_price_b
    return return_a, return_b


def spread_return(position: Position, price_a: float, price_b: float) -> float:
    """Unlevered return of the pair in the position's direction."""
    return_a, return_b = leg_returns(position, price_a, price_b)
    return _DIRECTION_SIGN[position.direction] * (return_a - return_b)


def unrealized_pnl(position: Position, price_a: float, price_b: float) -> float:
    """Mark-to-market PnL in dollars, leverage included, costs excluded."""
    return spread_return(position, price_a, price_b) * position.position_size * position.leverage


def mark(position: Position, price_a: float, price_b: float) -> float:
    """Mark an open position to market and widen its excursions.

    Returns the unrealized PnL; excursions are kept in % of ``position_size``.
    """
    pnl = unrealized_pnl(position, price_a, price_b)
    pnl_pct = pnl / position.position_size * 100.0
    position.max_favorable_excursion = max(position.max_favorable_excursion, pnl_pct)
    position.max_adverse_excursion = min(position.max_adverse_excursion, pnl_pct)
    return pnl


def build_position(
    position_id: str,
    signal: Signal,
    sizing: PositionSize,
    day: int,
    price_a: float,
    price_b: float,
    zscore: float,
    regime: Regime,
    commission_rate: float,
    slippage_rate: float,
) -> Tuple[Position, float]:
    """Create an open position and the cash debit of entering it."""
    if not signal.is_entry:
        raise ValueError(f"Cannot open a position from a {signal.type.value} signal")

    size = sizing.capital_allocated
    commission = size * commission_rate
    slippage = size * slippage_rate
    position = Position(
        id=position_id,
        entry_day=day,
        entry_price_a=price_a,
        entry_price_b=price_b,
        entry_zscore=zscore,
        direction=signal.direction,
        strategy=signal.strategy,
        regime=regime,
        position_size=size,
        leverage=sizing.leverage,
        commission=commission,
        slippage=slippage,
        total_costs=commission + slippage,
    )
    position.status = PositionStatus.OPEN
    return position, -(size + commission + slippage)


def evaluate_exit(
    position: Position,
    day: int,
    zscore: float,
    price_a: float,
    price_b: float,
    config,
) -> Optional[ExitReason]:
    """Return the first exit condition that fires, or ``None`` to hold.

    Order: holding period, dollar stop, optional z-score stop, strategy
    target (mean reversion) or reversal (momentum), optional momentum
    profit target.
    """
    if day - position.entry_day > config.max_holding_period:
        return ExitReason.MAX_HOLDING_PERIOD

    if unrealized_pnl(position, price_a, price_b) < -config.stop_loss_threshold * position.position_size:
        return ExitReason.STOP_LOSS

    if position.strategy is StrategyKind.MEAN_REVERSION:
        if config.stop_loss_zscore is not None and abs(zscore) > config.stop_loss_zscore:
            return ExitReason.ZSCORE_STOP
        if abs(zscore) < config.zscore_exit_threshold:
            return ExitReason.MEAN_REVERSION_TARGET
        return None

    if position.strategy is StrategyKind.MOMENTUM:
        entry = position.entry_zscore
        if (entry > 0 and zscore < 0) or (entry < 0 and zscore > 0):
            return ExitReason.MOMENTUM_REVERSAL
        if config.momentum_profit_target is not None:
            return_a, return_b = leg_returns(position, price_a, price_b)
            if abs(return_a - return_b) > config.momentum_profit_target:
                return ExitReason.PROFIT_TARGET
        return None

    raise ValueError(f"Unknown strategy: {position.strategy}")


def settle(
    position: Position,
    day: int,
    price_a: float,
    price_b: float,
    zscore: float,
    reason: ExitReason,
    commission_rate: float,
    slippage_rate: float,
) -> Settlement:
    """Close ``position`` and return the trade record and the cash credit."""
    if position.status is not PositionStatus.OPEN:
        raise ValueError(f"Position {position.id} is {position.status.value}, not open")
    if day < position.entry_day:
        raise ValueError(f"Exit day {day} precedes entry day {position.entry_day} for {position.id}")

    gross = mark(position, price_a, price_b)
    exit_commission = position.position_size * commission_rate
    exit_slippage = position.position_size * slippage_rate
    net = gross - exit_commission - exit_slippage

    trade = Trade(
        id=position.id,
        entry_day=position.entry_day,
        entry_price_a=position.entry_price_a,
        entry_price_b=position.entry_price_b,
        entry_zscore=position.entry_zscore,
        direction=position.direction,
        strategy=position.strategy,
        regime=position.regime,
        position_size=position.position_size,
        leverage=position.leverage,
        commission=position.commission + exit_commission,
        slippage=position.slippage + exit_slippage,
        total_costs=position.total_costs + exit_commission + exit_slippage,
        exit_day=day,
        exit_price_a=price_a,
        exit_price_b=price_b,
        exit_zscore=zscore,
        exit_reason=reason,
        pnl=net,
        pnl_pct=net / position.position_size * 100.0,
        holding_period=day - position.entry_day,
        max_favorable_excursion=position.max_favorable_excursion,
        max_adverse_excursion=position.max_adverse_excursion,
    )
    position.status = PositionStatus.CLOSED
    return Settlement(trade, position.position_size + net)
