"""Cash, open positions and trade history of one backtest run."""

import logging
from typing import List

from . import positions as pos
from .types import (
    EquityPoint,
    ExitReason,
    Position,
    PositionSize,
    Regime,
    Signal,
    Trade,
)
from ..utils.logging_config import log_structured

logger = logging.getLogger(__name__)

MAX_OPEN_POSITIONS = 2


class Portfolio:
    """Ledger of one backtest run: cash, open positions, trade history and equity curve."""

    def __init__(
        self,
        initial_capital: float,
        commission: float = 0.0,
        slippage: float = 0.0,
        max_open_positions: int = MAX_OPEN_POSITIONS,
    ) -> None:
        if initial_capital <= 0:
            raise ValueError("`initial_capital` must be greater than 0")
        self.initial_capital = initial_capital
        self.commission = commission
        self.slippage = slippage
        self.max_open_positions = max_open_positions

        self.cash = initial_capital
        self.equity = initial_capital
        self.peak_equity = initial_capital
        self.positions: List[Position] = []
        self.trades: List[Trade] = []
        self.equity_curve: List[EquityPoint] = []
        self._trade_counter = 0

    def can_open_position(self) -> bool:
        """Return True if a new position can be opened."""
        return len(self.positions) < self.max_open_positions

    def open_position(
        self,
        signal: Signal,
        sizing: PositionSize,
        day: int,
        price_a: float,
        price_b: float,
        zscore: float,
        regime: Regime,
    ) -> Position:
        """Open a position and debit allocation plus entry costs from cash."""
        if not self.can_open_position():
            raise ValueError(
                f"Position limit reached: {len(self.positions)} >= {self.max_open_positions}"
            )

        position, cash_delta = pos.build_position(
            position_id=f"trade_{self._trade_counter}",
            signal=signal,
            sizing=sizing,
            day=day,
            price_a=price_a,
            price_b=price_b,
            zscore=zscore,
            regime=regime,
            commission_rate=self.commission,
            slippage_rate=self.slippage,
        )
        self._trade_counter += 1
        self.positions.append(position)
        self.cash += cash_delta

        log_structured(
            logger, "debug",
            f"ENTRY {position.strategy.value} {position.direction.value} "
            f"size=${position.position_size:,.0f} z={zscore:.2f}",
            trade_id=position.id, day=day, regime=regime.value,
            position_size=position.position_size, leverage=position.leverage,
        )
        return position

    def unrealized_pnl(self, price_a: float, price_b: float) -> float:
        """Sum of mark-to-market PnL over open positions."""
        return sum(pos.unrealized_pnl(p, price_a, price_b) for p in self.positions)

    def close_position(
        self,
        position: Position,
        day: int,
        price_a: float,
        price_b: float,
        zscore: float,
        reason: ExitReason,
    ) -> Trade:
        """Close an open position, credit cash and append the trade."""
        if position not in self.positions:
            raise ValueError(f"Position {position.id} is not held by this portfolio")

        trade, cash_delta = pos.settle(
            position, day, price_a, price_b, zscore, reason,
            commission_rate=self.commission,
            slippage_rate=self.slippage,
        )
        self.positions.remove(position)
        self.cash += cash_delta
        self.trades.append(trade)

        log_structured(
            logger, "debug",
            f"EXIT {trade.strategy.value} pnl=${trade.pnl:,.2f} "
            f"({trade.pnl_pct:.2f}%) reason={reason.value}",
            trade_id=trade.id, day=day, pnl=trade.pnl, holding_period=trade.holding_period,
        )
        return trade

    def process_exits(self, day: int, price_a: float, price_b: float, zscore: float, config) -> List[Trade]:
        """Evaluate exit rules for every open position; close the ones that fire."""
        closed = []
        for position in list(self.positions):
            reason = pos.evaluate_exit(position, day, zscore, price_a, price_b, config)
            if reason is not None:
                closed.append(self.close_position(position, day, price_a, price_b, zscore, reason))
        return closed

    def close_all(self, day: int, price_a: float, price_b: float, zscore: float,
                  reason: ExitReason = ExitReason.BACKTEST_END) -> List[Trade]:
        """Force-close every remaining position."""
        return [
            self.close_position(position, day, price_a, price_b, zscore, reason)
            for position in list(self.positions)
        ]

    def record_equity(self, day: int, price_a: float, price_b: float, regime: Regime) -> EquityPoint:
        """Append an equity-curve sample for ``day``."""
        # дневная переоценка также обновляет экскурсии позиций
        unrealized = sum(pos.mark(p, price_a, price_b) for p in self.positions)
        equity = self.cash + unrealized
        self.peak_equity = max(self.peak_equity, equity)
        drawdown = (self.peak_equity - equity) / self.peak_equity if self.peak_equity > 0 else 0.0

        point = EquityPoint(
            day=day,
            equity=equity,
            cash=self.cash,
            unrealized_pnl=unrealized,
            drawdown=drawdown,
            regime=regime,
            active_positions=len(self.positions),
        )
        self.equity_curve.append(point)
        self.equity = equity
        return point

