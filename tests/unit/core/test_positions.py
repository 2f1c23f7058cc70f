"""Tests for position lifecycle transitions."""

import pytest

from regime_pairs.core import positions as pos
from regime_pairs.core.types import (
    HOLD,
    Direction,
    ExitReason,
    PositionSize,
    PositionStatus,
    Regime,
    Signal,
    SignalType,
    StrategyKind,
)
from regime_pairs.utils.config import StrategyConfig


def _open(direction=Direction.LONG_A_SHORT_B, strategy=StrategyKind.MEAN_REVERSION,
          zscore=-3.0, commission=0.001, slippage=0.0005, size=10_000.0, leverage=2.5):
    signal = Signal(SignalType.ENTRY, direction, strategy, 1.2)
    return pos.build_position(
        position_id="trade_0",
        signal=signal,
        sizing=PositionSize(size, leverage),
        day=30,
        price_a=100.0,
        price_b=50.0,
        zscore=zscore,
        regime=Regime.HIGH_CORRELATION,
        commission_rate=commission,
        slippage_rate=slippage,
    )


class TestBuildPosition:
    def test_costs_and_cash_debit(self):
        position, cash_delta = _open()
        assert position.status is PositionStatus.OPEN
        assert position.commission == pytest.approx(10.0)
        assert position.slippage == pytest.approx(5.0)
        assert position.total_costs == pytest.approx(15.0)
        assert cash_delta == pytest.approx(-10_015.0)
        assert position.exposure == pytest.approx(25_000.0)

    def test_hold_signal_rejected(self):
        with pytest.raises(ValueError):
            pos.build_position("x", HOLD, PositionSize(1000.0, 1.0), 0, 1.0, 1.0, 0.0,
                               Regime.HIGH_CORRELATION, 0.0, 0.0)


class TestUnrealizedPnl:
    def test_long_a_short_b(self):
        position, _ = _open()
        assert pos.unrealized_pnl(position, 110.0, 50.0) == pytest.approx(2_500.0)
        assert pos.unrealized_pnl(position, 100.0, 55.0) == pytest.approx(-2_500.0)

    def test_short_a_long_b(self):
        position, _ = _open(direction=Direction.SHORT_A_LONG_B, zscore=3.0)
        assert pos.unrealized_pnl(position, 110.0, 50.0) == pytest.approx(-2_500.0)

    def test_flat_prices(self):
        position, _ = _open()
        assert pos.unrealized_pnl(position, 100.0, 50.0) == 0.0


class TestEvaluateExit:
    """Exit rules and their priority."""

    def test_hold_when_nothing_fires(self):
        position, _ = _open()
        assert pos.evaluate_exit(position, 35, -2.0, 100.0, 50.0, StrategyConfig()) is None

    def test_max_holding_period(self):
        position, _ = _open()
        config = StrategyConfig()
        assert pos.evaluate_exit(position, 60, -2.0, 100.0, 50.0, config) is None
        assert pos.evaluate_exit(position, 61, -2.0, 100.0, 50.0, config) is ExitReason.MAX_HOLDING_PERIOD

    def test_stop_loss_uses_levered_pnl(self):
        position, _ = _open()
        config = StrategyConfig()
        # -1% * 10000 * 2.5 = -250, лимит -500
        assert pos.evaluate_exit(position, 31, -2.0, 99.0, 50.0, config) is None
        # -3% * 10000 * 2.5 = -750
        assert pos.evaluate_exit(position, 31, -2.0, 97.0, 50.0, config) is ExitReason.STOP_LOSS

    def test_holding_period_has_priority_over_stop(self):
        position, _ = _open()
        reason = pos.evaluate_exit(position, 61, -2.0, 97.0, 50.0, StrategyConfig())
        assert reason is ExitReason.MAX_HOLDING_PERIOD

    def test_mean_reversion_target(self):
        position, _ = _open()
        assert pos.evaluate_exit(position, 31, 0.5, 100.0, 50.0, StrategyConfig()) is ExitReason.MEAN_REVERSION_TARGET
        assert pos.evaluate_exit(position, 31, -0.99, 100.0, 50.0, StrategyConfig()) is ExitReason.MEAN_REVERSION_TARGET
        assert pos.evaluate_exit(position, 31, 1.0, 100.0, 50.0, StrategyConfig()) is None

    def test_zscore_stop(self):
        position, _ = _open()
        config = StrategyConfig(stop_loss_zscore=4.0)
        assert pos.evaluate_exit(position, 31, -4.5, 100.0, 50.0, config) is ExitReason.ZSCORE_STOP
        assert pos.evaluate_exit(position, 31, -3.5, 100.0, 50.0, config) is None

    def test_momentum_reversal(self):
        position, _ = _open(strategy=StrategyKind.MOMENTUM, zscore=3.0)
        config = StrategyConfig()
        assert pos.evaluate_exit(position, 31, 1.0, 100.0, 50.0, config) is None
        assert pos.evaluate_exit(position, 31, 0.0, 100.0, 50.0, config) is None
        assert pos.evaluate_exit(position, 31, -0.1, 100.0, 50.0, config) is ExitReason.MOMENTUM_REVERSAL

    def test_momentum_ignores_mean_reversion_target(self):
        position, _ = _open(strategy=StrategyKind.MOMENTUM, zscore=-3.0, direction=Direction.SHORT_A_LONG_B)
        assert pos.evaluate_exit(position, 31, -0.2, 100.0, 50.0, StrategyConfig()) is None

    def test_momentum_profit_target(self):
        position, _ = _open(strategy=StrategyKind.MOMENTUM, zscore=3.0)
        assert pos.evaluate_exit(position, 31, 2.0, 103.0, 50.0, StrategyConfig()) is None
        config = StrategyConfig(momentum_profit_target=0.02)
        assert pos.evaluate_exit(position, 31, 2.0, 103.0, 50.0, config) is ExitReason.PROFIT_TARGET


class TestSettle:
    """Closing a position."""

    def test_net_pnl_and_cash_credit(self):
        position, _ = _open()
        trade, cash_delta = pos.settle(position, 35, 110.0, 50.0, 0.2, ExitReason.MEAN_REVERSION_TARGET,
                                       commission_rate=0.001, slippage_rate=0.0005)
        assert trade.pnl == pytest.approx(2_485.0)
        assert trade.pnl_pct == pytest.approx(24.85)
        assert trade.total_costs == pytest.approx(30.0)
        assert trade.holding_period == 5
        assert trade.exit_reason is ExitReason.MEAN_REVERSION_TARGET
        assert trade.is_win
        assert cash_delta == pytest.approx(12_485.0)
        assert position.status is PositionStatus.CLOSED

    def test_cannot_close_twice(self):
        position, _ = _open()
        pos.settle(position, 31, 100.0, 50.0, 0.0, ExitReason.BACKTEST_END, 0.0, 0.0)
        with pytest.raises(ValueError):
            pos.settle(position, 32, 100.0, 50.0, 0.0, ExitReason.BACKTEST_END, 0.0, 0.0)

    def test_exit_before_entry(self):
        position, _ = _open()
        with pytest.raises(ValueError):
            pos.settle(position, 29, 100.0, 50.0, 0.0, ExitReason.BACKTEST_END, 0.0, 0.0)

    def test_trade_to_dict_uses_plain_values(self):
        position, _ = _open()
        trade, _ = pos.settle(position, 30, 100.0, 50.0, 0.0, ExitReason.BACKTEST_END, 0.0, 0.0)
        data = trade.to_dict()
        assert data["exit_reason"] == "backtest_end"
        assert data["direction"] == "long_A_short_B"
        assert data["status"] == "closed"
        assert data["pnl"] == 0.0


class TestExcursions:
    """Best and worst mark-to-market PnL over the life of a position."""

    def test_mark_widens_excursions(self):
        position, _ = _open()
        assert pos.mark(position, 104.0, 50.0) == pytest.approx(1_000.0)
        pos.mark(position, 97.0, 50.0)
        pos.mark(position, 101.0, 50.0)
        assert position.max_favorable_excursion == pytest.approx(10.0)
        assert position.max_adverse_excursion == pytest.approx(-7.5)

    def test_trade_carries_excursions(self):
        position, _ = _open()
        pos.mark(position, 104.0, 50.0)
        pos.mark(position, 97.0, 50.0)
        trade, _ = pos.settle(position, 33, 100.0, 50.0, 0.5, ExitReason.MEAN_REVERSION_TARGET, 0.0, 0.0)
        assert trade.max_favorable_excursion == pytest.approx(10.0)
        assert trade.max_adverse_excursion == pytest.approx(-7.5)
        assert trade.to_dict()["max_adverse_excursion"] == pytest.approx(-7.5)

    def test_exit_price_counts_as_mark(self):
        position, _ = _open()
        trade, _ = pos.settle(position, 31, 102.0, 50.0, 0.5, ExitReason.MEAN_REVERSION_TARGET, 0.0, 0.0)
        assert trade.max_favorable_excursion == pytest.approx(5.0)
        assert trade.max_adverse_excursion == 0.0
