"""
Регим-адаптивный бэктестер для пары инструментов.

Один проход по дням: режим -> выходы -> (возможно) один вход -> точка
equity. В конце оставшиеся позиции закрываются принудительно и
собирается отчет. Никакого ввода-вывода внутри цикла.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Optional

import numpy as np

from ..core.data_prep import prepare_pair_series
from ..core.portfolio import Portfolio
from ..core.types import Regime
from ..reporting.report import BacktestReport, build_report
from ..utils.config import StrategyConfig
from .regime import RegimeClassifier
from .signals import SignalGenerator
from .sizing import PositionSizer

logger = logging.getLogger(__name__)


class RegimeAdaptiveBacktester:
    """Simulates the regime-adaptive pairs strategy over one price path.

    Every call to :meth:`run` or :meth:`simulate` works on a fresh
    :class:`Portfolio`, so the instance can be reused and concurrent runs
    never share state.
    """

    def __init__(self, config: Optional[StrategyConfig] = None):
        self.config = config or StrategyConfig()
        self.classifier = RegimeClassifier.from_config(self.config)
        self.signal_generator = SignalGenerator.from_config(self.config)
        self.sizer = PositionSizer.from_config(self.config)

    def run(self, prices_a, prices_b) -> BacktestReport:
        """Prepare rolling statistics from raw prices and simulate.

        Raises
        ------
        InsufficientDataError
            If the series are not longer than ``correlation_window``.
        """
        derived = prepare_pair_series(prices_a, prices_b, self.config.correlation_window)
        logger.info(
            f"Hedge ratio {derived.hedge_ratio:.4f}, simulating {derived.n_days} days "
            f"from day {derived.start_day}"
        )
        return self.simulate(
            derived.prices_a,
            derived.prices_b,
            derived.zscore,
            derived.correlation,
            start_day=derived.start_day,
            hedge_ratio=derived.hedge_ratio,
        )

    def simulate(
        self,
        prices_a,
        prices_b,
        zscores,
        correlations,
        start_day: int = 0,
        hedge_ratio: Optional[float] = None,
    ) -> BacktestReport:
        """Run the day loop over pre-computed, day-aligned statistics.

        Parameters
        ----------
        prices_a, prices_b : array-like
            Prices of both legs on each simulated day.
        zscores, correlations : array-like
            Spread z-score and returns correlation on the same days.
        start_day : int
            Raw day index of the first element, used to label days.
        hedge_ratio : float, optional
            Only reported.
        """
        prices_a = np.asarray(prices_a, dtype=float)
        prices_b = np.asarray(prices_b, dtype=float)
        zscores = np.asarray(zscores, dtype=float)
        correlations = np.asarray(correlations, dtype=float)

        n = prices_a.shape[0]
        if not (prices_b.shape[0] == zscores.shape[0] == correlations.shape[0] == n):
            raise ValueError(
                "prices_a, prices_b, zscores and correlations must have equal length, got "
                f"{n}, {prices_b.shape[0]}, {zscores.shape[0]}, {correlations.shape[0]}"
            )
        if n == 0:
            raise ValueError("Nothing to simulate: empty input")
        if not np.all(np.isfinite(zscores)):
            raise ValueError("zscores must be finite on every simulated day")

        cfg = self.config
        portfolio = Portfolio(cfg.initial_capital, commission=cfg.commission, slippage=cfg.slippage)
        regime_days: Counter = Counter()

        for i in range(n):
            day = start_day + i
            price_a = float(prices_a[i])
            price_b = float(prices_b[i])
            zscore = float(zscores[i])
            regime = self.classifier.classify(float(correlations[i]))
            regime_days[regime] += 1

            portfolio.process_exits(day, price_a, price_b, zscore, cfg)

            if portfolio.can_open_position():
                self._try_entry(portfolio, day, price_a, price_b, zscore, regime)

            portfolio.record_equity(day, price_a, price_b, regime)

        last = n - 1
        forced = portfolio.close_all(start_day + last, float(prices_a[last]), float(prices_b[last]),
                                     float(zscores[last]))
        if forced:
            logger.info(f"Force-closed {len(forced)} position(s) at backtest end")

        report = build_report(
            initial_capital=cfg.initial_capital,
            final_equity=portfolio.cash,
            trades=portfolio.trades,
            equity_curve=portfolio.equity_curve,
            regime_days=regime_days,
            hedge_ratio=hedge_ratio,
            annualizing_factor=cfg.annualizing_factor,
        )
        logger.info(
            f"Backtest finished: {report.total_trades} trades, "
            f"return {report.total_return:.2f}%, max DD {report.max_drawdown:.2f}%"
        )
        return report

    def _try_entry(self, portfolio: Portfolio, day: int, price_a: float, price_b: float,
                   zscore: float, regime: Regime) -> None:
        signal = self.signal_generator.generate(zscore, regime)
        if not signal.is_entry:
            return
        sizing = self.sizer.size(regime, signal.strength, portfolio.cash)
        if sizing is None:
            return
        portfolio.open_position(signal, sizing, day, price_a, price_b, zscore, regime)


def run_backtest(prices_a, prices_b, config: Optional[StrategyConfig] = None) -> BacktestReport:
    """Run the strategy on two aligned price series with ``config`` (defaults if omitted)."""
    return RegimeAdaptiveBacktester(config).run(prices_a, prices_b)
