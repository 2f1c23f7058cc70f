"""Итоговый отчет бэктеста.

``BacktestReport`` собирается из состояния портфеля после принудительного
закрытия позиций. Форматирование и сохранение на диск вынесены в
отдельные функции, ядро симуляции ничего не печатает.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402

from ..core import performance  # noqa: E402
from ..core.types import EquityPoint, Regime, StrategyKind, Trade  # noqa: E402

logger = logging.getLogger(__name__)


@dataclass
class RegimeStats:
    days: int = 0
    percentage: float = 0.0
    trades: int = 0
    pnl: float = 0.0
    avg_pnl: float = 0.0


@dataclass
class StrategyStats:
    trades: int = 0
    wins: int = 0
    win_rate: float = 0.0
    pnl: float = 0.0


@dataclass
class BacktestReport:
    """Structured result of one backtest run. Percent fields are in %."""
    initial_capital: float
    final_equity: float
    total_return: float
    win_rate: float
    average_win: float
    average_loss: float
    average_win_pct: float
    average_loss_pct: float
    profit_factor: float
    expectancy: float
    sharpe_ratio: float
    sortino_ratio: float
    max_drawdown: float
    max_drawdown_duration: int
    total_trades: int
    hedge_ratio: Optional[float]
    regime_stats: Dict[Regime, RegimeStats] = field(default_factory=dict)
    strategy_stats: Dict[StrategyKind, StrategyStats] = field(default_factory=dict)
    equity_curve: List[EquityPoint] = field(default_factory=list)
    trades: List[Trade] = field(default_factory=list)

    def summary(self) -> Dict[str, Any]:
        """Scalar metrics and breakdowns without the per-day and per-trade lists."""
        return {
            "initial_capital": self.initial_capital,
            "final_equity": self.final_equity,
            "total_return": self.total_return,
            "win_rate": self.win_rate,
            "average_win": self.average_win,
            "average_loss": self.average_loss,
            "average_win_pct": self.average_win_pct,
            "average_loss_pct": self.average_loss_pct,
            "profit_factor": self.profit_factor,
            "expectancy": self.expectancy,
            "sharpe_ratio": self.sharpe_ratio,
            "sortino_ratio": self.sortino_ratio,
            "max_drawdown": self.max_drawdown,
            "max_drawdown_duration": self.max_drawdown_duration,
            "total_trades": self.total_trades,
            "hedge_ratio": self.hedge_ratio,
            "regime_stats": {r.value: vars(s).copy() for r, s in self.regime_stats.items()},
            "strategy_stats": {k.value: vars(s).copy() for k, s in self.strategy_stats.items()},
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.summary()
        data["equity_curve"] = [point.to_dict() for point in self.equity_curve]
        data["trades"] = [trade.to_dict() for trade in self.trades]
        return data

    def equity_frame(self) -> pd.DataFrame:
        frame = pd.DataFrame([point.to_dict() for point in self.equity_curve])
        return frame.set_index("day") if not frame.empty else frame

    def trades_frame(self) -> pd.DataFrame:
        return pd.DataFrame([trade.to_dict() for trade in self.trades])


def build_report(
    initial_capital: float,
    final_equity: float,
    trades: List[Trade],
    equity_curve: List[EquityPoint],
    regime_days: Mapping[Regime, int],
    hedge_ratio: Optional[float] = None,
    annualizing_factor: float = 365,
) -> BacktestReport:
    """Aggregate trade history and equity curve into a report."""
    pnl = pd.Series([t.pnl for t in trades], dtype=float)
    pnl_pct = pd.Series([t.pnl_pct for t in trades], dtype=float)

    avg_win, avg_loss = performance.average_win_loss(pnl)
    avg_win_pct = float(pnl_pct[pnl > 0].mean()) if (pnl > 0).any() else 0.0
    avg_loss_pct = float(pnl_pct[pnl <= 0].mean()) if (pnl <= 0).any() else 0.0

    equity = pd.Series([p.equity for p in equity_curve], dtype=float)
    daily_returns = equity.pct_change().replace([np.inf, -np.inf], np.nan).dropna()
    max_dd = performance.max_drawdown_on_equity(equity, initial_capital)

    total_days = sum(regime_days.values())
    regime_stats = {}
    for regime in Regime:
        regime_trades = [t for t in trades if t.regime is regime]
        days = int(regime_days.get(regime, 0))
        regime_pnl = float(sum(t.pnl for t in regime_trades))
        regime_stats[regime] = RegimeStats(
            days=days,
            percentage=days / total_days * 100.0 if total_days else 0.0,
            trades=len(regime_trades),
            pnl=regime_pnl,
            avg_pnl=regime_pnl / len(regime_trades) if regime_trades else 0.0,
        )

    strategy_stats = {}
    for strategy in StrategyKind:
        strategy_trades = [t for t in trades if t.strategy is strategy]
        wins = sum(1 for t in strategy_trades if t.is_win)
        strategy_stats[strategy] = StrategyStats(
            trades=len(strategy_trades),
            wins=wins,
            win_rate=wins / len(strategy_trades) * 100.0 if strategy_trades else 0.0,
            pnl=float(sum(t.pnl for t in strategy_trades)),
        )

    return BacktestReport(
        initial_capital=initial_capital,
        final_equity=final_equity,
        total_return=(final_equity - initial_capital) / initial_capital * 100.0,
        win_rate=performance.win_rate(pnl) * 100.0,
        average_win=avg_win,
        average_loss=avg_loss,
        average_win_pct=avg_win_pct,
        average_loss_pct=avg_loss_pct,
        profit_factor=performance.profit_factor(pnl),
        expectancy=performance.expectancy(pnl),
        sharpe_ratio=performance.sharpe_ratio(daily_returns, annualizing_factor),
        sortino_ratio=performance.sortino_ratio(daily_returns, annualizing_factor),
        max_drawdown=max_dd * 100.0,
        max_drawdown_duration=performance.max_drawdown_duration(equity, initial_capital),
        total_trades=len(trades),
        hedge_ratio=hedge_ratio,
        regime_stats=regime_stats,
        strategy_stats=strategy_stats,
        equity_curve=list(equity_curve),
        trades=list(trades),
    )


def _fmt_factor(value: float) -> str:
    return "inf" if math.isinf(value) else f"{value:.2f}"


def format_report(report: BacktestReport) -> str:
    """Human-readable summary of a report."""
    lines = [
        "=" * 60,
        "BACKTEST RESULTS",
        "=" * 60,
        f"Initial Capital: ${report.initial_capital:,.2f}",
        f"Final Equity:    ${report.final_equity:,.2f}",
        f"Total Return:    {report.total_return:.2f}%",
        f"Max Drawdown:    {report.max_drawdown:.2f}%",
        f"DD Duration:     {report.max_drawdown_duration} days",
        f"Total Trades:    {report.total_trades}",
        f"Win Rate:        {report.win_rate:.1f}%",
        f"Average Win:     ${report.average_win:,.2f} ({report.average_win_pct:.2f}%)",
        f"Average Loss:    ${report.average_loss:,.2f} ({report.average_loss_pct:.2f}%)",
        f"Profit Factor:   {_fmt_factor(report.profit_factor)}",
        f"Sharpe Ratio:    {report.sharpe_ratio:.2f}",
        f"Sortino Ratio:   {_fmt_factor(report.sortino_ratio)}",
    ]
    if report.hedge_ratio is not None:
        lines.append(f"Hedge Ratio:     {report.hedge_ratio:.4f}")

    lines += ["", "REGIME BREAKDOWN:"]
    for regime, stats in report.regime_stats.items():
        lines.append(
            f"  {regime.value}: {stats.days} days ({stats.percentage:.1f}%) | "
            f"{stats.trades} trades | Avg P&L: ${stats.avg_pnl:,.2f}"
        )

    lines += ["", "STRATEGY BREAKDOWN:"]
    for strategy, stats in report.strategy_stats.items():
        win_rate = f"{stats.win_rate:.1f}%" if stats.trades else "N/A"
        lines.append(
            f"  {strategy.value}: {stats.trades} trades | Win Rate: {win_rate} | P&L: ${stats.pnl:,.2f}"
        )
    return "\n".join(lines)


def plot_equity_curve(report: BacktestReport, path: Path) -> Path:
    frame = report.equity_frame()
    fig, (ax_eq, ax_dd) = plt.subplots(2, 1, figsize=(12, 7), sharex=True,
                                       gridspec_kw={"height_ratios": [3, 1]})
    if not frame.empty:
        ax_eq.plot(frame.index, frame["equity"], label="Equity")
        ax_eq.plot(frame.index, frame["cash"], label="Cash", alpha=0.6)
        ax_dd.fill_between(frame.index, -frame["drawdown"] * 100.0, 0, color="tab:red", alpha=0.4)
    ax_eq.set_ylabel("USD")
    ax_eq.legend()
    ax_eq.grid(True, alpha=0.3)
    ax_dd.set_ylabel("Drawdown, %")
    ax_dd.set_xlabel("Day")
    ax_dd.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(path, dpi=100)
    plt.close(fig)
    return path


def save_report(report: BacktestReport, out_dir: Path | str, plot: bool = True) -> Path:
    """Write summary JSON, trades/equity CSV and the equity chart to ``out_dir``."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    summary_path = out_dir / "summary.json"
    summary = report.summary()
    # json не поддерживает inf
    for key in ("profit_factor", "sortino_ratio"):
        if math.isinf(summary[key]):
            summary[key] = "inf"
    with summary_path.open("w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2, ensure_ascii=False, default=str)

    report.trades_frame().to_csv(out_dir / "trades.csv", index=False)
    report.equity_frame().to_csv(out_dir / "equity_curve.csv")

    if plot:
        plot_equity_curve(report, out_dir / "equity_curve.png")

    logger.info(f"Отчет сохранен: {out_dir}")
    return out_dir
