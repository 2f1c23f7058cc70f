"""Performance metrics for trading strategies."""

from __future__ import annotations

import numpy as np  # type: ignore
import pandas as pd  # type: ignore

from .math_utils import ZERO_STD_TOLERANCE


def _as_series(values) -> pd.Series:
    if isinstance(values, pd.Series):
        return values.astype(float)
    return pd.Series(np.asarray(values, dtype=float))


def sharpe_ratio(returns, annualizing_factor: float) -> float:
    """Calculates the annualized Sharpe ratio from a series of returns.

    Parameters
    ----------
    returns : pd.Series
        Series of strategy returns (fractions, not PnL).
    annualizing_factor : float
        Factor used to annualize the Sharpe ratio (e.g. number of trading days).

    Returns
    -------
    float
        Annualized Sharpe ratio. Returns ``0.0`` for fewer than two
        observations or when the standard deviation of ``returns`` is zero.
    """
    returns = _as_series(returns).dropna()
    if len(returns) < 2 or returns.std() < ZERO_STD_TOLERANCE:
        return 0.0

    # Assume risk free rate is zero
    return float(np.sqrt(annualizing_factor) * returns.mean() / returns.std())


def sortino_ratio(returns, annualizing_factor: float) -> float:
    """Annualized Sortino ratio with a zero target return.

    The downside deviation is taken over the negative returns only. Returns
    ``inf`` when nothing was lost and the mean is positive, ``0.0`` for
    fewer than two observations or a non-positive mean without losses.
    """
    returns = _as_series(returns).dropna()
    if len(returns) < 2:
        return 0.0

    negative = returns[returns < 0]
    if negative.empty:
        return float("inf") if returns.mean() > 0 else 0.0

    downside = np.sqrt((negative ** 2).mean())
    if downside < ZERO_STD_TOLERANCE:
        return 0.0
    return float(np.sqrt(annualizing_factor) * returns.mean() / downside)


def max_drawdown_on_equity(equity_curve, initial_capital: float | None = None) -> float:
    """Max drawdown of an equity curve as a positive fraction of the running peak.

    Parameters
    ----------
    equity_curve : array-like
        Equity values in time order.
    initial_capital : float, optional
        Starting value of the running peak.

    Returns
    -------
    float
        ``0.0`` for an empty or monotonically rising curve.
    """
    equity = _as_series(equity_curve)
    if equity.empty:
        return 0.0
    running_max = equity.cummax()
    if initial_capital is not None:
        running_max = running_max.clip(lower=initial_capital)
    running_max = running_max.where(running_max > 0)
    drawdown = (running_max - equity) / running_max
    return float(drawdown.fillna(0.0).max())


def max_drawdown_duration(equity_curve, initial_capital: float | None = None) -> int:
    """Longest run of consecutive samples below the running peak.

    Parameters
    ----------
    equity_curve : array-like
        Equity values in time order.
    initial_capital : float, optional
        Starting value of the running peak.

    Returns
    -------
    int
        Number of samples; ``0`` when the curve never drops below its peak.
    """
    equity = _as_series(equity_curve)
    if equity.empty:
        return 0
    running_max = equity.cummax()
    if initial_capital is not None:
        running_max = running_max.clip(lower=initial_capital)
    underwater = equity < running_max
    # каждый день без просадки открывает новую серию
    runs = (~underwater).cumsum()
    return int(underwater.groupby(runs).sum().max())


def win_rate(pnl_series) -> float:
    """Calculate win rate from per-trade PnL.

    Parameters
    ----------
    pnl_series : array-like
        Individual trade PnLs.

    Returns
    -------
    float
        Share of trades with positive PnL (0.0 to 1.0). Flat trades count
        as losses.
    """
    pnl = _as_series(pnl_series)
    if pnl.empty:
        return 0.0
    return float((pnl > 0).sum() / len(pnl))


def profit_factor(pnl_series) -> float:
    """Gross profit over gross loss.

    ``inf`` when there are no losses; ``0.0`` when there are no trades or
    no profitable ones.
    """
    pnl = _as_series(pnl_series)
    if pnl.empty:
        return 0.0
    gross_profit = pnl[pnl > 0].sum()
    gross_loss = abs(pnl[pnl <= 0].sum())
    if gross_loss == 0:
        return float("inf") if gross_profit > 0 else 0.0
    return float(gross_profit / gross_loss)


def average_win_loss(pnl_series) -> tuple[float, float]:
    """Mean of winning and of losing trades (``0.0`` when a side is empty)."""
    pnl = _as_series(pnl_series)
    wins = pnl[pnl > 0]
    losses = pnl[pnl <= 0]
    avg_win = float(wins.mean()) if len(wins) > 0 else 0.0
    avg_loss = float(losses.mean()) if len(losses) > 0 else 0.0
    return avg_win, avg_loss


def expectancy(pnl_series) -> float:
    """Calculate expectancy from a PnL series.

    Expectancy = (Win Rate × Average Win) - (Loss Rate × Average Loss)
    """
    pnl = _as_series(pnl_series)
    if pnl.empty:
        return 0.0

    wins = pnl[pnl > 0]
    losses = pnl[pnl <= 0]
    win_rate_val = len(wins) / len(pnl)
    loss_rate = len(losses) / len(pnl)

    avg_win = wins.mean() if len(wins) > 0 else 0.0
    avg_loss = abs(losses.mean()) if len(losses) > 0 else 0.0

    return float((win_rate_val * avg_win) - (loss_rate * avg_loss))
