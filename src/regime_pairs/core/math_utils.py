"""Mathematical helper utilities."""

from __future__ import annotations

from typing import NamedTuple

import numpy as np  # type: ignore
from numba import njit

# population std below this is treated as exactly zero
ZERO_STD_TOLERANCE = 1e-12


class RegressionResult(NamedTuple):
    slope: float
    intercept: float
    residuals: np.ndarray


def correlation(series1, series2) -> float:
    """Pearson correlation of two equal-length series.

    Parameters
    ----------
    series1, series2 : array-like
        Input sequences of the same length.

    Returns
    -------
    float
        Covariance over the geometric mean of the variances. ``nan`` is
        returned when the population std of either series is below
        ``ZERO_STD_TOLERANCE``; the caller decides what that means.
    """
    x = np.asarray(series1, dtype=float)
    y = np.asarray(series2, dtype=float)
    if x.shape != y.shape:
        raise ValueError(f"Series length mismatch: {x.shape[0]} != {y.shape[0]}")
    if x.size == 0:
        return float("nan")

    dx = x - x.mean()
    dy = y - y.mean()
    var_x = float(np.dot(dx, dx))
    var_y = float(np.dot(dy, dy))
    # population std ниже допуска считаем нулевой
    limit = ZERO_STD_TOLERANCE * ZERO_STD_TOLERANCE * x.size
    if var_x <= limit or var_y <= limit:
        return float("nan")
    return float(np.dot(dx, dy) / np.sqrt(var_x * var_y))


def linear_regression(x, y) -> RegressionResult:
    """Ordinary least squares fit of ``y = slope * x + intercept``.

    Parameters
    ----------
    x : array-like
        Independent variable.
    y : array-like
        Dependent variable.

    Returns
    -------
    RegressionResult
        Slope, intercept and residuals. When ``x`` has no variance the slope
        is reported as ``0.0`` and the intercept as the mean of ``y``.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.shape != y.shape:
        raise ValueError(f"Series length mismatch: {x.shape[0]} != {y.shape[0]}")
    n = x.size
    if n == 0:
        raise ValueError("Cannot fit a regression on empty series")

    sum_x = x.sum()
    sum_y = y.sum()
    sum_xy = np.dot(x, y)
    sum_xx = np.dot(x, x)

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0.0 or not np.isfinite(denominator):
        slope = 0.0
        intercept = float(sum_y / n)
    else:
        slope = float((n * sum_xy - sum_x * sum_y) / denominator)
        intercept = float((sum_y - slope * sum_x) / n)

    residuals = y - (slope * x + intercept)
    return RegressionResult(slope, intercept, residuals)


def standard_deviation(series) -> float:
    """Population standard deviation (divides by N, not N-1)."""
    values = np.asarray(series, dtype=float)
    if values.size == 0:
        return 0.0
    mean = values.sum() / values.size
    return float(np.sqrt(((values - mean) ** 2).sum() / values.size))


def z_score(value: float, mean: float, std_dev: float) -> float:
    """Standardized deviation; zero when ``std_dev`` is zero."""
    if std_dev == 0:
        return 0.0
    return (value - mean) / std_dev


# --- numba kernels for the rolling statistics ---

@njit(cache=True)
def rolling_zscore_numba(series: np.ndarray, window: int) -> np.ndarray:
    """Right-aligned rolling z-score of the last value in each window.

    Uses the population mean/std of the window. Values before the first
    full window are ``nan``; a window whose std falls below
    ``ZERO_STD_TOLERANCE`` yields ``0.0``.
    """
    n = series.shape[0]
    out = np.full(n, np.nan)
    if window <= 0 or n < window:
        return out

    for i in range(window - 1, n):
        total = 0.0
        for j in range(i - window + 1, i + 1):
            total += series[j]
        mean = total / window

        sq = 0.0
        for j in range(i - window + 1, i + 1):
            diff = series[j] - mean
            sq += diff * diff
        std = np.sqrt(sq / window)

        if std < ZERO_STD_TOLERANCE:
            out[i] = 0.0
        else:
            out[i] = (series[i] - mean) / std
    return out


@njit(cache=True)
def rolling_correlation_numba(x: np.ndarray, y: np.ndarray, window: int) -> np.ndarray:
    """Right-aligned rolling Pearson correlation.

    Values before the first full window and windows where either series
    has std below ``ZERO_STD_TOLERANCE`` are ``nan``.
    """
    n = x.shape[0]
    out = np.full(n, np.nan)
    if window <= 0 or n < window:
        return out
    limit = ZERO_STD_TOLERANCE * ZERO_STD_TOLERANCE * window

    for i in range(window - 1, n):
        sum_x = 0.0
        sum_y = 0.0
        for j in range(i - window + 1, i + 1):
            sum_x += x[j]
            sum_y += y[j]
        mean_x = sum_x / window
        mean_y = sum_y / window

        cov = 0.0
        var_x = 0.0
        var_y = 0.0
        for j in range(i - window + 1, i + 1):
            dx = x[j] - mean_x
            dy = y[j] - mean_y
            cov += dx * dy
            var_x += dx * dx
            var_y += dy * dy

        # деление на ноль в numba бросает исключение, поэтому проверяем явно
        if var_x <= limit or var_y <= limit:
            continue
        out[i] = cov / np.sqrt(var_x * var_y)
    return out
