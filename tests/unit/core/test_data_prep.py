"""Tests for derived series preparation and day alignment."""

import numpy as np
import pytest

from regime_pairs.core.data_prep import (
    InsufficientDataError,
    prepare_pair_series,
    simple_returns,
)
from regime_pairs.core.math_utils import correlation, linear_regression, standard_deviation, z_score


class TestPreparePairSeries:
    """Test prepare_pair_series."""

    def test_shapes_and_start_day(self, pair_prices):
        a, b = pair_prices
        derived = prepare_pair_series(a, b, 30)

        assert derived.start_day == 30
        assert derived.n_days == len(a) - 30
        assert derived.correlation.shape == derived.zscore.shape
        assert np.array_equal(derived.prices_a, a[30:])
        assert np.array_equal(derived.prices_b, b[30:])
        assert derived.returns_a.shape == (len(a) - 1,)

    def test_zscores_are_finite(self, pair_prices):
        a, b = pair_prices
        derived = prepare_pair_series(a, b, 30)
        assert np.all(np.isfinite(derived.zscore))

    def test_hedge_ratio_from_regression_of_b_on_a(self, pair_prices):
        a, b = pair_prices
        derived = prepare_pair_series(a, b, 30)
        assert derived.hedge_ratio == pytest.approx(linear_regression(a, b).slope)
        expected_spread = np.log(a) - derived.hedge_ratio * np.log(b)
        assert np.allclose(derived.spread, expected_spread)

    def test_zscore_uses_window_ending_on_same_day(self, pair_prices):
        a, b = pair_prices
        window = 20
        derived = prepare_pair_series(a, b, window)

        for d in (0, 7, derived.n_days - 1):
            t = derived.start_day + d
            chunk = derived.spread[t - window + 1 : t + 1]
            expected = z_score(derived.spread[t], chunk.mean(), standard_deviation(chunk))
            assert derived.zscore[d] == pytest.approx(expected, abs=1e-9)

    def test_correlation_uses_returns_ending_on_same_day(self, pair_prices):
        a, b = pair_prices
        window = 20
        derived = prepare_pair_series(a, b, window)
        ra, rb = simple_returns(a), simple_returns(b)

        for d in (0, 11, derived.n_days - 1):
            t = derived.start_day + d
            # доходность с индексом k относится к дню k + 1
            expected = correlation(ra[t - window : t], rb[t - window : t])
            assert derived.correlation[d] == pytest.approx(expected, abs=1e-9)

    def test_minimum_length(self):
        prices = np.linspace(100.0, 110.0, 11)
        derived = prepare_pair_series(prices, prices * 2.0, 10)
        assert derived.n_days == 1

    def test_insufficient_data(self):
        prices = np.linspace(100.0, 110.0, 10)
        with pytest.raises(InsufficientDataError):
            prepare_pair_series(prices, prices, 10)

    def test_insufficient_data_is_value_error(self):
        assert issubclass(InsufficientDataError, ValueError)

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            prepare_pair_series(np.ones(40), np.ones(41), 10)

    def test_invalid_window(self):
        with pytest.raises(ValueError):
            prepare_pair_series(np.ones(40), np.ones(40), 1)

    def test_non_positive_prices(self):
        a = np.full(40, 100.0)
        a[5] = 0.0
        with pytest.raises(ValueError):
            prepare_pair_series(a, np.full(40, 100.0), 10)

    def test_flat_prices_degenerate(self):
        flat = np.full(50, 100.0)
        derived = prepare_pair_series(flat, flat, 10)
        assert derived.hedge_ratio == 0.0
        assert np.all(derived.zscore == 0.0)
        assert np.all(np.isnan(derived.correlation))


def test_simple_returns():
    returns = simple_returns(np.array([100.0, 110.0, 99.0]))
    assert returns == pytest.approx([0.1, -0.1])
