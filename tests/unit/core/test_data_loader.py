"""Tests for CSV price loading."""

import numpy as np
import pytest

from regime_pairs.core.data_loader import (
    DataLoadError,
    align_price_series,
    find_price_column,
    load_pair,
    load_price_series,
)


def _write(path, text):
    path.write_text(text, encoding="utf-8")
    return path


class TestFindPriceColumn:
    def test_prefers_close_or_price(self):
        assert find_price_column(["Date", "Open", "Close", "Volume"]) == "Close"
        assert find_price_column(["date", "adj_price", "volume"]) == "adj_price"

    def test_falls_back_to_last_column(self):
        assert find_price_column(["date", "open", "value"]) == "value"

    def test_empty_columns(self):
        with pytest.raises(DataLoadError):
            find_price_column([])


class TestLoadPriceSeries:
    """Test load_price_series."""

    def test_detects_close_column(self, tmp_path):
        path = _write(tmp_path / "a.csv", "Date,Open,Close\n2024-01-01,1,100\n2024-01-02,2,101.5\n")
        prices = load_price_series(path)
        assert list(prices) == [100.0, 101.5]

    def test_drops_non_numeric_rows(self, tmp_path):
        path = _write(tmp_path / "a.csv", "date,close\nd1,100\nd2,abc\nd3,102\nd4,-1\n")
        prices = load_price_series(path)
        assert list(prices) == [100.0, 102.0]
        assert list(prices.index) == [0, 1]

    def test_explicit_column(self, tmp_path):
        path = _write(tmp_path / "a.csv", "x,close\n5,100\n6,101\n")
        assert list(load_price_series(path, column="x")) == [5.0, 6.0]

    def test_missing_column(self, tmp_path):
        path = _write(tmp_path / "a.csv", "x,close\n5,100\n")
        with pytest.raises(DataLoadError):
            load_price_series(path, column="nope")

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataLoadError):
            load_price_series(tmp_path / "missing.csv")

    def test_empty_file(self, tmp_path):
        path = _write(tmp_path / "empty.csv", "")
        with pytest.raises(DataLoadError):
            load_price_series(path)

    def test_no_numeric_rows(self, tmp_path):
        path = _write(tmp_path / "a.csv", "date,close\nd1,abc\nd2,def\n")
        with pytest.raises(DataLoadError):
            load_price_series(path)


class TestAlignment:
    def test_truncates_to_shorter(self):
        a, b = align_price_series([1.0, 2.0, 3.0], [4.0, 5.0])
        assert np.array_equal(a, [1.0, 2.0])
        assert np.array_equal(b, [4.0, 5.0])

    def test_load_pair(self, tmp_path):
        path_a = _write(tmp_path / "a.csv", "close\n100\n101\n102\n")
        path_b = _write(tmp_path / "b.csv", "price\n50\n51\n")
        a, b = load_pair(path_a, path_b)
        assert a.tolist() == [100.0, 101.0]
        assert b.tolist() == [50.0, 51.0]
