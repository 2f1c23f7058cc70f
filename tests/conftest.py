import os
import sys
from pathlib import Path

import numpy as np
import pytest

# Ensure the src directory is on the Python path for tests
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Ограничиваем потоки для Numba/BLAS при параллельном запуске тестов
os.environ.setdefault("NUMBA_NUM_THREADS", "1")
os.environ.setdefault("OMP_NUM_THREADS", "1")
os.environ.setdefault("MKL_NUM_THREADS", "1")
os.environ.setdefault("OPENBLAS_NUM_THREADS", "1")


@pytest.fixture(autouse=True)
def ensure_determinism():
    """Автоматически фиксирует seed для всех тестов."""
    np.random.seed(42)
    yield


@pytest.fixture
def rng():
    """Генератор случайных чисел с фиксированным seed."""
    return np.random.default_rng(42)


def generate_pair_prices(rng, n=300, beta=1.0, noise=0.01):
    """Генерирует синтетическую коинтегрированную пару.

    Параметры
    ----------
    rng : np.random.Generator
        Генератор случайных чисел с фиксированным seed.
    n : int, optional
        Количество дней (по умолчанию 300).
    beta : float, optional
        Связь лог-цен A и B.
    noise : float, optional
        Волатильность стационарной компоненты спреда.

    Возвращает
    -------
    tuple[np.ndarray, np.ndarray]
        Положительные цены A и B.
    """
    log_b = np.log(100.0) + np.cumsum(rng.normal(0.0, 0.01, n))
    # AR(1) спред
    spread = np.zeros(n)
    for i in range(1, n):
        spread[i] = 0.8 * spread[i - 1] + rng.normal(0.0, noise)
    log_a = np.log(50.0) + beta * (log_b - np.log(100.0)) + spread
    return np.exp(log_a), np.exp(log_b)


@pytest.fixture
def pair_prices(rng):
    """Синтетическая пара на 300 дней."""
    return generate_pair_prices(rng)

