"""
Regime Pairs - regime-adaptive pairs trading backtester.

Classifies the market into correlation regimes and switches between
mean-reversion and momentum trading of the spread of two assets.
"""

__version__ = "0.1.0"

# Экспорт основных компонентов для удобного импорта
from regime_pairs.utils.config import load_config, AppConfig, StrategyConfig
from regime_pairs.engine.backtest_engine import RegimeAdaptiveBacktester, run_backtest
from regime_pairs.reporting.report import BacktestReport

__all__ = [
    "__version__",
    "load_config",
    "AppConfig",
    "StrategyConfig",
    "RegimeAdaptiveBacktester",
    "run_backtest",
    "BacktestReport",
]
