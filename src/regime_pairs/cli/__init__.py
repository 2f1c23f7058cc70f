"""Command-line interface entry points for regime_pairs."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from regime_pairs.core.data_loader import DataLoadError, load_pair
from regime_pairs.core.data_prep import InsufficientDataError
from regime_pairs.engine.backtest_engine import RegimeAdaptiveBacktester
from regime_pairs.reporting.report import format_report, save_report
from regime_pairs.utils.config import AppConfig, load_config
from regime_pairs.utils.logging_config import setup_logging_from_config

logger = logging.getLogger(__name__)


def _load_app_config(path: str | None) -> AppConfig:
    if not path:
        return AppConfig()
    return load_config(path)


def _handle_backtest(args: argparse.Namespace) -> int:
    cfg = _load_app_config(args.config)
    setup_logging_from_config(cfg)

    source_a = args.prices_a or cfg.data.prices_a
    source_b = args.prices_b or cfg.data.prices_b
    if not source_a or not source_b:
        logger.error("Price sources for both legs are required (--prices-a/--prices-b or data.* in config)")
        return 1

    try:
        prices_a, prices_b = load_pair(source_a, source_b, cfg.data.column_a, cfg.data.column_b)
        report = RegimeAdaptiveBacktester(cfg.backtest).run(prices_a, prices_b)
    except (DataLoadError, InsufficientDataError) as exc:
        logger.error(f"Backtest failed: {exc}")
        return 1

    print(f"Pair: {cfg.data.name_a} / {cfg.data.name_b}")
    print(format_report(report))

    out_dir = Path(args.out_dir) if args.out_dir else cfg.results_dir
    save_report(report, out_dir, plot=not args.no_plot)
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI dispatcher for regime_pairs."""
    parser = argparse.ArgumentParser(description="regime_pairs command-line interface")
    subparsers = parser.add_subparsers(dest="command", required=True)

    backtest_parser = subparsers.add_parser(
        "backtest",
        help="Run the regime-adaptive backtest for one pair",
    )
    backtest_parser.add_argument(
        "--config",
        default=None,
        help="Path to app config YAML (defaults are used when omitted)",
    )
    backtest_parser.add_argument("--prices-a", help="CSV path or URL with prices of leg A")
    backtest_parser.add_argument("--prices-b", help="CSV path or URL with prices of leg B")
    backtest_parser.add_argument("--out-dir", help="Output directory (default: results_dir from config)")
    backtest_parser.add_argument(
        "--no-plot",
        action="store_true",
        help="Skip the equity chart",
    )
    backtest_parser.set_defaults(func=_handle_backtest)

    args = parser.parse_args(argv)
    return args.func(args)
