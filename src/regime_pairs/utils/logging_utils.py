"""Console logging for the regime_pairs package.

Only the package root logger carries a handler; module loggers obtained
with ``logging.getLogger(__name__)`` propagate to it. Levels are set by
``logging_config.setup_structured_logging``.
"""

from __future__ import annotations

import logging
import os
import sys

from dotenv import load_dotenv

ROOT_LOGGER = "regime_pairs"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_DATEFMT = "%Y-%m-%d %H:%M:%S"

_env_loaded = False


class ConsoleHandler(logging.StreamHandler):
    """stdout handler attached once to the package root."""

    def __init__(self):
        super().__init__(sys.stdout)
        self.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT))


def env_log_level(default: str = "INFO") -> str:
    """Level name from ``LOG_LEVEL``; ``.env`` is read on the first call only."""
    global _env_loaded
    if not _env_loaded:
        load_dotenv()
        _env_loaded = True
    level_name = os.getenv("LOG_LEVEL", default).upper()
    if not isinstance(logging.getLevelName(level_name), int):
        return default.upper()
    return level_name


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Return a logger inside the package hierarchy.

    Names outside ``regime_pairs`` are nested under it, so every record
    reaches the single console handler of the root.
    """
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"

    root = logging.getLogger(ROOT_LOGGER)
    if not any(isinstance(h, ConsoleHandler) for h in root.handlers):
        root.addHandler(ConsoleHandler())
    return logging.getLogger(name)
