"""Structured logging configuration for regime_pairs."""

import json
import logging
import logging.handlers
from datetime import datetime
from pathlib import Path

from .logging_utils import ROOT_LOGGER, env_log_level, get_logger


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logs."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "src": record.name,
            "msg": record.getMessage()
        }

        if hasattr(record, 'fields') and record.fields:
            log_entry.update(record.fields)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class RotatingFileHandler(logging.handlers.RotatingFileHandler):
    """Rotating file handler that creates its directory."""

    def __init__(self, filename: str, max_bytes: int = 10 * 1024 * 1024,
                 backup_count: int = 5, **kwargs):
        Path(filename).parent.mkdir(parents=True, exist_ok=True)
        super().__init__(filename, maxBytes=max_bytes, backupCount=backup_count, **kwargs)


def setup_structured_logging(
    log_file: str | None = None,
    level: str | None = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5
) -> logging.Logger:
    """Setup the package logger.

    Args:
        log_file: Optional path to a JSON-lines log file
        level: Logging level, ``LOG_LEVEL`` from the environment when omitted
        max_bytes: Max file size before rotation (10MB default)
        backup_count: Number of backup files to keep

    Returns:
        Configured package logger
    """
    logger = get_logger(ROOT_LOGGER)
    level = level or env_log_level()
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Убираем файловые хендлеры от предыдущей настройки
    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler):
            logger.removeHandler(handler)
            handler.close()

    if log_file:
        file_handler = RotatingFileHandler(
            log_file,
            max_bytes=max_bytes,
            backup_count=backup_count
        )
        file_handler.setFormatter(JSONFormatter())
        logger.addHandler(file_handler)

    return logger


def setup_logging_from_config(cfg) -> logging.Logger:
    """Configure logging from ``AppConfig.logging``."""
    # сделки логируются на уровне DEBUG
    level = "DEBUG" if cfg.logging.trade_details else cfg.logging.debug_level
    return setup_structured_logging(log_file=cfg.logging.log_file, level=level)


def log_structured(logger: logging.Logger, level: str, message: str, **fields):
    """Log structured message with extra fields.

    Args:
        logger: Logger instance
        level: Log level (info, warning, error, etc.)
        message: Log message
        **fields: Additional fields to include in log
    """
    log_method = getattr(logger, level.lower(), logger.info)
    extra = {"fields": fields} if fields else {}
    log_method(message, extra=extra)
