"""Logging for the CineMatch services and CLI."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import List

from ..config.models import LoggingConfig

APP_LOGGER = "cinematch"

# Provider SDKs log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "asyncio")


def effective_level(config: LoggingConfig, verbose: bool = False) -> int:
    """Resolve the numeric level, with ``verbose`` forcing DEBUG."""
    return logging.DEBUG if verbose else logging.getLevelName(config.level)


def _build_handlers(config: LoggingConfig) -> List[logging.Handler]:
    # stdout carries command output, including --json documents
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if config.file:
        log_path = Path(config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                log_path,
                maxBytes=config.max_size_mb * 1024 * 1024,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
        )
    return handlers


def setup_logging(config: LoggingConfig, verbose: bool = False) -> logging.Logger:
    """Configure the application logger.

    Handlers are attached to the ``cinematch`` logger rather than the root, so
    repeated CLI invocations in one process replace them instead of stacking.

    Args:
        config: Logging configuration.
        verbose: Log at DEBUG regardless of the configured level.

    Returns:
        The configured application logger.
    """
    level = effective_level(config, verbose)
    formatter = logging.Formatter(config.format)

    app_logger = logging.getLogger(APP_LOGGER)
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    for handler in _build_handlers(config):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        app_logger.addHandler(handler)
    app_logger.setLevel(level)
    app_logger.propagate = False

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    app_logger.debug(f"Logging configured with level {logging.getLevelName(level)}")
    return app_logger


class LoggerMixin:
    """Mixin class that provides logging functionality."""

    @property
    def logger(self) -> logging.Logger:
        """Get logger for this class."""
        return logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")
