"""Structured logging utilities with context management."""

import contextvars
import sys
from pathlib import Path
from typing import Any

from loguru import logger

from src.config import LoggingConfig

# Context variables for maintaining per-cycle context
cycle_context: contextvars.ContextVar[dict[str, Any]] = contextvars.ContextVar("cycle_context", default={})


class LoggingContext:
    """
    Context manager for structured logging with automatic context injection.

    Example:
        with LoggingContext(reading_time="2024-01-01T00:00:05"):
            logger.info("Evaluating reading")  # Will include reading_time
    """

    def __init__(self, **context_data):
        self.context_data = context_data
        self.token = None

    def __enter__(self):
        current = cycle_context.get().copy()
        current.update(self.context_data)
        self.token = cycle_context.set(current)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.token:
            cycle_context.reset(self.token)


def get_logging_context() -> dict[str, Any]:
    return cycle_context.get().copy()


def _context_filter(record) -> bool:
    """Add context variables to log record."""
    for key, value in cycle_context.get().items():
        record["extra"][key] = value
    return True


def configure_logging(config: LoggingConfig | None = None, logs_dir: str | Path | None = None) -> Path | None:
    """
    Configure loguru with a console handler and, when ``logs_dir`` is given,
    a rotating file handler.

    This should be called once at application startup.

    Returns:
        Path of the log file, if one was configured
    """
    config = config or LoggingConfig()

    logger.remove()

    logger.add(
        sink=sys.stderr,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level> {extra}"
        ),
        filter=_context_filter,
        level=config.level,
        colorize=config.colorize,
    )

    if logs_dir is None:
        return None

    log_path = Path(logs_dir) / config.file_name
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        sink=str(log_path),
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra} | {name}:{function}:{line} | {message}",
        filter=_context_filter,
        level=config.file_level,
        rotation=config.rotation,
        retention=config.retention,
        serialize=False,
    )

    logger.info(f"Logging to {log_path}")
    return log_path
