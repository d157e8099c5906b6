"""
Logging configuration for hpc-badge.

Uses loguru for structured logging with optional file rotation and retention.
"""

import sys
import time
from typing import Optional

from loguru import logger

from hpc_badge.config.settings import CoverageSettings, get_settings


def setup_logging(
    config: Optional[CoverageSettings] = None, level: Optional[str] = None
) -> None:
    """Configure logging based on settings.

    Sets up:
    - Console output with color and formatting
    - File output with rotation and retention (when log_to_file is set)

    Should be called once at application startup. ``level`` overrides the
    configured console level (the CLI's --verbose / --quiet flags).
    """
    if config is None:
        config = get_settings()

    console_level = level or config.log_level

    # Remove default handler
    logger.remove()

    # Console handler - colorized, formatted
    logger.add(
        sys.stderr,
        level=console_level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        colorize=True,
    )

    if config.log_to_file:
        log_dir = config.logs_dir
        log_dir.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_dir / "hpc-badge_{time:YYYY-MM-DD}.log",
            level="DEBUG",  # Always log everything to file
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation=config.log_rotation,
            retention=config.log_retention,
            compression="gz",
        )

    logger.debug("Logging initialized (level={})", console_level)


def get_logger(name: str):
    """Get a logger instance for a specific module.

    Example:
        >>> from hpc_badge.core.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Rendering report into {}", destdir)
    """
    return logger.bind(module=name)


class log_operation:
    """Context manager for logging pipeline stages with timing.

    Example:
        >>> with log_operation("Merging overlay", template="template.overlay"):
        ...     merge_overlay(...)
        # Logs: "Merging overlay [template=template.overlay] completed in 0.42s"
    """

    def __init__(self, operation: str, **context):
        self.operation = operation
        self.context = context
        self.start_time: Optional[float] = None

    def _context_str(self) -> str:
        return " ".join(f"{k}={v}" for k, v in self.context.items())

    def __enter__(self):
        self.start_time = time.monotonic()
        logger.info("{} [{}] starting...", self.operation, self._context_str())
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.monotonic() - (self.start_time or time.monotonic())

        if exc_type is None:
            logger.info(
                "{} [{}] completed in {:.2f}s",
                self.operation,
                self._context_str(),
                duration,
            )
        else:
            logger.error(
                "{} [{}] failed after {:.2f}s: {}",
                self.operation,
                self._context_str(),
                duration,
                exc_val,
            )

        return False  # Don't suppress exceptions
