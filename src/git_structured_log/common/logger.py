"""Logging utilities with rich output on standard error.

Standard output carries the JSON records, so every handler configured here
writes to stderr through a shared rich console.

Usage:
    from git_structured_log.common.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Opened repository")
    logger.warning("Skipping reference with undecodable name")
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

from .env import env

# Global stderr console for consistent output
console = Console(stderr=True)


def _rich_handler(show_time: bool = False, show_path: bool = False) -> RichHandler:
    handler = RichHandler(
        console=console,
        show_time=show_time,
        show_path=show_path,
        rich_tracebacks=True,
        markup=False,  # log messages carry refnames and paths verbatim
    )
    handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
    return handler


def get_logger(
    name: str,
    level: str | None = None,
    show_time: bool = False,
    show_path: bool = False,
) -> logging.Logger:
    """Get a configured logger with rich output.

    Args:
        name: Logger name (typically __name__ of the module)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               If None, the level is left unset so the root logger
               configured by setup_logging() decides.
        show_time: Show timestamp in log output
        show_path: Show file path in log output

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Module loggers propagate to the root handler installed by setup_logging()
    if level is None:
        return logger

    logger.setLevel(level.upper())

    # Avoid adding multiple handlers if logger already configured
    if not logger.handlers:
        logger.addHandler(_rich_handler(show_time, show_path))

    # Allow propagation for test frameworks (pytest caplog)
    logger.propagate = True

    return logger


def setup_logging(level: str = "WARNING", log_file: str | None = None) -> None:
    """Setup logging configuration for the entire application.

    Called once at the CLI entry point. LOG_LEVEL overrides ``level``.

    Args:
        level: Default logging level for all modules
        log_file: Optional file path to also log to a file
    """
    level = env.log_level(default=level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(_rich_handler())

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(file_handler)
