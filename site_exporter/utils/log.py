"""
Logging for the site exporter.

Component loggers write through rich; the print_* helpers give the CLI its
status lines.
"""

import logging
from typing import Dict, Optional

from rich.console import Console
from rich.logging import RichHandler


console = Console()

_loggers: Dict[str, logging.Logger] = {}

# Applied to loggers created later by get_logger
_default_level = logging.INFO

_FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _rich_handler(level: int) -> logging.Handler:
    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(level)
    return handler


def setup_logger(
    name: str = "site_exporter",
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure a named component logger.

    Any handlers from an earlier call are replaced, so calling this twice for
    the same name does not duplicate output.

    Args:
        name: Component name (crawler, renderer, archive, ...)
        level: Threshold for the logger and its handlers
        log_file: Also append plain-text records to this file

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.addHandler(_rich_handler(level))

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    _loggers[name] = logger
    return logger


def get_logger(name: str = "site_exporter") -> logging.Logger:
    """Return the logger for a component, configuring it on first use."""
    logger = _loggers.get(name)
    if logger is None:
        logger = setup_logger(name, level=_default_level)
    return logger


def set_level(level: int) -> None:
    """Apply a logging level to existing and future loggers."""
    global _default_level
    _default_level = level
    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)


def print_status(message: str, style: str = "bold blue") -> None:
    """Print one styled line to the console."""
    console.print(f"[{style}]{message}[/{style}]")


def print_error(message: str) -> None:
    print_status(f"❌ {message}", "bold red")


def print_success(message: str) -> None:
    print_status(f"✅ {message}", "bold green")


def print_warning(message: str) -> None:
    print_status(f"⚠️ {message}", "bold yellow")


def print_info(message: str) -> None:
    print_status(f"ℹ️ {message}", "bold cyan")
