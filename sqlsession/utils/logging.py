"""
Logging utilities for sqlsession.

This module provides functions and classes to configure the package
loggers consistently, mainly for the command-line interface. Library
code only ever writes to ``logging.getLogger(__name__)``.
"""
import logging
import sys
from pathlib import Path
from typing import Optional, Union

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
DEFAULT_LEVEL = logging.INFO

# Terminal colors per level
LOG_COLORS = {
    "DEBUG": "\033[94m",     # Blue
    "INFO": "\033[92m",      # Green
    "WARNING": "\033[93m",   # Yellow
    "ERROR": "\033[91m",     # Red
    "CRITICAL": "\033[95m",  # Magenta
    "RESET": "\033[0m"
}


class ColoredFormatter(logging.Formatter):
    """Formatter that adds colors to log messages in the terminal."""

    def __init__(self, fmt: str = DEFAULT_FORMAT, datefmt: str = DEFAULT_DATE_FORMAT,
                 use_colors: bool = True):
        """
        Initializes the formatter.

        Args:
            fmt: Message format
            datefmt: Date format
            use_colors: If True, uses colors in the terminal
        """
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        message = super().format(record)

        if self.use_colors and levelname in LOG_COLORS:
            return f"{LOG_COLORS[levelname]}{message}{LOG_COLORS['RESET']}"
        return message


def setup_logger(name: str = "sqlsession",
                 level: int = DEFAULT_LEVEL,
                 file_path: Optional[Union[str, Path]] = None,
                 format_string: Optional[str] = None,
                 use_colors: bool = True,
                 propagate: bool = False) -> logging.Logger:
    """
    Configures a logger with custom options.

    Args:
        name: Logger name
        level: Logging level
        file_path: Path to the log file (optional)
        format_string: Custom message format
        use_colors: If True, uses colors in the terminal
        propagate: If True, propagates messages to parent loggers

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)

    # Replace any handlers left over from a previous setup
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    logger.setLevel(level)
    logger.propagate = propagate

    fmt = format_string or DEFAULT_FORMAT
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(ColoredFormatter(fmt, use_colors=use_colors))
    logger.addHandler(console_handler)

    if file_path:
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(file_path)
        # No colors in files
        file_handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(file_handler)

    logger.debug(f"Logger '{name}' configured with level {logging.getLevelName(level)}")
    if file_path:
        logger.debug(f"Logs written to {file_path}")

    return logger

