"""
Centralized logging configuration for the bitgrid package.

Every module of the package logs through the shared ``logger`` defined at
the bottom of this file. Grid operations never raise on bad input; instead
they leave the grid untouched and report the rejected call here, so this
logger is the only place where a silently ignored call becomes visible.

Records go to stderr; stdout belongs to the command line JSON output.
"""

import logging
import sys
from typing import Optional

DEFAULT_FORMAT = "%(name)s - %(levelname)s - %(message)s"


def setup_logger(
    name: str = "bitgrid",
    level: int = logging.INFO,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Set up and configure a logger for the bitgrid package.

    Parameters
    ----------
    name : str, optional
        Name of the logger. Defaults to "bitgrid".
    level : int, optional
        Logging level. Defaults to logging.INFO.
    format_string : str, optional
        Custom format string for log messages. If None, uses
        ``DEFAULT_FORMAT``.

    Returns
    -------
    logging.Logger
        Configured logger instance. Calling this twice with the same name
        returns the same logger without stacking a second handler.
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))

    logger.addHandler(handler)

    return logger


def set_log_level(level: int, name: str = "bitgrid") -> logging.Logger:
    """
    Change the level of an already configured logger and all its handlers.

    Used by the command line interface for ``--verbose``.
    """
    target = logging.getLogger(name)
    target.setLevel(level)
    for handler in target.handlers:
        handler.setLevel(level)
    return target


# Create the default package logger
logger = setup_logger()
