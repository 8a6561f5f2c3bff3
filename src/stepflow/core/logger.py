"""Logging utilities for stepflow."""

import logging
import sys
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: Optional[str] = None, level: Union[int, str] = logging.INFO) -> logging.Logger:
    """Get a configured logger instance.

    Args:
        name: Logger name (defaults to the stepflow package logger)
        level: Logging level, as int or name ("DEBUG", "INFO", ...)

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name or "stepflow")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger
