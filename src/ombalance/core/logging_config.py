"""
Logging setup for the organic matter balance engine.
"""
import logging
import sys
from typing import Optional

from ombalance.core.config import LoggingConfig, get_config

PACKAGE_LOGGER = "ombalance"


def setup_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """
    Configure the package logger with a console handler.

    Args:
        config: Logging configuration, defaults to the global configuration

    Returns:
        The configured ``ombalance`` logger
    """
    config = config or get_config().logging
    numeric_level = getattr(logging, config.log_level.upper(), logging.INFO)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(numeric_level)

    # Replace handlers so repeated calls don't duplicate output
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(config.log_format, datefmt=config.date_format))
    logger.addHandler(handler)

    return logger
