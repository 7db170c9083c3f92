"""
Logging configuration for the Rise content extractor.
"""

import logging
import sys
from typing import Optional


def setup_logger(
    name: str = "rise_extractor",
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up and return a logger instance.

    Args:
        name: Logger name
        level: Logging level (default: INFO)
        log_file: Optional file path for logging

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # setup_logger runs once at import and again from the CLI with the
    # requested level; only the level changes on repeat calls.
    if logger.handlers:
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    logger.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Console goes to stderr so the CLI can print JSON on stdout
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


# Default logger instance, created once at import time
logger = setup_logger()


def get_module_logger(module_name: str) -> logging.Logger:
    """
    Get a child logger for a specific module.

    Child loggers (e.g. "rise_extractor.analyzer") inherit the package
    logger's handlers and level; the name shows which stage logged.

    Args:
        module_name: Name of the module (e.g., 'analyzer', 'sanitizer')

    Returns:
        Child logger instance
    """
    return logging.getLogger(f"rise_extractor.{module_name}")
