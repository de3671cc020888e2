"""
Error logging utility for browser hub.
Sends warnings and errors to a dated file, and everything to a debug file,
while leaving console output to the application.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import List

PACKAGE_LOGGER = 'browser_hub'

_installed_handlers: List[logging.Handler] = []


def setup_file_logging(log_dir: str = 'logs', logger_name: str = PACKAGE_LOGGER) -> logging.Logger:
    """
    Attach dated file handlers to the package logger.

    Calling this again swaps the previously installed handlers for new ones,
    so repeated setup never duplicates output.

    Args:
        log_dir: Directory for errors_YYYYMMDD.log and debug_YYYYMMDD.log
        logger_name: Logger to configure

    Returns:
        The configured logger
    """
    # Create logs directory
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.DEBUG)

    # Remove handlers from a previous setup
    for handler in _installed_handlers:
        logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    today = datetime.now().strftime('%Y%m%d')

    file_handler = logging.FileHandler(log_path / f"errors_{today}.log")
    file_handler.setLevel(logging.WARNING)

    debug_handler = logging.FileHandler(log_path / f"debug_{today}.log")
    debug_handler.setLevel(logging.DEBUG)

    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    for handler in (file_handler, debug_handler):
        handler.setFormatter(detailed_formatter)
        logger.addHandler(handler)
        _installed_handlers.append(handler)

    return logger
