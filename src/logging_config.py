"""
Logging Configuration
Sets up the loggers for the engine packages.
"""
import logging
import os
import sys
from typing import Optional

from config import LOG_LEVEL

# Top-level packages whose loggers share the same handlers
PACKAGES = ("core", "camera", "physics", "world", "main")

_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def parse_level(level: Optional[str], default: int = logging.INFO) -> int:
    """Map a level name such as "debug" to its logging constant."""
    if not level:
        return default
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else default


def setup_logging(level: Optional[int] = None, log_file: Optional[str] = None) -> None:
    """
    Configures the loggers of every engine package.

    Args:
        level: Logging level (e.g. logging.DEBUG). Falls back to the
            LOG_LEVEL environment variable, then config.LOG_LEVEL.
        log_file: Optional path to save logs to a file.
    """
    if level is None:
        level = parse_level(os.environ.get("LOG_LEVEL"), parse_level(LOG_LEVEL))

    formatter = logging.Formatter(_FORMAT, datefmt='%H:%M:%S')

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    file_handler = None
    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)

    for name in PACKAGES:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        # Avoid duplicate output when setup runs twice (tests, restarts)
        if logger.hasHandlers():
            logger.handlers.clear()
        logger.addHandler(console_handler)
        if file_handler is not None:
            logger.addHandler(file_handler)

    logging.getLogger("core").info("Logging initialized.")
