"""Loguru configuration for the relay.

Call ``setup_logger()`` once at process start. Repeated calls are no-ops.
"""

import sys

from loguru import logger

_INITIALISED = False

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)


def setup_logger(level: str = "INFO") -> None:
    global _INITIALISED
    if _INITIALISED:
        return

    logger.remove()  # drop loguru's default stderr sink
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT, colorize=True)
    logger.info("Logger initialised (level: {})", level.upper())

    _INITIALISED = True
