"""Console logging for the fitness client.

Structured kwargs passed to logger calls (key, event, status...) are
rendered through {extra}.
"""

import sys

from loguru import logger

from fitclient.config.settings import settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level> {extra}"
)


def setup_logger(level: str = "INFO") -> None:
    """Replace loguru's default sink with a colored stderr sink at the given level."""
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level, colorize=True)
    logger.debug("Logger initialized", level=level)


setup_logger(level=settings.log_level)
