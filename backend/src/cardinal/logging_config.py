import sys
from typing import Optional

from loguru import logger

from .utilities import LOG_FILE, LOG_LEVEL

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function} - {message}"


def configure_logging(level: str = LOG_LEVEL, log_file: Optional[str] = None):
    """
    Route all log output to one sink.

    The curses dashboard owns the terminal, so it logs to ``log_file``;
    the HTTP server logs to stderr.
    """
    logger.remove()
    if log_file:
        logger.add(log_file, level=level, format=LOG_FORMAT, enqueue=True)
    else:
        logger.add(sys.stderr, level=level, format=LOG_FORMAT)


def configure_dashboard_logging(level: str = LOG_LEVEL):
    configure_logging(level, LOG_FILE)
