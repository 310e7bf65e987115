"""Logger setup shared by every module."""

import logging
import sys
from typing import Optional

from ..config import Config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Get a configured logger.

    The ``flashdeck`` root logger gets a single stream handler the first time
    this is called; child loggers propagate to it.

    Args:
        name: Logger name (usually ``__name__``)
        level: Level name, defaults to Config.LOG_LEVEL

    Returns:
        Logger instance
    """
    root = logging.getLogger("flashdeck")
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel((level or Config.LOG_LEVEL).upper())
    elif level:
        root.setLevel(level.upper())
    return logging.getLogger(name)
