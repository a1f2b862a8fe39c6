"""Logging setup shared by all flashdeck modules."""

import logging
import os
import sys
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
ROOT_LOGGER_NAME = "flashdeck"


def setup_logger(name: str = ROOT_LOGGER_NAME, level: Optional[Union[int, str]] = None) -> logging.Logger:
    """
    Get a logger under the ``flashdeck`` hierarchy.
    
    The package root logger gets a single stream handler the first time
    this is called; module loggers propagate to it.
    
    Args:
        name: Logger name (usually ``__name__``)
        level: Level for the root package logger. Defaults to the
               FLASHDECK_LOG_LEVEL environment variable or INFO.
    
    Returns:
        Configured logger
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(os.environ.get("FLASHDECK_LOG_LEVEL", "INFO").upper())
    
    if level is not None:
        root.setLevel(level.upper() if isinstance(level, str) else level)
    
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
