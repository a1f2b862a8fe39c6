"""Utils module."""

from .parsing import TextParser
from .logger import setup_logger
from .paths import MediaPathGenerator

__all__ = [
    'TextParser',
    'setup_logger',
    'MediaPathGenerator',
]
