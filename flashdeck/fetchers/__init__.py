"""Fetchers module - media generation behind a common interface."""

from .base import BaseFetcher
from .audio import PronunciationFetcher

__all__ = [
    'BaseFetcher',
    'PronunciationFetcher',
]
