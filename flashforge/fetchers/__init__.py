"""Fetchers module - media fetching."""

from .base import BaseFetcher
from .audio import AudioFetcher

__all__ = [
    'BaseFetcher',
    'AudioFetcher',
]
