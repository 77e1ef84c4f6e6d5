"""Configuration module for FlashForge."""

from .settings import Config
from .languages import LANGUAGES, VOICES, language_name

__all__ = [
    'Config',
    'LANGUAGES',
    'VOICES',
    'language_name',
]
