"""Data models for FlashForge."""

from .word import WordRecord, WordStatus, AUDIO_SLOTS, generate_record_id
from .settings import (
    ExportFormat,
    FlashcardSettings,
    Language,
    SettingsModel,
    TranslationDirection,
    VoiceOption,
    coerce_format,
    get_extension,
)
from .export import ExportResult

__all__ = [
    'WordRecord',
    'WordStatus',
    'AUDIO_SLOTS',
    'generate_record_id',
    'ExportFormat',
    'ExportResult',
    'FlashcardSettings',
    'Language',
    'SettingsModel',
    'TranslationDirection',
    'VoiceOption',
    'coerce_format',
    'get_extension',
]
