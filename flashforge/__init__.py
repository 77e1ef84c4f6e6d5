"""FlashForge - AI Flashcard Generator"""

__version__ = "1.0.0"
__author__ = "FlashForge Team"

from .config import Config, LANGUAGES, VOICES
from .errors import FlashForgeError, GenerationError, ExportError, SettingsError
from .models import (
    ExportFormat,
    FlashcardSettings,
    TranslationDirection,
    WordRecord,
    WordStatus,
)
from .pipeline import FlashcardOrchestrator
from .services import GenerationGateway, SimulatedGateway
from .templates import CardTemplates

__all__ = [
    'Config',
    'LANGUAGES',
    'VOICES',
    'FlashForgeError',
    'GenerationError',
    'ExportError',
    'SettingsError',
    'ExportFormat',
    'FlashcardSettings',
    'TranslationDirection',
    'WordRecord',
    'WordStatus',
    'FlashcardOrchestrator',
    'GenerationGateway',
    'SimulatedGateway',
    'CardTemplates',
]
