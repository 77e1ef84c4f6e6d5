"""
Generation Gateway - the backend contract the processing pipeline relies on.

A gateway turns one raw word into a finished flashcard in four stages
(translation + definition, example 1, example 2, audio), reporting each
stage's fields through a progress callback, and exports finished cards.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..config import LANGUAGES
from ..errors import GenerationError
from ..export import ExportService
from ..models import (
    AUDIO_SLOTS,
    ExportResult,
    FlashcardSettings,
    Language,
    TranslationDirection,
    VoiceOption,
    WordRecord,
    WordStatus,
)
from .ai_service import AIService
from .media_service import MediaService

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Dict[str, Any]], None]


def translation_update(word: str, translation: str, definition: str,
                       settings: FlashcardSettings) -> Dict[str, str]:
    """
    Fields produced by the translation stage.

    The literal input stays on its own side of the card; the translation
    fills the other side.
    """
    if settings.translation_direction == TranslationDirection.SOURCE_TO_TARGET:
        return {"source_word": word, "target_word": translation, "definition": definition}
    return {"source_word": translation, "target_word": word, "definition": definition}


class BaseGateway(ABC):
    """Abstract base class for generation gateways."""

    @abstractmethod
    async def get_available_languages(self) -> List[Language]:
        """Languages the backend can generate for."""
        pass

    @abstractmethod
    async def get_available_voices(self, language_code: str) -> List[VoiceOption]:
        """Voices available for a language."""
        pass

    @abstractmethod
    async def process_word(
        self,
        word: str,
        settings: FlashcardSettings,
        on_progress: ProgressCallback
    ) -> WordRecord:
        """
        Run every generation stage for one word.

        Args:
            word: The user's input
            settings: Settings snapshot taken at dispatch
            on_progress: Called at least once per stage with that stage's fields

        Returns:
            The completed record

        Raises:
            GenerationError: If any stage fails
        """
        pass

    @abstractmethod
    async def export_flashcards(
        self,
        records: Sequence[WordRecord],
        export_format: Any,
        settings: FlashcardSettings
    ) -> ExportResult:
        """Serialize completed records and return where the artifact lives."""
        pass

    async def close(self) -> None:
        """Release network sessions and other resources."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


def voice_display_name(short_name: str) -> str:
    """'es-ES-ElviraNeural' -> 'Elvira'."""
    name = short_name.rsplit("-", 1)[-1]
    return re.sub(r'(Multilingual)?Neural$', '', name) or short_name


class GenerationGateway(BaseGateway):
    """
    Real backend: LLM text generation, Edge TTS audio, file exports.

    Usage:
        async with GenerationGateway() as gateway:
            record = await gateway.process_word("run", settings, print)
    """

    def __init__(
        self,
        ai_service: Optional[AIService] = None,
        media_service: Optional[MediaService] = None,
        export_service: Optional[ExportService] = None
    ):
        self.ai = ai_service or AIService()
        self.media = media_service or MediaService()
        self.exporter = export_service or ExportService()

    async def close(self) -> None:
        await self.ai.close()
        await self.media.close()

    async def get_available_languages(self) -> List[Language]:
        return [Language(**lang) for lang in LANGUAGES]

    async def get_available_voices(self, language_code: str) -> List[VoiceOption]:
        voices = await self.media.audio_fetcher.list_voices(language_code)
        return [
            VoiceOption(
                id=v["ShortName"],
                name=voice_display_name(v["ShortName"]),
                language=language_code,
                gender=v.get("Gender", ""),
            )
            for v in voices
        ]

    async def _resolve_voice(self, settings: FlashcardSettings) -> str:
        if settings.selected_voice:
            return settings.selected_voice
        voices = await self.get_available_voices(settings.target_language)
        if not voices:
            raise GenerationError(f"No voice available for '{settings.target_language}'")
        return voices[0].id

    async def process_word(
        self,
        word: str,
        settings: FlashcardSettings,
        on_progress: ProgressCallback
    ) -> WordRecord:
        record = WordRecord.create(word)
        record.transition(WordStatus.PROCESSING)

        def commit(update: Dict[str, Any]) -> None:
            record.merge(update)
            on_progress(update)

        # Stage 1: translation + definition
        result = await self.ai.translate_and_define(word, settings)
        commit(translation_update(word, result["translation"], result["definition"], settings))
        logger.debug("Translated %s -> %s", word, result["translation"])

        # Stages 2-3: example sentences in the target language
        sentence_1 = await self.ai.generate_example_sentence(record.target_word, settings)
        commit({"example_sentence_1": sentence_1})
        sentence_2 = await self.ai.generate_example_sentence(record.target_word, settings, avoid=sentence_1)
        commit({"example_sentence_2": sentence_2})

        # Stage 4: audio for every content slot
        voice = await self._resolve_voice(settings)
        logger.debug("Synthesizing audio for %s with %s", word, voice)
        texts = {slot: getattr(record, slot) for slot in AUDIO_SLOTS}
        audio_urls = await self.media.synthesize_slots(record.id, texts, voice)
        commit({"audio_urls": audio_urls})
        if not record.has_complete_audio:
            raise GenerationError(f"Missing audio for '{word}'")

        record.transition(WordStatus.COMPLETED)
        return record

    async def export_flashcards(
        self,
        records: Sequence[WordRecord],
        export_format: Any,
        settings: FlashcardSettings
    ) -> ExportResult:
        return await self.exporter.export(records, export_format, settings)
