"""
Simulated gateway for offline development and demos.

Produces placeholder content with realistic per-stage latency, so the whole
pipeline can be driven without API keys or network access.
"""

import asyncio
from typing import Any, Iterable, List, Optional, Sequence

from ..config import Config, LANGUAGES, VOICES
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
from ..utils.paths import MediaPathGenerator
from .gateway import BaseGateway, ProgressCallback, translation_update

# Base delay per stage, in seconds
STAGE_DELAYS = {
    "languages": 0.5,
    "voices": 0.8,
    "translation": 1.0,
    "example_1": 1.5,
    "example_2": 1.0,
    "audio": 2.0,
    "export": 2.0,
}


class SimulatedGateway(BaseGateway):
    """Gateway that fakes every stage with a delay."""

    def __init__(
        self,
        latency: Optional[float] = None,
        fail_words: Iterable[str] = (),
        export_service: Optional[ExportService] = None
    ):
        """
        Initialize the simulated gateway.

        Args:
            latency: Multiplier for STAGE_DELAYS (0 disables waiting)
            fail_words: Words whose processing fails in the translation stage
            export_service: Writer for exports (real files are produced)
        """
        self.latency = Config.SIMULATED_LATENCY if latency is None else latency
        self.fail_words = set(fail_words)
        self.exporter = export_service or ExportService()

    async def _wait(self, stage: str) -> None:
        await asyncio.sleep(STAGE_DELAYS[stage] * self.latency)

    async def get_available_languages(self) -> List[Language]:
        await self._wait("languages")
        return [Language(**lang) for lang in LANGUAGES]

    async def get_available_voices(self, language_code: str) -> List[VoiceOption]:
        await self._wait("voices")
        return [VoiceOption(**v) for v in VOICES if v["language"] == language_code]

    async def process_word(
        self,
        word: str,
        settings: FlashcardSettings,
        on_progress: ProgressCallback
    ) -> WordRecord:
        record = WordRecord.create(word)
        record.transition(WordStatus.PROCESSING)

        def commit(update):
            record.merge(update)
            on_progress(update)

        await self._wait("translation")
        if word in self.fail_words:
            raise GenerationError(f"Translation service rejected '{word}'")

        if settings.translation_direction == TranslationDirection.SOURCE_TO_TARGET:
            translation = f"{word} (translated to {settings.target_language})"
        else:
            translation = f"{word} (translated to {settings.source_language})"
        definition = f'Definition of "{word}" in {settings.source_language}'
        commit(translation_update(word, translation, definition, settings))

        await self._wait("example_1")
        commit({"example_sentence_1":
                f'This is an example sentence using "{word}" with {settings.tone} tone.'})

        await self._wait("example_2")
        commit({"example_sentence_2":
                f'Here is another example sentence with "{word}" showing different usage.'})

        await self._wait("audio")
        key = MediaPathGenerator.record_key(record.id)
        commit({"audio_urls": {slot: f"/api/audio/{key}-{slot}.mp3" for slot in AUDIO_SLOTS}})

        record.transition(WordStatus.COMPLETED)
        return record

    async def export_flashcards(
        self,
        records: Sequence[WordRecord],
        export_format: Any,
        settings: FlashcardSettings
    ) -> ExportResult:
        await self._wait("export")
        return await self.exporter.export(records, export_format, settings)
