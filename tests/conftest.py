"""Shared fixtures and fakes for the FlashForge test suite."""

import asyncio
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pytest

from flashforge.errors import GenerationError
from flashforge.export import ExportService
from flashforge.models import (
    AUDIO_SLOTS,
    ExportResult,
    FlashcardSettings,
    Language,
    VoiceOption,
    WordRecord,
    WordStatus,
)
from flashforge.services import BaseGateway, SimulatedGateway
from flashforge.services.gateway import translation_update


async def settle(rounds: int = 20) -> None:
    """Let every ready task run a few steps."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeGateway(BaseGateway):
    """
    Scriptable gateway.

    Words in `hang` never finish, words in `fail` raise after the first
    stage. With `gated=True` every word waits for `release()` first.
    """

    def __init__(
        self,
        fail: Iterable[str] = (),
        hang: Iterable[str] = (),
        gated: bool = False,
        delay: float = 0.0,
        catalogue_error: bool = False
    ):
        self.fail = set(fail)
        self.hang = set(hang)
        self.gated = gated
        self.delay = delay
        self.catalogue_error = catalogue_error
        self.calls: List[str] = []
        self.settings_seen: List[FlashcardSettings] = []
        self.active = 0
        self.max_active = 0
        self._gate: Optional[asyncio.Event] = None

    @property
    def gate(self) -> asyncio.Event:
        if self._gate is None:
            self._gate = asyncio.Event()
        return self._gate

    def release(self) -> None:
        self.gate.set()

    async def get_available_languages(self) -> List[Language]:
        if self.catalogue_error:
            raise GenerationError("catalogue offline")
        return [Language("en", "English"), Language("es", "Spanish"), Language("fr", "French")]

    async def get_available_voices(self, language_code: str) -> List[VoiceOption]:
        if self.catalogue_error:
            raise GenerationError("catalogue offline")
        return [
            VoiceOption(f"{language_code}-voice-a", "A", language_code, "Female"),
            VoiceOption(f"{language_code}-voice-b", "B", language_code, "Male"),
        ]

    async def process_word(self, word, settings, on_progress):
        self.calls.append(word)
        self.settings_seen.append(settings)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.gated:
                await self.gate.wait()
            if word in self.hang:
                await asyncio.sleep(3600)
            if self.delay:
                await asyncio.sleep(self.delay)

            record = WordRecord.create(word)
            record.transition(WordStatus.PROCESSING)
            update = translation_update(word, f"{word}-t", f"{word}-def", settings)
            record.merge(update)
            on_progress(update)
            if word in self.fail:
                raise GenerationError(f"cannot generate '{word}'")
            for name in ("example_sentence_1", "example_sentence_2"):
                on_progress({name: f"{word} {name}"})
            on_progress({"audio_urls": {slot: f"/audio/{word}-{slot}.mp3" for slot in AUDIO_SLOTS}})
            record.transition(WordStatus.COMPLETED)
            return record
        finally:
            self.active -= 1

    async def export_flashcards(self, records: Sequence[WordRecord], export_format: Any,
                                settings: FlashcardSettings) -> ExportResult:
        return ExportResult(url=f"file:///tmp/flashcards.{export_format}", format=str(export_format),
                            count=len(records))


class NotificationRecorder:
    """notify_callback that keeps every payload."""

    def __init__(self):
        self.payloads: List[Dict[str, Any]] = []

    def __call__(self, payload: Dict[str, Any]) -> None:
        self.payloads.append(payload)

    def titles(self) -> List[str]:
        return [p["title"] for p in self.payloads]

    def with_title(self, title: str) -> List[Dict[str, Any]]:
        return [p for p in self.payloads if p["title"] == title]


@pytest.fixture
def settings():
    return FlashcardSettings(source_language="en", target_language="es")


@pytest.fixture
def notifications():
    return NotificationRecorder()


@pytest.fixture
def export_service(tmp_path):
    return ExportService(output_dir=str(tmp_path / "output"))


@pytest.fixture
def simulated(export_service):
    return SimulatedGateway(latency=0, export_service=export_service)


@pytest.fixture
def completed_record():
    record = WordRecord.create("run")
    record.transition(WordStatus.PROCESSING)
    record.merge({
        "source_word": "run",
        "target_word": "correr",
        "definition": "to move fast on foot",
        "example_sentence_1": "Me gusta correr.",
        "example_sentence_2": "Corre cada mañana.",
    })
    record.transition(WordStatus.COMPLETED)
    return record
