"""
Processing orchestrator - drives word batches through the generation gateway.

Owns the settings, the word collection, the busy flag and the language and
voice catalogues. Presentation code reads state through the properties and
calls add_words / clear_words / update_settings / export_flashcards.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from ..config import Config
from ..errors import StageTimeoutError, describe_error
from ..models import (
    FlashcardSettings,
    Language,
    SettingsModel,
    TranslationDirection,
    VoiceOption,
    WordRecord,
    WordStatus,
    coerce_format,
)
from ..services.gateway import BaseGateway
from .collection import RecordUpdate, WordCollection

logger = logging.getLogger(__name__)

NotifyCallback = Callable[[Dict[str, Any]], None]

_LOG_LEVELS = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def input_placement(text: str, settings: FlashcardSettings) -> Dict[str, str]:
    """Put the literal input on the side of the card the direction names."""
    if settings.translation_direction == TranslationDirection.TARGET_TO_SOURCE:
        return {"source_word": "", "target_word": text}
    return {"source_word": text, "target_word": ""}


class FlashcardOrchestrator:
    """
    Processing pipeline for flashcard batches.

    Words of a batch are processed one at a time in insertion order (or, with
    concurrency > 1, by a bounded pool of workers). A failing word is marked
    as error and the batch moves on. Overlapping add_words calls queue behind
    each other; their records are visible as pending right away.

    Usage:
        async with SimulatedGateway() as gateway:
            app = FlashcardOrchestrator(gateway)
            await app.start()
            await app.add_words(["run", "jump"])
            url = await app.export_flashcards("csv")
    """

    def __init__(
        self,
        gateway: BaseGateway,
        settings: Optional[FlashcardSettings] = None,
        notify_callback: Optional[NotifyCallback] = None,
        concurrency: Optional[int] = None,
        stage_timeout: Optional[float] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            gateway: Backend performing generation and export
            settings: Initial settings (defaults from Config)
            notify_callback: Receives user-facing notifications.
                             Payload schema: {"event": "notify", "level": "info"|"success"|"warning"|"error",
                                              "title": str, "message": str}
            concurrency: Words processed at once (1 = sequential)
            stage_timeout: Seconds a stage may run without progress (0 disables)
        """
        self.gateway = gateway
        self.notify_callback = notify_callback or self._default_callback
        self.concurrency = max(1, concurrency if concurrency is not None else Config.CONCURRENCY)
        self.stage_timeout = Config.STAGE_TIMEOUT if stage_timeout is None else stage_timeout

        self._settings = SettingsModel(settings)
        self._collection = WordCollection()
        self._languages: List[Language] = []
        self._voices: List[VoiceOption] = []
        self._active_batches = 0
        self._batch_lock: Optional[asyncio.Lock] = None
        self._change_callbacks: List[Callable[[], None]] = []
        self._collection.on_change(self._notify_change)

    # =========================================================================
    # STATE (read-only for callers)
    # =========================================================================

    @property
    def words(self) -> Tuple[WordRecord, ...]:
        return self._collection.snapshot()

    @property
    def completed_words(self) -> List[WordRecord]:
        return self._collection.with_status(WordStatus.COMPLETED)

    @property
    def settings(self) -> FlashcardSettings:
        return self._settings.get()

    @property
    def is_processing(self) -> bool:
        return self._active_batches > 0

    @property
    def available_languages(self) -> List[Language]:
        return list(self._languages)

    @property
    def available_voices(self) -> List[VoiceOption]:
        return list(self._voices)

    def counts(self) -> Dict[str, int]:
        """Records per status, for progress display."""
        return self._collection.counts()

    def on_change(self, callback: Callable[[], None]) -> None:
        """Register a callback fired after any state change (re-render hook)."""
        self._change_callbacks.append(callback)

    def _notify_change(self) -> None:
        for callback in self._change_callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Change listener failed")

    @staticmethod
    def _default_callback(payload: Dict[str, Any]) -> None:
        """Default callback that writes notifications to the log."""
        level = _LOG_LEVELS.get(payload.get("level", "info"), logging.INFO)
        logger.log(level, "%s: %s", payload.get("title", ""), payload.get("message", ""))

    def _notify(self, level: str, title: str, message: str) -> None:
        try:
            self.notify_callback({
                "event": "notify",
                "level": level,
                "title": title,
                "message": message,
            })
        except Exception:
            logger.exception("Notification callback failed")

    def _get_batch_lock(self) -> asyncio.Lock:
        """Get or create the batch lock (lazy initialization)."""
        if self._batch_lock is None:
            self._batch_lock = asyncio.Lock()
        return self._batch_lock

    # =========================================================================
    # CATALOGUES
    # =========================================================================

    async def start(self) -> None:
        """Load languages and the voices of the current target language."""
        await self.load_languages()
        await self.refresh_voices()

    async def load_languages(self) -> List[Language]:
        try:
            self._languages = list(await self.gateway.get_available_languages())
        except Exception as e:
            logger.error("Failed to fetch languages: %s", describe_error(e))
            self._notify("error", "Error", "Failed to load available languages. Please try again.")
        self._notify_change()
        return self.available_languages

    async def refresh_voices(self) -> List[VoiceOption]:
        """
        Reload the voices for the current target language.

        A selected voice that the new list does not contain is dropped; if no
        voice is selected afterwards, the first voice of the list is selected.
        """
        language = self._settings.get().target_language
        if not language:
            return self.available_voices

        try:
            voices = list(await self.gateway.get_available_voices(language))
        except Exception as e:
            logger.error("Failed to fetch voices: %s", describe_error(e))
            self._notify("error", "Error", "Failed to load available voices. Please try again.")
            return self.available_voices

        if self._settings.get().target_language != language:
            # Target language changed while loading; that change refreshes again
            return self.available_voices

        self._voices = voices
        selected = self._settings.get().selected_voice
        if selected and selected not in {v.id for v in voices}:
            self._settings.update(selected_voice="")
            selected = ""
        if voices and not selected:
            self._settings.update(selected_voice=voices[0].id)

        self._notify_change()
        return self.available_voices

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    async def update_settings(self, **partial: Any) -> FlashcardSettings:
        """
        Merge settings; refresh voices when the target language changed.

        Records already dispatched keep the settings they were dispatched with.
        """
        previous = self._settings.get()
        current = self._settings.update(**partial)
        if current != previous:
            self._notify_change()
        if current.target_language != previous.target_language:
            await self.refresh_voices()
        return self._settings.get()

    async def add_words(self, raw_words: Sequence[str]) -> List[WordRecord]:
        """
        Add a batch of words and process it to the end.

        Args:
            raw_words: Already tokenized words (see TextParser.split_words)

        Returns:
            Final copies of the batch's records, in input order

        Raises:
            TypeError: If given a single string instead of a word sequence
        """
        if isinstance(raw_words, str):
            raise TypeError("add_words expects a sequence of words; split raw text with TextParser.split_words")
        words = [str(w) for w in raw_words]
        if not words:
            return []

        batch: List[WordRecord] = []
        self._active_batches += 1
        try:
            settings = self._settings.get()
            for text in words:
                record = WordRecord.create(text)
                record.merge(input_placement(text, settings))
                batch.append(record)
            self._collection.append_batch(batch)

            async with self._get_batch_lock():
                logger.info("Processing batch of %d words", len(batch))
                if self.concurrency == 1:
                    for record in batch:
                        await self._process_record(record)
                else:
                    semaphore = asyncio.Semaphore(self.concurrency)

                    async def worker(item: WordRecord) -> None:
                        async with semaphore:
                            await self._process_record(item)

                    await asyncio.gather(*[worker(record) for record in batch])

                counts = self._collection.counts()
                logger.info("Batch finished: %d completed, %d failed in total",
                            counts["completed"], counts["error"])
        finally:
            self._abandon_unfinished(batch)
            self._active_batches -= 1
            self._notify_change()

        return [r for r in (self._collection.get(record.id) for record in batch) if r is not None]

    def _abandon_unfinished(self, batch: Sequence[WordRecord]) -> None:
        """Fail every record of a cancelled batch that never reached a terminal status."""
        for record in batch:
            current = self._collection.get(record.id)
            if current is None or current.is_terminal:
                continue
            if current.status == WordStatus.PENDING:
                self._collection.apply(RecordUpdate(record.id, status=WordStatus.PROCESSING))
            self._collection.apply(RecordUpdate(record.id, status=WordStatus.ERROR, error="Cancelled"))

    async def _process_record(self, record: WordRecord) -> None:
        """Drive one record from pending to completed or error."""
        settings = self._settings.get()
        record_id = record.id
        text = record.input_text

        self._collection.apply(RecordUpdate(
            record_id, fields=input_placement(text, settings), status=WordStatus.PROCESSING
        ))
        logger.info("Processing: %s", text)

        progressed = asyncio.Event()

        def on_progress(update: Dict[str, Any]) -> None:
            progressed.set()
            self._collection.apply(RecordUpdate(record_id, fields=dict(update)))

        try:
            await self._await_stages(
                self.gateway.process_word(text, settings, on_progress), progressed
            )
        except asyncio.CancelledError:
            logger.warning("Processing of %s cancelled", text)
            self._collection.apply(RecordUpdate(record_id, status=WordStatus.ERROR, error="Cancelled"))
            raise
        except Exception as e:
            reason = describe_error(e)
            logger.warning("Error processing word %s: %s", text, reason)
            self._collection.apply(RecordUpdate(record_id, status=WordStatus.ERROR, error=reason))
            self._notify("error", "Processing Error",
                         f'Failed to process word "{text}". Please try again.')
        else:
            self._collection.apply(RecordUpdate(record_id, status=WordStatus.COMPLETED))

    async def _await_stages(self, coro: Awaitable[Any], progressed: asyncio.Event) -> Any:
        """
        Await a gateway call, failing it if a stage stalls.

        The stage deadline restarts every time the gateway reports progress.
        On timeout the call is cancelled and StageTimeoutError is raised.
        """
        task = asyncio.ensure_future(coro)
        if not self.stage_timeout or self.stage_timeout <= 0:
            return await task

        try:
            while True:
                progressed.clear()
                waiter = asyncio.ensure_future(progressed.wait())
                try:
                    done, _ = await asyncio.wait(
                        {task, waiter},
                        timeout=self.stage_timeout,
                        return_when=asyncio.FIRST_COMPLETED
                    )
                finally:
                    waiter.cancel()
                if task in done:
                    return task.result()
                if not done:
                    raise StageTimeoutError(self.stage_timeout)
        finally:
            if not task.done():
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)

    def clear_words(self) -> bool:
        """
        Remove all records unless a batch is running.

        Returns:
            True if the collection was cleared
        """
        if self.is_processing:
            self._notify("warning", "Cannot Clear Words",
                         "Please wait until all words have finished processing.")
            return False
        self._collection.clear()
        return True

    async def export_flashcards(self, export_format: Any) -> Optional[str]:
        """
        Export the completed records.

        Args:
            export_format: ExportFormat member or "html" / "csv" / "anki"

        Returns:
            URL of the exported file, or None when nothing was exported
        """
        if not len(self._collection):
            self._notify("error", "No Flashcards to Export",
                         "Please add and process words before exporting.")
            return None

        completed = self.completed_words
        if not completed:
            self._notify("error", "No Completed Flashcards",
                         "Please wait until at least one word has finished processing.")
            return None

        try:
            result = await self.gateway.export_flashcards(completed, export_format, self._settings.get())
        except Exception as e:
            logger.error("Export error: %s", describe_error(e))
            self._notify("error", "Export Failed",
                         "An error occurred while exporting your flashcards. Please try again.")
            return None

        fmt = coerce_format(export_format)
        label = fmt.value if fmt else str(export_format)
        self._notify("success", "Export Successful",
                     f"Your flashcards have been exported in {label.upper()} format.")
        return result.url
