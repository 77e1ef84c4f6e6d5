"""Tests for the processing orchestrator."""

import asyncio

import pytest

from flashforge.errors import SettingsError
from flashforge.models import FlashcardSettings, TranslationDirection, WordStatus
from flashforge.pipeline import FlashcardOrchestrator

from conftest import FakeGateway, settle


def run(coro):
    return asyncio.run(coro)


class TestEndToEnd:
    def test_batch_completes_and_exports(self, simulated, settings, notifications):
        async def scenario():
            app = FlashcardOrchestrator(simulated, settings, notifications, stage_timeout=5)
            await app.start()
            records = await app.add_words(["run", "jump"])
            url = await app.export_flashcards("csv")
            return app, records, url

        app, records, url = run(scenario())

        assert [r.input_text for r in records] == ["run", "jump"]
        assert all(r.status == WordStatus.COMPLETED for r in app.words)
        run_card = app.words[0]
        assert run_card.source_word == "run"
        assert run_card.target_word == "run (translated to es)"
        assert "neutral tone" in run_card.example_sentence_1
        assert len(run_card.audio_urls) == 4
        assert run_card.error is None
        assert url.startswith("file://") and url.endswith(".csv")
        assert notifications.titles() == ["Export Successful"]
        assert notifications.payloads[0]["message"] == "Your flashcards have been exported in CSV format."
        assert not app.is_processing

    def test_failed_word_does_not_stop_the_batch(self, export_service, settings, notifications):
        from flashforge.services import SimulatedGateway

        gateway = SimulatedGateway(latency=0, fail_words={"xyz"}, export_service=export_service)

        async def scenario():
            app = FlashcardOrchestrator(gateway, settings, notifications, stage_timeout=5)
            await app.add_words(["ok", "xyz"])
            return app

        app = run(scenario())

        ok, xyz = app.words
        assert ok.status == WordStatus.COMPLETED
        assert xyz.status == WordStatus.ERROR
        assert xyz.error == "Translation service rejected 'xyz'"
        errors = notifications.with_title("Processing Error")
        assert len(errors) == 1
        assert errors[0]["level"] == "error"
        assert errors[0]["message"] == 'Failed to process word "xyz". Please try again.'
        assert app.counts() == {"pending": 0, "processing": 0, "completed": 1, "error": 1}

    def test_target_to_source_keeps_input_as_target_word(self, simulated, notifications):
        settings = FlashcardSettings(
            source_language="en",
            target_language="es",
            translation_direction=TranslationDirection.TARGET_TO_SOURCE,
        )

        async def scenario():
            app = FlashcardOrchestrator(simulated, settings, notifications, stage_timeout=5)
            await app.add_words(["correr"])
            return app.words[0]

        record = run(scenario())

        assert record.status == WordStatus.COMPLETED
        assert record.target_word == "correr"
        assert record.source_word == "correr (translated to en)"


class TestBatches:
    def test_empty_batch_is_a_no_op(self, settings, notifications):
        gateway = FakeGateway()

        async def scenario():
            app = FlashcardOrchestrator(gateway, settings, notifications)
            return app, await app.add_words([])

        app, records = run(scenario())

        assert records == []
        assert gateway.calls == []
        assert app.words == ()
        assert not app.is_processing

    def test_records_are_pending_before_processing(self, settings, notifications):
        gateway = FakeGateway(gated=True)

        async def scenario():
            app = FlashcardOrchestrator(gateway, settings, notifications, stage_timeout=5)
            task = asyncio.ensure_future(app.add_words(["a", "b", "c"]))
            await settle()
            statuses = [r.status for r in app.words]
            busy = app.is_processing
            gateway.release()
            await task
            return statuses, busy, app

        statuses, busy, app = run(scenario())

        assert statuses == [WordStatus.PROCESSING, WordStatus.PENDING, WordStatus.PENDING]
        assert busy
        assert [r.status for r in app.words] == [WordStatus.COMPLETED] * 3
        assert gateway.calls == ["a", "b", "c"]

    def test_repeated_words_get_distinct_records(self, settings, notifications):
        async def scenario():
            app = FlashcardOrchestrator(FakeGateway(), settings, notifications)
            return await app.add_words(["run", "run"])

        records = run(scenario())

        assert len(records) == 2
        assert records[0].id != records[1].id

    def test_overlapping_batches_are_queued(self, settings, notifications):
        gateway = FakeGateway(gated=True)

        async def scenario():
            app = FlashcardOrchestrator(gateway, settings, notifications, stage_timeout=5)
            first = asyncio.ensure_future(app.add_words(["a"]))
            await settle()
            second = asyncio.ensure_future(app.add_words(["b"]))
            await settle()
            during = [(r.input_text, r.status) for r in app.words]
            gateway.release()
            await asyncio.gather(first, second)
            return app, during

        app, during = run(scenario())

        assert during == [("a", WordStatus.PROCESSING), ("b", WordStatus.PENDING)]
        assert gateway.calls == ["a", "b"]
        assert gateway.max_active == 1
        assert all(r.status == WordStatus.COMPLETED for r in app.words)
        assert not app.is_processing

    def test_worker_pool_bounds_parallelism(self, settings, notifications):
        gateway = FakeGateway(delay=0.01)
        words = [f"w{i}" for i in range(6)]

        async def scenario():
            app = FlashcardOrchestrator(gateway, settings, notifications, concurrency=3, stage_timeout=5)
            await app.add_words(words)
            return app

        app = run(scenario())

        assert 1 < gateway.max_active <= 3
        assert [r.input_text for r in app.words] == words
        assert all(r.status == WordStatus.COMPLETED for r in app.words)

    def test_settings_are_snapshotted_at_dispatch(self, notifications):
        gateway = FakeGateway(gated=True)
        settings = FlashcardSettings(source_language="en", target_language="es", tone_instructions="formal")

        async def scenario():
            app = FlashcardOrchestrator(gateway, settings, notifications, stage_timeout=5)
            task = asyncio.ensure_future(app.add_words(["a"]))
            await settle()
            await app.update_settings(tone_instructions="casual")
            gateway.release()
            await task
            return app

        app = run(scenario())

        assert gateway.settings_seen[0].tone == "formal"
        assert app.settings.tone == "casual"


class TestStageTimeout:
    def test_stalled_stage_fails_the_word(self, settings, notifications):
        gateway = FakeGateway(hang={"stuck"})

        async def scenario():
            app = FlashcardOrchestrator(gateway, settings, notifications, stage_timeout=0.05)
            await app.add_words(["stuck", "fine"])
            return app

        app = run(scenario())

        stuck, fine = app.words
        assert stuck.status == WordStatus.ERROR
        assert stuck.error == "Stage timed out after 0.05s"
        assert fine.status == WordStatus.COMPLETED
        assert len(notifications.with_title("Processing Error")) == 1

    def test_progress_rearms_the_deadline(self, settings, notifications):
        class SlowStages(FakeGateway):
            async def process_word(self, word, settings, on_progress):
                for stage in range(6):
                    await asyncio.sleep(0.02)
                    on_progress({"definition": f"stage {stage}"})
                return None

        async def scenario():
            app = FlashcardOrchestrator(SlowStages(), settings, notifications, stage_timeout=0.1)
            await app.add_words(["slow"])
            return app.words[0]

        record = run(scenario())

        assert record.status == WordStatus.COMPLETED
        assert record.definition == "stage 5"


class TestClearWords:
    def test_clear_refused_while_processing(self, settings, notifications):
        gateway = FakeGateway(gated=True)

        async def scenario():
            app = FlashcardOrchestrator(gateway, settings, notifications, stage_timeout=5)
            task = asyncio.ensure_future(app.add_words(["a", "b"]))
            await settle()
            cleared = app.clear_words()
            count = len(app.words)
            gateway.release()
            await task
            return app, cleared, count

        app, cleared, count = run(scenario())

        assert cleared is False
        assert count == 2
        assert len(app.words) == 2
        warning = notifications.with_title("Cannot Clear Words")
        assert len(warning) == 1
        assert warning[0]["level"] == "warning"
        assert warning[0]["message"] == "Please wait until all words have finished processing."

    def test_clear_when_idle(self, settings, notifications):
        async def scenario():
            app = FlashcardOrchestrator(FakeGateway(), settings, notifications)
            await app.add_words(["a"])
            return app, app.clear_words()

        app, cleared = run(scenario())

        assert cleared is True
        assert app.words == ()
        assert notifications.payloads == []


class TestSettingsAndVoices:
    def test_start_loads_languages_and_defaults_voice(self, simulated, settings, notifications):
        async def scenario():
            app = FlashcardOrchestrator(simulated, settings, notifications)
            await app.start()
            return app

        app = run(scenario())

        assert len(app.available_languages) == 10
        assert [v.id for v in app.available_voices] == ["es-ES-ElviraNeural", "es-ES-AlvaroNeural"]
        assert app.settings.selected_voice == "es-ES-ElviraNeural"

    def test_target_change_refreshes_voices(self, simulated, settings, notifications):
        async def scenario():
            app = FlashcardOrchestrator(simulated, settings, notifications)
            await app.start()
            await app.update_settings(target_language="fr")
            return app

        app = run(scenario())

        assert all(v.language == "fr" for v in app.available_voices)
        assert app.settings.selected_voice == "fr-FR-DeniseNeural"

    def test_valid_selected_voice_is_kept(self, simulated, notifications):
        settings = FlashcardSettings(source_language="en", target_language="fr",
                                     selected_voice="fr-FR-HenriNeural")

        async def scenario():
            app = FlashcardOrchestrator(simulated, settings, notifications)
            await app.refresh_voices()
            return app

        assert run(scenario()).settings.selected_voice == "fr-FR-HenriNeural"

    def test_unknown_selected_voice_is_replaced(self, simulated, notifications):
        settings = FlashcardSettings(source_language="en", target_language="es", selected_voice="nope")

        async def scenario():
            app = FlashcardOrchestrator(simulated, settings, notifications)
            await app.refresh_voices()
            return app

        assert run(scenario()).settings.selected_voice == "es-ES-ElviraNeural"

    def test_catalogue_failures_notify(self, settings, notifications):
        async def scenario():
            app = FlashcardOrchestrator(FakeGateway(catalogue_error=True), settings, notifications)
            await app.start()
            return app

        app = run(scenario())

        assert app.available_languages == []
        assert app.available_voices == []
        messages = [p["message"] for p in notifications.payloads]
        assert messages == [
            "Failed to load available languages. Please try again.",
            "Failed to load available voices. Please try again.",
        ]

    def test_empty_update_is_idempotent(self, settings, notifications):
        changes = []

        async def scenario():
            app = FlashcardOrchestrator(FakeGateway(), settings, notifications)
            app.on_change(lambda: changes.append(1))
            before = app.settings
            after = await app.update_settings()
            return before, after

        before, after = run(scenario())

        assert before is after
        assert changes == []

    def test_source_language_is_pinned(self, settings, notifications):
        async def scenario():
            app = FlashcardOrchestrator(FakeGateway(), settings, notifications)
            await app.update_settings(source_language="de")

        with pytest.raises(SettingsError):
            run(scenario())

    def test_direction_accepts_string(self, settings, notifications):
        async def scenario():
            app = FlashcardOrchestrator(FakeGateway(), settings, notifications)
            return await app.update_settings(translation_direction="target_to_source")

        assert run(scenario()).translation_direction == TranslationDirection.TARGET_TO_SOURCE

    def test_change_listeners_fire_on_progress(self, settings, notifications):
        changes = []

        async def scenario():
            app = FlashcardOrchestrator(FakeGateway(), settings, notifications)
            app.on_change(lambda: changes.append(1))
            await app.add_words(["a"])

        run(scenario())

        # append, processing, four stage updates, completed, batch end
        assert len(changes) >= 8


class TestFailureIsolation:
    def test_raising_notification_callback_does_not_abort_batch(self, settings):
        def broken_toast(payload):
            raise RuntimeError("toast widget gone")

        async def scenario():
            app = FlashcardOrchestrator(FakeGateway(fail={"xyz"}), settings, broken_toast, stage_timeout=5)
            await app.add_words(["xyz", "ok"])
            return app

        app = run(scenario())

        assert [(r.input_text, r.status) for r in app.words] == [
            ("xyz", WordStatus.ERROR),
            ("ok", WordStatus.COMPLETED),
        ]
        assert not app.is_processing

    def test_single_string_is_rejected(self, settings, notifications):
        gateway = FakeGateway()

        async def scenario():
            app = FlashcardOrchestrator(gateway, settings, notifications)
            await app.add_words("run")

        with pytest.raises(TypeError):
            run(scenario())
        assert gateway.calls == []


class TestCancellation:
    def test_cancelled_batch_leaves_no_unfinished_records(self, settings, notifications):
        gateway = FakeGateway(gated=True)

        async def scenario():
            app = FlashcardOrchestrator(gateway, settings, notifications, stage_timeout=5)
            task = asyncio.ensure_future(app.add_words(["a", "b"]))
            await settle()
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            return app, task

        app, task = run(scenario())

        assert task.cancelled()
        assert [(r.input_text, r.status, r.error) for r in app.words] == [
            ("a", WordStatus.ERROR, "Cancelled"),
            ("b", WordStatus.ERROR, "Cancelled"),
        ]
        assert not app.is_processing
        assert gateway.active == 0

    def test_cancelling_a_queued_batch_spares_the_running_one(self, settings, notifications):
        gateway = FakeGateway(gated=True)

        async def scenario():
            app = FlashcardOrchestrator(gateway, settings, notifications, stage_timeout=5)
            first = asyncio.ensure_future(app.add_words(["a"]))
            await settle()
            second = asyncio.ensure_future(app.add_words(["b"]))
            await settle()
            second.cancel()
            await asyncio.gather(second, return_exceptions=True)
            gateway.release()
            await first
            return app

        app = run(scenario())

        assert [(r.input_text, r.status) for r in app.words] == [
            ("a", WordStatus.COMPLETED),
            ("b", WordStatus.ERROR),
        ]
        assert gateway.calls == ["a"]
        assert not app.is_processing
