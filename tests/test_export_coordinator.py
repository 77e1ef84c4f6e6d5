"""Tests for FlashcardOrchestrator.export_flashcards guards and delegation."""

import asyncio
from unittest.mock import AsyncMock

from flashforge.errors import ExportError
from flashforge.models import ExportFormat, ExportResult, WordStatus
from flashforge.pipeline import FlashcardOrchestrator

from conftest import FakeGateway


def make_app(settings, notifications, **gateway_options):
    gateway = FakeGateway(**gateway_options)
    gateway.export_flashcards = AsyncMock(
        return_value=ExportResult(url="file:///tmp/flashcards-anki.apkg", format="anki", count=1)
    )
    return FlashcardOrchestrator(gateway, settings, notifications, stage_timeout=5), gateway


class TestExportGuards:
    def test_nothing_to_export(self, settings, notifications):
        app, gateway = make_app(settings, notifications)

        url = asyncio.run(app.export_flashcards(ExportFormat.ANKI))

        assert url is None
        gateway.export_flashcards.assert_not_awaited()
        assert notifications.titles() == ["No Flashcards to Export"]
        assert notifications.payloads[0]["level"] == "error"

    def test_no_completed_records(self, settings, notifications):
        app, gateway = make_app(settings, notifications, fail={"a", "b"})

        async def scenario():
            await app.add_words(["a", "b"])
            return await app.export_flashcards("html")

        url = asyncio.run(scenario())

        assert url is None
        gateway.export_flashcards.assert_not_awaited()
        assert notifications.with_title("No Completed Flashcards")


class TestExportDelegation:
    def test_only_completed_records_are_exported(self, settings, notifications):
        app, gateway = make_app(settings, notifications, fail={"bad"})

        async def scenario():
            await app.add_words(["good", "bad", "fine"])
            return await app.export_flashcards(ExportFormat.ANKI)

        url = asyncio.run(scenario())

        assert url == "file:///tmp/flashcards-anki.apkg"
        records, export_format, _ = gateway.export_flashcards.await_args.args
        assert [r.input_text for r in records] == ["good", "fine"]
        assert all(r.status == WordStatus.COMPLETED for r in records)
        assert export_format == ExportFormat.ANKI
        success = notifications.with_title("Export Successful")
        assert success[0]["message"] == "Your flashcards have been exported in ANKI format."

    def test_export_failure_notifies(self, settings, notifications):
        app, gateway = make_app(settings, notifications)
        gateway.export_flashcards.side_effect = ExportError("disk full")

        async def scenario():
            await app.add_words(["a"])
            return await app.export_flashcards("csv")

        url = asyncio.run(scenario())

        assert url is None
        failure = notifications.with_title("Export Failed")
        assert len(failure) == 1
        assert failure[0]["message"] == "An error occurred while exporting your flashcards. Please try again."

    def test_export_does_not_change_records(self, settings, notifications):
        app, _ = make_app(settings, notifications)

        async def scenario():
            await app.add_words(["a"])
            before = app.words
            await app.export_flashcards("csv")
            return before, app.words

        before, after = asyncio.run(scenario())

        assert before == after
