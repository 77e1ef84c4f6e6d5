"""Tests for the build_cards command-line driver."""

import asyncio
import logging

import pytest

import build_cards
from flashforge.config import Config
from flashforge.utils import setup_logger
from flashforge.errors import StageTimeoutError, describe_error


@pytest.fixture
def offline(tmp_path, monkeypatch):
    monkeypatch.setattr(Config, "OUTPUT_DIR", str(tmp_path / "out"))
    monkeypatch.setattr(Config, "SIMULATED_LATENCY", 0.0)
    return tmp_path


class TestCollectWords:
    def test_inline_and_file_input(self, tmp_path):
        words_file = tmp_path / "words.txt"
        words_file.write_text("swim\nfly", encoding="utf-8")
        assert build_cards.collect_words(["run, jump", str(words_file)]) == ["run", "jump", "swim", "fly"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            build_cards.collect_words([str(tmp_path / "missing.txt")])


class TestMain:
    def test_simulated_run_exports(self, offline, capsys):
        ok = asyncio.run(build_cards.main(["run, jump", "--simulate", "--format", "csv", "--tone", "formal"]))
        assert ok
        url = capsys.readouterr().out.strip()
        assert url.startswith("file://") and url.endswith(".csv")
        assert len(list((offline / "out").glob("flashcards-csv-*.csv"))) == 1

    def test_empty_input_fails(self, offline):
        assert not asyncio.run(build_cards.main([" , ", "--simulate"]))


class TestAmbient:
    def test_logger_is_configured_once(self):
        first = setup_logger("flashforge.test", level=logging.DEBUG)
        second = setup_logger("flashforge.test", level=logging.WARNING)
        assert first is second
        assert len(first.handlers) == 1
        assert first.level == logging.WARNING

    def test_describe_error(self):
        assert describe_error(RuntimeError("  ")) == "Unknown error"
        assert describe_error(StageTimeoutError(1.5)) == "Stage timed out after 1.5s"
