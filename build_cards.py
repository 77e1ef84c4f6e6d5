"""
FlashForge: AI Flashcard Generator
----------------------------------

Command-line entry point: generate flashcards for a word list and export them.

    python build_cards.py words.txt --format anki --target fr
    python build_cards.py "run, jump" --simulate
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from flashforge.config import Config
from flashforge.models import ExportFormat, TranslationDirection
from flashforge.pipeline import FlashcardOrchestrator
from flashforge.services import GenerationGateway, SimulatedGateway
from flashforge.utils import TextParser, read_words_file, setup_logger

logger = logging.getLogger("flashforge")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate language-learning flashcards.")
    parser.add_argument("words", nargs="+",
                        help="A .txt word list, or words separated by commas/newlines")
    parser.add_argument("--format", default=ExportFormat.ANKI.value,
                        choices=[f.value for f in ExportFormat], help="Export format")
    parser.add_argument("--target", default=Config.TARGET_LANG, help="Target language code")
    parser.add_argument("--direction", default=TranslationDirection.SOURCE_TO_TARGET.value,
                        choices=[d.value for d in TranslationDirection],
                        help="Which side of the card the input words belong to")
    parser.add_argument("--tone", default="", help="Tone instructions for example sentences")
    parser.add_argument("--voice", default="", help="Voice id (first available voice if omitted)")
    parser.add_argument("--simulate", action="store_true",
                        help="Use the offline simulated backend")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def collect_words(inputs) -> list:
    """Expand .txt files and split inline input into words."""
    words = []
    for item in inputs:
        if item.lower().endswith(".txt"):
            if not Path(item).exists():
                raise FileNotFoundError(f"{item} not found")
            words.extend(read_words_file(item))
        else:
            words.extend(TextParser.split_words(item))
    return words


async def main(argv=None) -> bool:
    """Main entry point."""
    args = parse_args(argv)
    setup_logger(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        words = collect_words(args.words)
    except (OSError, ValueError) as e:
        logger.error("%s", e)
        return False
    if not words:
        logger.error("No words to process")
        return False

    if args.simulate:
        gateway = SimulatedGateway()
    else:
        gateway = GenerationGateway()
        if not gateway.ai.is_configured:
            logger.error("No API key for %s; add it to .env or run with --simulate",
                         gateway.ai.config.provider.value)
            return False

    async with gateway:
        app = FlashcardOrchestrator(gateway)
        await app.start()
        await app.update_settings(
            target_language=args.target,
            translation_direction=args.direction,
            tone_instructions=args.tone,
        )
        if args.voice:
            await app.update_settings(selected_voice=args.voice)

        await app.add_words(words)
        counts = app.counts()
        logger.info("%d completed, %d failed", counts["completed"], counts["error"])

        url = await app.export_flashcards(args.format)
        if url is None:
            return False
        print(url)
        return True


if __name__ == "__main__":
    try:
        success = asyncio.run(main())
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        print("\n[!] Aborted by user.")
        sys.exit(1)
