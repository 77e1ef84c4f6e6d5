"""Anki package export built with genanki."""

import html
import os
from pathlib import Path
from typing import List, Sequence

import genanki

from ..config import Config, language_name
from ..models import AUDIO_SLOTS, FlashcardSettings, WordRecord
from ..templates import CardTemplates

FIELDS = [
    {'name': 'TargetWord'}, {'name': 'SourceWord'}, {'name': 'Definition'},
    {'name': 'Example1'}, {'name': 'Example2'}, {'name': 'TargetLabel'},
    {'name': 'AudioTargetWord'}, {'name': 'AudioDefinition'},
    {'name': 'AudioExample1'}, {'name': 'AudioExample2'},
    {'name': 'UUID'},
]


def create_model() -> genanki.Model:
    """Anki note type with one recognition card."""
    return genanki.Model(
        Config.MODEL_ID,
        'FlashForge',
        fields=FIELDS,
        templates=[{
            'name': '1. Recognition',
            'qfmt': CardTemplates.ANKI_FRONT,
            'afmt': CardTemplates.ANKI_BACK,
        }],
        css=CardTemplates.get_css()
    )


def _sound(path: str, media_files: List[str]) -> str:
    """[sound:] tag for an existing local audio file; remote or missing audio is skipped."""
    if not path or not os.path.isfile(path):
        return ""
    media_files.append(path)
    return f"[sound:{os.path.basename(path)}]"


def build_deck(records: Sequence[WordRecord], settings: FlashcardSettings):
    """
    Build the deck and the list of media files it references.
    
    Returns:
        (genanki.Deck, list of media file paths)
    """
    target_label = language_name(settings.target_language)
    deck = genanki.Deck(Config.DECK_ID, f"{Config.DECK_NAME}::{target_label}")
    model = create_model()
    media_files: List[str] = []
    
    for record in records:
        audio = [_sound(record.audio_urls.get(slot, ""), media_files) for slot in AUDIO_SLOTS]
        note = genanki.Note(
            model=model,
            fields=[
                *(html.escape(text) for text in (
                    record.target_word,
                    record.source_word,
                    record.definition,
                    record.example_sentence_1,
                    record.example_sentence_2,
                    target_label,
                )),
                *audio,
                record.id,
            ],
            guid=genanki.guid_for(record.id),
        )
        deck.add_note(note)
    
    return deck, sorted(set(media_files))


def write_apkg(records: Sequence[WordRecord], settings: FlashcardSettings, output_path: Path) -> Path:
    deck, media_files = build_deck(records, settings)
    package = genanki.Package(deck)
    package.media_files = media_files
    package.write_to_file(str(output_path))
    return output_path
