"""HTML export: a single web page with one card per word."""

import html
from pathlib import Path
from typing import Sequence

from ..config import language_name
from ..models import FlashcardSettings, WordRecord
from ..templates import CardTemplates


def write_html(records: Sequence[WordRecord], settings: FlashcardSettings, output_path: Path) -> Path:
    """
    Write records as an HTML page.
    
    Audio references are linked as they are; the page plays them when it
    is opened next to the media directory or the references are URLs.
    """
    target_label = language_name(settings.target_language)
    title = f"Flashcards: {language_name(settings.source_language)} / {target_label}"
    cards = "\n".join(CardTemplates.html_card(target_label, r) for r in records)
    page = CardTemplates.HTML_PAGE.format(
        lang=html.escape(settings.target_language),
        title=html.escape(title),
        css=CardTemplates.get_css(),
        cards=cards,
    )
    output_path.write_text(page, encoding="utf-8")
    return output_path
