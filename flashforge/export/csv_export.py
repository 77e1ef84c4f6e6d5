"""CSV export backed by pandas."""

from pathlib import Path
from typing import Sequence

import pandas as pd

from ..models import AUDIO_SLOTS, FlashcardSettings, WordRecord

TEXT_COLUMNS = ["source_word", "target_word", "definition", "example_sentence_1", "example_sentence_2"]
AUDIO_COLUMNS = [f"audio_{slot}" for slot in AUDIO_SLOTS]
COLUMNS = TEXT_COLUMNS + AUDIO_COLUMNS + ["source_language", "target_language"]


def records_to_dataframe(records: Sequence[WordRecord], settings: FlashcardSettings) -> pd.DataFrame:
    """One row per record, text columns first, then audio references."""
    rows = []
    for record in records:
        row = {col: getattr(record, col) for col in TEXT_COLUMNS}
        for slot, col in zip(AUDIO_SLOTS, AUDIO_COLUMNS):
            row[col] = record.audio_urls.get(slot, "")
        row["source_language"] = settings.source_language
        row["target_language"] = settings.target_language
        rows.append(row)
    return pd.DataFrame(rows, columns=COLUMNS)


def write_csv(records: Sequence[WordRecord], settings: FlashcardSettings, output_path: Path) -> Path:
    df = records_to_dataframe(records, settings)
    # utf-8-sig so spreadsheet applications detect the encoding
    df.to_csv(output_path, index=False, encoding="utf-8-sig")
    return output_path


def write_text(records: Sequence[WordRecord], settings: FlashcardSettings, output_path: Path) -> Path:
    """Plain-text dump used for unrecognized formats."""
    lines = []
    for record in records:
        lines.append(f"{record.source_word}\t{record.target_word}\t{record.definition}")
        for sentence in (record.example_sentence_1, record.example_sentence_2):
            if sentence:
                lines.append(f"\t{sentence}")
    output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return output_path
