"""User settings and the value types shared with the generation gateway."""

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Optional

from ..config import Config
from ..errors import SettingsError


class TranslationDirection(Enum):
    """Which side of the card holds the user's literal input."""
    SOURCE_TO_TARGET = "source_to_target"
    TARGET_TO_SOURCE = "target_to_source"


class ExportFormat(Enum):
    """Supported export formats."""
    HTML = "html"
    CSV = "csv"
    ANKI = "anki"


EXPORT_EXTENSIONS = {
    ExportFormat.HTML: "html",
    ExportFormat.CSV: "csv",
    ExportFormat.ANKI: "apkg",
}


def get_extension(export_format: Any) -> str:
    """File extension for a format, 'txt' for anything unrecognized."""
    fmt = coerce_format(export_format)
    return EXPORT_EXTENSIONS.get(fmt, "txt") if fmt else "txt"


def coerce_format(value: Any) -> Optional[ExportFormat]:
    """Resolve an ExportFormat from an enum member or its string value."""
    if isinstance(value, ExportFormat):
        return value
    try:
        return ExportFormat(str(value).lower())
    except ValueError:
        return None


@dataclass(frozen=True)
class Language:
    code: str
    name: str


@dataclass(frozen=True)
class VoiceOption:
    id: str
    name: str
    language: str
    gender: str


@dataclass(frozen=True)
class FlashcardSettings:
    """Immutable snapshot of the user's configuration."""

    source_language: str = Config.SOURCE_LANG
    target_language: str = Config.TARGET_LANG
    translation_direction: TranslationDirection = TranslationDirection.SOURCE_TO_TARGET
    tone_instructions: str = ""
    selected_voice: str = ""

    @property
    def tone(self) -> str:
        """Tone instructions, 'neutral' when none were given."""
        return self.tone_instructions.strip() or "neutral"


_FIELD_NAMES = {f.name for f in fields(FlashcardSettings)}


class SettingsModel:
    """
    Holds the current settings and merges partial updates into them.

    Snapshots are frozen dataclasses, so a copy handed to the gateway is
    never affected by later updates.

    Usage:
        model = SettingsModel()
        model.update(target_language="fr", tone_instructions="formal")
        settings = model.get()
    """

    def __init__(self, initial: Optional[FlashcardSettings] = None):
        self._settings = initial or FlashcardSettings()

    def get(self) -> FlashcardSettings:
        """Return the current settings snapshot."""
        return self._settings

    def update(self, **partial: Any) -> FlashcardSettings:
        """
        Merge the given fields into the current settings.

        Args:
            **partial: Any subset of FlashcardSettings fields

        Returns:
            The new settings snapshot

        Raises:
            SettingsError: On unknown fields or a change of the pinned source language
        """
        if not partial:
            return self._settings

        unknown = set(partial) - _FIELD_NAMES
        if unknown:
            raise SettingsError(f"Unknown settings: {', '.join(sorted(unknown))}")

        source = partial.get("source_language")
        if source is not None and source != self._settings.source_language:
            raise SettingsError(f"Source language is fixed to '{self._settings.source_language}'")

        direction = partial.get("translation_direction")
        if direction is not None and not isinstance(direction, TranslationDirection):
            try:
                partial["translation_direction"] = TranslationDirection(direction)
            except ValueError:
                raise SettingsError(f"Unknown translation direction: {direction}")

        for name in ("target_language", "tone_instructions", "selected_voice"):
            if name in partial and not isinstance(partial[name], str):
                raise SettingsError(f"Setting '{name}' must be a string")

        self._settings = replace(self._settings, **partial)
        return self._settings
