"""Word record: the unit of work moving through the generation pipeline."""

import copy
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from ..errors import InvalidTransitionError


class WordStatus(Enum):
    """Lifecycle states of a word record."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


# Allowed moves; completed and error are terminal
TRANSITIONS = {
    WordStatus.PENDING: {WordStatus.PROCESSING},
    WordStatus.PROCESSING: {WordStatus.COMPLETED, WordStatus.ERROR},
    WordStatus.COMPLETED: set(),
    WordStatus.ERROR: set(),
}

# Content slots that carry synthesized audio
AUDIO_SLOTS = ("target_word", "definition", "example_sentence_1", "example_sentence_2")

# Fields a generation stage may fill in
CONTENT_FIELDS = ("source_word", "target_word", "definition",
                  "example_sentence_1", "example_sentence_2", "audio_urls")


def generate_record_id(text: str) -> str:
    """
    Build a record id from the text, the creation time and a random suffix.

    The suffix keeps ids unique for repeated words inside one batch.
    """
    millis = int(time.time() * 1000)
    return f"{text}-{millis}-{uuid.uuid4().hex[:7]}"


@dataclass
class WordRecord:
    """Status and generated content for one vocabulary item."""

    id: str
    input_text: str
    source_word: str = ""
    target_word: str = ""
    definition: str = ""
    example_sentence_1: str = ""
    example_sentence_2: str = ""
    audio_urls: Dict[str, str] = field(default_factory=dict)
    status: WordStatus = WordStatus.PENDING
    error: Optional[str] = None

    @classmethod
    def create(cls, text: str) -> "WordRecord":
        """New pending record with the raw input as its source word."""
        return cls(id=generate_record_id(text), input_text=text, source_word=text)

    @property
    def is_terminal(self) -> bool:
        return not TRANSITIONS[self.status]

    @property
    def has_complete_audio(self) -> bool:
        return all(self.audio_urls.get(slot) for slot in AUDIO_SLOTS)

    def can_transition(self, status: WordStatus) -> bool:
        return status in TRANSITIONS[self.status]

    def transition(self, status: WordStatus, error: Optional[str] = None) -> None:
        """
        Move the record to a new status.

        Args:
            status: Requested status
            error: Failure reason, kept only for the error status

        Raises:
            InvalidTransitionError: If the move is not allowed
        """
        if not self.can_transition(status):
            raise InvalidTransitionError(self.status, status)
        self.status = status
        self.error = (error or "Unknown error") if status == WordStatus.ERROR else None

    def merge(self, update: Dict[str, Any]) -> None:
        """
        Merge content fields from a partial update.

        Status, error and id are owned by the state machine and skipped.
        Audio references accumulate instead of replacing the mapping.
        """
        for name, value in update.items():
            if name not in CONTENT_FIELDS:
                continue
            if name == "audio_urls":
                self.audio_urls.update({k: v for k, v in (value or {}).items() if v})
            else:
                setattr(self, name, "" if value is None else str(value))

    def copy(self) -> "WordRecord":
        return copy.deepcopy(self)
