"""Processing pipeline: word collection and batch orchestration."""

from .collection import RecordUpdate, WordCollection
from .orchestrator import FlashcardOrchestrator, input_placement

__all__ = [
    'FlashcardOrchestrator',
    'RecordUpdate',
    'WordCollection',
    'input_placement',
]
