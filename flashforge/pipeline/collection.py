"""
Word collection - the authoritative list of word records.

Every change goes through WordCollection.apply(), the only writer, which
receives RecordUpdate events. Callers only ever see copies.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..models import WordRecord, WordStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordUpdate:
    """A partial change for one record, addressed by id."""
    record_id: str
    fields: Dict[str, Any] = field(default_factory=dict)
    status: Optional[WordStatus] = None
    error: Optional[str] = None


class WordCollection:
    """Ordered word records with serialized writes and change notification."""

    def __init__(self):
        self._records: List[WordRecord] = []
        self._index: Dict[str, WordRecord] = {}
        self._change_callbacks: List[Callable[[], None]] = []

    def __len__(self) -> int:
        return len(self._records)

    def on_change(self, callback: Callable[[], None]) -> None:
        """
        Register a callback for data changes.

        Args:
            callback: Function to call after every applied change
        """
        self._change_callbacks.append(callback)

    def _notify_change(self) -> None:
        for callback in self._change_callbacks:
            try:
                callback()
            except Exception:
                # Listener errors are logged, never raised
                logger.exception("Change listener failed")

    def append_batch(self, records: Iterable[WordRecord]) -> None:
        """Append new records in order, all at once."""
        records = list(records)
        for record in records:
            if record.id in self._index:
                raise ValueError(f"Duplicate record id: {record.id}")
        for record in records:
            self._records.append(record)
            self._index[record.id] = record
        self._notify_change()

    def apply(self, update: RecordUpdate) -> bool:
        """
        Apply one update to its record.

        The status transition (if any) runs first, then the fields merge.
        Field updates for records that are not processing are dropped, so a
        finished record never changes again.

        Args:
            update: The change to apply

        Returns:
            True if the record changed

        Raises:
            InvalidTransitionError: If the update requests an illegal status move
        """
        record = self._index.get(update.record_id)
        if record is None:
            logger.debug("Update for unknown record %s dropped", update.record_id)
            return False

        if update.status is not None:
            record.transition(update.status, update.error)

        if update.fields:
            if record.status != WordStatus.PROCESSING:
                logger.debug("Late update for %s record %s dropped", record.status.value, record.id)
                if update.status is None:
                    return False
            else:
                record.merge(update.fields)

        self._notify_change()
        return True

    def clear(self) -> None:
        """Remove every record."""
        self._records = []
        self._index = {}
        self._notify_change()

    def get(self, record_id: str) -> Optional[WordRecord]:
        record = self._index.get(record_id)
        return record.copy() if record else None

    def snapshot(self) -> Tuple[WordRecord, ...]:
        """Copies of all records in insertion order."""
        return tuple(r.copy() for r in self._records)

    def with_status(self, status: WordStatus) -> List[WordRecord]:
        return [r.copy() for r in self._records if r.status == status]

    def counts(self) -> Dict[str, int]:
        """Number of records per status, every status present."""
        counter = Counter(r.status.value for r in self._records)
        return {status.value: counter.get(status.value, 0) for status in WordStatus}
