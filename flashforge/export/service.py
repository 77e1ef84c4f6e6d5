"""
Export Service - writes completed flashcards to disk in the requested format.
"""

import asyncio
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence

from ..config import Config
from ..errors import ExportError
from ..models import ExportFormat, ExportResult, FlashcardSettings, WordRecord, coerce_format, get_extension
from ..utils.helpers import ensure_dir, get_file_size_mb
from .anki_export import write_apkg
from .csv_export import write_csv, write_text
from .html_export import write_html

logger = logging.getLogger(__name__)

Writer = Callable[[Sequence[WordRecord], FlashcardSettings, Path], Path]

WRITERS: Dict[ExportFormat, Writer] = {
    ExportFormat.HTML: write_html,
    ExportFormat.CSV: write_csv,
    ExportFormat.ANKI: write_apkg,
}


class ExportService:
    """
    Service for exporting flashcards.

    Files are named flashcards-<format>-<YYYY-MM-DD>.<ext>; an existing file
    with the same name is kept as a timestamped backup.
    """

    def __init__(self, output_dir: Optional[str] = None, keep_backups: int = 3):
        """
        Initialize export service.

        Args:
            output_dir: Directory for exported files (defaults to Config.OUTPUT_DIR)
            keep_backups: Number of backups kept per file name
        """
        self.output_dir = Path(output_dir or Config.OUTPUT_DIR)
        self.keep_backups = keep_backups

    def output_path(self, export_format: Any, today: Optional[datetime] = None) -> Path:
        fmt = coerce_format(export_format)
        label = fmt.value if fmt else str(export_format)
        date = (today or datetime.now()).strftime("%Y-%m-%d")
        return self.output_dir / f"flashcards-{label}-{date}.{get_extension(export_format)}"

    def _backup_existing(self, output_path: Path) -> None:
        if not output_path.exists():
            return
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        backup = output_path.with_name(f"{output_path.stem}_{timestamp}{output_path.suffix}")
        os.replace(output_path, backup)
        logger.info("Backup created: %s", backup.name)
        self._cleanup_old_backups(output_path)

    def _cleanup_old_backups(self, output_path: Path) -> None:
        backups = sorted(
            output_path.parent.glob(f"{output_path.stem}_*{output_path.suffix}"),
            key=lambda p: p.stat().st_mtime,
            reverse=True
        )
        for old_backup in backups[self.keep_backups:]:
            try:
                old_backup.unlink()
            except OSError as e:
                logger.warning("Could not remove old backup %s: %s", old_backup.name, e)

    def write(
        self,
        records: Sequence[WordRecord],
        export_format: Any,
        settings: FlashcardSettings
    ) -> ExportResult:
        """
        Write records synchronously.

        Args:
            records: Records to export (already filtered by the caller)
            export_format: ExportFormat member or its string value
            settings: Settings used for language labels

        Returns:
            ExportResult with a file:// URL

        Raises:
            ExportError: If there is nothing to write or writing fails
        """
        if not records:
            raise ExportError("No flashcards to export")

        fmt = coerce_format(export_format)
        if fmt is None:
            logger.warning("Unknown export format %r, writing plain text", export_format)
        writer = WRITERS.get(fmt, write_text)

        ensure_dir(self.output_dir)
        output_path = self.output_path(export_format)
        try:
            self._backup_existing(output_path)
            writer(records, settings, output_path)
        except Exception as e:
            raise ExportError(f"Could not write {output_path.name}: {e}") from e

        logger.info("Exported %d flashcards -> %s (%.2f MB)",
                    len(records), output_path, get_file_size_mb(output_path))
        return ExportResult(
            url=output_path.resolve().as_uri(),
            format=fmt.value if fmt else str(export_format),
            count=len(records),
            path=output_path,
        )

    async def export(
        self,
        records: Sequence[WordRecord],
        export_format: Any,
        settings: FlashcardSettings
    ) -> ExportResult:
        """Write records without blocking the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.write, list(records), export_format, settings)
