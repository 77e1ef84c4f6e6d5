"""Export artifact description."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class ExportResult:
    """Where an export was written and what it contains."""
    url: str
    format: str
    count: int
    path: Optional[Path] = None
