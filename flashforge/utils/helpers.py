"""Utility functions."""

from pathlib import Path
from typing import Union


def ensure_dir(path: Union[str, Path]) -> Path:
    """Ensure directory exists."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_file_size_mb(path: Union[str, Path]) -> float:
    """Get file size in megabytes."""
    if not Path(path).exists():
        return 0.0
    return Path(path).stat().st_size / (1024 * 1024)
