"""Global settings and configuration."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load from project root
_env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(_env_path)


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, default))
    except ValueError:
        return default


@dataclass
class Config:
    """Application-wide configuration."""
    
    # Language parameters (source language is pinned)
    SOURCE_LANG: str = os.environ.get("FLASHFORGE_SOURCE_LANG", "en")
    TARGET_LANG: str = os.environ.get("FLASHFORGE_TARGET_LANG", "es")
    
    # Anki identifiers
    MODEL_ID: int = 1607393150
    DECK_ID: int = 2059400420
    DECK_NAME: str = "FlashForge"
    
    # Async settings
    CONCURRENCY: int = _env_int("CONCURRENCY", 1)
    RETRIES: int = _env_int("RETRIES", 3)
    TIMEOUT: int = _env_int("TIMEOUT", 30)
    STAGE_TIMEOUT: float = _env_float("STAGE_TIMEOUT", 60.0)
    SIMULATED_LATENCY: float = _env_float("SIMULATED_LATENCY", 1.0)
    
    # BASE_DIR is the project root (parent of flashforge/)
    BASE_DIR: Path = Path(__file__).parent.parent.parent.resolve()
    
    MEDIA_DIR: str = os.environ.get("MEDIA_DIR", str(BASE_DIR / "media"))
    OUTPUT_DIR: str = os.environ.get("OUTPUT_DIR", str(BASE_DIR / "data" / "output"))
