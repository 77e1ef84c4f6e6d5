"""Base class for speech fetchers."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class BaseFetcher(ABC):
    """
    Text-to-speech backend used by MediaService.

    A fetcher knows which voices exist per language and writes one MP3 per
    request. It is an async context manager so network sessions get closed.
    """

    @abstractmethod
    async def fetch(self, source: str, output_path: str, voice: str = "", volume: str = "+0%") -> bool:
        """
        Speak `source` with `voice` into `output_path`.

        Returns:
            True if a usable file was written, False otherwise
        """
        pass

    async def list_voices(self, language_code: str) -> List[Dict[str, Any]]:
        """Raw voice entries (ShortName, Gender, Locale) for a language; none by default."""
        return []

    async def close(self) -> None:
        pass

    async def __aenter__(self) -> "BaseFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
