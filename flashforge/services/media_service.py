"""
Media Service - audio synthesis and media file management.

Synthesizes one audio file per content slot of a word record and keeps the
files under the media directory.
"""

import asyncio
import logging
from pathlib import Path
from typing import Dict, List, Optional

from ..config import Config
from ..errors import GenerationError
from ..fetchers import AudioFetcher
from ..utils.helpers import ensure_dir
from ..utils.paths import MediaPathGenerator

logger = logging.getLogger(__name__)


class MediaService:
    """
    Service for generating and managing audio files.

    Usage:
        async with MediaService() as media:
            urls = await media.synthesize_slots(record_id, texts, "es-ES-ElviraNeural")
    """

    def __init__(
        self,
        media_dir: Optional[str] = None,
        audio_fetcher: Optional[AudioFetcher] = None
    ):
        """
        Initialize media service.

        Args:
            media_dir: Directory for media files (defaults to Config.MEDIA_DIR)
            audio_fetcher: Fetcher to use; created lazily when omitted
        """
        self.media_dir = ensure_dir(media_dir or Config.MEDIA_DIR)
        self._audio_fetcher = audio_fetcher

    @property
    def audio_fetcher(self) -> AudioFetcher:
        """Lazy-load audio fetcher."""
        if self._audio_fetcher is None:
            self._audio_fetcher = AudioFetcher()
        return self._audio_fetcher

    async def close(self) -> None:
        """Clean up the fetcher."""
        if self._audio_fetcher:
            await self._audio_fetcher.close()
            self._audio_fetcher = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def file_exists(self, path: Path) -> bool:
        """Check if a media file exists and has content."""
        return path.exists() and path.stat().st_size > 100

    async def synthesize(self, text: str, output_path: Path, voice: str, force: bool = False) -> Optional[Path]:
        """
        Synthesize one text into an audio file.

        Args:
            text: Text to speak
            output_path: Target MP3 path
            voice: Edge voice short name
            force: If True, regenerate even if the file exists

        Returns:
            Path to the audio file, or None on failure
        """
        if not force and self.file_exists(output_path):
            return output_path

        success = await self.audio_fetcher.fetch(text, str(output_path), voice=voice)
        if success and self.file_exists(output_path):
            return output_path
        return None

    async def synthesize_slots(
        self,
        record_id: str,
        texts: Dict[str, str],
        voice: str,
        force: bool = False
    ) -> Dict[str, str]:
        """
        Synthesize audio for every content slot of a record in parallel.

        Args:
            record_id: Word record id (names the files)
            texts: Slot name -> text to speak
            voice: Edge voice short name
            force: If True, regenerate cached files

        Returns:
            Slot name -> audio file path, one entry per slot

        Raises:
            GenerationError: If no voice is set or any slot failed
        """
        if not voice:
            raise GenerationError("No voice selected for audio synthesis")

        slots = list(texts)
        paths = MediaPathGenerator.get_all_audio_paths(record_id, slots, voice, str(self.media_dir))
        results = await asyncio.gather(
            *[self.synthesize(texts[slot], paths[slot], voice, force) for slot in slots],
            return_exceptions=True
        )

        audio_urls: Dict[str, str] = {}
        failed: List[str] = []
        for slot, result in zip(slots, results):
            if isinstance(result, Exception) or result is None:
                failed.append(slot)
            else:
                audio_urls[slot] = str(result)

        if failed:
            raise GenerationError(f"Audio synthesis failed for: {', '.join(failed)}")
        return audio_urls
