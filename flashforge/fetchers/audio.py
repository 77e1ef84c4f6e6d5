"""Audio fetcher - TTS via Edge TTS."""

import asyncio
import logging
import os
import random
import uuid
from typing import Any, Dict, List, Optional

import edge_tts

from ..utils.parsing import TextParser
from .base import BaseFetcher

logger = logging.getLogger(__name__)

# Files below this size are treated as failed syntheses
MIN_AUDIO_BYTES = 100


class AudioFetcher(BaseFetcher):
    """Handle audio generation via TTS (Edge TTS)."""
    
    def __init__(self, default_voice: str = "", jitter: float = 0.3):
        """
        Initialize audio fetcher.
        
        Args:
            default_voice: Voice used when fetch() gets none
            jitter: Upper bound of the random delay before each request, in seconds
        """
        self.default_voice = default_voice
        self.jitter = jitter
        self._voices: Optional[List[Dict[str, Any]]] = None
    
    async def list_voices(self, language_code: str) -> List[Dict[str, Any]]:
        """
        List Edge TTS voices for a language.
        
        The full catalogue is downloaded once per fetcher.
        
        Args:
            language_code: Two-letter language code ("es", "de", ...)
            
        Returns:
            Raw voice entries whose locale starts with the language code
        """
        if self._voices is None:
            self._voices = await edge_tts.list_voices()
        prefix = f"{language_code.lower()}-"
        return [v for v in self._voices if str(v.get("Locale", "")).lower().startswith(prefix)]
    
    async def fetch(self, source: str, output_path: str, voice: str = "", volume: str = "+0%") -> bool:
        """
        Generate audio using Edge TTS.
        
        Uses atomic write pattern: write to temp file, then rename.
        
        Args:
            source: Text to convert to speech
            output_path: Path to save MP3
            voice: Edge voice short name (falls back to default_voice)
            volume: Volume adjustment (e.g., "+0%", "+40%")
            
        Returns:
            True if successful, False otherwise
        """
        clean_text = TextParser.clean_for_tts(source)
        selected_voice = voice or self.default_voice
        if not clean_text or not selected_voice:
            return False
        
        temp_path = None
        try:
            # Smooth out request spikes
            if self.jitter > 0:
                await asyncio.sleep(random.uniform(0, self.jitter))
            
            os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
            
            temp_path = f"{output_path}.{uuid.uuid4().hex[:8]}.tmp"
            communicate = edge_tts.Communicate(clean_text, selected_voice, volume=volume)
            await communicate.save(temp_path)
            
            if os.path.exists(temp_path) and os.path.getsize(temp_path) > MIN_AUDIO_BYTES:
                os.replace(temp_path, output_path)
                temp_path = None
                return True
            return False
        
        except Exception as e:
            error_msg = str(e)
            if "429" in error_msg or "Too Many Requests" in error_msg:
                logger.warning("Rate limit hit (429): %s", error_msg[:80])
            else:
                logger.warning("Error generating audio: %s", error_msg[:80])
            return False
        
        finally:
            if temp_path and os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError:
                    pass
