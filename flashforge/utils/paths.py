"""
Media path generation utilities - single source of truth for file naming.
"""

import hashlib
import re
from pathlib import Path
from typing import Dict, Optional

from ..config import Config


class MediaPathGenerator:
    """
    Centralized media file path generator.
    
    Audio files are named after the record, the content slot and the voice,
    so a regenerated card with another voice never reuses stale audio.
    """
    
    # Version suffix for cache invalidation on format changes
    VERSION = "v1"
    
    AUDIO_EXT = ".mp3"
    
    _UNSAFE = re.compile(r'[^A-Za-z0-9_-]+')
    
    @classmethod
    def _get_media_dir(cls, media_dir: Optional[str] = None) -> Path:
        return Path(media_dir or Config.MEDIA_DIR)
    
    @classmethod
    def record_key(cls, record_id: str) -> str:
        """Filesystem-safe, fixed-length key for a record id."""
        return hashlib.sha256(record_id.encode("utf-8")).hexdigest()[:16]
    
    @classmethod
    def audio(cls, record_id: str, slot: str, voice_id: str) -> str:
        """
        Generate filename for one audio slot.
        
        Args:
            record_id: Word record id
            slot: Content slot (target_word, definition, ...)
            voice_id: Voice identifier
            
        Returns:
            Filename like "_audio_1a2b3c4d5e6f7a8b_definition_es-ES-ElviraNeural_v1.mp3"
        """
        voice = cls._UNSAFE.sub('', voice_id) or "default"
        return f"_audio_{cls.record_key(record_id)}_{slot}_{voice}_{cls.VERSION}{cls.AUDIO_EXT}"
    
    @classmethod
    def audio_path(cls, record_id: str, slot: str, voice_id: str,
                   media_dir: Optional[str] = None) -> Path:
        return cls._get_media_dir(media_dir) / cls.audio(record_id, slot, voice_id)
    
    @classmethod
    def get_all_audio_paths(cls, record_id: str, slots, voice_id: str,
                            media_dir: Optional[str] = None) -> Dict[str, Path]:
        """Paths for every audio slot of a record."""
        return {slot: cls.audio_path(record_id, slot, voice_id, media_dir) for slot in slots}
