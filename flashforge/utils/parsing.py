"""Text parsing utilities for consistent text processing across the application."""

import html
import re
import unicodedata
from pathlib import Path
from typing import List, Union


class TextParser:
    """
    Centralized text parsing utilities.
    
    Single source of truth for word splitting, TTS cleanup and
    Unicode normalization.
    """
    
    # Word input separators: newlines and commas, in any run
    WORD_SEPARATOR_PATTERN = re.compile(r'[\n,]+')
    
    # HTML tag removal pattern
    HTML_TAG_PATTERN = re.compile(r'<[^>]+>')
    
    # Whitespace normalization pattern
    WHITESPACE_PATTERN = re.compile(r'\s+')
    
    # Surrounding quotes LLMs like to add to single-word answers
    QUOTES_PATTERN = re.compile(r'^[\s"\'“”«»]+|[\s"\'“”«»]+$')
    
    @classmethod
    def normalize_unicode(cls, text: str) -> str:
        """
        Normalize text to NFC form for consistent Unicode handling.
        
        Args:
            text: Input text
            
        Returns:
            NFC-normalized text
        """
        if not text:
            return ""
        return unicodedata.normalize('NFC', str(text))
    
    @classmethod
    def split_words(cls, text: str) -> List[str]:
        """
        Split raw user input into words.
        
        Splits on newlines and commas, trims each entry and drops empties.
        Order and duplicates are preserved.
        
        Args:
            text: Raw input, e.g. "run, jump\\nswim"
            
        Returns:
            List of words
        """
        if not text:
            return []
        text = cls.normalize_unicode(text.replace('\r\n', '\n'))
        return [w.strip() for w in cls.WORD_SEPARATOR_PATTERN.split(text) if w.strip()]
    
    @classmethod
    def clean_for_tts(cls, text: str) -> str:
        """
        Clean text for TTS processing.
        
        Removes HTML and normalizes whitespace.
        """
        if not text:
            return ""
        text = html.unescape(str(text))
        text = cls.HTML_TAG_PATTERN.sub('', text)
        text = cls.WHITESPACE_PATTERN.sub(' ', text).strip()
        return cls.normalize_unicode(text)
    
    @classmethod
    def clean_reply(cls, text: str) -> str:
        """Strip whitespace and wrapping quotes from a one-line model reply."""
        if not text:
            return ""
        first_line = str(text).strip().split('\n')[0]
        return cls.normalize_unicode(cls.QUOTES_PATTERN.sub('', first_line))


def read_words_file(path: Union[str, Path]) -> List[str]:
    """
    Read words from a plain-text file.
    
    Args:
        path: Path to a .txt file
        
    Returns:
        Words split with TextParser.split_words
        
    Raises:
        ValueError: If the file is not a .txt file
    """
    path = Path(path)
    if path.suffix.lower() != ".txt":
        raise ValueError(f"Please use a plain text (.txt) file: {path.name}")
    return TextParser.split_words(path.read_text(encoding="utf-8-sig"))
