"""Utils module."""

from .helpers import ensure_dir, get_file_size_mb
from .parsing import TextParser, read_words_file
from .paths import MediaPathGenerator
from .logger import setup_logger

__all__ = [
    'ensure_dir',
    'get_file_size_mb',
    'TextParser',
    'read_words_file',
    'MediaPathGenerator',
    'setup_logger'
]
