"""Logging setup shared by the application and the CLI driver."""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logger(name: str = "flashforge", level: int = logging.INFO,
                 stream: Optional[object] = None) -> logging.Logger:
    """
    Configure and return a console logger.
    
    Calling it again for the same name only updates the level, so handlers
    are never duplicated.
    
    Args:
        name: Logger name (the package logger by default)
        level: Logging level
        stream: Output stream (defaults to stderr)
        
    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    
    if not any(getattr(h, "_flashforge", False) for h in logger.handlers):
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        handler._flashforge = True
        logger.addHandler(handler)
    
    return logger
