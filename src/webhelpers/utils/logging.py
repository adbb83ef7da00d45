"""Structured JSON logging setup."""
import logging
import sys
from typing import IO, Optional
from pythonjsonlogger import jsonlogger
from webhelpers.config import settings


def setup_logging(level: Optional[str] = None, stream: Optional[IO[str]] = None) -> logging.Handler:
    """
    Configure structured JSON logging on the root logger.
    
    Replaces any handler installed by an earlier call, so calling it
    twice does not duplicate records.
    
    Args:
        level: Log level name, defaults to settings.log_level
        stream: Output stream, defaults to stdout
        
    Returns:
        The installed handler
    """
    root = logging.getLogger()
    
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(jsonlogger.JsonFormatter(
        '%(asctime)s %(name)s %(levelname)s %(message)s %(filename)s %(lineno)d',
        datefmt='%Y-%m-%dT%H:%M:%S%z',
        rename_fields={
            'asctime': 'timestamp',
            'levelname': 'level'
        },
        static_fields={'service': 'webhelpers'}
    ))
    
    root.addHandler(handler)
    root.setLevel(getattr(logging, (level or settings.log_level).upper()))
    return handler
