"""Utils module."""

from .helpers import (
    ensure_dir,
    first_present,
    get_file_size_mb,
    is_null,
    is_bare_filename,
    resolve_deck_name,
    text_or_none,
)
from .logger import setup_logger

__all__ = [
    'ensure_dir',
    'first_present',
    'get_file_size_mb',
    'is_null',
    'is_bare_filename',
    'resolve_deck_name',
    'text_or_none',
    'setup_logger'
]
