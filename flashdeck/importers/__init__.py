"""Deck importers, selected by source extension."""

from .base import ArchiveImporter, BaseImporter
from .registry import ImporterRegistry
from .folder import FolderImporter
from .anki import AnkiPackageImporter
from .notes import NoteArchiveImporter, page_label, page_order

__all__ = [
    'ArchiveImporter',
    'BaseImporter',
    'ImporterRegistry',
    'FolderImporter',
    'AnkiPackageImporter',
    'NoteArchiveImporter',
    'page_label',
    'page_order',
]
