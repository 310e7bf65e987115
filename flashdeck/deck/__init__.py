"""Study and export of imported decks."""

from .session import GameState, StudySession
from .exporter import AnkiExporter

__all__ = ['GameState', 'StudySession', 'AnkiExporter']
