"""FlashDeck - flashcard deck import and persistence engine"""

__version__ = "1.0.0"
__author__ = "FlashDeck Team"

from .config import Config
from .errors import DeckImportError
from .models import Deck, Flashcard, ImportReport, ImportResult, ParsedDeck
from .services import AssetStore, DeckRepository, KeyValueStore
from .importers import ImporterRegistry
from .deck import AnkiExporter, GameState, StudySession

__all__ = [
    'Config',
    'DeckImportError',
    'Deck',
    'Flashcard',
    'ImportReport',
    'ImportResult',
    'ParsedDeck',
    'AssetStore',
    'DeckRepository',
    'KeyValueStore',
    'ImporterRegistry',
    'AnkiExporter',
    'GameState',
    'StudySession',
]
