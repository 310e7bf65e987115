"""Data models for FlashDeck."""

from .deck import Deck, Flashcard, new_id
from .report import ImportReport, ImportResult, ParsedDeck

__all__ = ['Deck', 'Flashcard', 'ImportReport', 'ImportResult', 'ParsedDeck', 'new_id']
