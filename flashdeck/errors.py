"""Import and persistence error taxonomy."""

from typing import Optional


class DeckImportError(Exception):
    """Base class for every failure surfaced by the import engine."""

    default_message: str = "Deck import failed"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class MissingDatabaseError(DeckImportError):
    default_message = "No database file (.db) found in the selected folder"


class MissingImagesFolderError(DeckImportError):
    default_message = "No images folder found in the selected folder"


class InvalidPackageError(DeckImportError):
    default_message = "Invalid package file"


class NoFlashcardsError(DeckImportError):
    default_message = "No valid flashcards found in the file"


class DuplicateSourceError(DeckImportError):
    default_message = "Deck from this location already exists"


class CopyFailedError(DeckImportError):
    default_message = "Could not copy asset into the image store"


class DatabaseOpenFailedError(DeckImportError):
    default_message = "Cannot open database file"


class QueryPrepareFailedError(DeckImportError):
    default_message = "Cannot prepare SQL statement"
