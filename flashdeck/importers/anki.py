"""Anki package (.apkg) importer."""

import sqlite3
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from ..config import Config
from ..errors import (
    DatabaseOpenFailedError,
    InvalidPackageError,
    NoFlashcardsError,
    QueryPrepareFailedError,
)
from ..models import Flashcard, ImportReport, ParsedDeck
from ..models.report import EMPTY_ANSWER
from ..utils import is_null, resolve_deck_name, setup_logger
from .base import ArchiveImporter
from .registry import ImporterRegistry

logger = setup_logger(__name__)

# Anki joins a note's fields with the ASCII unit separator
FIELD_SEPARATOR = "\x1f"


@ImporterRegistry.register(*Config.ANKI_EXTENSIONS)
class AnkiPackageImporter(ArchiveImporter):
    """
    Import the text notes of an Anki package.

    An .apkg is a zip holding a SQLite collection. Each card row yields one
    flashcard whose answer is the note's second field ("Back" in the basic
    note type) or, for single-field notes, the sort field. Anki text notes
    carry no image here, so ``image_name`` is always empty.
    """

    QUERY = """
        SELECT n.sfld AS front, n.flds AS fields, n.mid AS model_id
        FROM notes n
        JOIN cards c ON n.id = c.nid
        ORDER BY c.id
    """

    def import_deck(
        self,
        location: Union[str, Path],
        custom_name: Optional[str] = None,
    ) -> ParsedDeck:
        archive = Path(location).resolve()
        logger.info("Importing Anki package %s", archive)

        with self.extracted(archive) as scratch:
            collection = self._find_collection(scratch)
            df = self._read_notes(collection)

        report = ImportReport()
        flashcards = []
        for row in df.itertuples(index=False):
            answer = self.answer_from_fields(row.fields, row.front).strip()
            if not answer:
                report.reject(EMPTY_ANSWER)
                continue
            report.accept()
            flashcards.append(Flashcard(image_name="", answer=answer))

        logger.info(
            "Anki package %s: %d rows, %d accepted, %d rejected",
            archive.name, report.total_rows, report.accepted, report.rejected,
        )
        if not flashcards:
            raise NoFlashcardsError()

        return ParsedDeck(
            flashcards=flashcards,
            name=resolve_deck_name(custom_name, archive.stem),
            source_path=str(archive),
            report=report,
        )

    @staticmethod
    def answer_from_fields(fields, front) -> str:
        """Second field when the note has at least two, else the raw sort field."""
        components = ("" if is_null(fields) else str(fields)).split(FIELD_SEPARATOR)
        if len(components) >= 2:
            return components[1]
        return "" if is_null(front) else str(front)

    @staticmethod
    def _find_collection(scratch: Path) -> Path:
        # Newer exports keep the real collection compressed and ship a
        # placeholder legacy collection next to it
        if (scratch / Config.ANKI_COMPRESSED_COLLECTION).is_file() and not (
            scratch / Config.ANKI_COLLECTIONS[0]
        ).is_file():
            logger.error("Package only holds a compressed %s collection", Config.ANKI_COMPRESSED_COLLECTION)
            raise InvalidPackageError(
                "Unsupported Anki package: re-export it with \"Support older Anki versions\" enabled"
            )
        for name in Config.ANKI_COLLECTIONS:
            candidate = scratch / name
            if candidate.is_file():
                return candidate
        logger.error("No collection database in package (looked for %s)", ", ".join(Config.ANKI_COLLECTIONS))
        raise InvalidPackageError("Invalid Anki package file: no collection database")

    def _read_notes(self, collection: Path) -> pd.DataFrame:
        try:
            conn = sqlite3.connect(f"{collection.as_uri()}?mode=ro", uri=True)
        except sqlite3.Error as e:
            raise DatabaseOpenFailedError(f"Cannot open Anki collection: {e}") from e

        try:
            return pd.read_sql_query(self.QUERY, conn)
        except (pd.errors.DatabaseError, sqlite3.Error) as e:
            logger.error("Note query failed on %s: %s", collection.name, e)
            raise QueryPrepareFailedError(f"Cannot read notes from Anki collection: {e}") from e
        finally:
            conn.close()
