"""Folder importer: a card database plus an ``images`` subfolder."""

import sqlite3
from pathlib import Path
from typing import Optional, Set, Tuple, Union

import pandas as pd

from ..config import Config
from ..errors import (
    DatabaseOpenFailedError,
    MissingDatabaseError,
    MissingImagesFolderError,
    NoFlashcardsError,
    QueryPrepareFailedError,
)
from ..models import Flashcard, ImportReport, ParsedDeck
from ..models.report import EMPTY_ANSWER, MISSING_IMAGE
from ..utils import first_present, resolve_deck_name, setup_logger, text_or_none
from .base import BaseImporter
from .registry import ImporterRegistry

logger = setup_logger(__name__)


@ImporterRegistry.register(default=True)
class FolderImporter(BaseImporter):
    """
    Import a folder holding one ``.db`` file and an ``images`` directory.

    The database exposes one row per card with front/back text and the
    filenames of the front/back images.
    """

    QUERY = (
        "SELECT front, back, front_image_file_name, back_image_file_name "
        f"FROM {Config.FOLDER_CARD_TABLE}"
    )

    def import_deck(
        self,
        location: Union[str, Path],
        custom_name: Optional[str] = None,
    ) -> ParsedDeck:
        folder = Path(location).resolve()
        database, images_dir = self._locate(folder)
        logger.info("Importing folder %s (database: %s)", folder, database.name)

        df = self._read_cards(database)
        available = {
            p.name for p in images_dir.iterdir()
            if p.is_file() and p.suffix.lower() in Config.IMAGE_EXTENSIONS
        }

        report = ImportReport()
        flashcards = []
        for index, row in enumerate(df.itertuples(index=False), start=1):
            card = self._card_from_row(index, row, images_dir, available, report)
            if card is not None:
                flashcards.append(card)

        logger.info(
            "Folder %s: %d rows, %d accepted, %d rejected",
            folder.name, report.total_rows, report.accepted, report.rejected,
        )
        if not flashcards:
            raise NoFlashcardsError()

        return ParsedDeck(
            flashcards=flashcards,
            name=resolve_deck_name(custom_name, folder.name),
            source_path=str(folder),
            report=report,
        )

    def _locate(self, folder: Path) -> Tuple[Path, Path]:
        """Find the database file and images folder among immediate children."""
        try:
            children = sorted(folder.iterdir())
        except OSError as e:
            logger.error("Cannot list %s: %s", folder, e)
            raise MissingDatabaseError() from e

        database = next(
            (p for p in children
             if p.is_file() and p.suffix.lower() in Config.DATABASE_EXTENSIONS),
            None,
        )
        if database is None:
            raise MissingDatabaseError()

        images_dir = next(
            (p for p in children
             if p.is_dir() and p.name.lower() == Config.IMAGES_FOLDER),
            None,
        )
        if images_dir is None:
            raise MissingImagesFolderError()

        return database, images_dir

    def _read_cards(self, database: Path) -> pd.DataFrame:
        try:
            conn = sqlite3.connect(f"{database.as_uri()}?mode=ro", uri=True)
        except sqlite3.Error as e:
            logger.error("Failed to open database at %s: %s", database, e)
            raise DatabaseOpenFailedError(f"Cannot open database file {database.name}: {e}") from e

        try:
            return pd.read_sql_query(self.QUERY, conn)
        except (pd.errors.DatabaseError, sqlite3.Error) as e:
            logger.error("Card query failed on %s: %s", database, e)
            raise QueryPrepareFailedError(f"Cannot read cards from {database.name}: {e}") from e
        finally:
            conn.close()

    def _card_from_row(
        self,
        index: int,
        row,
        images_dir: Path,
        available: Set[str],
        report: ImportReport,
    ) -> Optional[Flashcard]:
        # Front image wins; back text wins
        image_name = text_or_none(row.front_image_file_name) or text_or_none(row.back_image_file_name)
        answer = first_present(row.back, row.front, Config.PLACEHOLDER_ANSWER).strip()

        if image_name is None or image_name not in available:
            logger.debug("Row %d skipped: image %r not in images folder", index, image_name)
            report.reject(MISSING_IMAGE)
            return None
        if not answer:
            logger.debug("Row %d skipped: empty answer", index)
            report.reject(EMPTY_ANSWER)
            return None

        if not self._store_asset(image_name, images_dir / image_name, report):
            return None

        report.accept()
        return Flashcard(image_name=image_name, answer=answer)
