"""Note-archive importer: one flashcard per exported PDF page."""

import re
from pathlib import Path
from typing import Callable, List, Optional, Union

from ..config import Config
from ..errors import NoFlashcardsError
from ..models import Flashcard, ImportReport, ParsedDeck
from ..utils import resolve_deck_name, setup_logger
from .base import ArchiveImporter
from .registry import ImporterRegistry

logger = setup_logger(__name__)


def page_label(filename: str) -> str:
    """
    Answer text for a page file.

    "page_12.pdf" -> "Page 12"; names without the prefix keep their stem
    ("cover.pdf" -> "Page cover").
    """
    number = Path(filename).stem
    if number.startswith(Config.PAGE_PREFIX):
        number = number[len(Config.PAGE_PREFIX):]
    return f"Page {number}"


def _is_page(path: Path) -> bool:
    return path.is_file() and path.suffix.lower() == Config.PAGE_EXTENSION


def page_order(name: str) -> list:
    """Sort key comparing digit runs as numbers, so page_2 comes before page_10."""
    return [int(part) if part.isdecimal() else part.lower() for part in re.split(r"(\d+)", name)]


@ImporterRegistry.register(*Config.NOTE_ARCHIVE_EXTENSIONS)
class NoteArchiveImporter(ArchiveImporter):
    """
    Import a notebook export whose pages are stored as individual PDFs.

    Pages are searched tier by tier and the first tier with any page wins:
    archive root, ``media/``, ``pages/``, then everything recursively.
    Each page is copied into the asset store so the flashcard keeps a valid
    image after the scratch directory is gone.
    """

    SEARCH_FOLDERS = ("media", "pages")

    def import_deck(
        self,
        location: Union[str, Path],
        custom_name: Optional[str] = None,
    ) -> ParsedDeck:
        archive = Path(location).resolve()
        logger.info("Importing note archive %s", archive)

        report = ImportReport()
        flashcards = []
        with self.extracted(archive) as scratch:
            pages = self.find_pages(scratch)
            if not pages:
                raise NoFlashcardsError("No PDF pages found in the note archive")

            for page in pages:
                if not self._store_asset(page.name, page, report):
                    continue
                report.accept()
                flashcards.append(Flashcard(image_name=page.name, answer=page_label(page.name)))

        logger.info(
            "Note archive %s: %d pages, %d accepted, %d rejected",
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

    def find_pages(self, root: Path) -> List[Path]:
        """Run the search tiers in order; the first non-empty result wins."""
        tiers: List[Callable[[], List[Path]]] = [lambda: self._pages_in(root)]
        tiers += [lambda sub=sub: self._pages_in(root / sub) for sub in self.SEARCH_FOLDERS]
        tiers.append(lambda: sorted(
            (p for p in root.rglob("*") if _is_page(p)),
            key=lambda p: page_order(p.relative_to(root).as_posix()),
        ))

        for tier in tiers:
            pages = tier()
            if pages:
                logger.debug("Found %d page(s) under %s", len(pages), pages[0].parent)
                return pages
        return []

    @staticmethod
    def _pages_in(directory: Path) -> List[Path]:
        if not directory.is_dir():
            return []
        return sorted((p for p in directory.iterdir() if _is_page(p)), key=lambda p: page_order(p.name))
