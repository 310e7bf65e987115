"""Base importer classes."""

import tempfile
import zipfile
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional, Union

from ..config import Config
from ..errors import CopyFailedError, InvalidPackageError
from ..models import ImportReport, ParsedDeck
from ..models.report import COPY_FAILED
from ..services.asset_store import AssetStore
from ..utils import ensure_dir, setup_logger

logger = setup_logger(__name__)


class BaseImporter(ABC):
    """
    Abstract base class for all deck importers.

    Subclasses turn one source location into an ordered list of flashcards.
    Per-row problems are counted in the report and skipped; only fatal
    problems raise a DeckImportError.
    """

    def __init__(
        self,
        asset_store: Optional[AssetStore] = None,
        scratch_dir: Optional[Union[str, Path]] = None,
    ) -> None:
        """
        Initialize importer.

        Args:
            asset_store: Where accepted images are copied (defaults to a store on Config.ASSETS_DIR)
            scratch_dir: Root for ephemeral extraction directories (defaults to Config.SCRATCH_DIR)
        """
        self.asset_store = asset_store or AssetStore()
        self.scratch_dir = Path(scratch_dir or Config.SCRATCH_DIR)

    @abstractmethod
    def import_deck(
        self,
        location: Union[str, Path],
        custom_name: Optional[str] = None,
    ) -> ParsedDeck:
        """
        Parse a source location.

        Args:
            location: Folder or archive path
            custom_name: Deck name override; blank means use the fallback name

        Returns:
            ParsedDeck with flashcards, name, source path and row report

        Raises:
            DeckImportError: On any fatal import problem
        """
        pass

    def _store_asset(self, name: str, source: Path, report: ImportReport) -> bool:
        """Copy an asset into the store; a failure rejects just this row."""
        try:
            self.asset_store.copy(name, source)
        except CopyFailedError as e:
            logger.warning("Skipping %s: %s", name, e)
            report.reject(COPY_FAILED)
            return False
        return True


class ArchiveImporter(BaseImporter):
    """Importer for zip-compatible archives extracted into a scratch directory."""

    #: Error raised when extraction fails
    invalid_error = InvalidPackageError

    @contextmanager
    def extracted(self, archive: Path) -> Generator[Path, None, None]:
        """
        Extract ``archive`` into a fresh scratch directory.

        The directory is removed when the block exits, whether it succeeded
        or raised.
        """
        ensure_dir(self.scratch_dir)
        with tempfile.TemporaryDirectory(prefix="flashdeck-", dir=self.scratch_dir) as temp_dir:
            scratch = Path(temp_dir)
            try:
                with zipfile.ZipFile(archive, "r") as zip_ref:
                    zip_ref.extractall(scratch)
            # zipfile raises RuntimeError for encrypted entries and
            # NotImplementedError for unsupported compression methods
            except (
                zipfile.BadZipFile,
                zipfile.LargeZipFile,
                OSError,
                ValueError,
                RuntimeError,
                NotImplementedError,
            ) as e:
                logger.error("Failed to extract %s: %s", archive, e)
                raise self.invalid_error(f"Cannot extract {archive.name}: {e}") from e
            logger.debug("Extracted %s into %s", archive, scratch)
            yield scratch
