"""
Asset Store - single persistent directory holding every deck image.

Assets are addressed by their original filename with no per-deck namespace:
two decks that both ship "image1.jpg" share one stored file, and the first
copy wins. An existing file is never overwritten.
"""

import os
import shutil
import uuid
from pathlib import Path
from threading import Lock
from typing import List, Optional, Union

from ..config import Config
from ..errors import CopyFailedError
from ..utils import ensure_dir, is_bare_filename, setup_logger

logger = setup_logger(__name__)


class AssetStore:
    """
    Filename-addressed image pool shared by all decks.

    Thread-safe: the exists-check and the copy happen under one lock, and
    copies land via temp file + atomic rename so a concurrent ``resolve``
    never sees a half-written file.
    """

    def __init__(self, assets_dir: Optional[Union[str, Path]] = None):
        """
        Initialize asset store.

        Args:
            assets_dir: Directory for stored assets (defaults to Config.ASSETS_DIR)
        """
        self.assets_dir = Path(assets_dir or Config.ASSETS_DIR)
        self._lock = Lock()

    def ensure_directory(self) -> Path:
        """Create the store directory on first use and return it."""
        return ensure_dir(self.assets_dir)

    def path_for(self, name: str) -> Path:
        """Destination path for an asset name (no existence check)."""
        return self.assets_dir / name

    def resolve(self, name: str) -> Optional[Path]:
        """
        Look up a stored asset.

        Args:
            name: Asset filename

        Returns:
            Path to the stored file, or None if absent
        """
        if not is_bare_filename(name):
            return None
        path = self.path_for(name)
        return path if path.is_file() else None

    def contains(self, name: str) -> bool:
        return self.resolve(name) is not None

    def copy(self, name: str, source_path: Union[str, Path]) -> Path:
        """
        Copy a file into the store under ``name``.

        No-op if an asset with that name already exists.

        Args:
            name: Asset filename
            source_path: File to copy from

        Returns:
            Path to the stored asset

        Raises:
            CopyFailedError: Invalid name or any I/O failure
        """
        if not is_bare_filename(name):
            raise CopyFailedError(f"Invalid asset name: {name!r}")

        with self._lock:
            destination = self.path_for(name)
            if destination.exists():
                logger.debug("Asset already stored: %s", name)
                return destination

            temp_file = self.assets_dir / f".{name}.{uuid.uuid4().hex[:8]}.tmp"
            try:
                self.ensure_directory()
                shutil.copyfile(source_path, temp_file)
                os.replace(temp_file, destination)
            except OSError as e:
                if temp_file.exists():
                    try:
                        temp_file.unlink()
                    except OSError:
                        logger.warning("Could not remove temp file %s", temp_file)
                raise CopyFailedError(f"Could not copy {source_path} to store: {e}") from e

            logger.debug("Copied asset %s from %s", name, source_path)
            return destination

    def remove(self, name: str) -> bool:
        """
        Delete a stored asset.

        Returns:
            True if a file was removed
        """
        path = self.resolve(name)
        if path is None:
            return False
        with self._lock:
            path.unlink()
        return True

    def list_assets(self) -> List[Path]:
        """All stored asset files."""
        if not self.assets_dir.exists():
            return []
        return sorted(
            p for p in self.assets_dir.iterdir()
            if p.is_file() and not p.name.endswith(".tmp")
        )

    def total_size_mb(self) -> float:
        total_bytes = sum(p.stat().st_size for p in self.list_assets() if p.exists())
        return total_bytes / (1024 * 1024)
