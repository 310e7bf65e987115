"""
Deck Repository - canonical deck collection and durable storage reconciliation.

The whole deck list is serialized as one blob under one key of the
key-value store; every mutation rewrites it. Flashcards whose image cannot
be found in the asset store are dropped at load and save time.
"""

import asyncio
import random
from pathlib import Path
from threading import RLock
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from ..config import Config
from ..errors import CopyFailedError, DeckImportError, DuplicateSourceError
from ..models import Deck, Flashcard, ImportResult, new_id
from ..utils import setup_logger
from .asset_store import AssetStore
from .storage import KeyValueStore

logger = setup_logger(__name__)


class DeckRepository:
    """
    Owns the canonical list of decks.

    Single-writer discipline: every mutation and every write to storage runs
    under one lock, and queries hand out copies. Blocking work behind the
    ``*_async`` commands runs in the default executor so an event loop stays
    responsive.

    Usage:
        repo = DeckRepository()
        repo.load()
        result = await repo.import_deck("/path/to/folder", "Capitals")
        if not result.ok:
            print(result.error)
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        asset_store: Optional[AssetStore] = None,
        storage_key: Optional[str] = None,
        scratch_dir: Optional[Union[str, Path]] = None,
        concurrency: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Initialize deck repository.

        Args:
            store: Durable key-value storage (defaults to Config.STORE_FILE)
            asset_store: Image pool (defaults to Config.ASSETS_DIR)
            storage_key: Key holding the deck list (defaults to Config.STORAGE_KEY)
            scratch_dir: Root for archive extraction and merged-deck source paths
            concurrency: Maximum imports parsed in parallel (defaults to Config.CONCURRENCY)
            rng: Random source for load-order shuffling
        """
        self.store = store or KeyValueStore()
        self.asset_store = asset_store or AssetStore()
        self.storage_key = storage_key or Config.STORAGE_KEY
        self.scratch_dir = Path(scratch_dir or Config.SCRATCH_DIR)
        self.concurrency = concurrency or Config.CONCURRENCY
        self._rng = rng or random.Random()

        self._decks: List[Deck] = []
        self._lock = RLock()

        # Created lazily per event loop; asyncio primitives cannot cross loops
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._source_locks: Dict[str, asyncio.Lock] = {}
        self._source_users: Dict[str, int] = {}
        self._in_flight: int = 0

    # ==================== Queries ====================

    @property
    def decks(self) -> List[Deck]:
        """Copies of all decks, in display order."""
        with self._lock:
            return [deck.copy() for deck in self._decks]

    @property
    def is_loading(self) -> bool:
        """True while any asynchronous command is running."""
        return self._in_flight > 0

    def count(self) -> int:
        with self._lock:
            return len(self._decks)

    def get(self, deck_id: str) -> Optional[Deck]:
        with self._lock:
            deck = self._find(deck_id)
            return deck.copy() if deck else None

    def find_by_source(self, source_path: Union[str, Path]) -> Optional[Deck]:
        source_path = str(source_path)
        with self._lock:
            for deck in self._decks:
                if deck.source_path == source_path:
                    return deck.copy()
        return None

    def find_by_name(self, name: str) -> List[Deck]:
        with self._lock:
            return [deck.copy() for deck in self._decks if deck.name == name]

    def summary(self) -> pd.DataFrame:
        """Per-deck statistics table."""
        columns = [
            "id", "name", "cards", "rounds", "total_score",
            "average_score", "progress", "last_played",
        ]
        rows = [
            {
                "id": deck.id,
                "name": deck.name,
                "cards": len(deck.flashcards),
                "rounds": deck.completed_rounds,
                "total_score": deck.total_score,
                "average_score": round(deck.average_score, 2),
                "progress": round(deck.progress_percentage, 1),
                "last_played": deck.last_played_date,
            }
            for deck in self.decks
        ]
        return pd.DataFrame(rows, columns=columns)

    # ==================== Persistence ====================

    def load(self) -> List[Deck]:
        """
        Load decks from storage and verify their images.

        Flashcards whose image cannot be resolved (or re-copied from the
        deck's source folder) are dropped from memory; decks left with no
        flashcards are dropped entirely. Storage itself is untouched until
        the next save. The resulting order is shuffled.

        Returns:
            Copies of the loaded decks
        """
        raw = self.store.get(self.storage_key, [])
        decks: List[Deck] = []
        for entry in raw if isinstance(raw, list) else []:
            try:
                deck = Deck.from_dict(entry)
            except (TypeError, ValueError, AttributeError) as e:
                logger.warning("Skipping unreadable stored deck: %s", e)
                continue

            deck.flashcards = self._verify_assets(deck)
            if not deck.flashcards:
                logger.warning("No valid flashcards found for deck: %s", deck.name)
                continue
            decks.append(deck)

        self._rng.shuffle(decks)
        with self._lock:
            self._decks = decks
        logger.info("Loaded %d verified deck(s)", len(decks))
        return self.decks

    def _persist(self) -> None:
        """Rewrite the whole deck list (caller must hold the lock)."""
        self.store.set(self.storage_key, [deck.to_dict() for deck in self._decks])

    def _verify_assets(self, deck: Deck) -> List[Flashcard]:
        """
        Keep only flashcards whose image is (or can be put) in the asset store.

        A missing image is re-copied from ``source_path/image_name`` or
        ``source_path/images/image_name`` when the original folder is still
        around.
        """
        verified = []
        for card in deck.flashcards:
            if not card.image_name or self.asset_store.contains(card.image_name):
                verified.append(card)
                continue

            source_dir = Path(deck.source_path)
            candidates = [
                source_dir / card.image_name,
                source_dir / Config.IMAGES_FOLDER / card.image_name,
            ]
            original = next((p for p in candidates if p.is_file()), None)
            if original is None:
                logger.warning("Image not found for flashcard: %s (%s)", card.image_name, deck.name)
                continue
            try:
                self.asset_store.copy(card.image_name, original)
            except CopyFailedError as e:
                logger.warning("Dropping flashcard %s: %s", card.image_name, e)
                continue
            verified.append(card)
        return verified

    # ==================== Commands ====================

    def add(self, deck: Deck) -> Deck:
        """
        Add a freshly imported deck.

        Raises:
            DuplicateSourceError: A deck from the same source path exists
        """
        with self._lock:
            if any(d.source_path == deck.source_path for d in self._decks):
                logger.info("Deck already exists for %s", deck.source_path)
                raise DuplicateSourceError(f"Deck from {deck.source_path} already exists")

            stored = deck.copy()
            stored.flashcards = self._verify_assets(stored)
            self._decks.append(stored)
            self._persist()
            logger.info("Added deck %r with %d flashcards", stored.name, len(stored.flashcards))
            return stored.copy()

    def update(self, deck: Deck) -> Optional[Deck]:
        """
        Replace the deck with the same id (how study results are committed).

        Returns:
            The stored deck, or None if no deck has that id
        """
        with self._lock:
            index = self._index_of(deck.id)
            if index is None:
                logger.warning("Cannot update unknown deck %s (%s)", deck.id, deck.name)
                return None

            stored = deck.copy()
            stored.flashcards = self._verify_assets(stored)
            self._decks[index] = stored
            self._persist()
            logger.info("Updated deck %r", stored.name)
            return stored.copy()

    def delete(self, deck: Deck) -> bool:
        """
        Remove a deck and, best effort, the images only it referenced.

        Returns:
            True if the deck existed
        """
        with self._lock:
            index = self._index_of(deck.id)
            if index is None:
                return False
            removed = self._decks.pop(index)
            self._persist()

            still_used = {name for d in self._decks for name in d.image_names}
            orphaned = set(removed.image_names) - still_used

        for name in sorted(orphaned):
            try:
                if self.asset_store.remove(name):
                    logger.debug("Deleted image: %s", name)
            except OSError as e:
                logger.warning("Could not delete image %s: %s", name, e)

        logger.info("Deleted deck %r", removed.name)
        return True

    def merge_decks(self, first: Deck, second: Deck, new_name: str) -> Deck:
        """
        Combine two decks into a new independent deck.

        Flashcards are deduplicated by content key (image name + answer),
        first occurrence wins. The merged deck gets a fresh unique source
        path so it never collides with a later import; the inputs stay as
        they are.
        """
        merged: List[Flashcard] = []
        seen = set()
        for card in first.flashcards + second.flashcards:
            if card.content_key in seen:
                continue
            seen.add(card.content_key)
            merged.append(Flashcard(image_name=card.image_name, answer=card.answer))

        deck = Deck(
            name=new_name.strip() or f"{first.name} + {second.name}",
            source_path=str(self.scratch_dir / "merged_decks" / new_id()),
            flashcards=merged,
        )
        logger.info("Merging %r and %r into %r (%d flashcards)", first.name, second.name, deck.name, len(merged))
        return self.add(deck)

    def _find(self, deck_id: str) -> Optional[Deck]:
        index = self._index_of(deck_id)
        return self._decks[index] if index is not None else None

    def _index_of(self, deck_id: str) -> Optional[int]:
        for index, deck in enumerate(self._decks):
            if deck.id == deck_id:
                return index
        return None

    # ==================== Async commands ====================

    def _bind_loop(self) -> None:
        loop = asyncio.get_running_loop()
        if loop is not self._loop:
            self._loop = loop
            self._semaphore = asyncio.Semaphore(self.concurrency)
            self._source_locks = {}
            self._source_users = {}

    def _get_semaphore(self) -> asyncio.Semaphore:
        self._bind_loop()
        return self._semaphore

    def _get_source_lock(self, source_path: str) -> asyncio.Lock:
        """Lock for one source path; pair every call with _release_source_lock."""
        self._bind_loop()
        if source_path not in self._source_locks:
            self._source_locks[source_path] = asyncio.Lock()
        self._source_users[source_path] = self._source_users.get(source_path, 0) + 1
        return self._source_locks[source_path]

    def _release_source_lock(self, source_path: str) -> None:
        users = self._source_users.get(source_path, 0) - 1
        if users > 0:
            self._source_users[source_path] = users
            return
        self._source_users.pop(source_path, None)
        self._source_locks.pop(source_path, None)

    async def _run(self, func, *args) -> Any:
        loop = asyncio.get_running_loop()
        self._in_flight += 1
        try:
            return await loop.run_in_executor(None, func, *args)
        finally:
            self._in_flight -= 1

    async def import_deck(
        self,
        location: Union[str, Path],
        custom_name: Optional[str] = None,
    ) -> ImportResult:
        """
        Import a folder or archive and add it as a new deck.

        One import per source path runs at a time and at most
        ``concurrency`` imports parse in parallel.

        Returns:
            ImportResult with the added deck and row report, or an error message
        """
        from ..importers import ImporterRegistry

        source_path = str(Path(location).resolve())
        self._in_flight += 1
        lock = self._get_source_lock(source_path)
        try:
            async with lock:
                if await self._run(self.find_by_source, source_path) is not None:
                    error = DuplicateSourceError(f"Deck from {source_path} already exists")
                    return ImportResult(error=error.message)

                importer = ImporterRegistry.create(
                    location, asset_store=self.asset_store, scratch_dir=self.scratch_dir
                )
                try:
                    async with self._get_semaphore():
                        parsed = await self._run(importer.import_deck, location, custom_name)
                    deck = await self._run(self.add, parsed.to_deck())
                except DeckImportError as e:
                    logger.error("Error processing %s: %s", location, e)
                    return ImportResult(error=f"Error processing file: {e}")

                return ImportResult(deck=deck, report=parsed.report)
        finally:
            self._release_source_lock(source_path)
            self._in_flight -= 1

    async def load_async(self) -> List[Deck]:
        return await self._run(self.load)

    async def update_async(self, deck: Deck) -> Optional[Deck]:
        return await self._run(self.update, deck)

    async def delete_async(self, deck: Deck) -> bool:
        return await self._run(self.delete, deck)

    async def merge_decks_async(self, first: Deck, second: Deck, new_name: str) -> Deck:
        return await self._run(self.merge_decks, first, second, new_name)
