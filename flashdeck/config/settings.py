"""Global settings and configuration."""

import os
import tempfile
from pathlib import Path

from dotenv import load_dotenv

# Project root .env first, then whatever python-dotenv finds from the cwd
load_dotenv(Path(__file__).parent.parent.parent / ".env")
load_dotenv()


def _env_int(key: str, default: int) -> int:
    try:
        return int(os.environ.get(key, default))
    except ValueError:
        return default


class Config:
    """Application-wide configuration."""

    # Persistent, app-private storage
    DATA_DIR: Path = Path(
        os.environ.get("FLASHDECK_DATA_DIR", Path.home() / ".local" / "share" / "flashdeck")
    ).expanduser()
    ASSETS_DIR: Path = DATA_DIR / "FlashcardImages"
    STORE_FILE: Path = DATA_DIR / "store.json"

    # Ephemeral extraction root for archive imports
    SCRATCH_DIR: Path = Path(os.environ.get("FLASHDECK_SCRATCH_DIR", tempfile.gettempdir()))

    # Key under which the whole deck list is stored
    STORAGE_KEY: str = "savedDecks"

    # Parallel import parsing limit
    CONCURRENCY: int = _env_int("FLASHDECK_CONCURRENCY", 4)

    LOG_LEVEL: str = os.environ.get("FLASHDECK_LOG_LEVEL", "INFO")

    # Source formats
    DATABASE_EXTENSIONS = (".db",)
    ANKI_EXTENSIONS = (".apkg",)
    NOTE_ARCHIVE_EXTENSIONS = (".goodnotes",)
    IMAGES_FOLDER: str = "images"
    IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".heic", ".webp")
    PAGE_EXTENSION: str = ".pdf"
    PAGE_PREFIX: str = "page_"

    # Anki collection databases, newest first
    ANKI_COLLECTIONS = ("collection.anki21", "collection.anki2")
    ANKI_COMPRESSED_COLLECTION: str = "collection.anki21b"

    FOLDER_CARD_TABLE: str = "share_data"
    PLACEHOLDER_ANSWER: str = "No answer found"
