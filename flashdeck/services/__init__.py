"""Services layer: asset pool, durable storage and the deck repository."""

from .asset_store import AssetStore
from .storage import KeyValueStore
from .repository import DeckRepository

__all__ = [
    "AssetStore",
    "KeyValueStore",
    "DeckRepository",
]
