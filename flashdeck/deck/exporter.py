"""Export a deck back out as an Anki package."""

import hashlib
import html
from pathlib import Path
from typing import List, Optional, Union

import genanki

from ..models import Deck
from ..services.asset_store import AssetStore
from ..utils import ensure_dir, get_file_size_mb, setup_logger

logger = setup_logger(__name__)


def _stable_id(seed: str) -> int:
    # hashlib for determinism; Python's hash() varies between sessions
    return int(hashlib.md5(seed.encode()).hexdigest()[:8], 16) % (1 << 30) + (1 << 30)


class AnkiExporter:
    """Write decks as .apkg files with genanki."""

    # Text-only flashcards have nothing but the answer to put on the front
    FRONT_TEMPLATE = "{{Image}}{{^Image}}{{Answer}}{{/Image}}"
    BACK_TEMPLATE = '{{FrontSide}}<hr id="answer">{{Answer}}'
    CSS = ".card { font-family: arial; font-size: 20px; text-align: center; }"

    def __init__(self, asset_store: Optional[AssetStore] = None) -> None:
        self.asset_store = asset_store or AssetStore()

    def _create_model(self, deck: Deck) -> genanki.Model:
        return genanki.Model(
            _stable_id(f"model:{deck.id}"),
            "FlashDeck Image Card",
            fields=[{"name": "Image"}, {"name": "Answer"}],
            templates=[{
                "name": "Card 1",
                "qfmt": self.FRONT_TEMPLATE,
                "afmt": self.BACK_TEMPLATE,
            }],
            css=self.CSS,
        )

    def export(self, deck: Deck, output_file: Union[str, Path]) -> Path:
        """
        Export deck to APKG file.

        Args:
            deck: Deck to export
            output_file: Destination .apkg path

        Returns:
            Path of the written package
        """
        output_file = Path(output_file)
        ensure_dir(output_file.parent)

        model = self._create_model(deck)
        anki_deck = genanki.Deck(_stable_id(f"deck:{deck.id}"), deck.name)
        media_files: List[str] = []

        for card in deck.flashcards:
            image_field = ""
            if card.image_name:
                stored = self.asset_store.resolve(card.image_name)
                if stored is None:
                    logger.warning("Image missing from store, exporting without it: %s", card.image_name)
                else:
                    media_files.append(str(stored))
                    image_field = f'<img src="{html.escape(card.image_name)}">'

            anki_deck.add_note(genanki.Note(
                model=model,
                fields=[image_field, card.answer],
                guid=genanki.guid_for(deck.id, card.id),
            ))

        package = genanki.Package(anki_deck)
        package.media_files = sorted(set(media_files))
        package.write_to_file(str(output_file))

        logger.info(
            "Exported %r: %d notes, %d media files (%.2f MB)",
            deck.name, len(deck.flashcards), len(package.media_files), get_file_size_mb(output_file),
        )
        return output_file
