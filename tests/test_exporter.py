"""Tests for exporting decks as Anki packages."""

import zipfile

from flashdeck.deck import AnkiExporter
from flashdeck.importers import AnkiPackageImporter
from flashdeck.models import Deck, Flashcard


def test_export_writes_media_and_reimports(asset_store, scratch_dir, tmp_path):
    source = tmp_path / "a.png"
    source.write_bytes(b"image")
    asset_store.copy("a.png", source)
    deck = Deck(
        name="Capitals",
        source_path="/src/capitals",
        flashcards=[Flashcard("a.png", "Paris"), Flashcard("", "Rome")],
    )

    output = AnkiExporter(asset_store=asset_store).export(deck, tmp_path / "out" / "capitals.apkg")

    assert output.is_file()
    with zipfile.ZipFile(output) as zf:
        names = zf.namelist()
    assert "collection.anki2" in names
    assert "0" in names

    parsed = AnkiPackageImporter(asset_store=asset_store, scratch_dir=scratch_dir).import_deck(output)
    assert [c.answer for c in parsed.flashcards] == ["Paris", "Rome"]
    assert parsed.name == "capitals"


def test_export_skips_missing_images(asset_store, tmp_path):
    deck = Deck(name="Ghost", source_path="/src", flashcards=[Flashcard("ghost.png", "Boo")])

    output = AnkiExporter(asset_store=asset_store).export(deck, tmp_path / "ghost.apkg")

    with zipfile.ZipFile(output) as zf:
        assert "0" not in zf.namelist()
