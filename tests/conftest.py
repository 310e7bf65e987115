"""Shared test fixtures."""

import random
import sqlite3
import zipfile

import genanki
import pytest

from flashdeck.services import AssetStore, DeckRepository, KeyValueStore

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@pytest.fixture
def data_dir(tmp_path):
    """App-private data directory."""
    d = tmp_path / "data"
    d.mkdir()
    return d


@pytest.fixture
def scratch_dir(tmp_path):
    d = tmp_path / "scratch"
    d.mkdir()
    return d


@pytest.fixture
def asset_store(data_dir):
    return AssetStore(data_dir / "FlashcardImages")


@pytest.fixture
def kv_store(data_dir):
    return KeyValueStore(data_dir / "store.json")


@pytest.fixture
def repo(kv_store, asset_store, scratch_dir):
    """Repository with deterministic shuffling on tmp storage."""
    return DeckRepository(
        store=kv_store,
        asset_store=asset_store,
        scratch_dir=scratch_dir,
        rng=random.Random(0),
    )


@pytest.fixture
def restart(data_dir, scratch_dir):
    """Build a fresh repository over the same files, as a new process would."""
    def _restart():
        new_repo = DeckRepository(
            store=KeyValueStore(data_dir / "store.json"),
            asset_store=AssetStore(data_dir / "FlashcardImages"),
            scratch_dir=scratch_dir,
            rng=random.Random(1),
        )
        new_repo.load()
        return new_repo
    return _restart


@pytest.fixture
def make_folder_deck(tmp_path):
    """
    Create an importable folder.

    rows are (front, back, front_image_file_name, back_image_file_name);
    images are the filenames written into images/.
    """
    def _make(name, rows, images, db_name="cards.db", images_folder="images"):
        folder = tmp_path / "sources" / name
        (folder / images_folder).mkdir(parents=True)
        for image in images:
            (folder / images_folder / image).write_bytes(PNG_BYTES + image.encode())

        conn = sqlite3.connect(folder / db_name)
        conn.execute(
            "CREATE TABLE share_data ("
            "front TEXT, back TEXT, front_image_file_name TEXT, back_image_file_name TEXT)"
        )
        conn.executemany("INSERT INTO share_data VALUES (?, ?, ?, ?)", rows)
        conn.commit()
        conn.close()
        return folder
    return _make


@pytest.fixture
def make_note_archive(tmp_path):
    """Create a .goodnotes zip; entries maps archive paths to bytes."""
    def _make(name, entries):
        archive = tmp_path / "sources" / f"{name}.goodnotes"
        archive.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(archive, "w") as zf:
            for entry, data in entries.items():
                zf.writestr(entry, data)
        return archive
    return _make


@pytest.fixture
def make_encrypted_zip(tmp_path):
    """
    Create a zip whose entries are flagged as encrypted.

    zipfile cannot write encrypted entries, so the general purpose flag bit
    is set in the local and central headers after writing.
    """
    def _make(filename, entries):
        archive = tmp_path / "sources" / filename
        archive.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(archive, "w") as zf:
            for entry, data in entries.items():
                zf.writestr(entry, data)

        raw = bytearray(archive.read_bytes())
        for signature, flag_offset in ((b"PK\x03\x04", 6), (b"PK\x01\x02", 8)):
            start = raw.find(signature)
            while start != -1:
                raw[start + flag_offset] |= 0x1
                start = raw.find(signature, start + 4)
        archive.write_bytes(bytes(raw))
        return archive
    return _make


@pytest.fixture
def make_apkg(tmp_path):
    """Build an Anki package with genanki; each note is a list of field values."""
    def _make(name, notes, field_names=("Front", "Back")):
        model = genanki.Model(
            1607392319,
            f"Test Model {len(field_names)}",
            fields=[{"name": f} for f in field_names],
            templates=[{
                "name": "Card 1",
                "qfmt": "{{%s}}" % field_names[0],
                "afmt": "{{FrontSide}}<hr id=answer>{{%s}}" % field_names[-1],
            }],
        )
        deck = genanki.Deck(2059400110, name)
        for fields in notes:
            deck.add_note(genanki.Note(model=model, fields=list(fields)))

        archive = tmp_path / "sources" / f"{name}.apkg"
        archive.parent.mkdir(parents=True, exist_ok=True)
        genanki.Package(deck).write_to_file(str(archive))
        return archive
    return _make
