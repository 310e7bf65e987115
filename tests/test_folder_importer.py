"""Tests for the folder + database importer."""

import sqlite3

import pytest

from flashdeck.errors import (
    MissingDatabaseError,
    MissingImagesFolderError,
    NoFlashcardsError,
    QueryPrepareFailedError,
)
from flashdeck.importers import FolderImporter
from flashdeck.models.report import EMPTY_ANSWER, MISSING_IMAGE


@pytest.fixture
def importer(asset_store, scratch_dir):
    return FolderImporter(asset_store=asset_store, scratch_dir=scratch_dir)


def test_valid_and_invalid_rows(importer, asset_store, make_folder_deck):
    folder = make_folder_deck(
        "Capitals",
        rows=[
            ("q1", "Paris", "a.png", None),
            ("q2", "Rome", None, "b.png"),
            ("q3", "Berlin", "missing.png", None),
            ("q4", "Madrid", None, None),
            ("q5", "", "c.png", None),
        ],
        images=["a.png", "b.png", "c.png"],
    )

    parsed = importer.import_deck(folder)

    assert [(c.image_name, c.answer) for c in parsed.flashcards] == [
        ("a.png", "Paris"),
        ("b.png", "Rome"),
    ]
    assert parsed.report.accepted == 2
    assert parsed.report.reasons[MISSING_IMAGE] == 2
    assert parsed.report.reasons[EMPTY_ANSWER] == 1
    assert parsed.report.total_rows == 5
    assert asset_store.contains("a.png")
    assert asset_store.contains("b.png")
    assert not asset_store.contains("c.png")


def test_front_image_preferred(importer, make_folder_deck):
    folder = make_folder_deck(
        "Images",
        rows=[("q", "ans", "front.png", "back.png")],
        images=["front.png", "back.png"],
    )
    parsed = importer.import_deck(folder)
    assert parsed.flashcards[0].image_name == "front.png"


def test_blank_front_image_falls_back_to_back(importer, make_folder_deck):
    folder = make_folder_deck("Blank", rows=[("q", "ans", "  ", "back.png")], images=["back.png"])
    parsed = importer.import_deck(folder)
    assert parsed.flashcards[0].image_name == "back.png"


def test_answer_falls_back_to_front_then_placeholder(importer, make_folder_deck):
    folder = make_folder_deck(
        "Answers",
        rows=[("Front text", None, "a.png", None), (None, None, "b.png", None)],
        images=["a.png", "b.png"],
    )
    parsed = importer.import_deck(folder)
    assert [c.answer for c in parsed.flashcards] == ["Front text", "No answer found"]


def test_answer_is_trimmed(importer, make_folder_deck):
    folder = make_folder_deck("Trim", rows=[("q", "  Paris \n", "a.png", None)], images=["a.png"])
    assert importer.import_deck(folder).flashcards[0].answer == "Paris"


def test_name_and_source_path(importer, make_folder_deck):
    folder = make_folder_deck("Capitals", rows=[("q", "Paris", "a.png", None)], images=["a.png"])

    parsed = importer.import_deck(folder)
    assert parsed.name == "Capitals"
    assert parsed.source_path == str(folder.resolve())

    assert importer.import_deck(folder, "  My Deck ").name == "My Deck"
    assert importer.import_deck(folder, "   ").name == "Capitals"


def test_images_folder_match_is_case_insensitive(importer, make_folder_deck):
    folder = make_folder_deck(
        "Upper", rows=[("q", "Paris", "a.png", None)], images=["a.png"], images_folder="Images"
    )
    assert len(importer.import_deck(folder).flashcards) == 1


def test_database_extension_is_case_insensitive(importer, make_folder_deck):
    folder = make_folder_deck(
        "UpperDb", rows=[("q", "Paris", "a.png", None)], images=["a.png"], db_name="CARDS.DB"
    )
    assert len(importer.import_deck(folder).flashcards) == 1


def test_missing_database(importer, tmp_path):
    folder = tmp_path / "empty"
    (folder / "images").mkdir(parents=True)
    with pytest.raises(MissingDatabaseError):
        importer.import_deck(folder)


def test_missing_folder_is_missing_database(importer, tmp_path):
    with pytest.raises(MissingDatabaseError):
        importer.import_deck(tmp_path / "does-not-exist")


def test_missing_images_folder(importer, tmp_path):
    folder = tmp_path / "noimages"
    folder.mkdir()
    sqlite3.connect(folder / "cards.db").close()
    with pytest.raises(MissingImagesFolderError):
        importer.import_deck(folder)


def test_wrong_schema_fails_query(importer, tmp_path):
    folder = tmp_path / "schema"
    (folder / "images").mkdir(parents=True)
    conn = sqlite3.connect(folder / "cards.db")
    conn.execute("CREATE TABLE other (x TEXT)")
    conn.commit()
    conn.close()
    with pytest.raises(QueryPrepareFailedError):
        importer.import_deck(folder)


def test_no_valid_rows(importer, make_folder_deck):
    folder = make_folder_deck("Nothing", rows=[("q", "a", "gone.png", None)], images=[])
    with pytest.raises(NoFlashcardsError):
        importer.import_deck(folder)


def test_reimport_copies_each_image_once(importer, asset_store, make_folder_deck):
    folder = make_folder_deck("Twice", rows=[("q", "Paris", "a.png", None)], images=["a.png"])
    importer.import_deck(folder)
    stored = asset_store.resolve("a.png")
    mtime = stored.stat().st_mtime_ns

    (folder / "images" / "a.png").write_bytes(b"changed")
    importer.import_deck(folder)

    assert asset_store.resolve("a.png").stat().st_mtime_ns == mtime
    assert asset_store.resolve("a.png").read_bytes() != b"changed"
    assert [p.name for p in asset_store.list_assets()] == ["a.png"]


def test_non_image_files_are_not_card_images(importer, asset_store, make_folder_deck):
    folder = make_folder_deck(
        "Extensions",
        rows=[
            ("q1", "Paris", "a.png", None),
            ("q2", "Notes", "notes.txt", None),
            ("q3", "Hidden", ".DS_Store", None),
            ("q4", "Upper", "B.JPG", None),
        ],
        images=["a.png", "notes.txt", ".DS_Store", "B.JPG"],
    )

    parsed = importer.import_deck(folder)

    assert [c.image_name for c in parsed.flashcards] == ["a.png", "B.JPG"]
    assert parsed.report.reasons[MISSING_IMAGE] == 2
    assert not asset_store.contains("notes.txt")
