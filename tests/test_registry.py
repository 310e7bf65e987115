"""Tests for importer selection by extension."""

import pytest

from flashdeck.importers import (
    AnkiPackageImporter,
    FolderImporter,
    ImporterRegistry,
    NoteArchiveImporter,
)


@pytest.mark.parametrize("location, expected", [
    ("/decks/french.apkg", AnkiPackageImporter),
    ("/decks/FRENCH.APKG", AnkiPackageImporter),
    ("/notes/lecture.goodnotes", NoteArchiveImporter),
    ("/decks/capitals", FolderImporter),
    ("/decks/readme.txt", FolderImporter),
])
def test_importer_for(location, expected):
    assert ImporterRegistry.importer_for(location) is expected


def test_create_passes_dependencies(asset_store, scratch_dir):
    importer = ImporterRegistry.create("x.apkg", asset_store=asset_store, scratch_dir=scratch_dir)
    assert isinstance(importer, AnkiPackageImporter)
    assert importer.asset_store is asset_store
    assert importer.scratch_dir == scratch_dir


def test_extensions():
    assert ImporterRegistry.extensions() == [".apkg", ".goodnotes"]
