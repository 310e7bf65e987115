"""
FlashDeck command line
----------------------

Import flashcard decks from folders, Anki packages and note archives, and
manage the saved collection.
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from .deck import AnkiExporter
from .models import Deck
from .services import DeckRepository


def _resolve_deck(repo: DeckRepository, ref: str) -> Optional[Deck]:
    """Find a deck by id, or by name when the name is unambiguous."""
    deck = repo.get(ref)
    if deck is not None:
        return deck
    matches = repo.find_by_name(ref)
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        print(f"❌ Error: {len(matches)} decks are named {ref!r}; use the deck id")
    else:
        print(f"❌ Error: no deck matches {ref!r}")
    return None


async def cmd_import(args, repo: DeckRepository) -> bool:
    await repo.load_async()
    result = await repo.import_deck(args.path, args.name)
    if not result.ok:
        print(f"❌ {result.error}")
        return False

    report = result.report
    print(f"✅ Imported {result.deck.name!r} ({result.deck.id})")
    print(f"   {report.accepted} flashcards accepted, {report.rejected} rows skipped")
    for reason, count in sorted(report.reasons.items()):
        print(f"   - {reason}: {count}")
    return True


async def cmd_list(args, repo: DeckRepository) -> bool:
    decks = await repo.load_async()
    if not decks:
        print("No decks saved.")
        return True
    for deck in sorted(decks, key=lambda d: d.name.lower()):
        print(f"{deck.id}  {deck.name}  ({len(deck.flashcards)} cards)")
    return True


async def cmd_stats(args, repo: DeckRepository) -> bool:
    await repo.load_async()
    table = repo.summary()
    if table.empty:
        print("No decks saved.")
        return True
    print(table.drop(columns=["id"]).sort_values("name").to_string(index=False))
    return True


async def cmd_delete(args, repo: DeckRepository) -> bool:
    await repo.load_async()
    deck = _resolve_deck(repo, args.deck)
    if deck is None:
        return False
    await repo.delete_async(deck)
    print(f"🗑️  Deleted {deck.name!r}")
    return True


async def cmd_rename(args, repo: DeckRepository) -> bool:
    await repo.load_async()
    deck = _resolve_deck(repo, args.deck)
    if deck is None:
        return False
    new_name = args.name.strip()
    if not new_name:
        print("❌ Error: deck name cannot be empty")
        return False
    old_name, deck.name = deck.name, new_name
    await repo.update_async(deck)
    print(f"✏️  Renamed {old_name!r} to {new_name!r}")
    return True


async def cmd_merge(args, repo: DeckRepository) -> bool:
    await repo.load_async()
    first = _resolve_deck(repo, args.first)
    second = _resolve_deck(repo, args.second)
    if first is None or second is None:
        return False
    merged = await repo.merge_decks_async(first, second, args.name)
    print(f"✅ Merged into {merged.name!r} ({merged.id}, {len(merged.flashcards)} cards)")
    return True


async def cmd_export(args, repo: DeckRepository) -> bool:
    await repo.load_async()
    deck = _resolve_deck(repo, args.deck)
    if deck is None:
        return False
    exporter = AnkiExporter(asset_store=repo.asset_store)
    output = await asyncio.get_running_loop().run_in_executor(
        None, exporter.export, deck, args.output
    )
    print(f"📦 Exported {deck.name!r} to {output}")
    return True


COMMANDS = {
    "import": cmd_import,
    "list": cmd_list,
    "stats": cmd_stats,
    "delete": cmd_delete,
    "rename": cmd_rename,
    "merge": cmd_merge,
    "export": cmd_export,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="flashdeck", description="Flashcard deck import and storage")
    subparsers = parser.add_subparsers(dest="command")

    p_import = subparsers.add_parser("import", help="Import a folder, .apkg or note archive")
    p_import.add_argument("path", help="Folder or archive to import")
    p_import.add_argument("--name", help="Deck name (default: folder or file name)")

    subparsers.add_parser("list", help="List saved decks")
    subparsers.add_parser("stats", help="Show per-deck statistics")

    p_delete = subparsers.add_parser("delete", help="Delete a deck and its unshared images")
    p_delete.add_argument("deck", help="Deck id or name")

    p_rename = subparsers.add_parser("rename", help="Rename a deck")
    p_rename.add_argument("deck", help="Deck id or name")
    p_rename.add_argument("name", help="New deck name")

    p_merge = subparsers.add_parser("merge", help="Merge two decks into a new one")
    p_merge.add_argument("first", help="Deck id or name")
    p_merge.add_argument("second", help="Deck id or name")
    p_merge.add_argument("name", help="Name of the merged deck")

    p_export = subparsers.add_parser("export", help="Export a deck as an Anki package")
    p_export.add_argument("deck", help="Deck id or name")
    p_export.add_argument("output", help="Output .apkg file")

    return parser


def main(argv: Optional[List[str]] = None, repo: Optional[DeckRepository] = None) -> int:
    """Entry point for the ``flashdeck`` console script."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1

    repo = repo or DeckRepository()
    try:
        success = asyncio.run(COMMANDS[args.command](args, repo))
    except KeyboardInterrupt:
        print("\n[!] Aborted by user.")
        return 1
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
