"""Import bookkeeping: per-import row counts and command outcomes."""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .deck import Deck, Flashcard

# Rejection reasons
MISSING_IMAGE = "missing_image"
EMPTY_ANSWER = "empty_answer"
COPY_FAILED = "copy_failed"


@dataclass
class ImportReport:
    """Counts of accepted and rejected source rows for one import."""

    accepted: int = 0
    reasons: Counter = field(default_factory=Counter)

    @property
    def rejected(self) -> int:
        return sum(self.reasons.values())

    @property
    def total_rows(self) -> int:
        return self.accepted + self.rejected

    def accept(self) -> None:
        self.accepted += 1

    def reject(self, reason: str) -> None:
        self.reasons[reason] += 1

    def as_dict(self) -> Dict[str, int]:
        return {
            "accepted": self.accepted,
            "rejected": self.rejected,
            **dict(self.reasons),
        }


@dataclass
class ParsedDeck:
    """What an importer hands back before the repository wraps it into a Deck."""

    flashcards: List[Flashcard]
    name: str
    source_path: str
    report: ImportReport

    def to_deck(self) -> Deck:
        return Deck(name=self.name, source_path=self.source_path, flashcards=self.flashcards)


@dataclass
class ImportResult:
    """Outcome of an asynchronous import command."""

    deck: Optional[Deck] = None
    report: ImportReport = field(default_factory=ImportReport)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.deck is not None
