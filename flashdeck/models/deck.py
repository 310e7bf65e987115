"""Deck and flashcard data models."""

import copy
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple


def new_id() -> str:
    """Generate an opaque unique identifier."""
    return uuid.uuid4().hex


@dataclass
class Flashcard:
    """One question/answer unit: an image reference and its answer."""

    image_name: str
    answer: str
    is_correct: bool = False
    # -1 wrong, +1 right, 0 not answered
    user_score: int = 0
    id: str = field(default_factory=new_id)

    @property
    def content_key(self) -> Tuple[str, str]:
        """Structural identity used for deduplication, independent of ``id``."""
        return (self.image_name, self.answer)

    @property
    def has_image(self) -> bool:
        return bool(self.image_name)

    def reset_score(self) -> None:
        self.is_correct = False
        self.user_score = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "image_name": self.image_name,
            "answer": self.answer,
            "is_correct": self.is_correct,
            "user_score": self.user_score,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Flashcard":
        return cls(
            id=str(data.get("id") or new_id()),
            image_name=str(data.get("image_name") or ""),
            answer=str(data.get("answer") or ""),
            is_correct=bool(data.get("is_correct", False)),
            user_score=int(data.get("user_score", 0)),
        )


@dataclass
class Deck:
    """A named, ordered collection of flashcards plus cumulative statistics."""

    name: str
    source_path: str
    flashcards: List[Flashcard] = field(default_factory=list)
    total_score: int = 0
    completed_rounds: int = 0
    last_played_date: Optional[datetime] = None
    id: str = field(default_factory=new_id)

    @property
    def average_score(self) -> float:
        if self.completed_rounds <= 0:
            return 0.0
        return self.total_score / self.completed_rounds

    @property
    def progress_percentage(self) -> float:
        if not self.flashcards:
            return 0.0
        answered = sum(1 for card in self.flashcards if card.user_score != 0)
        return answered / len(self.flashcards) * 100

    @property
    def image_names(self) -> List[str]:
        return [card.image_name for card in self.flashcards if card.image_name]

    def copy(self) -> "Deck":
        """Deep copy with the same identity (what a study session borrows)."""
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "source_path": self.source_path,
            "flashcards": [card.to_dict() for card in self.flashcards],
            "total_score": self.total_score,
            "completed_rounds": self.completed_rounds,
            "last_played_date": (
                self.last_played_date.isoformat() if self.last_played_date else None
            ),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Deck":
        played = data.get("last_played_date")
        return cls(
            id=str(data.get("id") or new_id()),
            name=str(data.get("name") or ""),
            source_path=str(data.get("source_path") or ""),
            flashcards=[Flashcard.from_dict(c) for c in data.get("flashcards") or []],
            total_score=int(data.get("total_score", 0)),
            completed_rounds=int(data.get("completed_rounds", 0)),
            last_played_date=datetime.fromisoformat(played) if played else None,
        )
