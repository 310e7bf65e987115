"""Study session over one deck."""

import random
from datetime import datetime
from enum import Enum
from typing import Optional

from ..models import Deck, Flashcard
from ..utils import setup_logger

logger = setup_logger(__name__)


class GameState(Enum):
    SHOWING_QUESTION = "showing_question"
    SHOWING_ANSWER = "showing_answer"
    GAME_COMPLETE = "game_complete"


class StudySession:
    """
    One round through a deck in shuffled order.

    The session works on its own copy of the deck; nothing reaches the
    repository until the caller passes ``finish()``'s result to
    ``DeckRepository.update``.

    Usage:
        session = StudySession(repo.get(deck_id))
        while session.state != GameState.GAME_COMPLETE:
            card = session.current_card
            session.reveal()
            session.answer(correct=True)
        repo.update(session.finish())
    """

    def __init__(self, deck: Deck, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()
        self.deck = deck.copy()
        self.score = 0
        self.index = 0
        self.state = GameState.SHOWING_QUESTION
        self._shuffle()

    def _shuffle(self) -> None:
        self._rng.shuffle(self.deck.flashcards)
        self.index = 0
        self.score = 0
        self.state = (
            GameState.SHOWING_QUESTION if self.deck.flashcards else GameState.GAME_COMPLETE
        )

    @property
    def current_card(self) -> Optional[Flashcard]:
        if self.state == GameState.GAME_COMPLETE:
            return None
        return self.deck.flashcards[self.index]

    @property
    def remaining(self) -> int:
        return len(self.deck.flashcards) - self.index

    def reveal(self) -> Flashcard:
        """Show the answer of the current card."""
        card = self.current_card
        if card is None:
            raise RuntimeError("Session is already complete")
        self.state = GameState.SHOWING_ANSWER
        return card

    def answer(self, correct: bool) -> None:
        """
        Record the user's verdict for the current card and advance.

        Args:
            correct: True if the user knew the answer
        """
        card = self.current_card
        if card is None:
            raise RuntimeError("Session is already complete")

        card.is_correct = correct
        card.user_score = 1 if correct else -1
        if correct:
            self.score += 1

        self.index += 1
        if self.index >= len(self.deck.flashcards):
            self.state = GameState.GAME_COMPLETE
            logger.info("Round complete for %r: %d/%d", self.deck.name, self.score, len(self.deck.flashcards))
        else:
            self.state = GameState.SHOWING_QUESTION

    def finish(self, now: Optional[datetime] = None) -> Deck:
        """
        Fold the session score into the deck statistics.

        Returns:
            Updated copy of the deck, ready for ``DeckRepository.update``
        """
        self.deck.total_score += self.score
        self.deck.completed_rounds += 1
        self.deck.last_played_date = now or datetime.now()
        return self.deck.copy()

    def restart(self) -> None:
        """Clear every card's result and start a new shuffled round."""
        for card in self.deck.flashcards:
            card.reset_score()
        self._shuffle()
