"""Quiz sessions over a deck and per-deck review statistics.

Answer matching lives in :mod:`flashcard_quiz.matching` and has no side
effects; :meth:`QuizRunner.submit` is the only place that records results.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional

from .errors import ValidationError
from .matching import check_answer
from .models import Card, Deck, QuizResult, QuizStatistics
from .store import DeckStore

logger = logging.getLogger(__name__)

LOW_ACCURACY_THRESHOLD = 0.6


class QuizRunner:
    def __init__(
        self,
        store: DeckStore,
        rng: Optional[random.Random] = None,
        low_accuracy_threshold: float = LOW_ACCURACY_THRESHOLD,
    ) -> None:
        self.store = store
        self.rng = rng if rng is not None else random.Random()
        self.low_accuracy_threshold = low_accuracy_threshold

    def start(self, deck: Optional[Deck]) -> List[Card]:
        """Return the deck's cards in a random order.

        Raises:
            ValidationError: If the deck is missing or has no cards
        """
        if deck is None:
            raise ValidationError("Deck cannot be empty")
        cards = self.store.list_cards_by_deck(deck)
        if not cards:
            raise ValidationError(f"Deck '{deck.name}' contains no cards")
        self.rng.shuffle(cards)
        logger.debug("Started quiz on deck %r with %d cards", deck.name, len(cards))
        return cards

    def submit(self, card: Optional[Card], user_answer: Optional[str]) -> QuizResult:
        """Judge an answer and record exactly one statistics update for it."""
        if card is None:
            raise ValidationError("Card cannot be empty")
        result = check_answer(card.answer, user_answer)
        self.store.update_card_statistics(card.card_id, result.correct)
        return result

    def statistics(self, deck: Deck) -> QuizStatistics:
        cards = self.store.list_cards_by_deck(deck)
        return QuizStatistics(
            total_cards=len(cards),
            reviewed_cards=sum(1 for c in cards if c.last_reviewed is not None),
            total_answers=sum(c.total_attempts for c in cards),
            correct_answers=sum(c.correct_count for c in cards),
        )

    def recommend_for_review(self, deck: Deck, max_count: int) -> List[Card]:
        """Pick up to ``max_count`` never-reviewed or low-accuracy cards at random."""
        if max_count <= 0:
            return []
        candidates = self.store.list_unreviewed_cards(deck) + self.store.list_low_accuracy_cards(
            deck, self.low_accuracy_threshold
        )
        self.rng.shuffle(candidates)
        return candidates[:max_count]
