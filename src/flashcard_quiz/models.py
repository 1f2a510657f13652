"""Domain types: cards, decks, export records and quiz values.

Validation is explicit: ``validate_card_fields`` and ``validate_deck_name``
return a list of violations and the store calls them before persisting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, List, Optional

from .errors import ParseError

MAX_QUESTION_LENGTH = 500
MAX_ANSWER_LENGTH = 500
MAX_DECK_NAME_LENGTH = 100


def _check_text(label: str, value: Optional[str], max_length: int) -> List[str]:
    if value is None or not value.strip():
        return [f"{label} cannot be empty"]
    if len(value.strip()) > max_length:
        return [f"{label} cannot exceed {max_length} characters"]
    return []


def validate_card_fields(question: Optional[str], answer: Optional[str]) -> List[str]:
    """Return violations for a card's question/answer (empty list if valid)."""
    return _check_text("Question", question, MAX_QUESTION_LENGTH) + _check_text(
        "Answer", answer, MAX_ANSWER_LENGTH
    )


def validate_deck_name(name: Optional[str]) -> List[str]:
    """Return violations for a deck name (empty list if valid)."""
    return _check_text("Deck name", name, MAX_DECK_NAME_LENGTH)


@dataclass
class Deck:
    deck_id: int
    name: str
    created_at: datetime


@dataclass
class Card:
    """One question/answer unit with review counters.

    Attributes:
        card_id: Store-assigned identity
        deck_id: Owning deck
        question: Prompt text
        answer: Stored answer (may list alternatives separated by ';' or ',')
        created_at: Creation timestamp
        last_reviewed: Last time the card was answered (None if never)
        correct_count: Number of correct answers
        incorrect_count: Number of incorrect answers
    """
    card_id: int
    deck_id: int
    question: str
    answer: str
    created_at: datetime
    last_reviewed: Optional[datetime] = None
    correct_count: int = 0
    incorrect_count: int = 0

    @property
    def total_attempts(self) -> int:
        return self.correct_count + self.incorrect_count

    @property
    def accuracy_rate(self) -> float:
        total = self.total_attempts
        return self.correct_count / total if total > 0 else 0.0


@dataclass(frozen=True)
class CardExportRecord:
    question: str
    answer: str


@dataclass(frozen=True)
class DeckExportRecord:
    """Serializable deck: a name plus question/answer pairs in order."""
    name: str
    cards: List[CardExportRecord] = field(default_factory=list)

    @classmethod
    def from_cards(cls, name: str, cards: Iterable[Card]) -> "DeckExportRecord":
        return cls(name=name, cards=[CardExportRecord(c.question, c.answer) for c in cards])

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "cards": [{"question": c.question, "answer": c.answer} for c in self.cards],
        }

    @classmethod
    def from_dict(cls, data: Any) -> "DeckExportRecord":
        """Build a record from parsed JSON, raising ParseError on a bad shape."""
        if not isinstance(data, dict):
            raise ParseError("Deck file must contain a JSON object")
        name = data.get("name")
        if not isinstance(name, str):
            raise ParseError("Deck file is missing a string 'name'")
        raw_cards = data.get("cards", [])
        if not isinstance(raw_cards, list):
            raise ParseError("'cards' must be a list")
        cards: List[CardExportRecord] = []
        for idx, item in enumerate(raw_cards):
            if not isinstance(item, dict):
                raise ParseError(f"Card #{idx + 1} must be a JSON object")
            question = item.get("question")
            answer = item.get("answer")
            if not isinstance(question, str) or not isinstance(answer, str):
                raise ParseError(f"Card #{idx + 1} needs string 'question' and 'answer'")
            cards.append(CardExportRecord(question=question, answer=answer))
        return cls(name=name, cards=cards)


@dataclass(frozen=True)
class QuizResult:
    correct: bool
    correct_answer: str
    user_answer: str


@dataclass(frozen=True)
class QuizStatistics:
    """Aggregate over every card of a deck."""
    total_cards: int
    reviewed_cards: int
    total_answers: int
    correct_answers: int

    @property
    def overall_accuracy(self) -> float:
        return self.correct_answers / self.total_answers if self.total_answers > 0 else 0.0

    @property
    def review_progress(self) -> float:
        return self.reviewed_cards / self.total_cards if self.total_cards > 0 else 0.0
