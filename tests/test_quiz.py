"""Tests for quiz sessions, statistics and review recommendations."""

import random
from unittest.mock import MagicMock

import pytest

from flashcard_quiz.errors import ValidationError
from flashcard_quiz.quiz import QuizRunner
from flashcard_quiz.store import DeckStore


@pytest.fixture
def store():
    with DeckStore(":memory:") as s:
        yield s


@pytest.fixture
def deck(store):
    deck = store.create_deck("Capitals")
    for q, a in [("France", "Paris"), ("Spain", "Madrid"), ("Italy", "Rome"), ("Peru", "Lima")]:
        store.create_card(q, a, deck)
    return deck


def answer(store, card, correct=0, incorrect=0):
    for _ in range(correct):
        store.update_card_statistics(card.card_id, True)
    for _ in range(incorrect):
        store.update_card_statistics(card.card_id, False)


class TestStart:
    """Test starting a quiz pass."""

    def test_returns_permutation(self, store, deck):
        runner = QuizRunner(store, rng=random.Random(7))
        cards = runner.start(deck)
        assert sorted(c.card_id for c in cards) == sorted(
            c.card_id for c in store.list_cards_by_deck(deck)
        )

    def test_seeded_rng_is_deterministic(self, store, deck):
        first = [c.card_id for c in QuizRunner(store, rng=random.Random(3)).start(deck)]
        second = [c.card_id for c in QuizRunner(store, rng=random.Random(3)).start(deck)]
        assert first == second

    def test_uses_injected_rng(self, store, deck):
        rng = MagicMock()
        QuizRunner(store, rng=rng).start(deck)
        rng.shuffle.assert_called_once()

    def test_empty_deck_rejected(self, store):
        empty = store.create_deck("Empty")
        with pytest.raises(ValidationError, match="contains no cards"):
            QuizRunner(store).start(empty)

    def test_missing_deck_rejected(self, store):
        with pytest.raises(ValidationError):
            QuizRunner(store).start(None)


class TestSubmit:
    """Test answer submission."""

    def test_correct_answer_recorded(self, store, deck):
        card = store.list_cards_by_deck(deck)[0]
        result = QuizRunner(store).submit(card, " paris ")
        assert result.correct is True
        assert result.correct_answer == "Paris"
        updated = store.get_card(card.card_id)
        assert (updated.correct_count, updated.incorrect_count) == (1, 0)
        assert updated.last_reviewed is not None

    def test_incorrect_answer_recorded(self, store, deck):
        card = store.list_cards_by_deck(deck)[1]
        result = QuizRunner(store).submit(card, None)
        assert result.correct is False
        assert store.get_card(card.card_id).incorrect_count == 1

    def test_exactly_one_statistics_update(self, store, deck):
        card = store.list_cards_by_deck(deck)[0]
        fake_store = MagicMock()
        QuizRunner(fake_store).submit(card, "Lyon")
        fake_store.update_card_statistics.assert_called_once_with(card.card_id, False)

    def test_missing_card_rejected(self, store):
        with pytest.raises(ValidationError):
            QuizRunner(store).submit(None, "x")


class TestStatistics:
    """Test deck statistics aggregation."""

    def test_three_card_deck(self, store):
        deck = store.create_deck("Three")
        a = store.create_card("a", "1", deck)
        b = store.create_card("b", "2", deck)
        store.create_card("c", "3", deck)
        answer(store, a, correct=4, incorrect=1)
        answer(store, b, correct=1, incorrect=4)
        stats = QuizRunner(store).statistics(deck)
        assert stats.total_cards == 3
        assert stats.reviewed_cards == 2
        assert stats.total_answers == 10
        assert stats.correct_answers == 5
        assert stats.review_progress == pytest.approx(2 / 3)
        assert stats.overall_accuracy == pytest.approx(0.5)

    def test_empty_deck(self, store):
        stats = QuizRunner(store).statistics(store.create_deck("Empty"))
        assert stats.review_progress == 0.0
        assert stats.overall_accuracy == 0.0


class TestRecommendForReview:
    """Test review recommendations."""

    def test_new_and_weak_cards_only(self, store, deck):
        france, spain, italy, peru = store.list_cards_by_deck(deck)
        answer(store, france, correct=3)
        answer(store, spain, correct=1, incorrect=2)
        answer(store, italy, correct=3, incorrect=2)
        picked = QuizRunner(store, rng=random.Random(1)).recommend_for_review(deck, 10)
        assert sorted(c.card_id for c in picked) == sorted([spain.card_id, peru.card_id])

    def test_threshold_is_strict(self, store, deck):
        france = store.list_cards_by_deck(deck)[0]
        answer(store, france, correct=3, incorrect=2)
        picked = QuizRunner(store).recommend_for_review(deck, 10)
        assert france.card_id not in [c.card_id for c in picked]

    def test_truncates_to_max_count(self, store, deck):
        runner = QuizRunner(store, rng=random.Random(5))
        assert len(runner.recommend_for_review(deck, 2)) == 2
        assert runner.recommend_for_review(deck, 0) == []

    def test_never_includes_reviewed_accurate_cards(self, store, deck):
        cards = store.list_cards_by_deck(deck)
        for card in cards:
            answer(store, card, correct=2)
        assert QuizRunner(store).recommend_for_review(deck, 5) == []

    def test_custom_threshold(self, store, deck):
        france = store.list_cards_by_deck(deck)[0]
        answer(store, france, correct=3, incorrect=1)
        runner = QuizRunner(store, low_accuracy_threshold=0.8)
        assert france.card_id in [c.card_id for c in runner.recommend_for_review(deck, 10)]
