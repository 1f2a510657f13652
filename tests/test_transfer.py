"""Tests for JSON and CSV deck import/export."""

import json
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from flashcard_quiz.errors import DeckIOError, NotFoundError, ParseError, ValidationError
from flashcard_quiz.store import DeckStore
from flashcard_quiz.transfer import DeckTransfer


@pytest.fixture
def store():
    with DeckStore(":memory:") as s:
        yield s


@pytest.fixture
def transfer(store):
    return DeckTransfer(store)


@pytest.fixture
def tmpdir_path():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def geography(store):
    deck = store.create_deck("Geography")
    store.create_card("Capital of France?", "Paris", deck)
    store.create_card("Rivers of Egypt, largest?", 'The "Nile"', deck)
    card = store.create_card("Capital of Japan?", "Tokyo", deck)
    store.update_card_statistics(card.card_id, True)
    return deck


class TestJsonExport:
    """Test JSON export."""

    def test_writes_name_and_cards_only(self, transfer, geography, tmpdir_path):
        path = transfer.export_json(geography, tmpdir_path / "out" / "nested" / "geo.json")
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["name"] == "Geography"
        assert data["cards"][0] == {"question": "Capital of France?", "answer": "Paris"}
        assert len(data["cards"]) == 3
        assert all(set(c) == {"question", "answer"} for c in data["cards"])

    def test_pretty_printed(self, transfer, geography, tmpdir_path):
        path = transfer.export_json(geography, tmpdir_path / "geo.json")
        assert "\n  " in path.read_text(encoding="utf-8")

    def test_requires_deck_and_path(self, transfer, geography):
        with pytest.raises(ValidationError):
            transfer.export_json(None, "x.json")
        with pytest.raises(ValidationError):
            transfer.export_json(geography, "   ")

    def test_mkdir_failure_is_io_error(self, transfer, geography, tmpdir_path):
        blocker = tmpdir_path / "file"
        blocker.write_text("not a dir", encoding="utf-8")
        with pytest.raises(DeckIOError):
            transfer.export_json(geography, blocker / "geo.json")


class TestJsonImport:
    """Test JSON import."""

    def test_round_trip_renames_on_collision(self, transfer, store, geography, tmpdir_path):
        path = transfer.export_json(geography, tmpdir_path / "geo.json")
        deck = transfer.import_json(path)
        assert deck.name == "Geography (1)"
        original = [(c.question, c.answer) for c in store.list_cards_by_deck(geography)]
        copied = store.list_cards_by_deck(deck)
        assert [(c.question, c.answer) for c in copied] == original
        assert all(c.correct_count == 0 and c.last_reviewed is None for c in copied)

    def test_missing_file(self, transfer, tmpdir_path):
        with pytest.raises(NotFoundError):
            transfer.import_json(tmpdir_path / "missing.json")

    def test_malformed_json(self, transfer, store, tmpdir_path):
        path = tmpdir_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ParseError):
            transfer.import_json(path)
        assert store.list_decks() == []

    def test_parse_error_is_not_io_error(self, transfer, tmpdir_path):
        path = tmpdir_path / "bad.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ParseError) as exc:
            transfer.import_json(path)
        assert not isinstance(exc.value, DeckIOError)

    def test_blank_card_rejected_before_deck_created(self, transfer, store, tmpdir_path):
        path = tmpdir_path / "blank.json"
        path.write_text(
            json.dumps({"name": "Bad", "cards": [{"question": "Q", "answer": " "}]}),
            encoding="utf-8",
        )
        with pytest.raises(ValidationError):
            transfer.import_json(path)
        assert store.find_deck_by_name("Bad") is None

    def test_read_failure_is_io_error(self, transfer, tmpdir_path):
        path = tmpdir_path / "geo.json"
        path.write_text("{}", encoding="utf-8")
        with patch.object(Path, "read_text", side_effect=PermissionError("denied")):
            with pytest.raises(DeckIOError):
                transfer.import_json(path)


class TestCsvExport:
    """Test CSV export."""

    def test_header_and_escaped_rows(self, transfer, geography, tmpdir_path):
        path = transfer.export_csv(geography, tmpdir_path / "geo.csv")
        raw = path.read_bytes().decode("utf-8")
        lines = raw.split(os.linesep)
        assert lines[0] == "Question,Answer"
        assert lines[1] == "Capital of France?,Paris"
        assert lines[2] == '"Rivers of Egypt, largest?","The ""Nile"""'
        assert lines[3] == "Capital of Japan?,Tokyo"
        assert raw.endswith(os.linesep)

    def test_empty_deck_writes_header(self, transfer, store, tmpdir_path):
        deck = store.create_deck("Empty")
        path = transfer.export_csv(deck, tmpdir_path / "empty.csv")
        assert path.read_text(encoding="utf-8").strip() == "Question,Answer"


class TestCsvImport:
    """Test CSV import."""

    def write(self, path, text):
        path.write_text(text, encoding="utf-8")
        return path

    def test_skips_blank_and_short_rows(self, transfer, store, tmpdir_path):
        path = self.write(
            tmpdir_path / "in.csv",
            "Question,Answer\n2+2?,4\n\n\"Color, UK spelling\",colour\nlonely field\n",
        )
        deck = transfer.import_csv(path, "Mixed")
        cards = store.list_cards_by_deck(deck)
        assert [(c.question, c.answer) for c in cards] == [
            ("2+2?", "4"),
            ("Color, UK spelling", "colour"),
        ]

    def test_header_always_discarded(self, transfer, store, tmpdir_path):
        path = self.write(tmpdir_path / "in.csv", "Q1,A1\nQ2,A2\n")
        deck = transfer.import_csv(path, "NoHeader")
        assert [c.question for c in store.list_cards_by_deck(deck)] == ["Q2"]

    def test_blank_question_or_answer_skipped(self, transfer, store, tmpdir_path):
        path = self.write(tmpdir_path / "in.csv", 'Question,Answer\n ,A\nQ,""\nQ,A,extra\n')
        deck = transfer.import_csv(path, "Sparse")
        assert [(c.question, c.answer) for c in store.list_cards_by_deck(deck)] == [("Q", "A")]

    def test_empty_file_still_creates_deck(self, transfer, store, tmpdir_path):
        path = self.write(tmpdir_path / "in.csv", "Question,Answer\n")
        deck = transfer.import_csv(path, "Hollow")
        assert store.find_deck_by_name("hollow") is not None
        assert store.count_cards(deck) == 0

    def test_name_collision(self, transfer, store, tmpdir_path):
        store.create_deck("Vocab")
        store.create_deck("Vocab (1)")
        path = self.write(tmpdir_path / "in.csv", "Question,Answer\nhola,hello\n")
        assert transfer.import_csv(path, "vocab ").name == "vocab (2)"

    def test_crlf_lines(self, transfer, store, tmpdir_path):
        path = tmpdir_path / "in.csv"
        path.write_bytes(b"Question,Answer\r\nQ1,A1\r\nQ2,A2\r\n")
        deck = transfer.import_csv(path, "Windows")
        assert [(c.question, c.answer) for c in store.list_cards_by_deck(deck)] == [
            ("Q1", "A1"),
            ("Q2", "A2"),
        ]

    def test_validation(self, transfer, store, tmpdir_path):
        path = self.write(tmpdir_path / "in.csv", "Question,Answer\n")
        with pytest.raises(ValidationError):
            transfer.import_csv(path, "  ")
        with pytest.raises(ValidationError):
            transfer.import_csv("", "Name")
        with pytest.raises(NotFoundError):
            transfer.import_csv(tmpdir_path / "missing.csv", "Name")
        assert store.list_decks() == []

    def test_round_trip(self, transfer, store, geography, tmpdir_path):
        path = transfer.export_csv(geography, tmpdir_path / "geo.csv")
        deck = transfer.import_csv(path, "Geography")
        assert deck.name == "Geography (1)"
        assert [(c.question, c.answer) for c in store.list_cards_by_deck(deck)] == [
            (c.question, c.answer) for c in store.list_cards_by_deck(geography)
        ]

    def test_line_breaks_inside_fields_round_trip(self, transfer, store, tmpdir_path):
        deck = store.create_deck("Poems")
        store.create_card("First line?", "Roses are red\nViolets are blue", deck)
        store.create_card("CR answer?", "a\rb", deck)
        store.create_card("Plain?", "yes", deck)
        path = transfer.export_csv(deck, tmpdir_path / "poems.csv")

        imported = transfer.import_csv(path, "Poems")
        assert [(c.question, c.answer) for c in store.list_cards_by_deck(imported)] == [
            ("First line?", "Roses are red\nViolets are blue"),
            ("CR answer?", "a\rb"),
            ("Plain?", "yes"),
        ]

    def test_quoted_field_spanning_crlf_lines(self, transfer, store, tmpdir_path):
        path = tmpdir_path / "in.csv"
        path.write_bytes(b'Question,Answer\r\nHaiku?,"old pond\r\nfrog jumps"\r\nQ2,A2\r\n')
        deck = transfer.import_csv(path, "Windows")
        assert [(c.question, c.answer) for c in store.list_cards_by_deck(deck)] == [
            ("Haiku?", "old pond\r\nfrog jumps"),
            ("Q2", "A2"),
        ]
