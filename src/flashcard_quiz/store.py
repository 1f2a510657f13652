"""SQLite-backed deck and card store.

Decks own their cards: deleting a deck deletes its cards. Deck names are
unique case-insensitively via a lowered ``name_key`` column. Every
mutating call commits before returning.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from .errors import DeckIOError, NotFoundError, ValidationError
from .models import Card, Deck, validate_card_fields, validate_deck_name

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS decks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    name_key TEXT NOT NULL UNIQUE,
    created_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS cards (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    deck_id INTEGER NOT NULL REFERENCES decks(id) ON DELETE CASCADE,
    question TEXT NOT NULL,
    answer TEXT NOT NULL,
    created_at TEXT NOT NULL,
    last_reviewed TEXT,
    correct_count INTEGER NOT NULL DEFAULT 0 CHECK (correct_count >= 0),
    incorrect_count INTEGER NOT NULL DEFAULT 0 CHECK (incorrect_count >= 0)
);
CREATE INDEX IF NOT EXISTS idx_cards_deck ON cards(deck_id);
"""

_CARD_COLUMNS = (
    "id, deck_id, question, answer, created_at, last_reviewed, correct_count, incorrect_count"
)


def _name_key(name: str) -> str:
    return name.strip().lower()


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _row_to_deck(row: sqlite3.Row) -> Deck:
    return Deck(deck_id=row["id"], name=row["name"], created_at=_parse_ts(row["created_at"]))


def _row_to_card(row: sqlite3.Row) -> Card:
    return Card(
        card_id=row["id"],
        deck_id=row["deck_id"],
        question=row["question"],
        answer=row["answer"],
        created_at=_parse_ts(row["created_at"]),
        last_reviewed=_parse_ts(row["last_reviewed"]),
        correct_count=row["correct_count"],
        incorrect_count=row["incorrect_count"],
    )


class DeckStore:
    def __init__(
        self,
        db_path: str | Path = ":memory:",
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._db_path = str(db_path)
        self._clock = clock
        self._conn = None
        try:
            if self._db_path != ":memory:":
                Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self._db_path)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._conn.executescript(SCHEMA)
        except (OSError, sqlite3.Error) as e:
            self.close()
            raise DeckIOError(f"Cannot open database {self._db_path}: {e}") from e
        logger.debug("Opened deck store at %s", self._db_path)

    def __enter__(self) -> "DeckStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _execute(self, query: str, params: tuple = (), commit: bool = False) -> sqlite3.Cursor:
        cursor = self._conn.execute(query, params)
        if commit:
            self._conn.commit()
        return cursor

    # Decks

    def create_deck(self, name: str) -> Deck:
        violations = validate_deck_name(name)
        if violations:
            raise ValidationError(violations)
        name = name.strip()
        if self.find_deck_by_name(name) is not None:
            raise ValidationError(f"Deck with name '{name}' already exists")
        created_at = self._clock()
        cursor = self._execute(
            "INSERT INTO decks (name, name_key, created_at) VALUES (?, ?, ?)",
            (name, _name_key(name), created_at.isoformat(timespec="microseconds")),
            commit=True,
        )
        logger.info("Created deck %r (id=%s)", name, cursor.lastrowid)
        return Deck(deck_id=cursor.lastrowid, name=name, created_at=created_at)

    def find_deck_by_name(self, name: Optional[str]) -> Optional[Deck]:
        """Case-insensitive lookup; blank names never match."""
        if name is None or not name.strip():
            return None
        row = self._execute(
            "SELECT * FROM decks WHERE name_key = ?", (_name_key(name),)
        ).fetchone()
        return _row_to_deck(row) if row else None

    def get_deck(self, deck_id: int) -> Optional[Deck]:
        row = self._execute("SELECT * FROM decks WHERE id = ?", (deck_id,)).fetchone()
        return _row_to_deck(row) if row else None

    def require_deck(self, name: str) -> Deck:
        deck = self.find_deck_by_name(name)
        if deck is None:
            raise NotFoundError(f"Deck not found: {name}")
        return deck

    def list_decks(self) -> List[Deck]:
        """All decks, newest first."""
        rows = self._execute("SELECT * FROM decks ORDER BY created_at DESC, id DESC").fetchall()
        return [_row_to_deck(r) for r in rows]

    def list_decks_with_cards(self) -> List[Deck]:
        rows = self._execute(
            "SELECT * FROM decks d WHERE EXISTS (SELECT 1 FROM cards c WHERE c.deck_id = d.id) "
            "ORDER BY d.created_at DESC, d.id DESC"
        ).fetchall()
        return [_row_to_deck(r) for r in rows]

    def rename_deck(self, deck_id: int, name: str) -> Deck:
        violations = validate_deck_name(name)
        if violations:
            raise ValidationError(violations)
        deck = self.get_deck(deck_id)
        if deck is None:
            raise NotFoundError(f"Deck not found with ID: {deck_id}")
        name = name.strip()
        existing = self.find_deck_by_name(name)
        if existing is not None and existing.deck_id != deck_id:
            raise ValidationError(f"Deck with name '{name}' already exists")
        self._execute(
            "UPDATE decks SET name = ?, name_key = ? WHERE id = ?",
            (name, _name_key(name), deck_id),
            commit=True,
        )
        deck.name = name
        return deck

    def delete_deck(self, deck_id: int) -> bool:
        cursor = self._execute("DELETE FROM decks WHERE id = ?", (deck_id,), commit=True)
        if cursor.rowcount:
            logger.info("Deleted deck id=%s and its cards", deck_id)
        return cursor.rowcount > 0

    # Cards

    def create_card(self, question: str, answer: str, deck: Deck) -> Card:
        if deck is None:
            raise ValidationError("Deck cannot be empty")
        violations = validate_card_fields(question, answer)
        if violations:
            raise ValidationError(violations)
        question, answer = question.strip(), answer.strip()
        created_at = self._clock()
        cursor = self._execute(
            "INSERT INTO cards (deck_id, question, answer, created_at) VALUES (?, ?, ?, ?)",
            (deck.deck_id, question, answer, created_at.isoformat(timespec="microseconds")),
            commit=True,
        )
        return Card(
            card_id=cursor.lastrowid,
            deck_id=deck.deck_id,
            question=question,
            answer=answer,
            created_at=created_at,
        )

    def get_card(self, card_id: int) -> Optional[Card]:
        row = self._execute(
            f"SELECT {_CARD_COLUMNS} FROM cards WHERE id = ?", (card_id,)
        ).fetchone()
        return _row_to_card(row) if row else None

    def list_cards_by_deck(self, deck: Deck) -> List[Card]:
        """Cards of a deck in creation order."""
        rows = self._execute(
            f"SELECT {_CARD_COLUMNS} FROM cards WHERE deck_id = ? ORDER BY id",
            (deck.deck_id,),
        ).fetchall()
        return [_row_to_card(r) for r in rows]

    def count_cards(self, deck: Deck) -> int:
        row = self._execute(
            "SELECT COUNT(*) AS n FROM cards WHERE deck_id = ?", (deck.deck_id,)
        ).fetchone()
        return row["n"]

    def update_card(self, card_id: int, question: str, answer: str) -> Card:
        violations = validate_card_fields(question, answer)
        if violations:
            raise ValidationError(violations)
        card = self.get_card(card_id)
        if card is None:
            raise NotFoundError(f"Card not found with ID: {card_id}")
        card.question, card.answer = question.strip(), answer.strip()
        self._execute(
            "UPDATE cards SET question = ?, answer = ? WHERE id = ?",
            (card.question, card.answer, card_id),
            commit=True,
        )
        return card

    def delete_card(self, card_id: int) -> bool:
        cursor = self._execute("DELETE FROM cards WHERE id = ?", (card_id,), commit=True)
        return cursor.rowcount > 0

    def search_cards(self, deck: Deck, keyword: Optional[str]) -> List[Card]:
        """Cards whose question or answer contains ``keyword`` (case-insensitive)."""
        cards = self.list_cards_by_deck(deck)
        if keyword is None or not keyword.strip():
            return cards
        needle = keyword.strip().lower()
        return [c for c in cards if needle in c.question.lower() or needle in c.answer.lower()]

    def update_card_statistics(self, card_id: int, correct: bool) -> None:
        column = "correct_count" if correct else "incorrect_count"
        cursor = self._execute(
            f"UPDATE cards SET {column} = {column} + 1, last_reviewed = ? WHERE id = ?",
            (self._clock().isoformat(timespec="microseconds"), card_id),
            commit=True,
        )
        if cursor.rowcount == 0:
            raise NotFoundError(f"Card not found with ID: {card_id}")

    # Review queries

    def list_unreviewed_cards(self, deck: Deck) -> List[Card]:
        rows = self._execute(
            f"SELECT {_CARD_COLUMNS} FROM cards WHERE deck_id = ? AND last_reviewed IS NULL "
            "ORDER BY id",
            (deck.deck_id,),
        ).fetchall()
        return [_row_to_card(r) for r in rows]

    def list_low_accuracy_cards(self, deck: Deck, threshold: float) -> List[Card]:
        """Cards with at least one attempt and accuracy below ``threshold``."""
        rows = self._execute(
            f"SELECT {_CARD_COLUMNS} FROM cards WHERE deck_id = ? "
            "AND (correct_count + incorrect_count) > 0 "
            "AND (CAST(correct_count AS REAL) / (correct_count + incorrect_count)) < ? "
            "ORDER BY id",
            (deck.deck_id, threshold),
        ).fetchall()
        return [_row_to_card(r) for r in rows]
