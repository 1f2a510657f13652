"""Deck import/export in JSON and CSV.

JSON files hold ``{"name": ..., "cards": [{"question": ..., "answer": ...}]}``.
CSV files start with a ``Question,Answer`` header followed by one encoded
record per card. A quoted field may span several physical lines. Only
questions and answers travel; review statistics and timestamps stay in
the store.

Imported decks never overwrite an existing deck: the name is made unique
with a `` (n)`` suffix first.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from .csv_codec import decode_field, decode_line, encode_record, has_open_quote
from .errors import DeckIOError, NotFoundError, ParseError, ValidationError
from .models import Deck, DeckExportRecord, validate_card_fields
from .naming import resolve_deck_name
from .store import DeckStore

logger = logging.getLogger(__name__)

CSV_HEADER = ("Question", "Answer")


def _require_path(file_path: Optional[str | Path]) -> Path:
    if file_path is None or not str(file_path).strip():
        raise ValidationError("File path cannot be empty")
    return Path(file_path)


def _require_existing(file_path: Optional[str | Path]) -> Path:
    path = _require_path(file_path)
    if not path.exists():
        raise NotFoundError(f"File not found: {path}")
    return path


def _prepare_parent(path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DeckIOError(f"Cannot create directory {path.parent}: {e}") from e


def _csv_records(lines: Iterable[str]) -> Iterator[str]:
    """Join physical lines into records, keeping line breaks inside quotes."""
    pending = ""
    for line in lines:
        pending += line
        if has_open_quote(pending):
            continue
        yield pending.rstrip("\r\n")
        pending = ""
    if pending:
        # Unterminated quote at end of file.
        yield pending.rstrip("\r\n")


class DeckTransfer:
    """Serialize decks to files and rebuild them from files through a store."""

    def __init__(self, store: DeckStore) -> None:
        self.store = store

    def _unique_name(self, base_name: str) -> str:
        return resolve_deck_name(base_name, self.store.find_deck_by_name)

    def export_json(self, deck: Optional[Deck], file_path: str | Path) -> Path:
        """Write ``deck`` as pretty-printed UTF-8 JSON and return the path."""
        if deck is None:
            raise ValidationError("Deck cannot be empty")
        path = _require_path(file_path)

        record = DeckExportRecord.from_cards(deck.name, self.store.list_cards_by_deck(deck))
        _prepare_parent(path)
        try:
            with path.open("w", encoding="utf-8") as f:
                json.dump(record.to_dict(), f, indent=2, ensure_ascii=False)
                f.write("\n")
        except OSError as e:
            raise DeckIOError(f"Cannot write {path}: {e}") from e

        logger.info("Exported deck %r (%d cards) to %s", deck.name, len(record.cards), path)
        return path

    def import_json(self, file_path: str | Path) -> Deck:
        """Create a new deck from a JSON export, keeping card order."""
        path = _require_existing(file_path)
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"{path} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise DeckIOError(f"Cannot read {path}: {e}") from e
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON in {path}: {e}") from e

        record = DeckExportRecord.from_dict(data)
        # All cards are validated before the deck is created.
        violations: List[str] = []
        for idx, card in enumerate(record.cards, start=1):
            violations.extend(
                f"Card #{idx}: {v}" for v in validate_card_fields(card.question, card.answer)
            )
        if violations:
            raise ValidationError(violations)

        deck = self.store.create_deck(self._unique_name(record.name))
        for card in record.cards:
            self.store.create_card(card.question, card.answer, deck)

        logger.info("Imported %d cards from %s into deck %r", len(record.cards), path, deck.name)
        return deck

    def export_csv(self, deck: Optional[Deck], file_path: str | Path) -> Path:
        """Write ``deck`` as a two-column CSV and return the path."""
        if deck is None:
            raise ValidationError("Deck cannot be empty")
        path = _require_path(file_path)

        cards = self.store.list_cards_by_deck(deck)
        _prepare_parent(path)
        try:
            with path.open("w", encoding="utf-8", newline="") as f:
                f.write(encode_record(CSV_HEADER) + os.linesep)
                for card in cards:
                    f.write(encode_record((card.question, card.answer)) + os.linesep)
        except OSError as e:
            raise DeckIOError(f"Cannot write {path}: {e}") from e

        logger.info("Exported deck %r (%d cards) to %s", deck.name, len(cards), path)
        return path

    def import_csv(self, file_path: str | Path, deck_name: Optional[str]) -> Deck:
        """Create a deck named (uniquely) after ``deck_name`` from a CSV file.

        The first record is a header and is skipped without inspection. Blank
        records, rows with fewer than two fields, and rows whose question or
        answer is blank are skipped. The deck is created even if no row
        yields a card.
        """
        path = _require_path(file_path)
        if deck_name is None or not deck_name.strip():
            raise ValidationError("Deck name cannot be empty")
        path = _require_existing(path)

        deck = self.store.create_deck(self._unique_name(deck_name))
        imported = 0
        try:
            with path.open("r", encoding="utf-8", newline="") as f:
                for record_no, record in enumerate(_csv_records(f), start=1):
                    if record_no == 1:
                        continue
                    if not record.strip():
                        continue
                    fields = decode_line(record)
                    if len(fields) < 2:
                        logger.debug("Skipping record %d of %s: fewer than 2 fields", record_no, path)
                        continue
                    question = decode_field(fields[0])
                    answer = decode_field(fields[1])
                    if not question or not answer:
                        logger.debug("Skipping record %d of %s: blank question or answer", record_no, path)
                        continue
                    self.store.create_card(question, answer, deck)
                    imported += 1
        except UnicodeDecodeError as e:
            raise ParseError(f"{path} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise DeckIOError(f"Cannot read {path}: {e}") from e

        if imported == 0:
            logger.warning("No cards imported from %s; deck %r is empty", path, deck.name)
        else:
            logger.info("Imported %d cards from %s into deck %r", imported, path, deck.name)
        return deck
