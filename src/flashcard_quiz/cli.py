"""CLI entrypoint for Flashcard Quiz.

Usage:
  flashcard-quiz menu
  flashcard-quiz import-csv capitals.csv --name Capitals
  flashcard-quiz quiz Capitals
"""

from __future__ import annotations

import argparse
import logging
from typing import List

from .config import load_config, make_rng
from .console import Console, truncate
from .errors import FlashcardError
from .quiz import QuizRunner
from .store import DeckStore
from .transfer import DeckTransfer

logger = logging.getLogger(__name__)


class App:
    """Store, quiz runner and transfer engine wired from one config."""

    def __init__(self, cfg: dict) -> None:
        self.cfg = cfg
        self.store = DeckStore(cfg["database_path"])
        self.quiz = QuizRunner(
            self.store,
            rng=make_rng(cfg),
            low_accuracy_threshold=float(cfg.get("review_threshold", 0.6)),
        )
        self.transfer = DeckTransfer(self.store)

    def console(self, **kwargs) -> Console:
        return Console(
            self.store,
            self.quiz,
            self.transfer,
            export_dir=self.cfg.get("export_dir", "exports"),
            **kwargs,
        )

    def close(self) -> None:
        self.store.close()


def configure_logging(cfg: dict, verbose: bool = False) -> None:
    level_name = str(cfg.get("log_level", "WARNING")).upper()
    level = logging.DEBUG if verbose else getattr(logging, level_name, logging.WARNING)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def cmd_menu(app: App, args: argparse.Namespace) -> int:
    return app.console().run()


def cmd_decks(app: App, args: argparse.Namespace) -> int:
    app.console().view_decks()
    return 0


def cmd_create_deck(app: App, args: argparse.Namespace) -> int:
    deck = app.store.create_deck(args.name)
    print(f"Created deck '{deck.name}'")
    return 0


def cmd_rename_deck(app: App, args: argparse.Namespace) -> int:
    deck = app.store.require_deck(args.deck)
    renamed = app.store.rename_deck(deck.deck_id, args.name)
    print(f"Renamed deck '{deck.name}' to '{renamed.name}'")
    return 0


def cmd_add_card(app: App, args: argparse.Namespace) -> int:
    deck = app.store.require_deck(args.deck)
    app.store.create_card(args.question, args.answer, deck)
    print(f"Added card to '{deck.name}' ({app.store.count_cards(deck)} cards)")
    return 0


def cmd_quiz(app: App, args: argparse.Namespace) -> int:
    deck = app.store.require_deck(args.deck)
    app.console().run_quiz(deck)
    return 0


def cmd_stats(app: App, args: argparse.Namespace) -> int:
    deck = app.store.require_deck(args.deck)
    print(f"Deck: {deck.name}")
    print(f"  Cards: {app.store.count_cards(deck)}")
    app.console().print_statistics(deck)
    return 0


def cmd_review(app: App, args: argparse.Namespace) -> int:
    deck = app.store.require_deck(args.deck)
    count = args.count if args.count is not None else int(app.cfg.get("review_count", 10))
    cards = app.quiz.recommend_for_review(deck, count)
    if not cards:
        print(f"Nothing to review in '{deck.name}'")
        return 0
    print(f"Recommended for review ({len(cards)}):")
    for card in cards:
        status = "new" if card.last_reviewed is None else f"{card.accuracy_rate * 100:.0f}%"
        print(f"  [{status:>4}] {truncate(card.question, 60)}")
    return 0


def cmd_export_json(app: App, args: argparse.Namespace) -> int:
    deck = app.store.require_deck(args.deck)
    path = app.transfer.export_json(deck, args.path)
    print(f"Wrote {path}")
    return 0


def cmd_import_json(app: App, args: argparse.Namespace) -> int:
    deck = app.transfer.import_json(args.path)
    print(f"Imported deck '{deck.name}' ({app.store.count_cards(deck)} cards)")
    return 0


def cmd_export_csv(app: App, args: argparse.Namespace) -> int:
    deck = app.store.require_deck(args.deck)
    path = app.transfer.export_csv(deck, args.path)
    print(f"Wrote {path}")
    return 0


def cmd_import_csv(app: App, args: argparse.Namespace) -> int:
    deck = app.transfer.import_csv(args.path, args.name)
    print(f"Imported deck '{deck.name}' ({app.store.count_cards(deck)} cards)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="flashcard-quiz", description="Flashcard quiz and deck manager")
    p.add_argument(
        "--config",
        default="flashcard_quiz.json",
        help="Path to config JSON (optional; defaults will be used if missing)",
    )
    p.add_argument("--db", help="Path to the SQLite database (overrides config)")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    menu = sub.add_parser("menu", help="Interactive menu")
    menu.set_defaults(func=cmd_menu)

    decks = sub.add_parser("decks", help="List decks with card counts")
    decks.set_defaults(func=cmd_decks)

    create = sub.add_parser("create-deck", help="Create an empty deck")
    create.add_argument("name")
    create.set_defaults(func=cmd_create_deck)

    rename = sub.add_parser("rename-deck", help="Rename a deck")
    rename.add_argument("deck")
    rename.add_argument("name", help="New deck name")
    rename.set_defaults(func=cmd_rename_deck)

    add = sub.add_parser("add-card", help="Add a card to a deck")
    add.add_argument("deck", help="Deck name (case-insensitive)")
    add.add_argument("--question", required=True)
    add.add_argument("--answer", required=True, help="Alternatives may be separated by ';' or ','")
    add.set_defaults(func=cmd_add_card)

    quiz = sub.add_parser("quiz", help="Quiz yourself on a deck")
    quiz.add_argument("deck")
    quiz.set_defaults(func=cmd_quiz)

    stats = sub.add_parser("stats", help="Show review progress and accuracy for a deck")
    stats.add_argument("deck")
    stats.set_defaults(func=cmd_stats)

    review = sub.add_parser("review", help="List new and low-accuracy cards")
    review.add_argument("deck")
    review.add_argument("--count", type=int, help="Maximum number of cards (default from config)")
    review.set_defaults(func=cmd_review)

    ej = sub.add_parser("export-json", help="Export a deck to JSON")
    ej.add_argument("deck")
    ej.add_argument("path")
    ej.set_defaults(func=cmd_export_json)

    ij = sub.add_parser("import-json", help="Import a deck from JSON")
    ij.add_argument("path")
    ij.set_defaults(func=cmd_import_json)

    ec = sub.add_parser("export-csv", help="Export a deck to CSV (Question,Answer)")
    ec.add_argument("deck")
    ec.add_argument("path")
    ec.set_defaults(func=cmd_export_csv)

    ic = sub.add_parser("import-csv", help="Import a deck from CSV (first line is a header)")
    ic.add_argument("path")
    ic.add_argument("--name", required=True, help="Name for the new deck")
    ic.set_defaults(func=cmd_import_csv)

    return p


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        cfg = load_config(args.config)
    except FlashcardError as e:
        print(f"Error: {e}")
        return 1
    if args.db:
        cfg["database_path"] = args.db
    configure_logging(cfg, args.verbose)

    app = None
    try:
        app = App(cfg)
        return args.func(app, args)
    except FlashcardError as e:
        logger.debug("Command %s failed", args.cmd, exc_info=True)
        print(f"Error: {e}")
        return 1
    finally:
        if app is not None:
            app.close()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
