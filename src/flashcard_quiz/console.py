"""Interactive menu for quizzing and managing decks.

Input and output are injectable so the menus can be driven from tests.
Errors raised by an action are shown and the menu keeps running.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional

from .errors import FlashcardError
from .models import Card, Deck
from .quiz import QuizRunner
from .store import DeckStore
from .transfer import DeckTransfer


def truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


class Console:
    def __init__(
        self,
        store: DeckStore,
        quiz: QuizRunner,
        transfer: DeckTransfer,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
        export_dir: str | Path = "exports",
    ) -> None:
        self.store = store
        self.quiz = quiz
        self.transfer = transfer
        self._input = input_fn
        self._print = output_fn
        self.export_dir = Path(export_dir)

    def ask(self, prompt: str) -> str:
        try:
            return self._input(prompt)
        except EOFError:
            return ""

    def _menu(self, title: str, options: List[str]) -> str:
        self._print(f"\n=== {title} ===")
        for idx, label in enumerate(options, start=1):
            self._print(f"{idx}. {label}")
        return self.ask("Enter your choice: ").strip()

    def _dispatch(self, action: Callable[[], None]) -> None:
        try:
            action()
        except FlashcardError as e:
            self._print(f"Error: {e}")

    def run(self) -> int:
        self._print("Welcome to Flashcard Quiz!")
        while True:
            choice = self._menu(
                "MAIN MENU", ["Start Quiz", "Manage Decks", "File Operations", "Exit"]
            )
            if choice == "1":
                self._dispatch(self.start_quiz)
            elif choice == "2":
                self.deck_menu()
            elif choice == "3":
                self.file_menu()
            elif choice in ("4", ""):
                self._print("Thank you for using Flashcard Quiz! Goodbye!")
                return 0
            else:
                self._print("Invalid choice. Please try again.")

    # Selection helpers

    def select_deck(self, decks: List[Deck], prompt: str) -> Optional[Deck]:
        self._print(f"\n{prompt}")
        self._print(f"{'#':<5} {'Name':<30} {'Cards':<10}")
        self._print("-" * 50)
        for idx, deck in enumerate(decks, start=1):
            self._print(f"{idx:<5} {truncate(deck.name, 30):<30} {self.store.count_cards(deck):<10}")
        return self._pick(decks, "Enter deck number (or 0 to cancel): ")

    def select_card(self, cards: List[Card], prompt: str) -> Optional[Card]:
        self._print(f"\n{prompt}")
        for idx, card in enumerate(cards, start=1):
            self._print(f"[{idx}] Q: {truncate(card.question, 40)} | A: {truncate(card.answer, 40)}")
        return self._pick(cards, "Enter card number (or 0 to cancel): ")

    def _pick(self, items: list, prompt: str):
        raw = self.ask(prompt).strip()
        try:
            choice = int(raw)
        except ValueError:
            self._print("Invalid input. Please enter a number.")
            return None
        if choice == 0:
            return None
        if 0 < choice <= len(items):
            return items[choice - 1]
        self._print("Invalid selection.")
        return None

    # Quiz

    def start_quiz(self) -> None:
        decks = self.store.list_decks_with_cards()
        if not decks:
            self._print("No decks with cards available. Please create a deck and add cards first.")
            return
        deck = self.select_deck(decks, "Select deck for quiz:")
        if deck is not None:
            self.run_quiz(deck)

    def run_quiz(self, deck: Deck) -> int:
        """Quiz every card of ``deck`` once; return the number answered correctly."""
        cards = self.quiz.start(deck)
        total = len(cards)
        correct = 0
        self._print(f"\nStarting quiz with {total} cards from deck: {deck.name}")
        self._print("Type 'quit' at any time to exit the quiz.\n")

        for idx, card in enumerate(cards, start=1):
            self._print(f"Question {idx}/{total}: {card.question}")
            answer = self.ask("Your answer: ")
            if answer.strip().lower() == "quit":
                self._print("Quiz ended early.")
                break
            result = self.quiz.submit(card, answer)
            if result.correct:
                correct += 1
                self._print("Correct!")
            else:
                self._print(f"Incorrect. The correct answer is: {result.correct_answer}")
            self._print("")

        pct = correct / total * 100 if total else 0.0
        self._print("=== QUIZ RESULTS ===")
        self._print(f"Score: {correct}/{total} ({pct:.1f}%)")
        self.print_statistics(deck)
        return correct

    def print_statistics(self, deck: Deck) -> None:
        stats = self.quiz.statistics(deck)
        self._print(
            f"Deck Progress: {stats.reviewed_cards}/{stats.total_cards} cards reviewed "
            f"({stats.review_progress * 100:.1f}%)"
        )
        self._print(
            f"Overall Accuracy: {stats.overall_accuracy * 100:.1f}% "
            f"({stats.correct_answers}/{stats.total_answers})"
        )

    # Decks

    def deck_menu(self) -> None:
        while True:
            choice = self._menu(
                "DECK MANAGEMENT",
                [
                    "Create New Deck",
                    "View All Decks",
                    "Select Deck for Card Management",
                    "Delete Deck",
                    "Back to Main Menu",
                ],
            )
            if choice == "1":
                self._dispatch(self.create_deck)
            elif choice == "2":
                self.view_decks()
            elif choice == "3":
                self._dispatch(self.choose_deck_for_cards)
            elif choice == "4":
                self._dispatch(self.delete_deck)
            elif choice in ("5", ""):
                return
            else:
                self._print("Invalid choice. Please try again.")

    def create_deck(self) -> None:
        name = self.ask("Enter deck name: ")
        deck = self.store.create_deck(name)
        self._print(f"Deck '{deck.name}' created successfully!")

    def view_decks(self) -> None:
        decks = self.store.list_decks()
        self._print("\n=== ALL DECKS ===")
        if not decks:
            self._print("No decks found. Create a deck first.")
            return
        self._print(f"{'ID':<5} {'Name':<30} {'Cards':<10} {'Created':<15}")
        self._print("-" * 65)
        for deck in decks:
            self._print(
                f"{deck.deck_id:<5} {truncate(deck.name, 30):<30} "
                f"{self.store.count_cards(deck):<10} {deck.created_at.date().isoformat():<15}"
            )

    def choose_deck_for_cards(self) -> None:
        decks = self.store.list_decks()
        if not decks:
            self._print("No decks available. Create a deck first.")
            return
        deck = self.select_deck(decks, "Select deck for card management:")
        if deck is not None:
            self.card_menu(deck)

    def delete_deck(self) -> None:
        decks = self.store.list_decks()
        if not decks:
            self._print("No decks available to delete.")
            return
        deck = self.select_deck(decks, "Select deck to delete:")
        if deck is None:
            return
        self._print(f"Deck: {deck.name}")
        self._print(f"Cards: {self.store.count_cards(deck)}")
        self._print("WARNING: This will delete the deck and all its cards!")
        confirm = self.ask("Are you sure you want to delete this deck? (yes/no): ")
        if confirm.strip().lower() != "yes":
            self._print("Deck deletion cancelled.")
            return
        if self.store.delete_deck(deck.deck_id):
            self._print("Deck deleted successfully!")
        else:
            self._print("Failed to delete deck.")

    # Cards

    def card_menu(self, deck: Deck) -> None:
        while True:
            choice = self._menu(
                f"CARDS IN '{deck.name}'",
                [
                    "Add New Card",
                    "View All Cards",
                    "Edit Card",
                    "Delete Card",
                    "Search Cards",
                    "Back to Deck Menu",
                ],
            )
            actions = {
                "1": self.add_card,
                "2": self.view_cards,
                "3": self.edit_card,
                "4": self.delete_card,
                "5": self.search_cards,
            }
            if choice in actions:
                self._dispatch(lambda: actions[choice](deck))
            elif choice in ("6", ""):
                return
            else:
                self._print("Invalid choice. Please try again.")

    def add_card(self, deck: Deck) -> None:
        question = self.ask("Enter question: ")
        answer = self.ask("Enter answer: ")
        self.store.create_card(question, answer, deck)
        self._print("Card added successfully!")

    def _print_cards(self, cards: List[Card]) -> None:
        for idx, card in enumerate(cards, start=1):
            self._print(f"\n[{idx}] ID: {card.card_id}")
            self._print(f"Question: {card.question}")
            self._print(f"Answer: {card.answer}")

    def view_cards(self, deck: Deck) -> None:
        cards = self.store.list_cards_by_deck(deck)
        self._print(f"\n=== CARDS IN '{deck.name}' ===")
        if not cards:
            self._print("No cards in this deck.")
            return
        self._print_cards(cards)
        for card in cards:
            if card.total_attempts:
                self._print(
                    f"Card {card.card_id}: {card.correct_count}/{card.total_attempts} correct "
                    f"({card.accuracy_rate * 100:.1f}%)"
                )

    def edit_card(self, deck: Deck) -> None:
        cards = self.store.list_cards_by_deck(deck)
        if not cards:
            self._print("No cards in this deck.")
            return
        card = self.select_card(cards, "Select card to edit:")
        if card is None:
            return
        question = self.ask(f"New question (blank keeps '{truncate(card.question, 40)}'): ")
        answer = self.ask(f"New answer (blank keeps '{truncate(card.answer, 40)}'): ")
        self.store.update_card(
            card.card_id, question if question.strip() else card.question,
            answer if answer.strip() else card.answer,
        )
        self._print("Card updated successfully!")

    def delete_card(self, deck: Deck) -> None:
        cards = self.store.list_cards_by_deck(deck)
        if not cards:
            self._print("No cards in this deck.")
            return
        card = self.select_card(cards, "Select card to delete:")
        if card is None:
            return
        confirm = self.ask("Are you sure you want to delete this card? (yes/no): ")
        if confirm.strip().lower() == "yes" and self.store.delete_card(card.card_id):
            self._print("Card deleted successfully!")
        else:
            self._print("Card deletion cancelled.")

    def search_cards(self, deck: Deck) -> None:
        keyword = self.ask("Enter search keyword: ")
        found = self.store.search_cards(deck, keyword)
        self._print(f"\nSearch results for '{keyword}':")
        if not found:
            self._print("No cards found matching the keyword.")
            return
        self._print_cards(found)

    # Files

    def file_menu(self) -> None:
        while True:
            choice = self._menu(
                "FILE OPERATIONS",
                [
                    "Export Deck to JSON",
                    "Import Deck from JSON",
                    "Export Deck to CSV",
                    "Import Deck from CSV",
                    "Back to Main Menu",
                ],
            )
            if choice == "1":
                self._dispatch(lambda: self.export_deck("json"))
            elif choice == "2":
                self._dispatch(self.import_json)
            elif choice == "3":
                self._dispatch(lambda: self.export_deck("csv"))
            elif choice == "4":
                self._dispatch(self.import_csv)
            elif choice in ("5", ""):
                return
            else:
                self._print("Invalid choice. Please try again.")

    def export_deck(self, fmt: str) -> None:
        decks = self.store.list_decks()
        if not decks:
            self._print("No decks available to export.")
            return
        deck = self.select_deck(decks, f"Select deck to export to {fmt.upper()}:")
        if deck is None:
            return
        default = self.export_dir / f"{deck.name}.{fmt}"
        raw = self.ask(f"Enter file path (default {default}): ").strip()
        target = raw or default
        if fmt == "json":
            path = self.transfer.export_json(deck, target)
        else:
            path = self.transfer.export_csv(deck, target)
        self._print(f"Deck exported successfully to: {path}")

    def import_json(self) -> None:
        path = self.ask("Enter JSON file path: ")
        deck = self.transfer.import_json(path.strip())
        self._print(f"Deck '{deck.name}' imported successfully!")
        self._print(f"Cards imported: {self.store.count_cards(deck)}")

    def import_csv(self) -> None:
        path = self.ask("Enter CSV file path: ")
        name = self.ask("Enter name for the new deck: ")
        deck = self.transfer.import_csv(path.strip(), name)
        self._print(f"Deck '{deck.name}' imported successfully!")
        self._print(f"Cards imported: {self.store.count_cards(deck)}")
