"""
Deck Service - Business logic for decklist text.

Decklists are plain text, one ``<quantity> <name>`` per line. Blank lines,
the ``Sideboard`` marker and single-word lines are skipped; a line whose
first word is not a whole number aborts the whole parse.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from loguru import logger

from utils.deck import CardRef
from utils.errors import DecklistParseError
from utils.game_constants import SIDEBOARD_MARKER


class DeckService:
    """Service for decklist parsing and formatting."""

    def parse_decklist(self, deck_text: str) -> list[CardRef]:
        """
        Convert deck text to card records, in file order.

        Args:
            deck_text: Deck list as text (format: "quantity card_name")

        Returns:
            List of card records; zero-quantity lines are dropped

        Raises:
            DecklistParseError: a quantity is not a non-negative integer
        """
        decklist: list[CardRef] = []
        for line_number, raw_line in enumerate(deck_text.split("\n"), start=1):
            line = raw_line.strip()
            if not line or line.casefold() == SIDEBOARD_MARKER:
                continue
            words = line.split()
            if len(words) < 2:
                continue
            quantity_text, name_words = words[0], words[1:]
            if not quantity_text.isdecimal():
                raise DecklistParseError(
                    f"Line {line_number}: invalid quantity {quantity_text!r} in {line!r}"
                )
            quantity = int(quantity_text)
            if quantity == 0:
                continue
            decklist.append(CardRef(" ".join(name_words), quantity))
        return decklist

    def read_decklist(self, filepath: Path | str) -> list[CardRef]:
        """Read and parse a decklist file."""
        path = Path(filepath)
        try:
            deck_text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise DecklistParseError(f"Unable to open {path}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise DecklistParseError(f"{path} is not UTF-8 text: {exc}") from exc
        try:
            decklist = self.parse_decklist(deck_text)
        except DecklistParseError as exc:
            raise DecklistParseError(f"{path}: {exc}") from exc
        logger.info(f"Loaded decklist from {path} with {len(decklist)} entries")
        return decklist

    @staticmethod
    def format_decklist(cards: Iterable[CardRef]) -> str:
        """Render records back to decklist text, one per line."""
        return "".join(f"{card}\n" for card in cards)


_default_deck_service: DeckService | None = None


def get_deck_service() -> DeckService:
    """Return a shared DeckService instance."""
    global _default_deck_service
    if _default_deck_service is None:
        _default_deck_service = DeckService()
    return _default_deck_service


def reset_deck_service() -> None:
    """Reset the global deck service instance (used by tests)."""
    global _default_deck_service
    _default_deck_service = None


__all__ = ["DeckService", "get_deck_service", "reset_deck_service"]
