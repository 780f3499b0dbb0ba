"""
Missing Service - Decklist minus inventory.

Matching is face-aware and diacritic-insensitive (see ``utils.card_names``)
and first-hit: the first inventory row that matches a decklist entry is the
one compared against.
"""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from repositories.card_repository import CardRepository
from utils.card_names import names_match
from utils.deck import CardRef

NOT_FOUND_NOTE = " <------ This card was not found in database.  Check spelling?"


def find_missing_cards(
    collection: Sequence[CardRef], decklist: Sequence[CardRef]
) -> list[CardRef] | None:
    """
    Compare a decklist to an inventory.

    Args:
        collection: Squashed inventory records
        decklist: Decklist records, in display order

    Returns:
        Missing records in decklist order, or None when nothing is missing
    """
    missing: list[CardRef] = []
    for wanted in decklist:
        owned = next((item for item in collection if names_match(wanted.name, item.name)), None)
        if owned is None:
            missing.append(wanted)
        elif owned.quantity < wanted.quantity:
            missing.append(CardRef(wanted.name, wanted.quantity - owned.quantity))
    logger.debug(f"Missing computation: {len(missing)} of {len(decklist)} decklist entries short")
    return missing or None


def check_spelling(index: CardRepository | None, name: str) -> str:
    """Return an annotation for names the catalog does not know, else ''."""
    if index is None or index.by_name(name) is not None:
        return ""
    return NOT_FOUND_NOTE


def missing_lines(missing: Sequence[CardRef] | None, index: CardRepository | None) -> list[str]:
    """Display lines for the missing list, annotated when a catalog is loaded."""
    return [f"{card}{check_spelling(index, card.name)}" for card in missing or ()]


__all__ = ["NOT_FOUND_NOTE", "check_spelling", "find_missing_cards", "missing_lines"]
