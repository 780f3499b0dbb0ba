"""Per-format legality of a whole decklist."""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from repositories.card_repository import CardRepository
from utils.card_data import Format, Legality
from utils.deck import CardRef
from utils.game_constants import FORMAT_LABELS

LegalityVector = dict[Format, bool]


def is_playable(state: Legality | None) -> bool:
    return state is not None and state.playable


def check_legality(index: CardRepository, decklist: Iterable[CardRef]) -> LegalityVector:
    """
    AND-reduce card legality across the deck for every format.

    Unresolved names leave every flag untouched. A format that has turned
    false is not read again. Deck size and colour identity are not checked.
    """
    vector: LegalityVector = {fmt: True for fmt in Format}
    unresolved = 0
    for card in decklist:
        entry = index.by_name(card.name)
        if entry is None:
            unresolved += 1
            continue
        for fmt, legal in vector.items():
            if legal:
                vector[fmt] = is_playable(entry.legality(fmt))
    if unresolved:
        logger.debug(f"Legality check skipped {unresolved} names not in the card database")
    return vector


def legality_lines(vector: LegalityVector) -> list[str]:
    """Display lines such as ``Modern: legal``."""
    return [
        f"{FORMAT_LABELS[fmt.value]}: {'legal' if legal else 'not legal'}"
        for fmt, legal in vector.items()
    ]


__all__ = ["LegalityVector", "check_legality", "is_playable", "legality_lines"]
