"""
Card Repository - In-memory index over the Scryfall oracle catalog.

Lookups are keyed by exact card name. Reprints sharing a name collapse to the
printing with the lowest positive price in the configured currency; the full
record list is kept for the fallback matching pass and for pricing.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from loguru import logger

from utils.card_data import CatalogCard, Layout
from utils.card_names import fold
from utils.game_constants import Currency

# Layouts whose printed name joins several faces with "//"
FACE_LAYOUTS = frozenset({Layout.TRANSFORM, Layout.FLIP, Layout.SPLIT, Layout.MODAL_DUAL_FACE})
PRICE_FACE_LAYOUTS = FACE_LAYOUTS | {Layout.ADVENTURE}


def _prefer(existing: CatalogCard, candidate: CatalogCard, currency: Currency) -> CatalogCard:
    """Pick which of two same-named printings the index keeps."""
    existing_price = existing.price(currency)
    candidate_price = candidate.price(currency)
    if candidate_price is None:
        return existing
    if existing_price is None or candidate_price < existing_price:
        return candidate
    return existing


class CardRepository:
    """Read-only catalog index shared by the legality and pricing stages."""

    def __init__(self, cards: Iterable[CatalogCard], currency: Currency = Currency.USD):
        """
        Build the index.

        Args:
            cards: Decoded catalog records (already validated)
            currency: Currency used to choose between reprints
        """
        self.currency = currency
        self._cards: list[CatalogCard] = list(cards)
        self._folded: list[str] = [fold(card.name) for card in self._cards]
        self._by_name: dict[str, CatalogCard] = {}
        for card in self._cards:
            existing = self._by_name.get(card.name)
            self._by_name[card.name] = (
                card if existing is None else _prefer(existing, card, currency)
            )
        self._by_folded: dict[str, CatalogCard] = {}
        for name, card in self._by_name.items():
            self._by_folded.setdefault(fold(name), card)
        self._face_entries: list[tuple[str, CatalogCard]] = [
            (key, card) for key, card in self._by_folded.items() if card.layout in FACE_LAYOUTS
        ]
        logger.debug(
            f"Indexed {len(self._by_name)} unique names from {len(self._cards)} catalog records"
        )

    def __len__(self) -> int:
        return len(self._by_name)

    def __iter__(self) -> Iterator[CatalogCard]:
        return iter(self._by_name.values())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.by_name(name) is not None

    @property
    def record_count(self) -> int:
        return len(self._cards)

    # ============= Lookups =============

    def by_name(self, name: str) -> CatalogCard | None:
        """
        Resolve a card name to its retained catalog entry.

        Exact name first, then diacritic/case folded equality, then the
        multi-face fallback where a split/flip/transform/MDFC entry whose
        folded name contains the folded query matches.

        Returns:
            The entry, or None if nothing matches
        """
        if not name:
            return None
        card = self._by_name.get(name)
        if card is not None:
            return card
        key = fold(name)
        card = self._by_folded.get(key)
        if card is not None:
            return card
        for folded, candidate in self._face_entries:
            if key in folded:
                return candidate
        return None

    def find_all(self, name: str) -> list[CatalogCard]:
        """Every record matching ``name``; adventure cards join the face fallback."""
        if not name:
            return []
        key = fold(name)
        matches: list[CatalogCard] = []
        for card, folded in zip(self._cards, self._folded):
            if folded == key or (card.layout in PRICE_FACE_LAYOUTS and key in folded):
                matches.append(card)
        return matches


__all__ = ["CardRepository", "FACE_LAYOUTS", "PRICE_FACE_LAYOUTS"]
