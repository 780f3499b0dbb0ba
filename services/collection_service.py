"""
Collection Service - Business logic for inventory loading.

Reads a Moxfield-style collection CSV (header row with at least ``Name`` and
``Count``) and collapses the per-printing rows into one record per card name.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable
from pathlib import Path

from loguru import logger

from utils.deck import CardRef
from utils.errors import InventoryParseError

NAME_COLUMN = "Name"
COUNT_COLUMN = "Count"


def squash_collection(cards: Iterable[CardRef]) -> list[CardRef]:
    """
    Fold rows that share an exact name into one, summing quantities.

    Moxfield exports one row per printing; the printing is irrelevant here.
    First-seen order is preserved.
    """
    totals: dict[str, int] = {}
    for card in cards:
        totals[card.name] = totals.get(card.name, 0) + card.quantity
    return [CardRef(name, quantity) for name, quantity in totals.items()]


def parse_collection_rows(
    rows: Iterable[dict[str, str | None]], source: str = "<csv>"
) -> list[CardRef]:
    """Turn CSV dict rows into card records; zero-count rows are dropped."""
    cards: list[CardRef] = []
    for line_number, row in enumerate(rows, start=2):
        name = row.get(NAME_COLUMN)
        count_raw = row.get(COUNT_COLUMN)
        if name is None or count_raw is None:
            raise InventoryParseError(f"{source}: line {line_number}: row is missing fields")
        count_text = count_raw.strip()
        if not count_text.isdecimal():
            raise InventoryParseError(
                f"{source}: line {line_number}: invalid count {count_raw!r} for {name!r}"
            )
        quantity = int(count_text)
        if quantity == 0:
            logger.debug(f"Skipping {name}: zero count")
            continue
        cards.append(CardRef(name, quantity))
    return cards


class CollectionService:
    """Service for reading and normalising inventory exports."""

    def read_collection(self, filepath: Path | str) -> list[CardRef]:
        """
        Load an inventory CSV and squash duplicate names.

        Args:
            filepath: Path to the CSV export

        Returns:
            Squashed list of card records

        Raises:
            InventoryParseError: the file cannot be opened, is not CSV, lacks the
                required columns, or carries a non-integer count
        """
        path = Path(filepath)
        try:
            with path.open("r", encoding="utf-8-sig", newline="") as fh:
                reader = csv.DictReader(fh, delimiter=",", strict=True)
                fieldnames = reader.fieldnames or []
                missing = [col for col in (NAME_COLUMN, COUNT_COLUMN) if col not in fieldnames]
                if missing:
                    raise InventoryParseError(
                        f"{path}: missing required column(s): {', '.join(missing)}"
                    )
                cards = parse_collection_rows(reader, source=str(path))
        except OSError as exc:
            raise InventoryParseError(f"Unable to open {path}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise InventoryParseError(f"{path} is not UTF-8 text: {exc}") from exc
        except csv.Error as exc:
            raise InventoryParseError(f"Malformed CSV in {path}: {exc}") from exc

        squashed = squash_collection(cards)
        logger.info(
            f"Loaded collection from {path}: {len(cards)} rows, {len(squashed)} unique cards"
        )
        return squashed


_default_collection_service: CollectionService | None = None


def get_collection_service() -> CollectionService:
    """Return a shared CollectionService instance."""
    global _default_collection_service
    if _default_collection_service is None:
        _default_collection_service = CollectionService()
    return _default_collection_service


def reset_collection_service() -> None:
    """Reset the global collection service instance (used by tests)."""
    global _default_collection_service
    _default_collection_service = None


__all__ = [
    "CollectionService",
    "get_collection_service",
    "parse_collection_rows",
    "reset_collection_service",
    "squash_collection",
]
