import re
from dataclasses import dataclass
from pathlib import Path

from utils.constants import MISSING_FILE_PREFIX

_RESERVED_NAMES = {
    "CON",
    "PRN",
    "AUX",
    "NUL",
    *(f"COM{i}" for i in range(1, 10)),
    *(f"LPT{i}" for i in range(1, 10)),
}


@dataclass(frozen=True)
class CardRef:
    """A card name and how many copies; shared by inventories and decklists."""

    name: str
    quantity: int

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError(f"Quantity for {self.name!r} must be at least 1")

    def __str__(self) -> str:
        return f"{self.quantity} {self.name}"


def total_quantity(cards: list[CardRef]) -> int:
    return sum(card.quantity for card in cards)


def sanitize_filename(filename: str, fallback: str = "decklist") -> str:
    """
    Sanitize a filename by removing invalid characters and preventing path traversal.

    Handles:
    - Null bytes
    - Path traversal attempts (../, drive letters)
    - Invalid filesystem characters
    - Reserved Windows filenames
    - Leading/trailing dots and spaces

    Args:
        filename: Original filename
        fallback: Default filename if result is empty

    Returns:
        Sanitized filename safe for filesystem use
    """
    filename = filename.replace("\x00", "_")

    # Invalid filesystem characters (spaces are kept)
    safe_name = "".join(ch if ch not in '\\/:*?"<>|' else "_" for ch in filename)

    # ".." and "..." collapse to a single underscore; leading dots are dropped
    safe_name = re.sub(r"\.{2,}", "_", safe_name)
    safe_name = safe_name.lstrip(".")
    safe_name = re.sub(r"_{2,}", "_", safe_name)
    safe_name = safe_name.strip().strip("._")

    base_name = safe_name.split(".")[0] if "." in safe_name else safe_name
    if base_name.upper() in _RESERVED_NAMES:
        safe_name = f"_{safe_name}"

    if not safe_name or not safe_name.replace("_", "").replace(".", "").strip():
        return fallback

    return safe_name


def missing_filename(decklist_path: Path | str | None) -> str:
    """Name of the file the missing list is written to for a decklist."""
    stem = Path(decklist_path).stem if decklist_path else ""
    return f"{MISSING_FILE_PREFIX}{sanitize_filename(stem)}.txt"


__all__ = ["CardRef", "missing_filename", "sanitize_filename", "total_quantity"]
