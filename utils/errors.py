"""Error kinds raised by the decklist services.

Every stage converts these into a status string; none of them is fatal to the
process.
"""

from __future__ import annotations


class DecklistError(Exception):
    """Base class for recoverable decklist errors."""


class ConfigInvalid(DecklistError):
    """Config file exists but cannot be parsed."""


class CatalogAbsent(DecklistError):
    """No local catalog file is available."""


class NetworkFailure(DecklistError):
    """Catalog metadata or bulk download failed."""


class CatalogCorrupt(DecklistError):
    """Catalog file could not be decoded as a JSON array of cards."""


class CatalogRecordError(CatalogCorrupt):
    """A single catalog record could not be decoded; the record is dropped."""


class InventoryParseError(DecklistError):
    """Inventory CSV could not be read."""


class DecklistParseError(DecklistError):
    """Decklist text could not be read."""


class ClipboardUnavailable(DecklistError):
    """System clipboard cannot be reached."""


class FileWriteError(DecklistError):
    """Writing a file (missing list, config, directories) failed."""


__all__ = [
    "DecklistError",
    "ConfigInvalid",
    "CatalogAbsent",
    "NetworkFailure",
    "CatalogCorrupt",
    "CatalogRecordError",
    "InventoryParseError",
    "DecklistParseError",
    "ClipboardUnavailable",
    "FileWriteError",
]
