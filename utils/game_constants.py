"""Gameplay-related constants shared across services."""

from enum import Enum


class Currency(str, Enum):
    """Currencies the pricing aggregator can report in."""

    USD = "USD"
    EURO = "Euro"
    TIX = "Tix"

    @property
    def price_key(self) -> str:
        return CURRENCY_PRICE_KEYS[self]

    @property
    def symbol(self) -> str:
        return CURRENCY_SYMBOLS[self]

    @classmethod
    def parse(cls, value: object, default: "Currency | None" = None) -> "Currency":
        if isinstance(value, Currency):
            return value
        text = str(value or "").strip().lower()
        for currency in cls:
            if text in (currency.value.lower(), currency.price_key):
                return currency
        if default is None:
            raise ValueError(f"Unknown currency: {value!r}")
        return default


CURRENCY_PRICE_KEYS = {
    Currency.USD: "usd",
    Currency.EURO: "eur",
    Currency.TIX: "tix",
}

CURRENCY_SYMBOLS = {
    Currency.USD: "$",
    Currency.EURO: "€",
    Currency.TIX: "Tix ",
}

# Scryfall legality keys -> display labels, in report order
FORMAT_LABELS = {
    "standard": "Standard",
    "future": "Future",
    "historic": "Historic",
    "timeless": "Timeless",
    "gladiator": "Gladiator",
    "pioneer": "Pioneer",
    "explorer": "Explorer",
    "modern": "Modern",
    "legacy": "Legacy",
    "pauper": "Pauper",
    "vintage": "Vintage",
    "penny": "Penny",
    "commander": "Commander",
    "oathbreaker": "Oathbreaker",
    "standardbrawl": "Standard Brawl",
    "brawl": "Brawl",
    "alchemy": "Alchemy",
    "paupercommander": "Pauper Commander",
    "duel": "Duel",
    "oldschool": "Old School",
    "premodern": "Premodern",
    "predh": "PreDH",
}

SIDEBOARD_MARKER = "sideboard"
FACE_SEPARATOR = "//"

__all__ = [
    "Currency",
    "CURRENCY_PRICE_KEYS",
    "CURRENCY_SYMBOLS",
    "FORMAT_LABELS",
    "SIDEBOARD_MARKER",
    "FACE_SEPARATOR",
]
