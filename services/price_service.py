"""
Price Service - Market price of the missing cards.

For every missing card the cheapest positive price across all matching
catalog records is used, multiplied by the missing quantity.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from loguru import logger

from repositories.card_repository import CardRepository
from utils.deck import CardRef
from utils.game_constants import Currency


@dataclass(frozen=True)
class PriceLine:
    name: str
    quantity: int
    unit_price: float
    line_total: float
    display: str


@dataclass(frozen=True)
class PriceReport:
    currency: Currency
    lines: list[PriceLine] = field(default_factory=list)
    total: float = 0.0

    @property
    def total_display(self) -> str:
        return f"Total: {self.currency.symbol}{self.total:.2f}"


def unit_price(index: CardRepository, name: str, currency: Currency) -> float:
    """Cheapest positive price among every record matching ``name``; 0 if none."""
    prices = [
        price for card in index.find_all(name) if (price := card.price(currency)) is not None
    ]
    return min(prices) if prices else 0.0


def format_price_line(unit: float, quantity: int, line_total: float, currency: Currency) -> str:
    return f"[{unit:.2f}] x{quantity} = {currency.symbol}{line_total:.2f}"


def price_missing(
    index: CardRepository, missing: Sequence[CardRef], currency: Currency = Currency.USD
) -> PriceReport:
    """
    Price the missing list.

    Args:
        index: Loaded catalog
        missing: Missing records, in display order
        currency: Currency to price in

    Returns:
        PriceReport whose lines align 1:1 with ``missing``
    """
    lines: list[PriceLine] = []
    total = 0.0
    unpriced = 0
    for card in missing:
        unit = unit_price(index, card.name, currency)
        if unit == 0.0:
            unpriced += 1
        line_total = unit * card.quantity
        total += line_total
        lines.append(
            PriceLine(
                name=card.name,
                quantity=card.quantity,
                unit_price=unit,
                line_total=line_total,
                display=format_price_line(unit, card.quantity, line_total, currency),
            )
        )
    if unpriced:
        logger.debug(f"No {currency.value} price found for {unpriced} missing cards")
    return PriceReport(currency=currency, lines=lines, total=total)


__all__ = ["PriceLine", "PriceReport", "format_price_line", "price_missing", "unit_price"]
