"""
Repositories package - Data access layer.

This package contains the catalog index that the legality, pricing and
spell-check stages query.
"""

from repositories.card_repository import FACE_LAYOUTS, PRICE_FACE_LAYOUTS, CardRepository

__all__ = ["CardRepository", "FACE_LAYOUTS", "PRICE_FACE_LAYOUTS"]
