"""
Services package - Business logic layer.

This package exposes business services while avoiding heavy imports at module load time.
"""

from importlib import import_module
from typing import Any

__all__ = [
    "CatalogService",
    "CollectionService",
    "ConfigService",
    "DeckService",
    "DecklistConfig",
    "check_legality",
    "find_missing_cards",
    "get_collection_service",
    "get_deck_service",
    "price_missing",
]

_LAZY_MODULES = {
    "CatalogService": "services.catalog_service",
    "CollectionService": "services.collection_service",
    "get_collection_service": "services.collection_service",
    "ConfigService": "services.config_service",
    "DecklistConfig": "services.config_service",
    "DeckService": "services.deck_service",
    "get_deck_service": "services.deck_service",
    "check_legality": "services.legality_service",
    "find_missing_cards": "services.missing_service",
    "price_missing": "services.price_service",
}


def __getattr__(name: str) -> Any:
    if name in _LAZY_MODULES:
        module = import_module(_LAZY_MODULES[name])
        value = getattr(module, name)
        globals()[name] = value
        return value

    raise AttributeError(f"module 'services' has no attribute '{name}'")
