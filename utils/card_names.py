"""Card name folding and face helpers used by every name comparison."""

from __future__ import annotations

import unicodedata

from utils.game_constants import FACE_SEPARATOR

__all__ = ["fold", "front_face", "is_multi_face", "names_match"]


def fold(name: str) -> str:
    """Strip diacritics and case from a card name for comparison only."""
    decomposed = unicodedata.normalize("NFD", name or "")
    stripped = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
    return unicodedata.normalize("NFC", stripped).casefold().strip()


def is_multi_face(name: str) -> bool:
    return FACE_SEPARATOR in (name or "")


def front_face(name: str) -> str:
    """Return the part before ``//`` (trimmed), or the whole name."""
    return (name or "").split(FACE_SEPARATOR, 1)[0].strip()


def names_match(wanted: str, owned: str) -> bool:
    """Face-aware equality between a decklist name and an inventory name.

    ``Fire`` matches ``Fire // Ice`` in either direction; only the front face
    is considered.
    """
    wanted_key = fold(wanted)
    owned_key = fold(owned)
    if wanted_key == owned_key:
        return True
    if is_multi_face(owned) and fold(front_face(owned)) == wanted_key:
        return True
    if is_multi_face(wanted) and fold(front_face(wanted)) == owned_key:
        return True
    return False
