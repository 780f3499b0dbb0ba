"""Tests for the CardRepository catalog index."""

import pytest

from repositories.card_repository import CardRepository
from utils.card_data import CardPrices, CatalogCard, Format, Layout, Legality
from utils.game_constants import Currency


def _card(name, usd=None, layout=Layout.NORMAL, eur=None, set_code=""):
    return CatalogCard(
        name=name, layout=layout, prices=CardPrices(usd=usd, eur=eur), set_code=set_code
    )


@pytest.fixture
def repository():
    return CardRepository(
        [
            _card("Island"),
            _card("Séance", usd="0.40"),
            _card("Fire // Ice", usd="0.25", layout=Layout.SPLIT),
            _card("Delver of Secrets // Insectile Aberration", layout=Layout.TRANSFORM),
            _card("Bonecrusher Giant // Stomp", usd="0.90", layout=Layout.ADVENTURE),
            _card("Goblin Guide", usd="1.00"),
        ]
    )


# ============= Retention Tests =============


def test_keeps_lowest_positive_price_per_name():
    repo = CardRepository(
        [
            _card("Sol Ring", usd="1.50", set_code="c21"),
            _card("Sol Ring", usd="0.80", set_code="cmr"),
            _card("Sol Ring", usd=None, set_code="ltc"),
        ]
    )

    assert len(repo) == 1
    assert repo.record_count == 3
    assert repo.by_name("Sol Ring").set_code == "cmr"


def test_priced_entry_never_loses_to_unpriced():
    repo = CardRepository([_card("Opt", usd=None, set_code="a"), _card("Opt", usd="0.10", set_code="b")])

    assert repo.by_name("Opt").set_code == "b"


def test_zero_price_is_not_a_price():
    repo = CardRepository([_card("Opt", usd="0.10", set_code="a"), _card("Opt", usd="0.00", set_code="b")])

    assert repo.by_name("Opt").set_code == "a"


def test_retention_uses_configured_currency():
    cards = [
        _card("Opt", usd="0.10", eur="0.90", set_code="a"),
        _card("Opt", usd="0.50", eur="0.05", set_code="b"),
    ]

    assert CardRepository(cards, Currency.USD).by_name("Opt").set_code == "a"
    assert CardRepository(cards, Currency.EURO).by_name("Opt").set_code == "b"


# ============= Lookup Tests =============


def test_by_name_exact_and_folded(repository):
    assert repository.by_name("Island").name == "Island"
    assert repository.by_name("island").name == "Island"
    assert repository.by_name("Seance").name == "Séance"


def test_by_name_face_fallback_for_face_layouts(repository):
    assert repository.by_name("Fire").name == "Fire // Ice"
    assert repository.by_name("Insectile Aberration").name.startswith("Delver of Secrets")


def test_by_name_face_fallback_excludes_adventure_and_normal(repository):
    assert repository.by_name("Stomp") is None
    assert repository.by_name("Goblin") is None


def test_by_name_unknown_returns_none(repository):
    assert repository.by_name("Black Lotus") is None
    assert repository.by_name("") is None
    assert "Black Lotus" not in repository
    assert "Fire" in repository


def test_find_all_returns_every_matching_record():
    repo = CardRepository(
        [
            _card("Sol Ring", usd="1.50"),
            _card("Sol Ring", usd="0.80"),
            _card("Sol Ring"),
            _card("Sol Ring Token"),
        ]
    )

    assert len(repo.find_all("Sol Ring")) == 3


def test_find_all_includes_adventure_faces(repository):
    assert [card.name for card in repository.find_all("Stomp")] == ["Bonecrusher Giant // Stomp"]
    assert [card.name for card in repository.find_all("Ice")] == ["Fire // Ice"]
    assert repository.find_all("Goblin") == []


def test_iteration_yields_retained_entries(repository):
    names = {card.name for card in repository}

    assert "Island" in names
    assert len(names) == len(repository) == 6


def test_legality_lookup_through_index():
    lotus = CatalogCard(name="Black Lotus", legalities={Format.VINTAGE: Legality.RESTRICTED})
    repo = CardRepository([lotus])

    assert repo.by_name("black lotus").legality(Format.VINTAGE) is Legality.RESTRICTED
