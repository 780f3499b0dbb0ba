"""Tests for the catalog record codec."""

import math

import pytest

from utils.card_data import (
    CardPrices,
    CatalogCard,
    Format,
    Layout,
    Legality,
    decode_card,
    decode_catalog,
)
from utils.errors import CatalogCorrupt, CatalogRecordError
from utils.game_constants import Currency


def test_decode_card_minimal_record_uses_defaults():
    card = decode_card({"name": "Opt"})

    assert card.name == "Opt"
    assert card.layout is Layout.NORMAL
    assert card.legalities == {}
    assert card.prices == CardPrices()
    assert card.cmc == 0.0
    assert card.edhrec_rank == 0
    assert card.type_line == ""
    assert card.set_type is None


def test_decode_card_reads_known_fields():
    card = decode_card(
        {
            "name": "Fire // Ice",
            "layout": "split",
            "legalities": {"modern": "legal", "vintage": "restricted", "standard": "not_legal"},
            "prices": {"usd": "0.25", "eur": None, "tix": "0.03"},
            "color_identity": ["R", "U"],
            "rarity": "uncommon",
            "set": "mh2",
            "set_type": "draft_innovation",
            "cmc": 4.0,
            "finishes": ["nonfoil", "foil"],
            "card_faces": [{"name": "Fire"}, {"name": "Ice"}],
            "edhrec_rank": "152",
        }
    )

    assert card.layout is Layout.SPLIT
    assert card.legality(Format.MODERN) is Legality.LEGAL
    assert card.legality(Format.VINTAGE) is Legality.RESTRICTED
    assert card.legality(Format.LEGACY) is None
    assert card.prices.usd == "0.25"
    assert card.prices.eur is None
    assert card.color_identity == ("R", "U")
    assert card.set_code == "mh2"
    assert card.face_names == ("Fire", "Ice")
    assert card.edhrec_rank == 152


def test_decode_card_keeps_unknown_fields_aside():
    card = decode_card({"name": "Opt", "artist": "Tyler Jacobson"})

    assert card.extra == {"artist": "Tyler Jacobson"}


def test_decode_card_ignores_unknown_format_keys():
    card = decode_card({"name": "Opt", "legalities": {"modern": "legal", "hyperformat": "legal"}})

    assert card.legalities == {Format.MODERN: Legality.LEGAL}


@pytest.mark.parametrize(
    "field, value",
    [
        ("layout", "hexagonal"),
        ("rarity", "ultra"),
        ("lang", "klingon"),
        ("border_color", "plaid"),
        ("finishes", ["sparkly"]),
    ],
)
def test_decode_card_rejects_unknown_tokens(field, value):
    with pytest.raises(CatalogRecordError):
        decode_card({"name": "Opt", field: value})


def test_decode_card_rejects_unknown_legality_state():
    with pytest.raises(CatalogRecordError):
        decode_card({"name": "Opt", "legalities": {"modern": "maybe"}})


def test_decode_card_rejects_non_objects():
    with pytest.raises(CatalogRecordError):
        decode_card(["Opt"])


def test_decode_catalog_drops_bad_records_and_continues():
    payload = [
        {"name": "Opt"},
        {"name": "Broken", "layout": "hexagonal"},
        "not a card",
        {"layout": "normal"},
        {"name": "Island"},
    ]

    cards, skipped = decode_catalog(payload)

    assert [card.name for card in cards] == ["Opt", "Island"]
    assert skipped == 3


def test_decode_catalog_requires_an_array():
    with pytest.raises(CatalogCorrupt):
        decode_catalog({"object": "list", "data": []})


@pytest.mark.parametrize("raw", [None, "", "abc", "0", "0.00", "-1.5", "nan"])
def test_price_parse_failures_mean_no_price(raw):
    prices = CardPrices(usd=raw)

    assert prices.get(Currency.USD) is None


def test_price_is_parsed_on_demand_per_currency():
    card = CatalogCard(name="Sol Ring", prices=CardPrices(usd="1.50", eur="1.20", tix="0.02"))

    assert card.prices.raw(Currency.USD) == "1.50"
    assert math.isclose(card.price(Currency.USD), 1.5)
    assert math.isclose(card.price(Currency.EURO), 1.2)
    assert math.isclose(card.price(Currency.TIX), 0.02)


def test_restricted_counts_as_playable():
    assert Legality.LEGAL.playable
    assert Legality.RESTRICTED.playable
    assert not Legality.BANNED.playable
    assert not Legality.NOT_LEGAL.playable
