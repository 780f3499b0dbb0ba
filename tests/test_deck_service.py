"""Tests for DeckService decklist parsing."""

import pytest

from services.deck_service import DeckService, get_deck_service
from utils.deck import CardRef, missing_filename, sanitize_filename
from utils.errors import DecklistParseError


@pytest.fixture
def deck_service():
    return DeckService()


# ============= Parsing Tests =============


def test_parse_basic_decklist(deck_service):
    deck_text = "4 Lightning Bolt\n20 Mountain\n\nSideboard\n2 Smash to Smithereens\n"

    cards = deck_service.parse_decklist(deck_text)

    assert cards == [
        CardRef("Lightning Bolt", 4),
        CardRef("Mountain", 20),
        CardRef("Smash to Smithereens", 2),
    ]


def test_parse_skips_markers_blank_and_single_word_lines(deck_service):
    deck_text = "  \nSIDEBOARD\nDeck\n  3   Fire  //   Ice  \r\n"

    assert deck_service.parse_decklist(deck_text) == [CardRef("Fire // Ice", 3)]


def test_parse_drops_zero_quantities(deck_service):
    assert deck_service.parse_decklist("0 Opt\n1 Island") == [CardRef("Island", 1)]


@pytest.mark.parametrize("line", ["x4 Opt", "-1 Opt", "four Opt", "1.5 Opt"])
def test_parse_rejects_bad_quantity(deck_service, line):
    with pytest.raises(DecklistParseError, match="invalid quantity"):
        deck_service.parse_decklist(f"4 Island\n{line}\n")


def test_parse_does_not_merge_duplicates(deck_service):
    cards = deck_service.parse_decklist("2 Opt\n2 Opt\n")

    assert cards == [CardRef("Opt", 2), CardRef("Opt", 2)]


def test_format_then_parse_round_trip(deck_service):
    cards = deck_service.parse_decklist("4 Ragavan, Nimble Pilferer\n1 Séance\n2 Fire // Ice\n")

    assert deck_service.parse_decklist(DeckService.format_decklist(cards)) == cards


# ============= File Tests =============


def test_read_decklist(deck_service, tmp_path):
    path = tmp_path / "deck.txt"
    path.write_text("4 Opt\n", encoding="utf-8")

    assert deck_service.read_decklist(path) == [CardRef("Opt", 4)]


def test_read_decklist_reports_path_on_error(deck_service, tmp_path):
    path = tmp_path / "deck.txt"
    path.write_text("four Opt\n", encoding="utf-8")

    with pytest.raises(DecklistParseError, match="deck.txt"):
        deck_service.read_decklist(path)


def test_read_missing_decklist(deck_service, tmp_path):
    with pytest.raises(DecklistParseError, match="Unable to open"):
        deck_service.read_decklist(tmp_path / "absent.txt")


def test_get_deck_service_is_shared():
    assert get_deck_service() is get_deck_service()


# ============= Deck Utility Tests =============


def test_card_ref_rejects_non_positive_quantity():
    with pytest.raises(ValueError):
        CardRef("Opt", 0)


def test_card_ref_display():
    assert str(CardRef("Opt", 4)) == "4 Opt"


def test_sanitize_filename():
    assert sanitize_filename("../../etc/passwd") == "etc_passwd"
    assert sanitize_filename("CON") == "_CON"
    assert sanitize_filename("") == "decklist"


def test_missing_filename_uses_decklist_stem():
    assert missing_filename("/decks/Mono Red.txt") == "missing_Mono Red.txt"
    assert missing_filename(None) == "missing_decklist.txt"
