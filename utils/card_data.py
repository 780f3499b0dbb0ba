"""Scryfall catalog records and their lenient JSON codec.

Only a handful of fields matter to the rest of the program (name, layout,
legalities, prices, color identity, rarity, set). Everything else a record
carries is decoded with forgiving defaults or kept untouched in ``extra``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from loguru import logger

from utils.errors import CatalogCorrupt, CatalogRecordError
from utils.game_constants import Currency


class Layout(str, Enum):
    NORMAL = "normal"
    SPLIT = "split"
    FLIP = "flip"
    TRANSFORM = "transform"
    MODAL_DUAL_FACE = "modal_dfc"
    ADVENTURE = "adventure"
    MELD = "meld"
    SAGA = "saga"
    TOKEN = "token"
    DOUBLE_FACED_TOKEN = "double_faced_token"
    ART_SERIES = "art_series"
    CLASS = "class"
    PLANAR = "planar"
    SCHEME = "scheme"
    PROTOTYPE = "prototype"
    VANGUARD = "vanguard"
    EMBLEM = "emblem"
    AUGMENT = "augment"
    HOST = "host"
    MUTATE = "mutate"
    LEVELER = "leveler"
    CASE = "case"
    REVERSIBLE = "reversible_card"
    BATTLE = "battle"


class Legality(str, Enum):
    LEGAL = "legal"
    NOT_LEGAL = "not_legal"
    RESTRICTED = "restricted"
    BANNED = "banned"

    @property
    def playable(self) -> bool:
        return self in (Legality.LEGAL, Legality.RESTRICTED)


class Format(str, Enum):
    STANDARD = "standard"
    FUTURE = "future"
    HISTORIC = "historic"
    TIMELESS = "timeless"
    GLADIATOR = "gladiator"
    PIONEER = "pioneer"
    EXPLORER = "explorer"
    MODERN = "modern"
    LEGACY = "legacy"
    PAUPER = "pauper"
    VINTAGE = "vintage"
    PENNY = "penny"
    COMMANDER = "commander"
    OATHBREAKER = "oathbreaker"
    STANDARD_BRAWL = "standardbrawl"
    BRAWL = "brawl"
    ALCHEMY = "alchemy"
    PAUPER_COMMANDER = "paupercommander"
    DUEL = "duel"
    OLD_SCHOOL = "oldschool"
    PREMODERN = "premodern"
    PREDH = "predh"


class Rarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    SPECIAL = "special"
    MYTHIC = "mythic"
    BONUS = "bonus"


class SetType(str, Enum):
    CORE = "core"
    EXPANSION = "expansion"
    MASTERS = "masters"
    ETERNAL = "eternal"
    ALCHEMY = "alchemy"
    MASTERPIECE = "masterpiece"
    ARSENAL = "arsenal"
    FROM_THE_VAULT = "from_the_vault"
    SPELLBOOK = "spellbook"
    PREMIUM_DECK = "premium_deck"
    DUEL_DECK = "duel_deck"
    DRAFT_INNOVATION = "draft_innovation"
    TREASURE_CHEST = "treasure_chest"
    COMMANDER = "commander"
    PLANECHASE = "planechase"
    ARCHENEMY = "archenemy"
    VANGUARD = "vanguard"
    FUNNY = "funny"
    STARTER = "starter"
    BOX = "box"
    PROMO = "promo"
    TOKEN = "token"
    MEMORABILIA = "memorabilia"
    MINIGAME = "minigame"


class Language(str, Enum):
    ENGLISH = "en"
    SPANISH = "es"
    FRENCH = "fr"
    GERMAN = "de"
    ITALIAN = "it"
    PORTUGUESE = "pt"
    JAPANESE = "ja"
    KOREAN = "ko"
    RUSSIAN = "ru"
    SIMPLIFIED_CHINESE = "zhs"
    TRADITIONAL_CHINESE = "zht"
    HEBREW = "he"
    LATIN = "la"
    ANCIENT_GREEK = "grc"
    ARABIC = "ar"
    SANSKRIT = "sa"
    PHYREXIAN = "ph"
    QUENYA = "qya"


class BorderColor(str, Enum):
    BLACK = "black"
    WHITE = "white"
    BORDERLESS = "borderless"
    SILVER = "silver"
    GOLD = "gold"
    YELLOW = "yellow"


class Finish(str, Enum):
    FOIL = "foil"
    NONFOIL = "nonfoil"
    ETCHED = "etched"
    GLOSSY = "glossy"


@dataclass(frozen=True)
class CardPrices:
    """Prices exactly as Scryfall sends them; ``None`` means no price."""

    usd: str | None = None
    usd_foil: str | None = None
    usd_etched: str | None = None
    eur: str | None = None
    eur_foil: str | None = None
    tix: str | None = None

    def raw(self, currency: Currency) -> str | None:
        return getattr(self, currency.price_key)

    def get(self, currency: Currency) -> float | None:
        """Parse the price for ``currency``; zero, negative or garbage is no price."""
        text = self.raw(currency)
        if text is None:
            return None
        try:
            value = float(text)
        except (TypeError, ValueError):
            return None
        if value != value or value <= 0:  # NaN or non-positive
            return None
        return value


@dataclass(frozen=True)
class CatalogCard:
    """One oracle card from the Scryfall bulk file."""

    name: str
    layout: Layout = Layout.NORMAL
    legalities: dict[Format, Legality] = field(default_factory=dict)
    prices: CardPrices = field(default_factory=CardPrices)
    color_identity: tuple[str, ...] = ()
    rarity: Rarity = Rarity.COMMON
    set_code: str = ""
    id: str = ""
    oracle_id: str = ""
    lang: Language = Language.ENGLISH
    released_at: str = ""
    mana_cost: str = ""
    cmc: float = 0.0
    type_line: str = ""
    oracle_text: str = ""
    colors: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    set_name: str = ""
    set_type: SetType | None = None
    border_color: BorderColor = BorderColor.BLACK
    finishes: tuple[Finish, ...] = ()
    reserved: bool = False
    edhrec_rank: int = 0
    face_names: tuple[str, ...] = ()
    extra: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def legality(self, fmt: Format) -> Legality | None:
        return self.legalities.get(fmt)

    def price(self, currency: Currency) -> float | None:
        return self.prices.get(currency)


_KNOWN_FIELDS = {
    "name",
    "layout",
    "legalities",
    "prices",
    "color_identity",
    "rarity",
    "set",
    "id",
    "oracle_id",
    "lang",
    "released_at",
    "mana_cost",
    "cmc",
    "type_line",
    "oracle_text",
    "colors",
    "keywords",
    "set_name",
    "set_type",
    "border_color",
    "finishes",
    "reserved",
    "edhrec_rank",
    "card_faces",
}


def _text(raw: dict[str, Any], key: str) -> str:
    value = raw.get(key)
    return "" if value is None else str(value)


def _number(raw: dict[str, Any], key: str, kind: type = float) -> Any:
    value = raw.get(key)
    if value is None or isinstance(value, bool):
        return kind(0)
    try:
        return kind(value)
    except (TypeError, ValueError):
        return kind(0)


def _strings(raw: dict[str, Any], key: str) -> tuple[str, ...]:
    value = raw.get(key)
    if not isinstance(value, list):
        return ()
    return tuple(str(item) for item in value if item is not None)


def _token(enum_cls: type[Enum], value: Any, field_name: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise CatalogRecordError(f"Unknown {field_name} token {value!r}") from exc


def _decode_legalities(value: Any) -> dict[Format, Legality]:
    if not isinstance(value, dict):
        return {}
    legalities: dict[Format, Legality] = {}
    for key, state in value.items():
        try:
            fmt = Format(key)
        except ValueError:
            # New formats appear upstream from time to time; they are not tracked.
            continue
        legalities[fmt] = _token(Legality, state, "legality")
    return legalities


def _decode_prices(value: Any) -> CardPrices:
    if not isinstance(value, dict):
        return CardPrices()

    def pick(key: str) -> str | None:
        price = value.get(key)
        return None if price is None else str(price)

    return CardPrices(
        usd=pick("usd"),
        usd_foil=pick("usd_foil"),
        usd_etched=pick("usd_etched"),
        eur=pick("eur"),
        eur_foil=pick("eur_foil"),
        tix=pick("tix"),
    )


def _face_names(raw: dict[str, Any]) -> tuple[str, ...]:
    faces = raw.get("card_faces")
    if not isinstance(faces, list):
        return ()
    names = []
    for face in faces:
        if isinstance(face, dict) and face.get("name"):
            names.append(str(face["name"]))
    return tuple(names)


def decode_card(raw: Any) -> CatalogCard:
    """Decode a single Scryfall card object.

    Raises:
        CatalogRecordError: the object is not a card or carries an unknown
            enumerated token. Callers drop the record and continue.
    """
    if not isinstance(raw, dict):
        raise CatalogRecordError(f"Expected a JSON object, got {type(raw).__name__}")

    set_type_raw = raw.get("set_type")
    finishes_raw = raw.get("finishes") if isinstance(raw.get("finishes"), list) else []

    return CatalogCard(
        name=_text(raw, "name"),
        layout=_token(Layout, raw.get("layout") or Layout.NORMAL.value, "layout"),
        legalities=_decode_legalities(raw.get("legalities")),
        prices=_decode_prices(raw.get("prices")),
        color_identity=_strings(raw, "color_identity"),
        rarity=_token(Rarity, raw.get("rarity") or Rarity.COMMON.value, "rarity"),
        set_code=_text(raw, "set"),
        id=_text(raw, "id"),
        oracle_id=_text(raw, "oracle_id"),
        lang=_token(Language, raw.get("lang") or Language.ENGLISH.value, "language"),
        released_at=_text(raw, "released_at"),
        mana_cost=_text(raw, "mana_cost"),
        cmc=_number(raw, "cmc"),
        type_line=_text(raw, "type_line"),
        oracle_text=_text(raw, "oracle_text"),
        colors=_strings(raw, "colors"),
        keywords=_strings(raw, "keywords"),
        set_name=_text(raw, "set_name"),
        set_type=_token(SetType, set_type_raw, "set type") if set_type_raw else None,
        border_color=_token(
            BorderColor, raw.get("border_color") or BorderColor.BLACK.value, "border color"
        ),
        finishes=tuple(_token(Finish, item, "finish") for item in finishes_raw),
        reserved=bool(raw.get("reserved", False)),
        edhrec_rank=_number(raw, "edhrec_rank", int),
        face_names=_face_names(raw),
        extra={key: value for key, value in raw.items() if key not in _KNOWN_FIELDS},
    )


def decode_catalog(payload: Any) -> tuple[list[CatalogCard], int]:
    """Decode a whole bulk file payload.

    Returns:
        (cards, skipped) where ``skipped`` counts records that failed to decode.

    Raises:
        CatalogCorrupt: the payload is not a JSON array.
    """
    if not isinstance(payload, list):
        raise CatalogCorrupt("Card database is not a JSON array of cards")
    cards: list[CatalogCard] = []
    skipped = 0
    for raw in payload:
        try:
            card = decode_card(raw)
        except CatalogRecordError as exc:
            skipped += 1
            logger.debug(f"Skipping catalog record: {exc}")
            continue
        if not card.name:
            skipped += 1
            continue
        cards.append(card)
    if skipped:
        logger.warning(f"Skipped {skipped} unreadable catalog records")
    return cards, skipped


__all__ = [
    "BorderColor",
    "CardPrices",
    "CatalogCard",
    "Finish",
    "Format",
    "Language",
    "Layout",
    "Legality",
    "Rarity",
    "SetType",
    "decode_card",
    "decode_catalog",
]
