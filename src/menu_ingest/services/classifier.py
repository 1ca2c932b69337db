"""Normalization of draft items before enrichment."""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass

from menu_ingest.domain.menu import ItemType, MenuItem
from menu_ingest.domain.values import (
    MIN_VINTAGE,
    clamp_confidence,
    is_plausible_vintage,
    latest_plausible_vintage,
)
from menu_ingest.services.wine_lexicon import looks_rose, wine_color_for, wine_style_for

_TYPE_ALIASES = {
    "food": ItemType.FOOD,
    "foods": ItemType.FOOD,
    "dish": ItemType.FOOD,
    "dishes": ItemType.FOOD,
    "meal": ItemType.FOOD,
    "entree": ItemType.FOOD,
    "beverage": ItemType.BEVERAGE,
    "beverages": ItemType.BEVERAGE,
    "drink": ItemType.BEVERAGE,
    "drinks": ItemType.BEVERAGE,
    "cocktail": ItemType.BEVERAGE,
    "cocktails": ItemType.BEVERAGE,
    "beer": ItemType.BEVERAGE,
    "beers": ItemType.BEVERAGE,
    "spirit": ItemType.BEVERAGE,
    "spirits": ItemType.BEVERAGE,
    "wine": ItemType.WINE,
    "wines": ItemType.WINE,
}

_WINE_TERMS = (
    "wine",
    "vino",
    "vin",
    "champagne",
    "prosecco",
    "cava",
    "cabernet",
    "merlot",
    "pinot",
    "chardonnay",
    "sauvignon",
    "riesling",
    "malbec",
    "syrah",
    "shiraz",
    "zinfandel",
    "sangiovese",
    "tempranillo",
    "grenache",
    "nebbiolo",
    "chianti",
    "barolo",
    "rioja",
    "bordeaux",
    "burgundy",
    "sancerre",
    "chablis",
    "rosé",
    "moscato",
    "port",
    "sherry",
)
_BEVERAGE_TERMS = (
    "beverage",
    "drink",
    "cocktail",
    "mocktail",
    "beer",
    "ale",
    "lager",
    "ipa",
    "stout",
    "porter",
    "cider",
    "whiskey",
    "whisky",
    "bourbon",
    "scotch",
    "vodka",
    "gin",
    "rum",
    "tequila",
    "mezcal",
    "brandy",
    "cognac",
    "liqueur",
    "spirit",
    "martini",
    "margarita",
    "mojito",
    "negroni",
    "spritz",
    "soda",
    "juice",
    "lemonade",
    "coffee",
    "espresso",
    "latte",
    "cappuccino",
    "tea",
    "smoothie",
    "milkshake",
    "water",
    "tonic",
)

_FOOD_CATEGORY_TERMS = (
    (
        "Dessert",
        (
            "dessert",
            "cake",
            "pie",
            "tart",
            "pudding",
            "brownie",
            "cheesecake",
            "sorbet",
            "gelato",
            "ice cream",
            "tiramisu",
            "cookie",
        ),
    ),
    (
        "Appetizer",
        (
            "appetizer",
            "starter",
            "soup",
            "salad",
            "wings",
            "bruschetta",
            "dip",
            "nachos",
            "calamari",
            "tapas",
            "small plate",
        ),
    ),
    ("Side", ("side", "fries", "chips", "rice", "bread", "mash", "vegetables")),
    (
        "Main",
        (
            "main",
            "entree",
            "steak",
            "burger",
            "chicken",
            "salmon",
            "fish",
            "pasta",
            "pizza",
            "lamb",
            "pork",
            "risotto",
            "curry",
            "sandwich",
        ),
    ),
)
_BEVERAGE_CATEGORY_TERMS = (
    (
        "Non-Alcoholic",
        (
            "non-alcoholic",
            "alcohol-free",
            "mocktail",
            "soda",
            "juice",
            "lemonade",
            "water",
            "soft drink",
        ),
    ),
    (
        "Alcoholic",
        (
            "cocktail",
            "beer",
            "ale",
            "lager",
            "ipa",
            "stout",
            "cider",
            "whiskey",
            "whisky",
            "bourbon",
            "vodka",
            "gin",
            "rum",
            "tequila",
            "mezcal",
            "brandy",
            "cognac",
            "liqueur",
            "martini",
            "margarita",
            "mojito",
            "negroni",
            "spritz",
        ),
    ),
    ("Cold", ("iced", "frozen", "cold", "milkshake", "smoothie", "shake")),
    ("Hot", ("hot", "coffee", "espresso", "latte", "cappuccino", "tea", "mocha", "cocoa")),
)
_WINE_CATEGORY_BY_STYLE = {
    "sparkling": "Sparkling",
    "champagne": "Sparkling",
    "dessert": "Dessert",
    "fortified": "Fortified",
}
_WINE_CATEGORY_BY_COLOR = {
    "red": "Red",
    "white": "White",
    "rosé": "Rosé",
    "sparkling": "Sparkling",
}
FALLBACK_CATEGORY = "Other"

_BASE_CONFIDENCE = 30
_CATEGORY_BONUS = 25
_PRICE_BONUS = 25
_DESCRIPTION_BONUS = 10
_TYPE_BONUS = 10

_ROSE_WORD_RE = re.compile(r"\bRose\b")

_logger = logging.getLogger(__name__)


def _terms_pattern(terms: Iterable[str]) -> re.Pattern[str]:
    alternatives = sorted((re.escape(term) for term in terms), key=len, reverse=True)
    return re.compile(r"\b(?:" + "|".join(alternatives) + r")s?\b", re.IGNORECASE)


_WINE_PATTERN = _terms_pattern(_WINE_TERMS)
_BEVERAGE_PATTERN = _terms_pattern(_BEVERAGE_TERMS)
_FOOD_CATEGORY_PATTERNS = tuple(
    (category, _terms_pattern(terms)) for category, terms in _FOOD_CATEGORY_TERMS
)
_BEVERAGE_CATEGORY_PATTERNS = tuple(
    (category, _terms_pattern(terms)) for category, terms in _BEVERAGE_CATEGORY_TERMS
)


def coerce_item_type(raw: str | None) -> ItemType | None:
    """Map a type label such as ``Drinks`` or ``wine`` onto an item type."""
    if not raw:
        return None
    return _TYPE_ALIASES.get(raw.strip().casefold())


def infer_item_type(category: str, name: str) -> ItemType:
    """Guess the type from keywords, category first."""
    for text in (category, name):
        if _WINE_PATTERN.search(text):
            return ItemType.WINE
        if _BEVERAGE_PATTERN.search(text):
            return ItemType.BEVERAGE
    return ItemType.FOOD


def title_case_category(raw: str) -> str:
    """Title Case a category, capitalizing each hyphenated part."""
    words = []
    for word in raw.split():
        parts = [part[:1].upper() + part[1:].lower() for part in word.split("-")]
        words.append("-".join(parts))
    return _ROSE_WORD_RE.sub("Rosé", " ".join(words))


def fallback_category(item_type: ItemType, text: str) -> str:
    """Pick a canonical category for an item that arrived without one."""
    if item_type is ItemType.WINE:
        style = wine_style_for(text, default=None)
        if style in _WINE_CATEGORY_BY_STYLE:
            return _WINE_CATEGORY_BY_STYLE[style]
        if looks_rose(text):
            return "Rosé"
        color = wine_color_for(text)
        return _WINE_CATEGORY_BY_COLOR.get(color or "", FALLBACK_CATEGORY)

    patterns = (
        _BEVERAGE_CATEGORY_PATTERNS
        if item_type is ItemType.BEVERAGE
        else _FOOD_CATEGORY_PATTERNS
    )
    for category, pattern in patterns:
        if pattern.search(text):
            return category
    return FALLBACK_CATEGORY


@dataclass
class ItemClassifier:
    """Give every draft a type, a category and a completeness score.

    Items are normalized in place and never dropped; values that cannot be
    kept are removed and reported as processing notes.
    """

    def classify(self, items: list[MenuItem]) -> list[str]:
        notes: list[str] = []
        for position, item in enumerate(items, start=1):
            notes.extend(self._classify_item(position, item))
        _logger.info("Classified %s item(s)", len(items))
        return notes

    def _classify_item(self, position: int, item: MenuItem) -> list[str]:
        notes: list[str] = []
        item.name = item.name.strip()
        item.category = item.category.strip()
        if item.description is not None:
            item.description = item.description.strip() or None

        supplied_type = item.item_type or coerce_item_type(item.raw_type)
        item.item_type = supplied_type or infer_item_type(item.category, item.name)

        supplied_category = bool(item.category)
        if supplied_category:
            item.category = title_case_category(item.category)
        else:
            text = " ".join(part for part in (item.name, item.description) if part)
            item.category = fallback_category(item.item_type, text)

        if item.price is not None and item.price < 0:
            notes.append(
                f"Item {position} ({item.name}): negative price {item.price} removed"
            )
            item.price = None
        if item.vintage is not None and not is_plausible_vintage(item.vintage):
            notes.append(
                f"Item {position} ({item.name}): implausible vintage {item.vintage} "
                f"removed (expected {MIN_VINTAGE} to {latest_plausible_vintage()})"
            )
            item.vintage = None

        score = _BASE_CONFIDENCE
        if supplied_category:
            score += _CATEGORY_BONUS
        if item.price is not None:
            score += _PRICE_BONUS
        if item.description:
            score += _DESCRIPTION_BONUS
        if supplied_type is not None:
            score += _TYPE_BONUS
        if item.source_confidence is not None:
            score = (score + item.source_confidence) / 2
        item.confidence = clamp_confidence(score)

        _logger.debug(
            "Classified item %s: type=%s category=%s confidence=%s",
            position,
            item.item_type.value,
            item.category,
            item.confidence,
        )
        return notes
