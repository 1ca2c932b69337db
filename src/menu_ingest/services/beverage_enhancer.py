"""Bar enrichment for beverages other than wine."""

import re
from collections.abc import Iterable
from dataclasses import dataclass

from menu_ingest.domain.generation import BeverageEnhancement
from menu_ingest.domain.menu import ItemType, MenuItem
from menu_ingest.services.enhancement import SequentialEnhancer, describe_item

BEVERAGE_INSTRUCTIONS = """
You are a master bartender and beverage specialist. Given a drink from a menu,
describe its composition and service.

RESPONSE FORMAT: Return ONLY a JSON object:
{
  "spiritType": "vodka",
  "beerStyle": null,
  "cocktailIngredients": ["vodka", "cranberry juice", "lime juice", "lime wheel"],
  "alcoholContent": null,
  "servingStyle": "shaken",
  "isNonAlcoholic": false,
  "temperature": "chilled",
  "confidence": 90
}

GUIDELINES:
1. spiritType: the base spirit (vodka, gin, rum, whiskey, tequila, brandy, ...);
   brand names map to their spirit ("Grey Goose" -> vodka).
2. beerStyle: IPA, lager, stout, pilsner, wheat beer, porter, ale, ... for beers.
3. cocktailIngredients: spirits, mixers, syrups, liqueurs, bitters and garnishes.
   Use plain names ("fresh lime juice" -> "lime juice"). Never list
   preparation steps such as "shaken" or "stirred" as ingredients.
4. alcoholContent: as printed, e.g. "5.6% ABV"; null if not stated.
5. servingStyle: draft, bottled, canned, neat, on the rocks, shaken, stirred, ...
6. isNonAlcoholic: true for virgin drinks, mocktails, sodas, juices, coffee and tea.
7. Use null for anything you cannot determine.

Return valid JSON only.
""".strip()

PREPARATION_METHODS = (
    "shaken",
    "stirred",
    "muddled",
    "built",
    "strained",
    "blended",
    "chilled",
    "frozen",
    "neat",
    "on the rocks",
    "straight up",
    "garnished",
    "served",
    "topped",
    "finished",
    "mixed",
    "combined",
)
_PREPARATION_MAX_WORDS = 3

INGREDIENT_SYNONYMS = {
    "fresh lime juice": "lime juice",
    "fresh lemon juice": "lemon juice",
    "fresh-squeezed lime juice": "lime juice",
    "fresh-squeezed lemon juice": "lemon juice",
    "freshly squeezed lime juice": "lime juice",
    "freshly squeezed lemon juice": "lemon juice",
    "house-made simple syrup": "simple syrup",
    "homemade simple syrup": "simple syrup",
    "house simple syrup": "simple syrup",
    "homemade grenadine": "grenadine",
    "house-made grenadine": "grenadine",
    "muddled mint": "mint",
    "muddled mint leaves": "mint",
    "fresh mint": "mint",
    "fresh mint leaves": "mint",
    "muddled cucumber": "cucumber",
    "fresh cucumber": "cucumber",
    "lemon twist": "lemon peel",
    "orange twist": "orange peel",
    "lime twist": "lime peel",
    "maraschino cherry": "cherry",
    "cocktail cherry": "cherry",
    "club soda": "soda water",
    "sparkling water": "soda water",
    "tonic water": "tonic",
    "dry vermouth": "vermouth",
    "sweet vermouth": "vermouth",
}

_PREPARATION_RE = re.compile(
    r"\b(?:" + "|".join(re.escape(method) for method in PREPARATION_METHODS) + r")\b",
    re.IGNORECASE,
)


def _is_preparation_step(ingredient: str) -> bool:
    # Longer phrases are descriptions that merely mention a method.
    return (
        len(ingredient.split()) <= _PREPARATION_MAX_WORDS
        and _PREPARATION_RE.search(ingredient) is not None
    )


def normalize_cocktail_ingredients(ingredients: Iterable[str]) -> list[str]:
    """Map synonyms, drop preparation steps and de-duplicate ingredients."""
    seen: set[str] = set()
    normalized = []
    for raw in ingredients:
        ingredient = raw.strip()
        if not ingredient:
            continue
        ingredient = INGREDIENT_SYNONYMS.get(ingredient.lower(), ingredient)
        if _is_preparation_step(ingredient):
            continue
        key = ingredient.casefold()
        if key in seen:
            continue
        seen.add(key)
        normalized.append(ingredient)
    return normalized


@dataclass
class BeverageEnhancer(SequentialEnhancer[BeverageEnhancement]):
    """Adds spirit, beer style, cocktail composition and service details."""

    item_type = ItemType.BEVERAGE
    label = "Beverage"
    response_model = BeverageEnhancement
    instructions = BEVERAGE_INSTRUCTIONS

    def build_prompt(self, item: MenuItem) -> str:
        return (
            "Analyze this beverage and extract detailed information:\n\n"
            f"{describe_item(item)}\n\n"
            "Return the information in the specified JSON format."
        )

    def has_details(self, item: MenuItem) -> bool:
        return item.is_non_alcoholic is not None

    def apply(self, item: MenuItem, enhancement: BeverageEnhancement) -> list[str]:
        for field_name in (
            "spirit_type",
            "beer_style",
            "alcohol_content",
            "serving_style",
            "temperature",
        ):
            if getattr(item, field_name) is None:
                setattr(item, field_name, getattr(enhancement, field_name))
        if not item.cocktail_ingredients:
            ingredients = normalize_cocktail_ingredients(enhancement.cocktail_ingredients)
            item.cocktail_ingredients = ingredients or None
        if item.is_non_alcoholic is None:
            item.is_non_alcoholic = enhancement.is_non_alcoholic
        return []
