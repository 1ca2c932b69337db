"""Provenance and service enrichment for wines."""

from dataclasses import dataclass

from menu_ingest.domain.generation import MAX_SERVING_OPTIONS, WineEnhancement
from menu_ingest.domain.menu import ItemType, MenuItem, ServingOption
from menu_ingest.domain.values import is_plausible_vintage
from menu_ingest.services.enhancement import SequentialEnhancer, describe_item
from menu_ingest.services.wine_lexicon import (
    find_grapes_by_pattern,
    looks_rose,
    normalize_grape_varieties,
    wine_color_for,
    wine_style_for,
)

WINE_INSTRUCTIONS = """
You are a sommelier. Given a wine from a restaurant menu, identify its
provenance, grapes and service options.

RESPONSE FORMAT: Return ONLY a JSON object:
{
  "producer": "Domaine Leflaive",
  "region": "Burgundy",
  "vintage": 2020,
  "grapeVariety": ["Chardonnay"],
  "wineStyle": "still",
  "wineColor": "white",
  "servingOptions": [{"size": "Glass", "price": 12.99}, {"size": "Bottle", "price": 48}],
  "suggestedPairings": ["roast chicken", "grilled fish"],
  "confidence": 85
}

GUIDELINES:
1. grapeVariety: standard grape names. Recognize regional styles
   ("Chianti" = Sangiovese, "Prosecco" = Glera, "Champagne" = Champagne Blend).
   Use an empty list only if there is no clue at all.
2. vintage: the four-digit year if shown, otherwise null.
3. wineStyle: still, sparkling, champagne, dessert or fortified.
4. wineColor: red, white, rosé, sparkling or orange.
5. servingOptions: every size/price pair printed for the wine; both values required.
6. suggestedPairings: at most 5 dishes or food styles.
7. Use null for anything you cannot determine.

Return valid JSON only.
""".strip()


@dataclass
class WineEnhancer(SequentialEnhancer[WineEnhancement]):
    """Adds producer, region, vintage, grapes, serving options and pairings."""

    item_type = ItemType.WINE
    label = "Wine"
    response_model = WineEnhancement
    instructions = WINE_INSTRUCTIONS

    def build_prompt(self, item: MenuItem) -> str:
        known = [
            f"{label}: {value}"
            for label, value in (
                ("PRODUCER", item.producer),
                ("REGION", item.region),
                ("VINTAGE", item.vintage),
            )
            if value is not None
        ]
        context = "\n".join([describe_item(item), *known])
        return (
            "Analyze this wine and extract detailed information:\n\n"
            f"{context}\n\n"
            "Return the information in the specified JSON format."
        )

    def has_details(self, item: MenuItem) -> bool:
        return bool(item.grape_variety)

    def apply(self, item: MenuItem, enhancement: WineEnhancement) -> list[str]:
        notes: list[str] = []
        if item.producer is None:
            item.producer = enhancement.producer
        if item.region is None:
            item.region = enhancement.region

        if item.vintage is None and enhancement.vintage is not None:
            if is_plausible_vintage(enhancement.vintage):
                item.vintage = enhancement.vintage
            else:
                notes.append(f"implausible vintage {enhancement.vintage} ignored")

        if not item.grape_variety:
            grapes = normalize_grape_varieties(enhancement.grape_variety)
            if not grapes:
                grapes = find_grapes_by_pattern(item.name, item.description)
            item.grape_variety = grapes

        if not item.serving_options:
            options = [
                ServingOption(size=option.size, price=option.price)
                for option in enhancement.serving_options
                if option.size and option.price is not None and option.price >= 0
            ]
            dropped = len(enhancement.serving_options) - len(options)
            if dropped:
                notes.append(f"{dropped} incomplete serving option(s) dropped")
            item.serving_options = options[:MAX_SERVING_OPTIONS] or None

        if not item.suggested_pairings:
            item.suggested_pairings = enhancement.suggested_pairings or None

        if item.wine_style is None:
            item.wine_style = wine_style_for(enhancement.wine_style) or wine_style_for(
                f"{item.name} {item.category}", default=None
            )
        color = wine_color_for(item.wine_color or enhancement.wine_color)
        if color in (None, "other") and looks_rose(item.name, item.region, item.category):
            color = "rosé"
        item.wine_color = color
        return notes
