"""Culinary enrichment for food items."""

from dataclasses import dataclass

from menu_ingest.domain.generation import FoodEnhancement
from menu_ingest.domain.menu import DIETARY_FLAGS, DietaryTags, ItemType, MenuItem
from menu_ingest.services.enhancement import SequentialEnhancer, describe_item

FOOD_INSTRUCTIONS = """
You are a culinary expert specializing in food analysis. Given a food item's
name and description, extract its ingredients, cooking methods, dietary
restrictions and allergens.

RESPONSE FORMAT: Return ONLY a JSON object:
{
  "ingredients": ["ingredient1", "ingredient2"],
  "cookingMethods": ["grilled", "sautéed"],
  "dietaryTags": {
    "isVegetarian": true,
    "isVegan": false,
    "isGlutenFree": false,
    "isDairyFree": true,
    "isSpicy": false
  },
  "allergens": ["dairy", "gluten", "nuts"],
  "confidence": 85
}

GUIDELINES:
1. List the main ingredients (at most 8).
2. Identify cooking methods (grilled, fried, baked, sautéed, roasted, ...), at most 4.
3. Identify common allergens (dairy, gluten, nuts, shellfish, eggs, soy, fish), at most 6.
4. Be conservative: if unsure, mark a flag false or leave the value out of a list.

DIETARY RULES:
- Vegetarian: no meat, fish or poultry
- Vegan: no animal products (meat, dairy, eggs, honey)
- Gluten-free: no wheat, barley, rye or other gluten-containing ingredients
- Dairy-free: no milk, cheese, cream, butter or other dairy products
- Spicy: contains chili, hot pepper or spicy seasonings

Return valid JSON only.
""".strip()


def _all_flags_supplied(item: MenuItem) -> bool:
    supplied = item.supplied_dietary_flags or {}
    return all(name in supplied for name in DIETARY_FLAGS)


@dataclass
class FoodEnhancer(SequentialEnhancer[FoodEnhancement]):
    """Adds ingredients, cooking methods, dietary tags and allergens."""

    item_type = ItemType.FOOD
    label = "Food"
    response_model = FoodEnhancement
    instructions = FOOD_INSTRUCTIONS

    def build_prompt(self, item: MenuItem) -> str:
        return (
            "Analyze this food item and extract detailed information:\n\n"
            f"{describe_item(item)}\n\n"
            "Return the information in the specified JSON format."
        )

    def has_details(self, item: MenuItem) -> bool:
        return bool(item.ingredients) and bool(item.cooking_methods) and (
            _all_flags_supplied(item)
        )

    def apply(self, item: MenuItem, enhancement: FoodEnhancement) -> list[str]:
        if not item.ingredients:
            item.ingredients = enhancement.ingredients
        if not item.cooking_methods:
            item.cooking_methods = enhancement.cooking_methods
        if not _all_flags_supplied(item):
            # Flags from the upload override the generated ones.
            flags = enhancement.dietary_tags.model_dump()
            flags.update(item.supplied_dietary_flags or {})
            item.dietary_tags = DietaryTags.from_flags(flags)
        if not item.allergens:
            item.allergens = enhancement.allergens
        return []
