"""Menu item records and the parse result envelope."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

DIETARY_FLAGS = (
    "is_vegetarian",
    "is_vegan",
    "is_gluten_free",
    "is_dairy_free",
    "is_spicy",
)


class ItemType(Enum):
    """Canonical menu item types."""

    FOOD = "food"
    BEVERAGE = "beverage"
    WINE = "wine"


@dataclass(frozen=True)
class DietaryTags:
    """Dietary flags attached to a food item."""

    is_vegetarian: bool = False
    is_vegan: bool = False
    is_gluten_free: bool = False
    is_dairy_free: bool = False
    is_spicy: bool = False

    @classmethod
    def from_flags(cls, flags: Mapping[str, bool]) -> "DietaryTags":
        """Build tags from a possibly partial flag map; vegan implies vegetarian."""
        values = {name: bool(flags.get(name, False)) for name in DIETARY_FLAGS}
        values["is_vegetarian"] = values["is_vegetarian"] or values["is_vegan"]
        return cls(**values)

    def to_dict(self) -> dict[str, bool]:
        return {
            "isVegetarian": self.is_vegetarian,
            "isVegan": self.is_vegan,
            "isGlutenFree": self.is_gluten_free,
            "isDairyFree": self.is_dairy_free,
            "isSpicy": self.is_spicy,
        }


@dataclass(frozen=True)
class ServingOption:
    """A serving size with its price, e.g. Glass 8.50."""

    size: str
    price: float


@dataclass
class MenuItem:
    """A menu item record.

    Created as a draft by a parser or the AI extractor, normalized once by the
    classifier and then filled in place by at most one type enhancer. Fields
    left as ``None`` are absent from the serialized item. ``source_confidence``,
    ``raw_type`` and ``supplied_dietary_flags`` carry what the upload or the
    upstream stage reported and are never serialized.
    """

    name: str
    category: str = ""
    item_type: ItemType | None = None
    description: str | None = None
    price: float | None = None
    confidence: int = 0
    original_text: str | None = None
    source_confidence: int | None = None
    raw_type: str | None = None
    supplied_dietary_flags: dict[str, bool] | None = None

    # Food
    ingredients: list[str] | None = None
    cooking_methods: list[str] | None = None
    dietary_tags: DietaryTags | None = None
    allergens: list[str] | None = None

    # Beverage
    spirit_type: str | None = None
    beer_style: str | None = None
    cocktail_ingredients: list[str] | None = None
    alcohol_content: str | None = None
    serving_style: str | None = None
    is_non_alcoholic: bool | None = None
    temperature: str | None = None

    # Wine
    producer: str | None = None
    region: str | None = None
    vintage: int | None = None
    grape_variety: list[str] | None = None
    serving_options: list[ServingOption] | None = None
    suggested_pairings: list[str] | None = None
    wine_style: str | None = None
    wine_color: str | None = None

    def to_dict(self) -> dict[str, object]:
        """Serialize to the camelCase wire shape, omitting absent fields."""
        payload: dict[str, object] = {
            "name": self.name,
            "category": self.category,
            "itemType": self.item_type.value if self.item_type else None,
            "description": self.description,
            "price": self.price,
            "confidence": self.confidence,
            "originalText": self.original_text,
            "ingredients": self.ingredients,
            "cookingMethods": self.cooking_methods,
            "dietaryTags": self.dietary_tags.to_dict() if self.dietary_tags else None,
            "allergens": self.allergens,
            "spiritType": self.spirit_type,
            "beerStyle": self.beer_style,
            "cocktailIngredients": self.cocktail_ingredients,
            "alcoholContent": self.alcohol_content,
            "servingStyle": self.serving_style,
            "isNonAlcoholic": self.is_non_alcoholic,
            "temperature": self.temperature,
            "producer": self.producer,
            "region": self.region,
            "vintage": self.vintage,
            "grapeVariety": self.grape_variety,
            "servingOptions": (
                [{"size": opt.size, "price": opt.price} for opt in self.serving_options]
                if self.serving_options is not None
                else None
            ),
            "suggestedPairings": self.suggested_pairings,
            "wineStyle": self.wine_style,
            "wineColor": self.wine_color,
        }
        return {key: value for key, value in payload.items() if value is not None}


@dataclass(frozen=True)
class PositionedItem:
    """An item together with its 1-based position in the menu."""

    position: int
    item: MenuItem


@dataclass
class MenuDraft:
    """Output of the structured parsers and the unstructured extractor."""

    menu_name: str | None
    items: list[MenuItem]
    processing_notes: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class MenuParseResult:
    """Top-level envelope returned to the caller."""

    success: bool
    menu_name: str
    items: list[MenuItem]
    total_items_found: int
    processing_notes: list[str]
    errors: list[str]

    def to_dict(self) -> dict[str, object]:
        """Serialize to the wire envelope; ``data`` only on success."""
        envelope: dict[str, object] = {"success": self.success}
        if self.success:
            envelope["data"] = {
                "menuName": self.menu_name,
                "items": [item.to_dict() for item in self.items],
                "totalItemsFound": self.total_items_found,
                "processingNotes": list(self.processing_notes),
            }
        envelope["errors"] = list(self.errors)
        return envelope
