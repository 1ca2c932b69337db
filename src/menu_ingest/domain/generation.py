"""Models for payloads returned by the generation service."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from menu_ingest.domain.values import (
    clamp_confidence,
    clean_text,
    parse_int,
    parse_price,
)

MAX_INGREDIENTS = 8
MAX_COOKING_METHODS = 4
MAX_ALLERGENS = 6
MAX_GRAPE_VARIETIES = 10
MAX_SERVING_OPTIONS = 10
MAX_SUGGESTED_PAIRINGS = 5


class _GeneratedModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _clean_strings(values: list[str]) -> list[str]:
    return [value.strip() for value in values if value and value.strip()]


class ExtractedMenu(_GeneratedModel):
    """Top-level shape of an extraction call; items are checked one by one."""

    menu_name: str | None = Field(default=None, alias="menuName")
    items: list[dict[str, object]]

    @field_validator("menu_name", mode="before")
    @classmethod
    def _blank_name(cls, value: object) -> str | None:
        return clean_text(value)


class ExtractedItem(_GeneratedModel):
    """Single menu item reported by the extraction call."""

    name: str = Field(min_length=1)
    description: str | None = None
    price: float | None = None
    category: str | None = None
    item_type: str | None = Field(default=None, alias="itemType")
    confidence: int | None = None
    original_text: str | None = Field(default=None, alias="originalText")

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("description", "category", "item_type", "original_text", mode="before")
    @classmethod
    def _optional_text(cls, value: object) -> str | None:
        return clean_text(value)

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, value: object) -> float | None:
        return parse_price(value)

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence(cls, value: object) -> int | None:
        return None if value is None else clamp_confidence(value)


class FoodDietaryTags(_GeneratedModel):
    is_vegetarian: bool = Field(default=False, alias="isVegetarian")
    is_vegan: bool = Field(default=False, alias="isVegan")
    is_gluten_free: bool = Field(default=False, alias="isGlutenFree")
    is_dairy_free: bool = Field(default=False, alias="isDairyFree")
    is_spicy: bool = Field(default=False, alias="isSpicy")


class FoodEnhancement(_GeneratedModel):
    """Culinary detail for a food item."""

    ingredients: list[str]
    cooking_methods: list[str] = Field(alias="cookingMethods")
    dietary_tags: FoodDietaryTags = Field(alias="dietaryTags")
    allergens: list[str] = Field(default_factory=list)
    confidence: int = 50

    @field_validator("ingredients")
    @classmethod
    def _clip_ingredients(cls, value: list[str]) -> list[str]:
        return _clean_strings(value)[:MAX_INGREDIENTS]

    @field_validator("cooking_methods")
    @classmethod
    def _clip_methods(cls, value: list[str]) -> list[str]:
        return _clean_strings(value)[:MAX_COOKING_METHODS]

    @field_validator("allergens", mode="before")
    @classmethod
    def _allergens_list(cls, value: object) -> object:
        return value if isinstance(value, list) else []

    @field_validator("allergens")
    @classmethod
    def _clip_allergens(cls, value: list[str]) -> list[str]:
        return _clean_strings(value)[:MAX_ALLERGENS]

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence(cls, value: object) -> int:
        return clamp_confidence(value)


class BeverageEnhancement(_GeneratedModel):
    """Bar detail for a non-wine beverage."""

    spirit_type: str | None = Field(default=None, alias="spiritType")
    beer_style: str | None = Field(default=None, alias="beerStyle")
    cocktail_ingredients: list[str] = Field(
        default_factory=list, alias="cocktailIngredients"
    )
    alcohol_content: str | None = Field(default=None, alias="alcoholContent")
    serving_style: str | None = Field(default=None, alias="servingStyle")
    is_non_alcoholic: bool = Field(alias="isNonAlcoholic")
    temperature: str | None = None
    confidence: int = 50

    @field_validator(
        "spirit_type",
        "beer_style",
        "alcohol_content",
        "serving_style",
        "temperature",
        mode="before",
    )
    @classmethod
    def _optional_text(cls, value: object) -> str | None:
        return clean_text(value)

    @field_validator("cocktail_ingredients", mode="before")
    @classmethod
    def _ingredients_list(cls, value: object) -> object:
        return [] if value is None else value

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence(cls, value: object) -> int:
        return clamp_confidence(value)


class WineServingOption(_GeneratedModel):
    size: str | None = None
    price: float | None = None

    @field_validator("size", mode="before")
    @classmethod
    def _size(cls, value: object) -> str | None:
        return clean_text(value)

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, value: object) -> float | None:
        return parse_price(value)


class WineEnhancement(_GeneratedModel):
    """Provenance and service detail for a wine."""

    producer: str | None = None
    region: str | None = None
    vintage: int | None = None
    grape_variety: list[str] = Field(alias="grapeVariety")
    serving_options: list[WineServingOption] = Field(
        default_factory=list, alias="servingOptions"
    )
    suggested_pairings: list[str] = Field(
        default_factory=list, alias="suggestedPairings"
    )
    wine_style: str | None = Field(default=None, alias="wineStyle")
    wine_color: str | None = Field(default=None, alias="wineColor")
    confidence: int = 50

    @field_validator("producer", "region", "wine_style", "wine_color", mode="before")
    @classmethod
    def _optional_text(cls, value: object) -> str | None:
        return clean_text(value)

    @field_validator("vintage", mode="before")
    @classmethod
    def _vintage(cls, value: object) -> int | None:
        return parse_int(value)

    @field_validator("grape_variety")
    @classmethod
    def _clip_grapes(cls, value: list[str]) -> list[str]:
        return _clean_strings(value)[:MAX_GRAPE_VARIETIES]

    @field_validator("serving_options", mode="before")
    @classmethod
    def _option_objects(cls, value: object) -> object:
        if not isinstance(value, list):
            return []
        return [option for option in value if isinstance(option, dict)]

    @field_validator("suggested_pairings", mode="before")
    @classmethod
    def _pairings_list(cls, value: object) -> object:
        return value if isinstance(value, list) else []

    @field_validator("suggested_pairings")
    @classmethod
    def _clip_pairings(cls, value: list[str]) -> list[str]:
        return _clean_strings(value)[:MAX_SUGGESTED_PAIRINGS]

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence(cls, value: object) -> int:
        return clamp_confidence(value)
