"""Tests for beverage enrichment."""

import asyncio

from menu_ingest.domain.menu import ItemType, MenuItem, PositionedItem
from menu_ingest.domain.results import Ok
from menu_ingest.services.beverage_enhancer import (
    BeverageEnhancer,
    normalize_cocktail_ingredients,
)
from tests.conftest import RecordingSleep, ScriptedGenerationClient, service_error


def test_normalize_cocktail_ingredients() -> None:
    raw = [
        "Tequila",
        "Fresh lime juice",
        "lime juice",
        "Shaken",
        "on the rocks",
        "Club soda",
        "  ",
        "Salt rim, shaken hard and served with a smile",
    ]

    assert normalize_cocktail_ingredients(raw) == [
        "Tequila",
        "lime juice",
        "soda water",
        "Salt rim, shaken hard and served with a smile",
    ]


def test_enhance_fills_beverage_fields(generation_client: ScriptedGenerationClient) -> None:
    generation_client.text.append(
        Ok(
            '{"spiritType": "tequila", "cocktailIngredients": ["tequila", "fresh lime juice",'
            ' "stirred"], "servingStyle": "shaken", "isNonAlcoholic": false,'
            ' "temperature": "chilled", "confidence": 90}'
        )
    )
    margarita = MenuItem(
        name="Margarita", category="Cocktails", item_type=ItemType.BEVERAGE, spirit_type="mezcal"
    )
    enhancer = BeverageEnhancer(port=generation_client, sleep=RecordingSleep())

    report = asyncio.run(enhancer.enhance_batch([PositionedItem(1, margarita)]))

    assert report.enhanced == 1
    assert margarita.spirit_type == "mezcal"
    assert margarita.cocktail_ingredients == ["tequila", "lime juice"]
    assert margarita.serving_style == "shaken"
    assert margarita.is_non_alcoholic is False
    assert margarita.beer_style is None


def test_enhance_failure_notes_service_error(
    generation_client: ScriptedGenerationClient,
) -> None:
    generation_client.text.append(service_error("rate limited"))
    lemonade = MenuItem(name="Lemonade", category="Non-Alcoholic", item_type=ItemType.BEVERAGE)
    enhancer = BeverageEnhancer(port=generation_client, sleep=RecordingSleep())

    report = asyncio.run(enhancer.enhance_batch([PositionedItem(4, lemonade)]))

    assert lemonade.is_non_alcoholic is None
    assert report.notes[0] == (
        "Beverage enhancement failed for item 4 (Lemonade): service error: rate limited"
    )


def test_beverage_with_flag_is_already_detailed(
    generation_client: ScriptedGenerationClient,
) -> None:
    water = MenuItem(
        name="Still Water", category="Cold", item_type=ItemType.BEVERAGE, is_non_alcoholic=True
    )
    enhancer = BeverageEnhancer(port=generation_client, sleep=RecordingSleep())

    report = asyncio.run(enhancer.enhance_batch([PositionedItem(1, water)]))

    assert report.skipped == 1
    assert generation_client.complete_calls == []
