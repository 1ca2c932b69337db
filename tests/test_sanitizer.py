"""Tests for generative JSON repair and validation."""

from menu_ingest.domain.generation import FoodEnhancement, WineEnhancement
from menu_ingest.domain.results import Err, Ok
from menu_ingest.services.sanitizer import (
    close_truncated_items,
    first_json_object,
    parse_and_validate,
    parse_json_object,
    strip_code_fences,
)


def test_strip_code_fences_with_language_tag() -> None:
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('```json\n{"a": 1}') == '{"a": 1}'


def test_parse_json_object_plain_and_prose_wrapped() -> None:
    assert parse_json_object('{"a": 1}') == Ok({"a": 1})
    assert parse_json_object('Here you go: {"a": 1} Enjoy!') == Ok({"a": 1})


def test_parse_json_object_ignores_braces_in_prose_and_extra_objects() -> None:
    assert parse_json_object('Using {house style}: {"a": 1} as requested') == Ok({"a": 1})
    assert parse_json_object('{"a": 1}\n{"b": 2}') == Ok({"a": 1})
    assert first_json_object('{broken {"a": {"b": 2}} {"c": 3}') == '{"a": {"b": 2}}'
    assert first_json_object("no braces {here") is None


def test_parse_json_object_removes_trailing_commas() -> None:
    assert parse_json_object('{"items": [1, 2,], "b": 3,}') == Ok({"items": [1, 2], "b": 3})


def test_parse_json_object_recovers_truncated_items() -> None:
    text = '{"items": [{"name": "Soup"}, {"name": "Sal'

    result = parse_json_object(text)

    assert result == Ok({"items": [{"name": "Soup"}]})


def test_close_truncated_items_ignores_closed_arrays() -> None:
    assert close_truncated_items('{"items": [{"name": "Soup"}]}') is None
    assert close_truncated_items('{"other": 1') is None


def test_parse_json_object_failures() -> None:
    assert parse_json_object(None) == Err("empty response")
    assert parse_json_object("   ") == Err("empty response")
    assert parse_json_object("I could not analyze this dish.") == Err(
        "response was not valid JSON"
    )
    assert parse_json_object("[1, 2]") == Err("response JSON is not an object")


def test_parse_and_validate_reports_missing_fields() -> None:
    result = parse_and_validate('{"ingredients": ["egg"]}', FoodEnhancement)

    assert isinstance(result, Err)
    assert "cookingMethods" in result.error
    assert "dietaryTags" in result.error


def test_parse_and_validate_clips_lists_and_confidence() -> None:
    text = """```json
    {
      "ingredients": ["a", "b", "c", "d", "e", "f", "g", "h", "i", " "],
      "cookingMethods": ["grilled"],
      "dietaryTags": {"isVegetarian": true},
      "allergens": "none",
      "confidence": 140
    }
    ```"""

    result = parse_and_validate(text, FoodEnhancement)

    assert isinstance(result, Ok)
    assert result.value.ingredients == ["a", "b", "c", "d", "e", "f", "g", "h"]
    assert result.value.allergens == []
    assert result.value.confidence == 100
    assert result.value.dietary_tags.is_vegetarian is True
    assert result.value.dietary_tags.is_vegan is False


def test_wine_enhancement_drops_non_object_serving_options() -> None:
    text = (
        '{"grapeVariety": ["Merlot"], "vintage": "2018", '
        '"servingOptions": [{"size": "Glass", "price": "$9"}, "Bottle"]}'
    )

    result = parse_and_validate(text, WineEnhancement)

    assert isinstance(result, Ok)
    assert result.value.vintage == 2018
    assert len(result.value.serving_options) == 1
    assert result.value.serving_options[0].price == 9.0
