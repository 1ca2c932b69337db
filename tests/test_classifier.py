"""Tests for item classification and normalization."""

from menu_ingest.domain.menu import ItemType, MenuItem
from menu_ingest.domain.values import latest_plausible_vintage
from menu_ingest.services.classifier import (
    ItemClassifier,
    coerce_item_type,
    fallback_category,
    infer_item_type,
    title_case_category,
)


def test_coerce_item_type_aliases() -> None:
    assert coerce_item_type("Drinks") is ItemType.BEVERAGE
    assert coerce_item_type(" wine ") is ItemType.WINE
    assert coerce_item_type("dish") is ItemType.FOOD
    assert coerce_item_type("merchandise") is None
    assert coerce_item_type(None) is None


def test_infer_item_type_from_keywords() -> None:
    assert infer_item_type("Red Wines", "Malbec Reserva") is ItemType.WINE
    assert infer_item_type("", "Chianti Classico") is ItemType.WINE
    assert infer_item_type("Cocktails", "Paloma") is ItemType.BEVERAGE
    assert infer_item_type("", "Iced Tea") is ItemType.BEVERAGE
    assert infer_item_type("Starters", "Ginger Chicken Wings") is ItemType.FOOD
    assert infer_item_type("", "Steak Frites") is ItemType.FOOD


def test_title_case_category() -> None:
    assert title_case_category("main course") == "Main Course"
    assert title_case_category("NON-ALCOHOLIC drinks") == "Non-Alcoholic Drinks"
    assert title_case_category("rose wines") == "Rosé Wines"


def test_fallback_category_by_type() -> None:
    assert fallback_category(ItemType.FOOD, "Chocolate Cake") == "Dessert"
    assert fallback_category(ItemType.FOOD, "Mystery Box") == "Other"
    assert fallback_category(ItemType.BEVERAGE, "Fresh Orange Juice") == "Non-Alcoholic"
    assert fallback_category(ItemType.BEVERAGE, "Flat White Coffee") == "Hot"
    assert fallback_category(ItemType.WINE, "Prosecco DOC") == "Sparkling"
    assert fallback_category(ItemType.WINE, "Whispering Angel Rosé") == "Rosé"
    assert fallback_category(ItemType.WINE, "Vintage Port 2011") == "Fortified"
    assert fallback_category(ItemType.WINE, "Rioja Tinto") == "Red"


def test_classify_normalizes_every_item() -> None:
    items = [
        MenuItem(name=" Grilled Salmon ", category="main course", price=24.99, raw_type="food"),
        MenuItem(name="Negroni"),
        MenuItem(name="Pinot Noir", category="red wine", price=-12.0),
    ]

    notes = ItemClassifier().classify(items)

    assert [item.item_type for item in items] == [
        ItemType.FOOD,
        ItemType.BEVERAGE,
        ItemType.WINE,
    ]
    assert items[0].name == "Grilled Salmon"
    assert [item.category for item in items] == ["Main Course", "Alcoholic", "Red Wine"]
    assert items[2].price is None
    assert notes == ["Item 3 (Pinot Noir): negative price -12.0 removed"]


def test_classify_confidence_reflects_completeness() -> None:
    complete = MenuItem(
        name="Burger", category="Mains", price=15.0, description="Beef", raw_type="food"
    )
    bare = MenuItem(name="Burger")
    reported = MenuItem(name="Burger", category="Mains", price=15.0, source_confidence=40)

    ItemClassifier().classify([complete, bare, reported])

    assert complete.confidence == 100
    assert bare.confidence == 30
    assert reported.confidence == 60


def test_classify_removes_implausible_vintage() -> None:
    old = MenuItem(name="Old Bordeaux", category="Red", item_type=ItemType.WINE, vintage=1492)
    future = MenuItem(name="Future Rioja", category="Red", item_type=ItemType.WINE, vintage=2099)
    latest = latest_plausible_vintage()

    notes = ItemClassifier().classify([old, future])

    assert old.vintage is None
    assert future.vintage is None
    assert notes == [
        f"Item 1 (Old Bordeaux): implausible vintage 1492 removed (expected 1800 to {latest})",
        f"Item 2 (Future Rioja): implausible vintage 2099 removed (expected 1800 to {latest})",
    ]
