"""Tests for enhancement ordering and routing."""

import asyncio
from dataclasses import dataclass, field

import pytest

from menu_ingest.domain.menu import ItemType, MenuItem, PositionedItem
from menu_ingest.services.enhancement import (
    EnhancementOrchestrator,
    EnhancementReport,
    ItemEnhancer,
    describe_item,
)


@dataclass
class RecordingEnhancer(ItemEnhancer):
    """Enhancer that records the positions it was given."""

    item_type: ItemType
    log: list[tuple[ItemType, list[int]]] = field(default_factory=list)

    async def enhance_batch(
        self, items: list[PositionedItem], cancel: asyncio.Event | None = None
    ) -> EnhancementReport:
        self.log.append((self.item_type, [positioned.position for positioned in items]))
        return EnhancementReport(
            enhanced=len(items),
            attempted=len(items),
            skipped=0,
            notes=[f"{self.item_type.value}: {len(items)}"],
        )


def _items() -> list[MenuItem]:
    return [
        MenuItem(name="Merlot", item_type=ItemType.WINE),
        MenuItem(name="Soup", item_type=ItemType.FOOD),
        MenuItem(name="Cola", item_type=ItemType.BEVERAGE),
        MenuItem(name="Steak", item_type=ItemType.FOOD),
    ]


def test_runs_food_then_beverage_then_wine() -> None:
    log: list[tuple[ItemType, list[int]]] = []
    orchestrator = EnhancementOrchestrator(
        enhancers=[RecordingEnhancer(item_type, log) for item_type in ItemType]
    )

    notes = asyncio.run(orchestrator.enhance(_items()))

    assert log == [
        (ItemType.FOOD, [2, 4]),
        (ItemType.BEVERAGE, [3]),
        (ItemType.WINE, [1]),
    ]
    assert notes == ["food: 2", "beverage: 1", "wine: 1"]


def test_missing_enhancer_is_noted() -> None:
    orchestrator = EnhancementOrchestrator(enhancers=[RecordingEnhancer(ItemType.FOOD)])

    notes = asyncio.run(orchestrator.enhance(_items()))

    assert notes == [
        "food: 2",
        "No enhancer configured for beverage items; 1 item(s) left unenhanced",
        "No enhancer configured for wine items; 1 item(s) left unenhanced",
    ]


def test_cancelled_run_skips_remaining_groups() -> None:
    cancel = asyncio.Event()
    cancel.set()
    food = RecordingEnhancer(ItemType.FOOD)
    orchestrator = EnhancementOrchestrator(enhancers=[food])

    notes = asyncio.run(orchestrator.enhance(_items()[1:2], cancel=cancel))

    assert food.log == []
    assert notes == ["Enhancement cancelled: 1 food item(s) left unenhanced"]


def test_unclassified_item_is_rejected() -> None:
    orchestrator = EnhancementOrchestrator(enhancers=[])

    with pytest.raises(ValueError):
        asyncio.run(orchestrator.enhance([MenuItem(name="Mystery")]))


def test_describe_item() -> None:
    item = MenuItem(
        name="Ribeye",
        category="Main",
        price=32.0,
        original_text="RIBEYE 12oz ..... 32",
    )

    assert describe_item(item) == (
        "ITEM NAME: Ribeye\n"
        "DESCRIPTION: No description available\n"
        "CATEGORY: Main\n"
        "PRICE: 32.00\n"
        "ORIGINAL MENU TEXT: RIBEYE 12oz ..... 32"
    )
