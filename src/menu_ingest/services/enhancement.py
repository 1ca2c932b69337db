"""Sequential per-item enrichment shared by the type enhancers."""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, Generic, Protocol, TypeVar

from pydantic import BaseModel

from menu_ingest.domain.errors import PipelineErrorKind
from menu_ingest.domain.menu import ItemType, MenuItem, PositionedItem
from menu_ingest.domain.results import Err, Ok, Result
from menu_ingest.services.generation import StructuredGenerationPort
from menu_ingest.services.sanitizer import parse_and_validate

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

ModelT = TypeVar("ModelT", bound=BaseModel)

ENHANCEMENT_ORDER = (ItemType.FOOD, ItemType.BEVERAGE, ItemType.WINE)

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnhancementReport:
    """Outcome of one enhancer run over its items."""

    enhanced: int
    attempted: int
    skipped: int
    notes: list[str]


class ItemEnhancer(Protocol):
    """Interface for a type-specific enhancer."""

    item_type: ItemType

    async def enhance_batch(
        self, items: list[PositionedItem], cancel: asyncio.Event | None = None
    ) -> EnhancementReport:
        """Enhance items of this enhancer's type in place."""


@dataclass
class SequentialEnhancer(ABC, Generic[ModelT]):
    """One free-text call per item, validated and merged into the draft.

    Calls are issued one at a time with ``delay_seconds`` between them. A
    failed call leaves its item untouched and is never retried.
    """

    item_type: ClassVar[ItemType]
    label: ClassVar[str]
    response_model: ClassVar[type[BaseModel]]
    instructions: ClassVar[str]

    port: StructuredGenerationPort
    delay_seconds: float = 2.0
    sleep: "Callable[[float], Awaitable[None]]" = field(default=asyncio.sleep)

    @abstractmethod
    def build_prompt(self, item: MenuItem) -> str:
        """Describe one item for the generation call."""

    @abstractmethod
    def has_details(self, item: MenuItem) -> bool:
        """Whether the item already carries this type's required fields."""

    @abstractmethod
    def apply(self, item: MenuItem, enhancement: ModelT) -> list[str]:
        """Merge a validated enhancement into absent fields; return notes."""

    async def enhance_batch(
        self, items: list[PositionedItem], cancel: asyncio.Event | None = None
    ) -> EnhancementReport:
        notes: list[str] = []
        pending = [positioned for positioned in items if not self.has_details(positioned.item)]
        skipped = len(items) - len(pending)
        if skipped:
            notes.append(
                f"{self.label} enhancement: {skipped} item(s) already detailed, skipped"
            )
        _logger.info("%s enhancement: %s item(s) to enhance", self.label, len(pending))

        enhanced = 0
        attempted = 0
        for index, positioned in enumerate(pending):
            if index:
                await self.sleep(self.delay_seconds)
            if cancel is not None and cancel.is_set():
                notes.append(
                    f"{self.label} enhancement cancelled: "
                    f"{len(pending) - index} item(s) left unenhanced"
                )
                break
            attempted += 1
            item = positioned.item
            outcome = await self._enhance_item(item)
            if isinstance(outcome, Err):
                _logger.warning(
                    "%s enhancement failed for item %s (%s): %s",
                    self.label,
                    positioned.position,
                    item.name,
                    outcome.error,
                )
                notes.append(
                    f"{self.label} enhancement failed for item {positioned.position} "
                    f"({item.name}): {outcome.error}"
                )
                continue
            notes.extend(
                f"Item {positioned.position} ({item.name}): {note}"
                for note in self.apply(item, outcome.value)
            )
            enhanced += 1
            _logger.debug("%s enhancement applied to item %s", self.label, positioned.position)

        notes.append(f"{self.label} enhancement: enhanced {enhanced}/{len(pending)} items")
        return EnhancementReport(
            enhanced=enhanced, attempted=attempted, skipped=skipped, notes=notes
        )

    async def _enhance_item(self, item: MenuItem) -> Result[ModelT, str]:
        response = await self.port.complete(
            instructions=self.instructions, prompt=self.build_prompt(item)
        )
        if isinstance(response, Err):
            return Err(response.error.describe())
        parsed = parse_and_validate(response.value, self.response_model)
        if isinstance(parsed, Err):
            _logger.debug(
                "%s: %s", PipelineErrorKind.ENHANCEMENT_VALIDATION.value, parsed.error
            )
            return Err(parsed.error)
        return Ok(parsed.value)


def describe_item(item: MenuItem) -> str:
    """Render the fields an enhancer prompt needs."""
    lines = [f"ITEM NAME: {item.name}"]
    lines.append(f"DESCRIPTION: {item.description or 'No description available'}")
    lines.append(f"CATEGORY: {item.category}")
    if item.price is not None:
        lines.append(f"PRICE: {item.price:.2f}")
    if item.original_text and item.original_text != item.name:
        lines.append(f"ORIGINAL MENU TEXT: {item.original_text}")
    return "\n".join(lines)


@dataclass
class EnhancementOrchestrator:
    """Run each type enhancer once over its items, food then beverage then wine."""

    enhancers: list[ItemEnhancer]

    async def enhance(
        self, items: list[MenuItem], cancel: asyncio.Event | None = None
    ) -> list[str]:
        """Enhance items in place and return the processing notes."""
        groups: dict[ItemType, list[PositionedItem]] = {}
        for position, item in enumerate(items, start=1):
            if item.item_type is None:
                raise ValueError(f"item {position} was not classified")
            groups.setdefault(item.item_type, []).append(PositionedItem(position, item))

        by_type = {enhancer.item_type: enhancer for enhancer in self.enhancers}
        notes: list[str] = []
        for item_type in ENHANCEMENT_ORDER:
            group = groups.get(item_type)
            if not group:
                continue
            enhancer = by_type.get(item_type)
            if enhancer is None:
                notes.append(
                    f"No enhancer configured for {item_type.value} items; "
                    f"{len(group)} item(s) left unenhanced"
                )
                continue
            if cancel is not None and cancel.is_set():
                notes.append(
                    f"Enhancement cancelled: {len(group)} {item_type.value} "
                    "item(s) left unenhanced"
                )
                continue
            report = await enhancer.enhance_batch(group, cancel=cancel)
            notes.extend(report.notes)
        return notes
