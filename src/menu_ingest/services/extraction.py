"""AI extraction of menu items from a chunk of text."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from menu_ingest.domain.errors import GenerationError, GenerationErrorKind
from menu_ingest.domain.generation import ExtractedItem, ExtractedMenu
from menu_ingest.domain.results import Err, Ok, Result
from menu_ingest.services.generation import StructuredGenerationPort
from menu_ingest.services.sanitizer import validate_payload

_logger = logging.getLogger(__name__)


def _nullable(schema: dict[str, object]) -> dict[str, object]:
    return {"anyOf": [schema, {"type": "null"}]}


EXTRACTION_SCHEMA_NAME = "record_menu_items"

EXTRACTION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "menuName": _nullable({"type": "string"}),
        "items": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "description": _nullable({"type": "string"}),
                    "price": _nullable({"type": "number", "minimum": 0}),
                    "category": _nullable({"type": "string"}),
                    "itemType": _nullable(
                        {"type": "string", "enum": ["food", "beverage", "wine"]}
                    ),
                    "confidence": _nullable(
                        {"type": "integer", "minimum": 0, "maximum": 100}
                    ),
                    "originalText": _nullable({"type": "string"}),
                },
                "required": [
                    "name",
                    "description",
                    "price",
                    "category",
                    "itemType",
                    "confidence",
                    "originalText",
                ],
                "additionalProperties": False,
            },
        },
    },
    "required": ["menuName", "items"],
    "additionalProperties": False,
}

EXTRACTION_INSTRUCTIONS = """
You are a menu parsing specialist. Extract every menu item from the restaurant
menu text you are given and record them with the provided function.

Rules:
- Extract only orderable items (dishes, drinks, wines). Skip section headings,
  decorative text, addresses, phone numbers and opening hours.
- itemType is "food" for dishes, "beverage" for cocktails, beers, spirits,
  soft drinks, coffee and tea, and "wine" for all wines including sparkling,
  champagne, port and sake.
- price is the primary price as a number without currency symbols; null if
  no price is shown.
- category is the menu section the item belongs to, e.g. "Starters",
  "Red Wine", "Cocktails".
- confidence (0-100) reflects how clearly the item could be read.
- originalText is the exact source line(s) for the item.
- menuName is the menu's title if the text shows one, otherwise null.
- Do not skip items and do not summarize. If unsure about a field, use null.
""".strip()


def build_extraction_prompt(chunk: str, label: str) -> str:
    return f"Extract all menu items from this part of the menu ({label}).\n\nMENU TEXT:\n{chunk}"


@dataclass(frozen=True)
class ChunkExtraction:
    """Validated result of one extraction call."""

    menu_name: str | None
    items: list[ExtractedItem]
    dropped_items: int = 0


@dataclass
class AIExtractionClient:
    """Structured extraction with a single retry on transient failures."""

    port: StructuredGenerationPort
    retry_delay_seconds: float = 2.0
    retry_attempts: int = 1
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)

    async def extract(
        self, chunk: str, *, label: str = "menu"
    ) -> Result[ChunkExtraction, GenerationError]:
        """Extract items from a chunk; failures are returned, never raised."""
        outcome = await self._generate_with_retry(chunk, label)
        if isinstance(outcome, Err):
            return outcome

        menu = validate_payload(outcome.value, ExtractedMenu)
        if isinstance(menu, Err):
            return Err(
                GenerationError(
                    GenerationErrorKind.NO_STRUCTURED_OUTPUT,
                    f"payload did not match the extraction schema ({menu.error})",
                )
            )

        items: list[ExtractedItem] = []
        dropped = 0
        for raw_item in menu.value.items:
            parsed = validate_payload(raw_item, ExtractedItem)
            if isinstance(parsed, Ok):
                items.append(parsed.value)
            else:
                dropped += 1
                _logger.debug("Dropped extracted item in %s: %s", label, parsed.error)
        return Ok(
            ChunkExtraction(
                menu_name=menu.value.menu_name, items=items, dropped_items=dropped
            )
        )

    async def _generate_with_retry(
        self, chunk: str, label: str
    ) -> Result[dict[str, object], GenerationError]:
        prompt = build_extraction_prompt(chunk, label)
        attempt = 0
        while True:
            outcome = await self.port.generate(
                instructions=EXTRACTION_INSTRUCTIONS,
                prompt=prompt,
                schema=EXTRACTION_SCHEMA,
                schema_name=EXTRACTION_SCHEMA_NAME,
            )
            if isinstance(outcome, Ok):
                return outcome
            if not outcome.error.retryable or attempt >= self.retry_attempts:
                return outcome
            attempt += 1
            _logger.warning(
                "Extraction of %s failed (attempt %s/%s): %s",
                label,
                attempt,
                self.retry_attempts + 1,
                outcome.error.describe(),
            )
            await self.sleep(self.retry_delay_seconds)
