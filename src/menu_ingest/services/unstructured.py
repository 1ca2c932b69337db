"""AI-assisted extraction for PDF and plain-text menus."""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from menu_ingest.domain.errors import PipelineError, PipelineErrorKind, pipeline_kind_for
from menu_ingest.domain.generation import ExtractedItem
from menu_ingest.domain.menu import MenuDraft, MenuItem
from menu_ingest.domain.results import Err, Ok, Result
from menu_ingest.services.chunker import TextChunker
from menu_ingest.services.extraction import AIExtractionClient

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0e-\x1f\x7f]")
_HORIZONTAL_SPACE_RE = re.compile(r"[ \t\xa0]+")
_LINE_EDGE_SPACE_RE = re.compile(r" *\n *")
_EXTRA_BLANK_LINES_RE = re.compile(r"\n{3,}")

_logger = logging.getLogger(__name__)


def clean_extracted_text(text: str) -> str:
    """Normalize whitespace in text pulled out of a document."""
    cleaned = text.replace("\r\n", "\n").replace("\r", "\n")
    cleaned = cleaned.replace("\f", "\n\n")
    cleaned = _CONTROL_CHARS_RE.sub("", cleaned)
    cleaned = _HORIZONTAL_SPACE_RE.sub(" ", cleaned)
    cleaned = _LINE_EDGE_SPACE_RE.sub("\n", cleaned)
    cleaned = _EXTRA_BLANK_LINES_RE.sub("\n\n", cleaned)
    return cleaned.strip()


def _draft_from_extracted(extracted: ExtractedItem) -> MenuItem:
    return MenuItem(
        name=extracted.name,
        category=extracted.category or "",
        description=extracted.description,
        price=extracted.price,
        original_text=extracted.original_text,
        source_confidence=extracted.confidence,
        raw_type=extracted.item_type,
    )


def _dedup_key(item: ExtractedItem) -> tuple[str, str, float | None]:
    return (item.name.casefold(), (item.item_type or "").casefold(), item.price)


@dataclass
class UnstructuredExtractor:
    """Chunk a document's text and merge per-chunk extraction results.

    Chunks are processed one at a time with a fixed delay between calls. A
    failed chunk is skipped with a note; only a document that yields no items
    at all fails.
    """

    extraction_client: AIExtractionClient
    chunker: TextChunker = field(default_factory=TextChunker)
    chunk_delay_seconds: float = 1.0
    sleep: "Callable[[float], Awaitable[None]]" = field(default=asyncio.sleep)

    async def extract(
        self, text: str, *, cancel: asyncio.Event | None = None
    ) -> Result[MenuDraft, PipelineError]:
        chunks = self.chunker.split(clean_extracted_text(text))
        total = len(chunks)
        _logger.info("Extracting menu items from %s chunk(s)", total)

        notes: list[str] = []
        items: list[MenuItem] = []
        menu_name: str | None = None
        first_seen_in: dict[tuple[str, str, float | None], int] = {}
        issued_call = False

        for index, chunk in enumerate(chunks, start=1):
            if not chunk.strip():
                continue
            if issued_call:
                await self.sleep(self.chunk_delay_seconds)
            if cancel is not None and cancel.is_set():
                notes.append(
                    f"Extraction cancelled: {total - index + 1} of {total} chunks not processed"
                )
                break
            issued_call = True

            outcome = await self.extraction_client.extract(
                chunk, label=f"chunk {index}/{total}"
            )
            if isinstance(outcome, Err):
                _logger.warning(
                    "Chunk %s/%s skipped (%s): %s",
                    index,
                    total,
                    pipeline_kind_for(outcome.error).value,
                    outcome.error.message,
                )
                notes.append(f"Chunk {index}/{total} skipped: {outcome.error.describe()}")
                continue

            extraction = outcome.value
            if menu_name is None and extraction.menu_name:
                menu_name = extraction.menu_name
            if extraction.dropped_items:
                notes.append(
                    f"Chunk {index}/{total}: dropped {extraction.dropped_items} "
                    "item(s) without a name"
                )

            duplicates = 0
            for extracted in extraction.items:
                # Repeats inside one chunk are real menu entries; only repeats
                # of an earlier chunk's item are boundary overlap.
                if first_seen_in.setdefault(_dedup_key(extracted), index) != index:
                    duplicates += 1
                    continue
                items.append(_draft_from_extracted(extracted))
            if duplicates:
                notes.append(
                    f"Chunk {index}/{total}: dropped {duplicates} item(s) "
                    "already extracted from an earlier chunk"
                )
            _logger.debug(
                "Chunk %s/%s yielded %s item(s)", index, total, len(extraction.items)
            )

        if not items:
            return Err(
                PipelineError(
                    PipelineErrorKind.TOTAL_EXTRACTION_FAILURE,
                    "No menu items could be extracted from the document",
                    tuple(notes),
                )
            )
        return Ok(MenuDraft(menu_name=menu_name, items=items, processing_notes=notes))
