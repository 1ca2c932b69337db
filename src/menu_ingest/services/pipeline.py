"""End-to-end menu ingestion: dispatch, parse or extract, classify, enhance."""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum

from menu_ingest.domain.errors import PipelineError
from menu_ingest.domain.menu import MenuDraft, MenuParseResult
from menu_ingest.domain.results import Err, Result
from menu_ingest.services.aggregator import aggregate, failure, menu_name_from_filename
from menu_ingest.services.classifier import ItemClassifier
from menu_ingest.services.dispatcher import DispatchedInput, FormatDispatcher, InputFormat
from menu_ingest.services.enhancement import EnhancementOrchestrator
from menu_ingest.services.structured_parsers import (
    parse_csv_menu,
    parse_json_menu,
    parse_spreadsheet_menu,
)
from menu_ingest.services.unstructured import UnstructuredExtractor

_logger = logging.getLogger(__name__)


class PipelineState(Enum):
    """Stages an upload moves through."""

    RECEIVED = "received"
    DISPATCHED = "dispatched"
    PARSED = "parsed"
    EXTRACTING = "extracting"
    CLASSIFIED = "classified"
    ENHANCING = "enhancing"
    AGGREGATED = "aggregated"
    DONE = "done"
    FAILED = "failed"


_TRANSITIONS = {
    PipelineState.RECEIVED: {PipelineState.DISPATCHED},
    PipelineState.DISPATCHED: {
        PipelineState.PARSED,
        PipelineState.EXTRACTING,
        PipelineState.FAILED,
    },
    PipelineState.PARSED: {PipelineState.CLASSIFIED, PipelineState.FAILED},
    PipelineState.EXTRACTING: {PipelineState.CLASSIFIED, PipelineState.FAILED},
    PipelineState.CLASSIFIED: {PipelineState.ENHANCING},
    PipelineState.ENHANCING: {PipelineState.AGGREGATED},
    PipelineState.AGGREGATED: {PipelineState.DONE},
    PipelineState.DONE: set(),
    PipelineState.FAILED: set(),
}


@dataclass
class _RunState:
    label: str
    state: PipelineState = PipelineState.RECEIVED

    def advance(self, target: PipelineState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"invalid pipeline transition {self.state.value} -> {target.value}")
        _logger.debug("Upload %s: %s -> %s", self.label, self.state.value, target.value)
        self.state = target


@dataclass
class MenuIngestionPipeline:
    """Turns an uploaded menu into a parse result envelope.

    Each run owns its notes and items; nothing is shared between runs apart
    from the injected collaborators.
    """

    dispatcher: FormatDispatcher
    unstructured_extractor: UnstructuredExtractor
    orchestrator: EnhancementOrchestrator
    classifier: ItemClassifier = field(default_factory=ItemClassifier)

    async def parse_upload(
        self,
        content: bytes,
        filename: str | None = None,
        *,
        mime_type: str | None = None,
        menu_name: str | None = None,
        cancel: asyncio.Event | None = None,
    ) -> MenuParseResult:
        """Run the whole pipeline; expected failures end up in the envelope."""
        run = _RunState(label=filename or "<upload>")
        dispatched = await self.dispatcher.dispatch(content, filename, mime_type)
        run.advance(PipelineState.DISPATCHED)
        if isinstance(dispatched, Err):
            return self._fail(run, dispatched.error)

        drafted = await self._draft(run, dispatched.value, cancel)
        if isinstance(drafted, Err):
            return self._fail(run, drafted.error)
        draft = drafted.value

        notes = list(draft.processing_notes)
        notes.extend(self.classifier.classify(draft.items))
        run.advance(PipelineState.CLASSIFIED)

        run.advance(PipelineState.ENHANCING)
        notes.extend(await self.orchestrator.enhance(draft.items, cancel=cancel))

        resolved_name = menu_name or draft.menu_name or menu_name_from_filename(filename)
        result = aggregate(resolved_name, draft.items, notes)
        run.advance(PipelineState.AGGREGATED)
        _logger.info(
            "Parsed menu %s: items=%s notes=%s",
            result.menu_name,
            result.total_items_found,
            len(result.processing_notes),
        )
        run.advance(PipelineState.DONE)
        return result

    async def parse_text(
        self,
        text: str,
        *,
        filename: str = "menu.txt",
        menu_name: str | None = None,
        cancel: asyncio.Event | None = None,
    ) -> MenuParseResult:
        """Run the pipeline on text that is already in memory."""
        return await self.parse_upload(
            text.encode("utf-8"),
            filename,
            mime_type="text/plain",
            menu_name=menu_name,
            cancel=cancel,
        )

    async def _draft(
        self,
        run: _RunState,
        dispatched: DispatchedInput,
        cancel: asyncio.Event | None,
    ) -> Result[MenuDraft, PipelineError]:
        if dispatched.format is InputFormat.JSON:
            run.advance(PipelineState.PARSED)
            return parse_json_menu(dispatched.text)
        if dispatched.format is InputFormat.CSV:
            run.advance(PipelineState.PARSED)
            return parse_csv_menu(dispatched.text)
        if dispatched.format is InputFormat.EXCEL:
            run.advance(PipelineState.PARSED)
            return parse_spreadsheet_menu(dispatched.rows)
        run.advance(PipelineState.EXTRACTING)
        return await self.unstructured_extractor.extract(dispatched.text, cancel=cancel)

    def _fail(self, run: _RunState, error: PipelineError) -> MenuParseResult:
        _logger.warning("Upload %s failed (%s): %s", run.label, error.kind.value, error.message)
        run.advance(PipelineState.FAILED)
        return failure(error)
