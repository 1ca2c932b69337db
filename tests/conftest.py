"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from menu_ingest.config import Settings
from menu_ingest.domain.errors import GenerationError, GenerationErrorKind
from menu_ingest.domain.results import Err, Ok, Result
from menu_ingest.services.dispatcher import (
    DocumentTextExtractor,
    FormatDispatcher,
    SpreadsheetReader,
)
from menu_ingest.services.generation import StructuredGenerationPort


async def no_sleep(seconds: float) -> None:
    return None


@dataclass
class RecordingSleep:
    """Sleep replacement that records requested delays."""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@dataclass
class ScriptedGenerationClient(StructuredGenerationPort):
    """Generation port replaying queued results and recording every call."""

    structured: list[Result[dict[str, object], GenerationError]] = field(
        default_factory=list
    )
    text: list[Result[str, GenerationError]] = field(default_factory=list)
    generate_calls: list[dict[str, object]] = field(default_factory=list)
    complete_calls: list[dict[str, str]] = field(default_factory=list)

    async def generate(
        self,
        *,
        instructions: str,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
    ) -> Result[dict[str, object], GenerationError]:
        self.generate_calls.append(
            {"instructions": instructions, "prompt": prompt, "schema_name": schema_name}
        )
        if not self.structured:
            return Err(
                GenerationError(GenerationErrorKind.NO_STRUCTURED_OUTPUT, "nothing queued")
            )
        return self.structured.pop(0)

    async def complete(
        self, *, instructions: str, prompt: str
    ) -> Result[str, GenerationError]:
        self.complete_calls.append({"instructions": instructions, "prompt": prompt})
        if not self.text:
            return Err(GenerationError(GenerationErrorKind.SERVICE_ERROR, "nothing queued"))
        return self.text.pop(0)


@dataclass
class FakeTextExtractor(DocumentTextExtractor):
    """Document extractor returning a fixed outcome."""

    outcome: Result[str, str] = field(default_factory=lambda: Ok(""))
    calls: int = 0

    def extract_text(self, content: bytes) -> Result[str, str]:
        self.calls += 1
        return self.outcome


@dataclass
class FakeSpreadsheetReader(SpreadsheetReader):
    """Spreadsheet reader returning fixed rows."""

    outcome: Result[list[tuple[object, ...]], str] = field(default_factory=lambda: Ok([]))
    calls: int = 0

    def read_rows(self, content: bytes) -> Result[list[tuple[object, ...]], str]:
        self.calls += 1
        return self.outcome


def make_dispatcher(**collaborators: object) -> FormatDispatcher:
    """Build a dispatcher with fakes for every collaborator not given."""
    defaults = {
        "pdf_extractor": FakeTextExtractor(),
        "docx_extractor": FakeTextExtractor(),
        "spreadsheet_reader": FakeSpreadsheetReader(),
    }
    return FormatDispatcher(**{**defaults, **collaborators})


def extraction_payload(*items: dict[str, object], menu_name: str | None = None) -> Ok:
    """Build a successful extraction call result with schema-complete items."""
    defaults = {
        "description": None,
        "price": None,
        "category": None,
        "itemType": None,
        "confidence": None,
        "originalText": None,
    }
    return Ok(
        {"menuName": menu_name, "items": [{**defaults, **item} for item in items]}
    )


def service_error(message: str = "upstream unavailable") -> Err:
    return Err(GenerationError(GenerationErrorKind.SERVICE_ERROR, message))


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="openai-key")


@pytest.fixture
def generation_client() -> ScriptedGenerationClient:
    return ScriptedGenerationClient()
