"""Routing of uploads to the structured or the AI-assisted path."""

import asyncio
import io
import json
import logging
import zipfile
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from typing import Protocol

from menu_ingest.domain.errors import PipelineError, PipelineErrorKind
from menu_ingest.domain.results import Err, Ok, Result

_PDF_MAGIC = b"%PDF-"
_ZIP_MAGIC = b"PK\x03\x04"

_logger = logging.getLogger(__name__)


class InputFormat(Enum):
    """Upload formats the pipeline accepts."""

    JSON = "json"
    CSV = "csv"
    EXCEL = "excel"
    PDF = "pdf"
    DOCX = "docx"
    TEXT = "text"

    @property
    def structured(self) -> bool:
        return self in {InputFormat.JSON, InputFormat.CSV, InputFormat.EXCEL}

    @property
    def label(self) -> str:
        return _FORMAT_LABELS[self]


_FORMAT_LABELS = {
    InputFormat.JSON: "JSON",
    InputFormat.CSV: "CSV",
    InputFormat.EXCEL: "Excel workbook",
    InputFormat.PDF: "PDF",
    InputFormat.DOCX: "Word document",
    InputFormat.TEXT: "plain text",
}
_EXTENSION_FORMATS = {
    ".json": InputFormat.JSON,
    ".csv": InputFormat.CSV,
    ".xlsx": InputFormat.EXCEL,
    ".pdf": InputFormat.PDF,
    ".docx": InputFormat.DOCX,
    ".txt": InputFormat.TEXT,
    ".text": InputFormat.TEXT,
    ".md": InputFormat.TEXT,
}
_MIME_FORMATS = {
    "application/json": InputFormat.JSON,
    "text/csv": InputFormat.CSV,
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": InputFormat.EXCEL,
    "application/pdf": InputFormat.PDF,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": (
        InputFormat.DOCX
    ),
    "text/plain": InputFormat.TEXT,
}
# Legacy binary Office files cannot be read; images need OCR.
UNSUPPORTED_EXTENSIONS = frozenset(
    {".xls", ".doc", ".png", ".jpg", ".jpeg", ".gif", ".webp"}
)


class DocumentTextExtractor(Protocol):
    """Interface for pulling plain text out of a binary document."""

    def extract_text(self, content: bytes) -> Result[str, str]:
        """Return the document text, pages or blocks separated by blank lines."""


class SpreadsheetReader(Protocol):
    """Interface for reading the cell values of a workbook."""

    def read_rows(self, content: bytes) -> Result[list[tuple[object, ...]], str]:
        """Return the first worksheet's rows, trailing empty rows removed."""


@dataclass(frozen=True)
class DispatchedInput:
    """An upload resolved to its format and content.

    Text formats carry ``text``; spreadsheets carry ``rows`` instead.
    """

    format: InputFormat
    text: str = ""
    rows: Sequence[tuple[object, ...]] = ()


def decode_text(content: bytes) -> str | None:
    """Decode UTF-8 (BOM tolerated) or Latin-1; ``None`` for binary data."""
    if b"\x00" in content:
        return None
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return content.decode("latin-1")


def _format_error(message: str) -> Err[PipelineError]:
    return Err(PipelineError(PipelineErrorKind.FORMAT_DETECTION, message))


def _looks_like_json(text: str) -> bool:
    if text.lstrip()[:1] not in ("{", "["):
        return False
    try:
        json.loads(text)
    except json.JSONDecodeError:
        return False
    return True


def _office_format(content: bytes) -> InputFormat | None:
    """Tell a .xlsx from a .docx by the parts inside the zip container."""
    try:
        with zipfile.ZipFile(io.BytesIO(content)) as archive:
            names = archive.namelist()
    except zipfile.BadZipFile:
        return None
    if any(name.startswith("xl/") for name in names):
        return InputFormat.EXCEL
    if any(name.startswith("word/") for name in names):
        return InputFormat.DOCX
    return None


@dataclass
class FormatDispatcher:
    """Detect an upload's format and produce the content the next stage reads."""

    pdf_extractor: DocumentTextExtractor
    docx_extractor: DocumentTextExtractor
    spreadsheet_reader: SpreadsheetReader
    min_text_chars: int = 10

    def detect_format(
        self, content: bytes, filename: str | None = None, mime_type: str | None = None
    ) -> Result[InputFormat, PipelineError]:
        if not content.strip():
            return _format_error("Uploaded file is empty")

        extension = PurePath(filename).suffix.lower() if filename else ""
        if extension in UNSUPPORTED_EXTENSIONS:
            return _format_error(f"Unsupported file format: {extension}")
        if extension in _EXTENSION_FORMATS:
            return Ok(_EXTENSION_FORMATS[extension])

        if mime_type:
            hinted = _MIME_FORMATS.get(mime_type.split(";")[0].strip().lower())
            if hinted is not None:
                return Ok(hinted)

        if content.lstrip().startswith(_PDF_MAGIC):
            return Ok(InputFormat.PDF)
        if content.startswith(_ZIP_MAGIC):
            office_format = _office_format(content)
            if office_format is None:
                return _format_error("Unsupported file format: unrecognized zip archive")
            return Ok(office_format)
        text = decode_text(content)
        if text is None:
            return _format_error("Unsupported file format: could not detect the file type")
        if _looks_like_json(text):
            return Ok(InputFormat.JSON)
        return Ok(InputFormat.TEXT)

    async def dispatch(
        self, content: bytes, filename: str | None = None, mime_type: str | None = None
    ) -> Result[DispatchedInput, PipelineError]:
        detected = self.detect_format(content, filename, mime_type)
        if isinstance(detected, Err):
            return detected
        input_format = detected.value
        _logger.debug("Detected %s upload: filename=%s", input_format.value, filename)

        if input_format is InputFormat.EXCEL:
            read = await asyncio.to_thread(self.spreadsheet_reader.read_rows, content)
            if isinstance(read, Err):
                return _format_error(read.error)
            return Ok(DispatchedInput(input_format, rows=read.value))

        if input_format in {InputFormat.PDF, InputFormat.DOCX}:
            extractor = (
                self.pdf_extractor if input_format is InputFormat.PDF else self.docx_extractor
            )
            extracted = await asyncio.to_thread(extractor.extract_text, content)
            if isinstance(extracted, Err):
                return _format_error(extracted.error)
            if len(extracted.value.strip()) < self.min_text_chars:
                return _format_error(f"No readable text found in {input_format.label}")
            return Ok(DispatchedInput(input_format, extracted.value))

        text = decode_text(content)
        if text is None:
            return _format_error(
                f"File is not valid {input_format.label}: it contains binary data"
            )
        if input_format is InputFormat.TEXT and len(text.strip()) < self.min_text_chars:
            return _format_error("Not enough readable text in file")
        return Ok(DispatchedInput(input_format, text))
