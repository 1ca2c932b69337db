"""PDF text extraction backed by pdfplumber."""

import io
import logging
from dataclasses import dataclass

import pdfplumber

from menu_ingest.domain.results import Err, Ok, Result
from menu_ingest.services.dispatcher import DocumentTextExtractor

_logger = logging.getLogger(__name__)


@dataclass
class PdfplumberTextExtractor(DocumentTextExtractor):
    """Read the text layer of every page; scanned pages yield nothing."""

    page_separator: str = "\n\n"

    def extract_text(self, content: bytes) -> Result[str, str]:
        pages: list[str] = []
        try:
            with pdfplumber.open(io.BytesIO(content)) as pdf:
                _logger.debug("PDF has %s page(s)", len(pdf.pages))
                for number, page in enumerate(pdf.pages, start=1):
                    text = (page.extract_text() or "").strip()
                    if text:
                        pages.append(text)
                    else:
                        _logger.debug("PDF page %s has no text layer", number)
        except Exception as exc:
            _logger.warning("PDF text extraction failed: %s", exc)
            return Err(f"Could not read PDF: {exc}")
        return Ok(self.page_separator.join(pages))
