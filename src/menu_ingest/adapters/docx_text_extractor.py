"""Word document text extraction backed by python-docx."""

import io
import logging
import zipfile
from dataclasses import dataclass

import docx
from docx.opc.exceptions import PackageNotFoundError
from docx.table import Table

from menu_ingest.domain.results import Err, Ok, Result
from menu_ingest.services.dispatcher import DocumentTextExtractor

_logger = logging.getLogger(__name__)


@dataclass
class DocxTextExtractor(DocumentTextExtractor):
    """Read paragraphs and table rows in document order.

    Menus laid out as tables come out one row per line with the cells
    separated by ``cell_separator``.
    """

    cell_separator: str = "  "

    def extract_text(self, content: bytes) -> Result[str, str]:
        try:
            document = docx.Document(io.BytesIO(content))
        except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as exc:
            _logger.warning("Word text extraction failed: %s", exc)
            return Err(f"Could not read Word document: {exc}")

        lines: list[str] = []
        for block in document.iter_inner_content():
            if isinstance(block, Table):
                lines.extend(self._table_lines(block))
            else:
                lines.append(block.text.strip())
        _logger.debug("Word document yielded %s line(s)", len(lines))
        return Ok("\n".join(lines).strip())

    def _table_lines(self, table: Table) -> list[str]:
        lines = []
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells]
            # Merged cells repeat the same text across the grid.
            unique = [
                text for index, text in enumerate(cells) if text and text not in cells[:index]
            ]
            if unique:
                lines.append(self.cell_separator.join(unique))
        return lines
