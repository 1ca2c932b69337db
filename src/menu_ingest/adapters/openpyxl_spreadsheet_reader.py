"""Spreadsheet reading backed by openpyxl."""

import io
import logging
import zipfile
from dataclasses import dataclass

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from menu_ingest.domain.results import Err, Ok, Result
from menu_ingest.services.dispatcher import SpreadsheetReader

_logger = logging.getLogger(__name__)


def _is_blank(row: tuple[object, ...]) -> bool:
    return all(cell is None or not str(cell).strip() for cell in row)


@dataclass
class OpenpyxlSpreadsheetReader(SpreadsheetReader):
    """Read cached cell values from the first worksheet of a .xlsx file."""

    def read_rows(self, content: bytes) -> Result[list[tuple[object, ...]], str]:
        try:
            workbook = openpyxl.load_workbook(
                io.BytesIO(content), data_only=True, read_only=True
            )
        except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as exc:
            _logger.warning("Spreadsheet read failed: %s", exc)
            return Err(f"Could not read spreadsheet: {exc}")

        try:
            if not workbook.worksheets:
                return Err("Spreadsheet has no worksheets")
            sheet = workbook.worksheets[0]
            rows = [tuple(row) for row in sheet.iter_rows(values_only=True)]
        finally:
            workbook.close()

        # Formatted but empty rows at the end of a sheet are not data.
        while rows and _is_blank(rows[-1]):
            rows.pop()
        _logger.debug("Spreadsheet sheet %r has %s row(s)", sheet.title, len(rows))
        return Ok(rows)
