"""Deterministic parsers for JSON, CSV and spreadsheet menu uploads."""

import csv
import io
import json
import logging
import re
from collections.abc import Iterable, Mapping, Sequence

from menu_ingest.domain.errors import PipelineError, PipelineErrorKind
from menu_ingest.domain.generation import (
    MAX_ALLERGENS,
    MAX_COOKING_METHODS,
    MAX_GRAPE_VARIETIES,
    MAX_INGREDIENTS,
    MAX_SERVING_OPTIONS,
    MAX_SUGGESTED_PAIRINGS,
)
from menu_ingest.domain.menu import (
    DIETARY_FLAGS,
    DietaryTags,
    MenuDraft,
    MenuItem,
    ServingOption,
)
from menu_ingest.domain.results import Err, Ok, Result
from menu_ingest.domain.values import (
    clamp_confidence,
    clean_text,
    parse_bool,
    parse_int,
    parse_price,
    parse_string_list,
)

_FIELD_ALIASES = {
    "name": {"name", "item", "item_name", "dish", "dish_name", "menu_item"},
    "description": {"description", "desc", "details"},
    "price": {"price", "cost", "amount"},
    "category": {"category", "cat", "section"},
    "item_type": {"type", "item_type", "itemtype"},
    "confidence": {"confidence"},
    "ingredients": {"ingredients"},
    "allergens": {"allergens"},
    "cooking_methods": {"cooking_methods", "cooking_method"},
    "is_vegetarian": {"is_vegetarian", "vegetarian"},
    "is_vegan": {"is_vegan", "vegan"},
    "is_gluten_free": {"is_gluten_free", "gluten_free"},
    "is_dairy_free": {"is_dairy_free", "dairy_free"},
    "is_spicy": {"is_spicy", "spicy"},
    "spirit_type": {"spirit_type", "spirit"},
    "beer_style": {"beer_style"},
    "cocktail_ingredients": {"cocktail_ingredients"},
    "alcohol_content": {"alcohol_content", "abv"},
    "serving_style": {"serving_style"},
    "is_non_alcoholic": {"is_non_alcoholic", "non_alcoholic"},
    "temperature": {"temperature"},
    "producer": {"producer", "winery"},
    "region": {"region"},
    "vintage": {"vintage", "year"},
    "grape_variety": {"grape_variety", "grapes", "grape"},
    "serving_options": {"serving_options"},
    "suggested_pairings": {"suggested_pairings", "pairings"},
    "wine_style": {"wine_style", "style"},
    "wine_color": {"wine_color", "color", "colour"},
}
_ALIAS_TO_FIELD = {
    alias: canonical for canonical, aliases in _FIELD_ALIASES.items() for alias in aliases
}

REQUIRED_CSV_COLUMNS = ("name", "description", "price", "category")
CSV_DELIMITERS = (",", ";", "\t", "|")

_TEXT_FIELDS = (
    "spirit_type",
    "beer_style",
    "alcohol_content",
    "serving_style",
    "temperature",
    "producer",
    "region",
    "wine_style",
    "wine_color",
)
_LIST_LIMITS = {
    "ingredients": MAX_INGREDIENTS,
    "allergens": MAX_ALLERGENS,
    "cooking_methods": MAX_COOKING_METHODS,
    "cocktail_ingredients": None,
    "grape_variety": MAX_GRAPE_VARIETIES,
    "suggested_pairings": MAX_SUGGESTED_PAIRINGS,
}

_CAMEL_BOUNDARY_RE = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATOR_RE = re.compile(r"[\s\-]+")
_NON_WORD_RE = re.compile(r"[^\w]")

_logger = logging.getLogger(__name__)


def canonical_field(key: str) -> str:
    """Map a JSON key or CSV header to its canonical field name.

    ``itemType``, ``Item Type`` and ``item-type`` all become ``item_type``.
    Unknown keys come back normalized but otherwise unchanged.
    """
    normalized = _CAMEL_BOUNDARY_RE.sub(r"\1_\2", key.strip())
    normalized = _SEPARATOR_RE.sub("_", normalized.lower())
    normalized = _NON_WORD_RE.sub("", normalized)
    return _ALIAS_TO_FIELD.get(normalized, normalized)


def _structured_error(message: str) -> Err[PipelineError]:
    return Err(PipelineError(PipelineErrorKind.STRUCTURED_PARSE, message))


def _no_items_error(message: str, notes: list[str]) -> Err[PipelineError]:
    return Err(
        PipelineError(PipelineErrorKind.TOTAL_EXTRACTION_FAILURE, message, tuple(notes))
    )


def _serving_options(value: object) -> list[ServingOption]:
    if not isinstance(value, list):
        return []
    options = []
    for option in value:
        if not isinstance(option, Mapping):
            continue
        size = clean_text(option.get("size"))
        price = parse_price(option.get("price"))
        if size and price is not None and price >= 0:
            options.append(ServingOption(size=size, price=price))
    return options[:MAX_SERVING_OPTIONS]


def _build_item(record: Mapping[str, object], label: str, notes: list[str]) -> MenuItem:
    """Create a draft from a record keyed by canonical field names."""
    item = MenuItem(
        name=str(record["name"]).strip(),
        category=clean_text(record.get("category")) or "",
        description=clean_text(record.get("description")),
        raw_type=clean_text(record.get("item_type")),
    )

    raw_price = record.get("price")
    if clean_text(raw_price) is not None:
        item.price = parse_price(raw_price)
        if item.price is None:
            notes.append(f"{label} ({item.name}): unreadable price {raw_price!r} ignored")

    if clean_text(record.get("confidence")) is not None:
        item.source_confidence = clamp_confidence(record.get("confidence"))

    for field_name in _TEXT_FIELDS:
        value = clean_text(record.get(field_name))
        if value is not None:
            setattr(item, field_name, value)
    for field_name, limit in _LIST_LIMITS.items():
        values = parse_string_list(record.get(field_name))
        if values:
            setattr(item, field_name, values[:limit])

    flags = {name: parse_bool(record.get(name)) for name in DIETARY_FLAGS}
    supplied = {name: flag for name, flag in flags.items() if flag is not None}
    if supplied:
        item.supplied_dietary_flags = supplied
        item.dietary_tags = DietaryTags.from_flags(supplied)
    item.is_non_alcoholic = parse_bool(record.get("is_non_alcoholic"))

    raw_vintage = record.get("vintage")
    if clean_text(raw_vintage) is not None:
        item.vintage = parse_int(raw_vintage)
        if item.vintage is None:
            notes.append(f"{label} ({item.name}): unreadable vintage {raw_vintage!r} ignored")

    options = _serving_options(record.get("serving_options"))
    if options:
        item.serving_options = options
    return item


def parse_json_menu(text: str) -> Result[MenuDraft, PipelineError]:
    """Parse a JSON menu upload.

    Accepts ``{"name": ..., "items": [...]}`` and ``{"menu": {...}}``. The
    whole upload fails when the shape is wrong or any item lacks a name.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        return _structured_error(f"Invalid JSON: {exc.msg} (line {exc.lineno})")
    if not isinstance(data, dict):
        return _structured_error("JSON menu must be an object with an 'items' array")
    container = data["menu"] if isinstance(data.get("menu"), dict) else data

    raw_items = container.get("items")
    if not isinstance(raw_items, list):
        return _structured_error("JSON menu must contain an 'items' array")

    records: list[dict[str, object]] = []
    for index, raw_item in enumerate(raw_items, start=1):
        if not isinstance(raw_item, dict):
            return _structured_error(f"Item {index} is not an object")
        record = {canonical_field(key): value for key, value in raw_item.items()}
        if clean_text(record.get("name")) is None:
            return _structured_error(f"Item {index}: missing required 'name'")
        records.append(record)

    notes: list[str] = []
    items = [
        _build_item(record, f"Item {index}", notes)
        for index, record in enumerate(records, start=1)
    ]
    if not items:
        return _no_items_error("JSON menu contains no items", notes)

    menu_name = clean_text(container.get("name")) or clean_text(container.get("menuName"))
    _logger.info("Parsed JSON menu: items=%s notes=%s", len(items), len(notes))
    return Ok(MenuDraft(menu_name=menu_name, items=items, processing_notes=notes))


def detect_delimiter(text: str) -> str:
    """Pick the delimiter that occurs most often in the header line."""
    header = next((line for line in text.splitlines() if line.strip()), "")
    counts = {delimiter: header.count(delimiter) for delimiter in CSV_DELIMITERS}
    best = max(CSV_DELIMITERS, key=lambda delimiter: counts[delimiter])
    return best if counts[best] else ","


def _parse_table(
    header: Sequence[object],
    rows: Iterable[tuple[int, Sequence[object]]],
    source: str,
) -> Result[MenuDraft, PipelineError]:
    """Build drafts from a header row and numbered data rows.

    Shared by CSV and spreadsheet uploads. Every data row without a name,
    including rows of empty cells, is skipped with a note.
    """
    columns = [canonical_field(clean_text(cell) or "") for cell in header]
    if "name" not in columns:
        return _structured_error(
            f"{source} must include a 'Name' column (or an alias such as 'Item' or 'Dish')"
        )

    notes: list[str] = []
    missing = [column for column in REQUIRED_CSV_COLUMNS if column not in columns]
    if missing:
        notes.append(
            f"{source} is missing expected column(s): "
            + ", ".join(column.title() for column in missing)
        )

    items: list[MenuItem] = []
    for row_number, values in rows:
        record: dict[str, object] = {}
        # Cells beyond the header width are ignored.
        for column, value in zip(columns, values):
            record.setdefault(column, value)
        label = f"Row {row_number}"
        if not any(clean_text(value) is not None for value in record.values()):
            notes.append(f"{label}: skipped, empty row")
            continue
        if clean_text(record.get("name")) is None:
            notes.append(f"{label}: skipped, missing required 'Name'")
            continue
        items.append(_build_item(record, label, notes))

    if not items:
        return _no_items_error(f"{source} file contains no menu items", notes)
    _logger.info("Parsed %s menu: items=%s notes=%s", source, len(items), len(notes))
    return Ok(MenuDraft(menu_name=None, items=items, processing_notes=notes))


def parse_csv_menu(text: str) -> Result[MenuDraft, PipelineError]:
    """Parse a CSV menu upload.

    Headers are matched case-insensitively through aliases. Rows without a
    name are skipped with a note; a file without a name column fails.
    Completely blank lines are not data rows.
    """
    reader = csv.reader(io.StringIO(text), delimiter=detect_delimiter(text))
    header = next((row for row in reader if row), None)
    if header is None:
        return _structured_error("CSV file has no header row")
    rows = ((reader.line_num, row) for row in reader if row)
    return _parse_table(header, rows, "CSV")


def parse_spreadsheet_menu(rows: Sequence[Sequence[object]]) -> Result[MenuDraft, PipelineError]:
    """Parse the rows of a spreadsheet's first worksheet.

    The first non-empty row is the header; the CSV column aliases and row
    rules apply. Row numbers in notes are worksheet row numbers.
    """
    numbered = list(enumerate(rows, start=1))
    header_index = next(
        (
            index
            for index, (_, row) in enumerate(numbered)
            if any(clean_text(cell) is not None for cell in row)
        ),
        None,
    )
    if header_index is None:
        return _structured_error("Spreadsheet has no header row")
    return _parse_table(
        numbered[header_index][1], numbered[header_index + 1 :], "Spreadsheet"
    )
