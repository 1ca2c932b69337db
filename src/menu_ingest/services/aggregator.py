"""Assembly of the final parse envelope."""

import re
from collections.abc import Iterable
from pathlib import PurePath

from menu_ingest.domain.errors import PipelineError
from menu_ingest.domain.menu import MenuItem, MenuParseResult

DEFAULT_MENU_NAME = "Untitled Menu"

_FILENAME_SEPARATOR_RE = re.compile(r"[-_]+")
_WORD_START_RE = re.compile(r"\b\w")


def menu_name_from_filename(filename: str | None) -> str | None:
    """Derive a readable menu name, e.g. ``summer_wine-list.csv`` -> ``Summer Wine List``."""
    if not filename:
        return None
    stem = PurePath(filename.replace("\\", "/")).stem
    words = _FILENAME_SEPARATOR_RE.sub(" ", stem).split()
    if not words:
        return None
    return _WORD_START_RE.sub(lambda match: match.group().upper(), " ".join(words))


def _unique(messages: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(message for message in messages if message))


def aggregate(
    menu_name: str | None,
    items: list[MenuItem],
    notes: Iterable[str],
    errors: Iterable[str] = (),
) -> MenuParseResult:
    """Build the envelope; it succeeds exactly when there is at least one item."""
    return MenuParseResult(
        success=bool(items),
        menu_name=menu_name or DEFAULT_MENU_NAME,
        items=list(items),
        total_items_found=len(items),
        processing_notes=_unique(notes),
        errors=_unique(errors),
    )


def failure(error: PipelineError, notes: Iterable[str] = ()) -> MenuParseResult:
    """Build the envelope for a run that ended with a fatal error."""
    return MenuParseResult(
        success=False,
        menu_name=DEFAULT_MENU_NAME,
        items=[],
        total_items_found=0,
        processing_notes=_unique(notes),
        errors=_unique(error.messages()),
    )
