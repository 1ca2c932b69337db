"""Repair and validation of generative JSON responses.

Every heuristic for "the model almost followed the schema" lives here:
code-fence stripping, prose around the JSON object, trailing commas and
responses cut off in the middle of an ``items`` array.
"""

import json
import logging
import re
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from menu_ingest.domain.results import Err, Ok, Result

_FENCED_RE = re.compile(r"^```[\w-]*[ \t]*\n?(.*?)\n?[ \t]*```$", re.DOTALL)
_OPEN_FENCE_RE = re.compile(r"^```[\w-]*[ \t]*\n?")
_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")
_ITEMS_ARRAY_RE = re.compile(r'"items"\s*:\s*\[')
_DECODER = json.JSONDecoder()

ModelT = TypeVar("ModelT", bound=BaseModel)

_logger = logging.getLogger(__name__)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence, with or without a language tag."""
    stripped = text.strip()
    match = _FENCED_RE.match(stripped)
    if match:
        return match.group(1).strip()
    if stripped.startswith("```"):
        # Opening fence only: the response was cut off before the closing one.
        return _OPEN_FENCE_RE.sub("", stripped, count=1).strip()
    return stripped


def extract_json_object(text: str) -> str | None:
    """Return the span from the first ``{`` to the last ``}``.

    When no closing brace follows the first opening one, the tail from the
    opening brace is returned so truncation repair can still be attempted.
    """
    start = text.find("{")
    if start == -1:
        return None
    end = text.rfind("}")
    if end < start:
        return text[start:]
    return text[start : end + 1]


def first_json_object(text: str) -> str | None:
    """Return the first complete JSON object embedded in ``text``.

    Decoding is attempted at every ``{`` in turn, so braces in surrounding
    prose and any objects after the first one are ignored.
    """
    index = text.find("{")
    while index != -1:
        try:
            _, end = _DECODER.raw_decode(text, index)
        except json.JSONDecodeError:
            index = text.find("{", index + 1)
        else:
            return text[index:end]
    return None


def remove_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA_RE.sub(r"\1", text)


def close_truncated_items(text: str) -> str | None:
    """Cut a truncated ``items`` array back to its last complete element.

    Returns ``None`` when there is no ``items`` array or the array is closed,
    i.e. the damage is somewhere else.
    """
    match = _ITEMS_ARRAY_RE.search(text)
    if match is None:
        return None
    array_start = match.end()
    depth = 0
    in_string = False
    escaped = False
    last_item_end = -1
    for index in range(array_start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in "{[":
            depth += 1
        elif char in "}]":
            if depth == 0:
                return None
            depth -= 1
            if depth == 0 and char == "}":
                last_item_end = index
    if last_item_end == -1:
        return text[:array_start] + "]}"
    return text[: last_item_end + 1] + "]}"


def parse_json_object(text: str | None) -> Result[dict[str, object], str]:
    """Parse a JSON object out of a generative response.

    Repairs are tried from least to most invasive; the first candidate that
    decodes to an object wins.
    """
    if text is None or not text.strip():
        return Err("empty response")
    candidate = strip_code_fences(text)
    attempts = [candidate]
    block = extract_json_object(candidate)
    if block is not None:
        without_commas = remove_trailing_commas(block)
        attempts.extend([block, without_commas])
        repaired = close_truncated_items(without_commas)
        if repaired is not None:
            attempts.append(repaired)
        embedded = first_json_object(candidate)
        if embedded is not None:
            attempts.append(embedded)

    decoded_non_object = False
    seen: set[str] = set()
    for attempt in attempts:
        if attempt in seen:
            continue
        seen.add(attempt)
        try:
            parsed = json.loads(attempt)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            if attempt is not candidate:
                _logger.debug("Recovered JSON object after repair (%s chars)", len(attempt))
            return Ok(parsed)
        decoded_non_object = True

    if decoded_non_object:
        return Err("response JSON is not an object")
    return Err("response was not valid JSON")


def validate_payload(
    payload: dict[str, object], model: type[ModelT]
) -> Result[ModelT, str]:
    """Validate a decoded payload against a pydantic model."""
    try:
        return Ok(model.model_validate(payload))
    except ValidationError as exc:
        return Err(describe_validation_error(exc))


def parse_and_validate(text: str | None, model: type[ModelT]) -> Result[ModelT, str]:
    """Sanitize a raw response and validate it in one step."""
    decoded = parse_json_object(text)
    if isinstance(decoded, Err):
        return decoded
    return validate_payload(decoded.value, model)


def describe_validation_error(exc: ValidationError) -> str:
    fields = sorted(
        {".".join(str(part) for part in error["loc"]) or "<root>" for error in exc.errors()}
    )
    return "missing or invalid fields: " + ", ".join(fields)
