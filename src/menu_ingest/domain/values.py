"""Lenient parsing of scalar menu values."""

import math
import re
from datetime import UTC, datetime

_CURRENCY_RE = re.compile(r"[$£€¥₹₽¢]")
_NON_NUMERIC_RE = re.compile(r"[^\d.,\-]")
_THOUSANDS_RE = re.compile(r",(\d{3})(?!\d)")
_DECIMAL_COMMA_RE = re.compile(r",(\d{1,2})$")

MIN_VINTAGE = 1800
_VINTAGE_LOOKAHEAD_YEARS = 5

_TRUE_VALUES = {"true", "yes", "1", "y", "on"}
_FALSE_VALUES = {"false", "no", "0", "n", "off"}


def parse_price(value: object) -> float | None:
    """Parse a price from a number or a currency string.

    Handles symbols, thousands separators and European decimal commas.
    Returns ``None`` when no number can be read. Negative results are
    returned as-is so callers can report them.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return round(float(value), 2)
    raw = str(value).strip()
    if not raw:
        return None
    negative = raw.startswith("-") or raw.startswith("(")
    cleaned = _NON_NUMERIC_RE.sub("", _CURRENCY_RE.sub("", raw)).replace("-", "")
    cleaned = _THOUSANDS_RE.sub(r"\1", cleaned)
    cleaned = _DECIMAL_COMMA_RE.sub(r".\1", cleaned)
    cleaned = cleaned.replace(",", "")
    try:
        amount = round(float(cleaned), 2)
    except ValueError:
        return None
    return -amount if negative else amount


def parse_bool(value: object) -> bool | None:
    """Parse yes/no style flags; ``None`` when the value is blank or unknown."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    raw = str(value).strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    return None


def parse_int(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    raw = str(value).strip()
    if not re.fullmatch(r"-?\d+", raw):
        return None
    return int(raw)


def parse_string_list(value: object) -> list[str]:
    """Read a list from a JSON array or a ``,``/``;``/``|`` separated string."""
    if value is None:
        return []
    if isinstance(value, list):
        parts = [str(part).strip() for part in value if part is not None]
    else:
        parts = [part.strip() for part in re.split(r"[,;|]", str(value))]
    return [part for part in parts if part]


def clean_text(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def clamp_confidence(value: object, default: int = 50) -> int:
    """Clamp a confidence score into 0..100."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return max(0, min(100, round(number)))


def latest_plausible_vintage() -> int:
    return datetime.now(tz=UTC).year + _VINTAGE_LOOKAHEAD_YEARS


def is_plausible_vintage(year: int) -> bool:
    return MIN_VINTAGE <= year <= latest_plausible_vintage()
