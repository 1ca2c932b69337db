"""Known grape varieties and keyword tables for wine descriptions."""

import re
from collections.abc import Iterable

from menu_ingest.domain.generation import MAX_GRAPE_VARIETIES

KNOWN_GRAPE_VARIETIES = (
    # Red
    "Cabernet Sauvignon",
    "Cabernet Franc",
    "Merlot",
    "Pinot Noir",
    "Syrah",
    "Shiraz",
    "Tempranillo",
    "Sangiovese",
    "Grenache",
    "Malbec",
    "Zinfandel",
    "Barbera",
    "Nebbiolo",
    "Primitivo",
    "Montepulciano",
    "Nero d'Avola",
    "Corvina",
    "Rondinella",
    "Molinara",
    "Dolcetto",
    "Aglianico",
    "Cannonau",
    "Carmenère",
    "Petite Sirah",
    "Mourvèdre",
    "Cinsault",
    "Carignan",
    "Gamay",
    # White
    "Chardonnay",
    "Sauvignon Blanc",
    "Riesling",
    "Pinot Grigio",
    "Pinot Gris",
    "Gewürztraminer",
    "Albariño",
    "Verdejo",
    "Moscato",
    "Glera",
    "Trebbiano",
    "Vermentino",
    "Fiano",
    "Falanghina",
    "Greco",
    "Arneis",
    "Cortese",
    "Viognier",
    "Roussanne",
    "Marsanne",
    "Chenin Blanc",
    "Sémillon",
    "Muscadet",
    "Melon de Bourgogne",
    "Grüner Veltliner",
    "Welschriesling",
    # Sparkling
    "Champagne Blend",
    "Cava Blend",
    "Franciacorta Blend",
    "Crémant Blend",
    # Blends and others
    "Field Blend",
    "Bordeaux Blend",
    "Rhône Blend",
    "GSM Blend",
    "Super Tuscan",
    "Rosé Blend",
    "Lambrusco",
    "Brachetto",
    "Blend",
)

# Appellations that imply their grape even when no variety is named.
_REGIONAL_GRAPES = (
    ("chianti", "Sangiovese"),
    ("brunello", "Sangiovese"),
    ("prosecco", "Glera"),
    ("champagne", "Champagne Blend"),
    ("cava", "Cava Blend"),
    ("franciacorta", "Franciacorta Blend"),
    ("lambrusco", "Lambrusco"),
    ("barolo", "Nebbiolo"),
    ("barbaresco", "Nebbiolo"),
    ("beaujolais", "Gamay"),
    ("chablis", "Chardonnay"),
    ("sancerre", "Sauvignon Blanc"),
    ("rioja", "Tempranillo"),
    ("amarone", "Corvina"),
)

_MIN_PARTIAL_MATCH = 4

_COLOR_KEYWORDS = (
    ("red", ("red", "rouge", "tinto", "rosso")),
    ("white", ("white", "blanc", "blanco", "bianco", "weiss", "branco")),
    (
        "rosé",
        (
            "rosé",
            "rose",
            "rosado",
            "rosato",
            "chiaretto",
            "pink",
            "blush",
            "provence",
        ),
    ),
    (
        "sparkling",
        (
            "sparkling",
            "champagne",
            "prosecco",
            "cava",
            "cremant",
            "crémant",
            "franciacorta",
            "spumante",
            "pétillant",
            "petillant",
        ),
    ),
    ("orange", ("orange", "amber", "skin contact", "skin-contact")),
)

_STYLE_KEYWORDS = (
    (
        "sparkling",
        (
            "sparkling",
            "prosecco",
            "cava",
            "cremant",
            "crémant",
            "franciacorta",
            "petillant",
            "pétillant",
            "spumante",
        ),
    ),
    ("champagne", ("champagne",)),
    (
        "dessert",
        (
            "dessert",
            "sweet",
            "ice wine",
            "icewine",
            "late harvest",
            "noble rot",
            "botrytis",
            "aszú",
            "aszu",
            "tokaji",
            "moscato",
            "moscatel",
            "sauternes",
            "beerenauslese",
            "trockenbeerenauslese",
            "eiswein",
            "passito",
            "vendange tardive",
        ),
    ),
    (
        "fortified",
        (
            "fortified",
            "port",
            "porto",
            "sherry",
            "madeira",
            "marsala",
            "vermouth",
            "commandaria",
            "vin doux naturel",
            "lbv",
            "fino",
            "manzanilla",
            "amontillado",
            "oloroso",
            "palo cortado",
            "pedro ximenez",
            "malmsey",
        ),
    ),
)

_ROSE_HINTS = ("rosé", "rose", "rosado", "rosato", "chiaretto", "pink")
_ROSE_REGIONS = ("provence",)


def _keyword_pattern(keywords: Iterable[str]) -> re.Pattern[str]:
    alternatives = sorted((re.escape(keyword) for keyword in keywords), key=len, reverse=True)
    return re.compile(r"\b(?:" + "|".join(alternatives) + r")\b", re.IGNORECASE)


_COLOR_PATTERNS = tuple((color, _keyword_pattern(words)) for color, words in _COLOR_KEYWORDS)
_STYLE_PATTERNS = tuple((style, _keyword_pattern(words)) for style, words in _STYLE_KEYWORDS)
_ROSE_HINT_PATTERN = _keyword_pattern(_ROSE_HINTS)
_ROSE_REGION_PATTERN = _keyword_pattern(_ROSE_REGIONS)
_GRAPE_PATTERNS = tuple((grape, _keyword_pattern([grape])) for grape in KNOWN_GRAPE_VARIETIES)
_REGIONAL_PATTERNS = tuple(
    (_keyword_pattern([appellation]), grape) for appellation, grape in _REGIONAL_GRAPES
)


def normalize_grape_name(name: str) -> str:
    """Return the canonical spelling of a grape, or the trimmed input.

    An exact case-insensitive match wins; otherwise the first known variety
    that contains, or is contained in, the name is used.
    """
    cleaned = name.strip()
    if not cleaned:
        return ""
    lowered = cleaned.casefold()
    for known in KNOWN_GRAPE_VARIETIES:
        if known.casefold() == lowered:
            return known
    if len(lowered) < _MIN_PARTIAL_MATCH:
        return cleaned
    for known in KNOWN_GRAPE_VARIETIES:
        known_lowered = known.casefold()
        if lowered in known_lowered or known_lowered in lowered:
            return known
    return cleaned


def _unique(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    unique = []
    for value in values:
        key = value.casefold()
        if value and key not in seen:
            seen.add(key)
            unique.append(value)
    return unique


def normalize_grape_varieties(names: Iterable[str]) -> list[str]:
    return _unique(normalize_grape_name(name) for name in names)[:MAX_GRAPE_VARIETIES]


def find_grapes_by_pattern(*texts: str | None) -> list[str]:
    """Find grapes named in free text, plus grapes implied by appellations."""
    text = " ".join(part for part in texts if part)
    found = [grape for grape, pattern in _GRAPE_PATTERNS if pattern.search(text)]
    found.extend(grape for pattern, grape in _REGIONAL_PATTERNS if pattern.search(text))
    return _unique(found)[:MAX_GRAPE_VARIETIES]


def wine_color_for(text: str | None) -> str | None:
    """Map a free-text colour to red/white/rosé/sparkling/orange/other."""
    if not text or not text.strip():
        return None
    for color, pattern in _COLOR_PATTERNS:
        if pattern.search(text):
            return color
    return "other"


def wine_style_for(text: str | None, default: str | None = "still") -> str | None:
    """Map a free-text style to still/sparkling/champagne/dessert/fortified."""
    if not text or not text.strip():
        return None
    for style, pattern in _STYLE_PATTERNS:
        if pattern.search(text):
            return style
    return default


def looks_rose(
    name: str | None, region: str | None = None, category: str | None = None
) -> bool:
    """Detect a rosé from its name, region or category."""
    if _ROSE_HINT_PATTERN.search(" ".join(part for part in (name, category) if part)):
        return True
    return bool(region and _ROSE_REGION_PATTERN.search(region))
