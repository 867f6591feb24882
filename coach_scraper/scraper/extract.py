# coach_scraper/scraper/extract.py
"""Field extraction from raw listing text.

Everything in here is a pure function over strings: no network, no database,
and no exceptions for missing data. A field that cannot be found comes back as
``None`` (or ``0.0`` for prices) and the caller decides which fallback to use.

Body-text matchers expect the page text already lower-cased, except the seller
and state matchers which rely on capitalisation.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import NamedTuple, Optional


# ---------------------------------------------------------------------------
# Title parsing
# ---------------------------------------------------------------------------

# Converters first, then chassis/other coach builders. Order is priority.
KNOWN_MAKES = (
    "Prevost", "Marathon", "Liberty", "Millennium", "Featherlite", "Emerald",
    "Vantare", "Parliament", "Royale", "Nashville", "Angola", "Newell",
    "Newmar", "Foretravel", "Country Coach", "Entegra",
)

KNOWN_MODELS = (
    "H3-45", "X3-45", "H345", "XLII", "XL2", "Executive", "VIP",
    "Allegiance", "Heritage",
)

LUXURY_MAKES = frozenset({
    "prevost", "marathon", "liberty", "millennium", "featherlite", "emerald",
    "vantare", "parliament", "royale", "nashville", "angola", "newell",
})

YEAR_RE = re.compile(r"\b((?:19|20)\d{2})\b")


class TitleParts(NamedTuple):
    year: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None


def _first_token(text: str, tokens) -> Optional[str]:
    for token in tokens:
        if re.search(rf"(?<![\w-]){re.escape(token)}(?![\w-])", text, re.I):
            return token
    return None


def year_from_text(text: Optional[str]) -> Optional[int]:
    if not text:
        return None
    m = YEAR_RE.search(text)
    return int(m.group(1)) if m else None


def extract_year_make_model(title: Optional[str]) -> TitleParts:
    """Pull year, make and model out of a listing title.

    Make and model are the first entries of ``KNOWN_MAKES``/``KNOWN_MODELS``
    (in list order, not title order) present in the title, returned in their
    canonical spelling.
    """
    if not title:
        return TitleParts()
    return TitleParts(
        year=year_from_text(title),
        make=_first_token(title, KNOWN_MAKES),
        model=_first_token(title, KNOWN_MODELS),
    )


# ---------------------------------------------------------------------------
# Price
# ---------------------------------------------------------------------------

_LEADING_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?|\.\d+")

def parse_price(text: Optional[str]) -> float:
    """Extract a price from strings like ``$650,000`` or ``650000.00``.

    Only the leading number of what is left after stripping counts, so
    ``$650,000.00.`` and ``$899,900 O.B.O.`` still parse. Returns ``0.0``
    when there is no number at all; callers treat that as "no price found",
    never as a real price.
    """
    numeric = re.sub(r"[^0-9.]", "", str(text or ""))
    m = _LEADING_NUMBER_RE.match(numeric)
    return float(m.group(0)) if m else 0.0


# ---------------------------------------------------------------------------
# Category
# ---------------------------------------------------------------------------

class Category(str, Enum):
    CLASS_A = "Class A"
    CLASS_B = "Class B"
    CLASS_C = "Class C"
    LUXURY = "Luxury"
    UNCLASSIFIED = "Unclassified"


_CLASS_RULES = (
    (re.compile(r"\bclass\s*a\b"), Category.CLASS_A),
    (re.compile(r"\bclass\s*b\b"), Category.CLASS_B),
    (re.compile(r"\bclass\s*c\b"), Category.CLASS_C),
)


def classify_category(title: Optional[str], make: Optional[str] = None) -> Category:
    """Luxury brand or "luxury" keyword beats any explicit "Class X" wording."""
    lowered = (title or "").lower()
    if (make or "").lower() in LUXURY_MAKES or "luxury" in lowered:
        return Category.LUXURY
    for pattern, category in _CLASS_RULES:
        if pattern.search(lowered):
            return category
    return Category.UNCLASSIFIED


# ---------------------------------------------------------------------------
# Coach details: mileage, length, slides, bed, colours (lower-cased body text)
# ---------------------------------------------------------------------------

_MILEAGE_RE = re.compile(
    r"(?:mileage|odometer|miles)\s*[:\-]?\s*([\d,]*\d)"
    r"|([\d,]*\d)\s*(?:actual\s+)?(?:miles|mi)\b"
)
_LENGTH_RE = re.compile(
    r"length\s*[:\-]?\s*(\d{2})"
    r"|\b(\d{2})\s*(?:'|’|ft\b|feet\b|foot\b)"
)
_SLIDE_RE = re.compile(
    r"slides?\s*[:\-]\s*([0-4])\b"
    r"|\b(?:(single|double|triple|quad)\s*)?(?:\(?\s*([0-4])\s*\)?\s*)?[\s-]*slides?\b"
)
_SLIDE_WORDS = {"single": 1, "double": 2, "triple": 3, "quad": 4}
_BED_RE = re.compile(
    r"\b(king|queen|full|twin|bunk)(?:[\s-]*size)?\s*beds?\b"
    r"|\bbed\s*(?:type)?\s*[:\-]\s*(king|queen|full|twin|bunk)\b"
)
_COLOR_TAIL = r"\s*[:\-]\s*([a-z][a-z /&-]{1,40}?)(?=\s*(?:[,.;|\n]|interior|exterior|$))"
_EXTERIOR_RE = re.compile(r"exterior(?:\s*colou?rs?)?" + _COLOR_TAIL)
_INTERIOR_RE = re.compile(r"interior(?:\s*colou?rs?)?" + _COLOR_TAIL)


def extract_mileage(text: str) -> Optional[int]:
    for m in _MILEAGE_RE.finditer(text or ""):
        digits = re.sub(r"\D", "", m.group(1) or m.group(2) or "")
        if digits:
            return int(digits)
    return None


def extract_length(text: str) -> Optional[str]:
    m = _LENGTH_RE.search(text or "")
    if not m:
        return None
    return f"{m.group(1) or m.group(2)} feet"


def extract_slide_count(text: str) -> Optional[int]:
    """Slide count from "slides: 3", "3 slides", "triple slide" and the like.

    When one match carries both a word and a numeral ("double (3) slide"),
    the numeral is used.
    """
    for m in _SLIDE_RE.finditer(text or ""):
        labelled, word, digit = m.groups()
        if labelled:
            return int(labelled)
        if digit:
            return int(digit)
        if word:
            return _SLIDE_WORDS[word]
    return None


def extract_bed_type(text: str) -> Optional[str]:
    m = _BED_RE.search(text or "")
    if not m:
        return None
    return (m.group(1) or m.group(2)).capitalize()


def _color(pattern, text: str) -> Optional[str]:
    m = pattern.search(text or "")
    if not m:
        return None
    value = m.group(1).strip(" -/&")
    return value.title() if value else None


def extract_exterior_color(text: str) -> Optional[str]:
    return _color(_EXTERIOR_RE, text)


def extract_interior_color(text: str) -> Optional[str]:
    return _color(_INTERIOR_RE, text)


_CHASSIS_CODES = (
    (re.compile(r"\bh3-?45\b"), "H3-45"),
    (re.compile(r"\bx3-?45\b"), "X3-45"),
    (re.compile(r"\bxlii\b"), "XLII"),
    (re.compile(r"\bxl2?\b"), "XL"),
)


def model_from_body(text: str) -> Optional[str]:
    """Known Prevost chassis code mentioned anywhere in the body text."""
    for pattern, label in _CHASSIS_CODES:
        if pattern.search(text or ""):
            return label
    return None


# ---------------------------------------------------------------------------
# Seller / location (original-case text)
# ---------------------------------------------------------------------------

_SELLER_RE = re.compile(
    r"(?i:contact|offered by|listed by|seller|call)\s*:?\s*"
    r"([A-Z][\w.&'-]*(?:[ \t]+(?:[A-Z][\w.&'-]*|&))*)"
)

US_STATES = {
    "Alabama": "AL", "Alaska": "AK", "Arizona": "AZ", "Arkansas": "AR",
    "California": "CA", "Colorado": "CO", "Connecticut": "CT", "Delaware": "DE",
    "Florida": "FL", "Georgia": "GA", "Hawaii": "HI", "Idaho": "ID",
    "Illinois": "IL", "Indiana": "IN", "Iowa": "IA", "Kansas": "KS",
    "Kentucky": "KY", "Louisiana": "LA", "Maine": "ME", "Maryland": "MD",
    "Massachusetts": "MA", "Michigan": "MI", "Minnesota": "MN", "Mississippi": "MS",
    "Missouri": "MO", "Montana": "MT", "Nebraska": "NE", "Nevada": "NV",
    "New Hampshire": "NH", "New Jersey": "NJ", "New Mexico": "NM", "New York": "NY",
    "North Carolina": "NC", "North Dakota": "ND", "Ohio": "OH", "Oklahoma": "OK",
    "Oregon": "OR", "Pennsylvania": "PA", "Rhode Island": "RI", "South Carolina": "SC",
    "South Dakota": "SD", "Tennessee": "TN", "Texas": "TX", "Utah": "UT",
    "Vermont": "VT", "Virginia": "VA", "Washington": "WA", "West Virginia": "WV",
    "Wisconsin": "WI", "Wyoming": "WY",
}
STATE_CODES = frozenset(US_STATES.values())

# longest names first so "West Virginia" wins over "Virginia"
_STATE_NAME_RE = re.compile(
    r"\b(" + "|".join(sorted(US_STATES, key=len, reverse=True)) + r")\b", re.I
)
_STATE_CODE_RE = re.compile(
    r"(?i:located in|location)\s*:?\s*(?:[A-Za-z .'-]+,\s*)?([A-Z]{2})\b"
    r"|,\s*([A-Z]{2})\s+\d{5}\b"
)


def extract_seller(text: str) -> Optional[str]:
    m = _SELLER_RE.search(text or "")
    if not m:
        return None
    return m.group(1).strip(" .&") or None


def normalize_state(value: Optional[str]) -> Optional[str]:
    """Two-letter code for a state name or code, ``None`` if it is neither."""
    if not value:
        return None
    value = value.strip()
    if value.upper() in STATE_CODES:
        return value.upper()
    for name, code in US_STATES.items():
        if name.lower() == value.lower():
            return code
    return None


def extract_state(text: str) -> Optional[str]:
    m = _STATE_NAME_RE.search(text or "")
    if m:
        return normalize_state(m.group(1))
    for m in _STATE_CODE_RE.finditer(text or ""):
        code = m.group(1) or m.group(2)
        if code in STATE_CODES:
            return code
    return None
