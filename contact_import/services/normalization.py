"""
Header and value normalization utilities.

Used for field detection and import reconciliation.
Normalizations are composable: each is a small function
that can be chained.
"""

import math
import re
from datetime import datetime, timezone

from dateutil import parser as date_parser


def normalize_whitespace(value: str) -> str:
    """Collapse whitespace and strip."""
    return re.sub(r"\s+", " ", value.strip())


def normalize_case(value: str) -> str:
    """Lowercase for case-insensitive comparison."""
    return value.lower()


def normalize_header(value: str) -> str:
    """
    Spreadsheet header normalization chain.
    'E-mail Address' → 'e mail address'
    '  First_Name: ' → 'first_name'
    """
    return normalize_whitespace(re.sub(r"[^\w\s]", " ", normalize_case(value)))


def strip_to_alphanum(value: str) -> str:
    """Strip all non-alphanumeric characters and lowercase."""
    return re.sub(r"[^a-z0-9]", "", value.lower())


def digits_only(value: str | None) -> str:
    """'(555) 123-4567' → '5551234567'"""
    return re.sub(r"\D", "", value or "")


def round_half_up(value: float) -> int:
    """Round non-negative scores the way a UI shows them (2.5 → 3)."""
    return int(math.floor(value + 0.5))


# ─── Patterns ─────────────────────────────────────────────────

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_PHONE_STRIP_PATTERN = re.compile(r"[^\d+\-()\s.]")

TRUE_TOKENS = frozenset({"true", "1", "yes", "y", "on"})
FALSE_TOKENS = frozenset({"false", "0", "no", "n", "off"})

# Missing date components default to this instant, never to "today".
_DATE_DEFAULT = datetime(1970, 1, 1, tzinfo=timezone.utc)


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value.strip()))


def parse_datetime(value: str) -> datetime | None:
    """
    Parse a human-entered date/time into an aware UTC datetime.

    Naive values are taken as UTC. Returns None if unparsable.
    """
    try:
        parsed = date_parser.parse(value.strip(), default=_DATE_DEFAULT)
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_number(value: str) -> float | None:
    """'1,250.5' → 1250.5; non-numeric and non-finite values → None."""
    try:
        number = float(value.strip().replace(",", ""))
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def format_number(number: float) -> str:
    """Integral floats render without a fraction: 42.0 → '42'."""
    if number.is_integer():
        return str(int(number))
    return repr(number)


# ─── Value Coercion ───────────────────────────────────────────

def coerce_value(raw_value: str | None, data_type: str) -> str | None:
    """
    Coerce a raw cell to the canonical string form for a field type.

    Returns None when the cell is blank or cannot be represented as the
    type; callers omit the field rather than store an empty string.
    """
    if raw_value is None or not isinstance(raw_value, str):
        return None
    trimmed = raw_value.strip()
    if not trimmed:
        return None

    if data_type == "email":
        return trimmed.lower()

    if data_type == "phone":
        return _PHONE_STRIP_PATTERN.sub("", trimmed).strip() or None

    if data_type == "number":
        number = parse_number(trimmed)
        return format_number(number) if number is not None else None

    if data_type == "checkbox":
        token = trimmed.lower()
        if token in TRUE_TOKENS:
            return "true"
        if token in FALSE_TOKENS:
            return "false"
        return None

    if data_type == "datetime":
        parsed = parse_datetime(trimmed)
        return parsed.isoformat() if parsed is not None else None

    return trimmed


# ─── Value Comparison ─────────────────────────────────────────

def is_blank(value: object) -> bool:
    return value is None or str(value).strip() == ""


def values_match(val_a: object, val_b: object) -> bool:
    """
    Compare two contact values after trimming.

    None and blank are the same; comparison is otherwise exact so that
    a case-only correction still counts as a change.
    """
    a = "" if val_a is None else str(val_a).strip()
    b = "" if val_b is None else str(val_b).strip()
    return a == b
