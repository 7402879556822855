from __future__ import annotations

import math
import re
from datetime import date, datetime, time, timezone


NUMERIC_TYPES = {"rating", "slider"}
RADIX_PREFIXES = {"0x": 16, "0o": 8, "0b": 2}
DECIMAL_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def normalize_value(value: object, question_type: str) -> object:
    """Coerce a raw answer to the representation used for ``question_type``.

    Never raises: text that cannot be coerced becomes NaN (numeric types) or
    ``None`` (dates), both of which fail every later comparison.
    """
    if question_type in NUMERIC_TYPES:
        return to_number(value) if isinstance(value, str) else value
    if question_type == "date":
        return parse_date(value) if isinstance(value, str) else value
    if question_type == "boolean":
        if isinstance(value, str):
            return value.lower() == "true"
        return is_truthy(value)
    return value


def to_number(value: object) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, (datetime, date)):
        return date_timestamp(value)
    if not isinstance(value, str):
        return math.nan

    text = value.strip()
    if not text:
        return 0.0
    if text in {"Infinity", "+Infinity"}:
        return math.inf
    if text == "-Infinity":
        return -math.inf

    radix = RADIX_PREFIXES.get(text[:2].lower())
    if radix is not None:
        digits = text[2:]
        # int() also accepts underscores, signs and spaces; Number() does not.
        if not (digits.isascii() and digits.isalnum()):
            return math.nan
        try:
            return float(int(digits, radix))
        except ValueError:
            return math.nan

    if not DECIMAL_RE.match(text):
        return math.nan
    return float(text)


def parse_date(text: str) -> datetime | None:
    raw = text.strip()
    if not raw:
        return None
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


def date_timestamp(value: object) -> float:
    """Milliseconds since the epoch, or NaN when ``value`` is not a date."""
    if isinstance(value, datetime):
        moment = value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
        return moment.timestamp() * 1000.0
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc).timestamp() * 1000.0
    return math.nan


def is_truthy(value: object) -> bool:
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def strict_equals(left: object, right: object) -> bool:
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if is_number(left) and is_number(right):
        return left == right
    if is_number(left) or is_number(right):
        return False
    if isinstance(left, str) or isinstance(right, str):
        return isinstance(left, str) and isinstance(right, str) and left == right
    return left == right


def js_string(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ",".join("" if item is None else js_string(item) for item in value)
    return str(value)
