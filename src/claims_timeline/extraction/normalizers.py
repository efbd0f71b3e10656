"""Value coercion helpers for raw claim fields.

Claim exports are loosely typed: numbers arrive as strings, strings arrive
padded, counts arrive as floats. These helpers coerce without raising.
"""

import math
import re
from typing import Any, Dict, Optional, Sequence

DEFAULT_DAYS_SUPPLY = 30
MAX_DAYS_SUPPLY = 365

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def safe_float(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """
    Convert any value to float safely.

    Handles currency symbols and thousands separators found in exported
    amounts (e.g. "$1,234.50", "USD 12.00").

    Args:
        value: Raw value (str, int, float, None, etc.)
        default: Default value if conversion fails (pass None for optional fields)

    Returns:
        Float representation of the value, or default if conversion fails
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        cleaned = value.strip()
        for currency in ("USD", "$"):
            cleaned = cleaned.replace(currency, "")
        cleaned = cleaned.replace(",", "").strip()
        if not cleaned:
            return default
        try:
            return float(cleaned)
        except ValueError:
            return default
    return default


def parse_leading_int(value: Any) -> Optional[int]:
    """Integer prefix of a value ("30", "30 days", 30.0), or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return int(value)
    m = _LEADING_INT_RE.match(str(value))
    return int(m.group(1)) if m else None


def coerce_days(
    value: Any,
    default: int = DEFAULT_DAYS_SUPPLY,
    maximum: int = MAX_DAYS_SUPPLY,
) -> int:
    """Coerce a day count into the range [1, maximum].

    Missing, non-numeric and non-positive values fall back to ``default``;
    values above ``maximum`` are capped.
    """
    days = parse_leading_int(value)
    if days is None or days <= 0:
        return default
    return min(days, maximum)


def first_non_empty_string(record: Dict[str, Any], fields: Sequence[str]) -> Optional[str]:
    """First field in ``fields`` holding a non-blank string, stripped."""
    for field_name in fields:
        value = record.get(field_name)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def is_blank(value: Any) -> bool:
    """True for None, empty/whitespace strings and empty containers."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return len(value) == 0
    return False
