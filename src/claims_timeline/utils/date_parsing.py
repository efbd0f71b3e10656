"""Date parsing utilities for claims data.

Handles the six numeric date layouts found in pharmacy and medical claim
exports and normalizes them to calendar dates (``datetime.date``). Dates are
built from their year/month/day components, never from timestamps, so a
value cannot shift by a day across timezones.
"""

import calendar
import re
from datetime import MAXYEAR, MINYEAR, date, datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from claims_timeline.errors import SUPPORTED_DATE_FORMATS, DateParseError, ExtractionError

DEFAULT_DATE_FORMAT = "YYYY-MM-DD"

# Strict ISO: 2024-01-15 (no time part)
_RE_ISO = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

_RE_SEPARATOR = re.compile(r"[-/]")

# Component order per format token: (year, month, day) positions
_FORMAT_LAYOUT: Dict[str, Tuple[int, int, int]] = {
    "YYYY-MM-DD": (0, 1, 2),
    "YYYY/MM/DD": (0, 1, 2),
    "MM/DD/YYYY": (2, 0, 1),
    "MM-DD-YYYY": (2, 0, 1),
    "DD-MM-YYYY": (2, 1, 0),
    "DD/MM/YYYY": (2, 1, 0),
}


def _validate_date(year: int, month: int, day: int) -> Optional[date]:
    """Build a date, or None if the components are not a real calendar day.

    ``date()`` refuses out-of-range components instead of rolling them
    forward, so 2024-02-30 is rejected rather than becoming March 1st.
    """
    try:
        return date(year, month, day)
    except ValueError:
        return None


def candidate_formats(preferred_format: Optional[str] = None) -> List[str]:
    """Formats to try, in order.

    An explicitly configured, non-default format is the only one tried;
    otherwise every supported format is tried in fixed order.
    """
    if preferred_format and preferred_format != DEFAULT_DATE_FORMAT:
        return [preferred_format]
    return list(SUPPORTED_DATE_FORMATS)


def parse_with_format(text: str, fmt: str) -> Optional[date]:
    """Parse ``text`` using one format token, returning None on mismatch."""
    layout = _FORMAT_LAYOUT.get(fmt)
    if layout is None:
        return None

    parts = _RE_SEPARATOR.split(text)
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return None

    year_s, month_s, day_s = parts[layout[0]], parts[layout[1]], parts[layout[2]]
    if len(year_s) != 4 or len(month_s) > 2 or len(day_s) > 2:
        return None

    return _validate_date(int(year_s), int(month_s), int(day_s))


def date_format_examples(today: Optional[date] = None) -> Dict[str, str]:
    """One example string per supported format, computed from ``today``."""
    today = today or date.today()
    y, m, d = f"{today.year:04d}", f"{today.month:02d}", f"{today.day:02d}"
    return {
        "YYYY-MM-DD": f"{y}-{m}-{d}",
        "MM/DD/YYYY": f"{m}/{d}/{y}",
        "DD-MM-YYYY": f"{d}-{m}-{y}",
        "YYYY/MM/DD": f"{y}/{m}/{d}",
        "DD/MM/YYYY": f"{d}/{m}/{y}",
        "MM-DD-YYYY": f"{m}-{d}-{y}",
    }


def to_calendar_date(value: Any) -> date:
    """Strip any time-of-day from a date-like value."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Expected a date, got {type(value).__name__}")


def parse_date(value: Any, preferred_format: Optional[str] = DEFAULT_DATE_FORMAT) -> date:
    """Parse a raw claim value into a calendar date.

    Algorithm:
    1. Empty, whitespace-only or non-string values fail immediately.
    2. When no explicit non-default format is configured, a strict
       ``YYYY-MM-DD`` string is parsed directly.
    3. Otherwise every candidate format is tried in order; components are
       split on ``-`` or ``/`` and must all be numeric.
    4. The result must be a real calendar date (no rolling forward).

    Args:
        value: Raw value from the claim document.
        preferred_format: Configured date format token.

    Returns:
        The parsed ``datetime.date``.

    Raises:
        DateParseError: Listing every attempted format and one example per
            supported format.
    """
    if isinstance(value, (date, datetime)):
        return to_calendar_date(value)

    if value is None or (isinstance(value, str) and not value.strip()):
        raise DateParseError(
            "Date value is empty",
            value=value,
            expected_format=preferred_format or DEFAULT_DATE_FORMAT,
        )

    if not isinstance(value, str):
        raise DateParseError(
            f"Expected date string but received {type(value).__name__}: {value!r}",
            value=value,
            expected_format=preferred_format or DEFAULT_DATE_FORMAT,
        )

    text = value.strip()
    formats = candidate_formats(preferred_format)

    if formats[0] == DEFAULT_DATE_FORMAT:
        m = _RE_ISO.match(text)
        if m:
            parsed = _validate_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
            if parsed is not None:
                return parsed

    attempted: List[str] = []
    for fmt in formats:
        attempted.append(fmt)
        parsed = parse_with_format(text, fmt)
        if parsed is not None:
            return parsed

    raise DateParseError(
        f'Unable to parse date: "{text}". Tried formats: {", ".join(attempted)}',
        value=value,
        attempted_formats=attempted,
        examples=date_format_examples(),
        expected_format=preferred_format or DEFAULT_DATE_FORMAT,
    )


def try_parse_date(value: Any, preferred_format: Optional[str] = DEFAULT_DATE_FORMAT) -> Optional[date]:
    """Like ``parse_date`` but returns None instead of raising."""
    try:
        return parse_date(value, preferred_format)
    except DateParseError:
        return None


def add_days(value: date, days: int) -> date:
    """Shift ``value`` by whole days.

    Raises:
        ExtractionError: If the result falls outside the representable calendar
    """
    try:
        return value + timedelta(days=days)
    except OverflowError as e:
        raise ExtractionError(
            f"Date {value.isoformat()} shifted by {days} days is out of range",
            details={"date": value.isoformat(), "days": days},
        ) from e


def add_months(value: date, months: int) -> date:
    """Shift by whole months, clamping to the last day of the target month.

    Raises:
        ExtractionError: If the result falls outside the representable calendar
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    if not MINYEAR <= year <= MAXYEAR:
        raise ExtractionError(
            f"Date {value.isoformat()} shifted by {months} months is out of range",
            details={"date": value.isoformat(), "months": months},
        )
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def is_supported_format(fmt: str) -> bool:
    return fmt in _FORMAT_LAYOUT
