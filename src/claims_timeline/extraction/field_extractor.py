"""Declarative field and date extraction over raw claim objects.

Used by the configurable strategy: every value is read through a path from a
``ClaimTypeConfig`` rather than from a hard-coded key.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Union

from claims_timeline.errors import DateParseError, ExtractionError
from claims_timeline.extraction.normalizers import coerce_days, safe_float
from claims_timeline.schemas.claim_types import (
    CalculationDateSpec,
    DateCalculation,
    DisplayFieldConfig,
    FieldConfig,
    FieldDateSpec,
    FixedDateSpec,
)
from claims_timeline.utils.date_parsing import (
    DEFAULT_DATE_FORMAT,
    add_days,
    add_months,
    date_format_examples,
    parse_date,
    try_parse_date,
)
from claims_timeline.utils.field_paths import require_path, resolve_path

logger = logging.getLogger(__name__)

DateSpec = Union[FieldDateSpec, CalculationDateSpec, FixedDateSpec]


def extract_field(record: Any, path: str, default: Any = None) -> Any:
    """Resolve ``path`` against ``record``; missing data yields ``default``."""
    return resolve_path(record, path, default)


def extract_with_config(record: Any, config: FieldConfig) -> Any:
    """Read a value using a FieldConfig.

    Raises:
        ExtractionError: If the field is required and missing
    """
    if config.required:
        try:
            return require_path(record, config.path)
        except KeyError as e:
            raise ExtractionError(f"Required field '{config.path}' is missing") from e
    value = resolve_path(record, config.path)
    return config.default_value if value is None else value


def apply_offset(base: date, operation: str, amount: int, unit: str) -> date:
    """Add or subtract ``amount`` units from ``base``.

    Raises:
        ExtractionError: For an unknown unit or a result outside the calendar
    """
    sign = -1 if operation == "subtract" else 1
    if unit == "days":
        return add_days(base, sign * amount)
    if unit == "weeks":
        return add_days(base, sign * amount * 7)
    if unit == "months":
        return add_months(base, sign * amount)
    if unit == "years":
        return add_months(base, sign * amount * 12)
    raise ExtractionError(f"Unknown calculation unit: {unit}")


def resolve_calculation_value(record: Any, calculation: DateCalculation) -> int:
    """Offset for a calculation: a literal, or a field coerced to 1..365 (default 30)."""
    if isinstance(calculation.value, int):
        return calculation.value
    return coerce_days(resolve_path(record, calculation.value))


def _date_from_fields(record: Any, fields: List[str], fmt: str, claim_id: str) -> date:
    """First parseable date among ``fields``.

    When a value is present but unparseable and no later field succeeds, the
    parse error of the first such value is raised so its attempted formats
    reach the caller.
    """
    first_error: Optional[DateParseError] = None
    for index, field_path in enumerate(fields):
        raw = resolve_path(record, field_path)
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            continue
        try:
            parsed = parse_date(raw, fmt)
        except DateParseError as e:
            if first_error is None:
                first_error = e.with_context(claim_id=claim_id, field_name=field_path)
            continue
        if index > 0:
            logger.warning(f"Using fallback date field '{field_path}' for claim {claim_id}")
        return parsed

    if first_error is not None:
        raise first_error
    raise DateParseError(
        f"No valid date found in field '{fields[0]}' or fallbacks for claim {claim_id}",
        attempted_formats=[],
        examples=date_format_examples(),
        claim_id=claim_id,
        field_name=fields[0],
        expected_format=fmt,
    )


def extract_date(
    record: Any,
    spec: DateSpec,
    global_format: Optional[str] = DEFAULT_DATE_FORMAT,
    claim_id: str = "",
) -> date:
    """
    Extract a calendar date according to a date spec.

    - ``field``: the primary field, then each fallback field in order.
    - ``calculation``: the base date (or a fallback base field), shifted by
      the literal or field-referenced offset.
    - ``fixed``: the configured constant.

    Raises:
        DateParseError: Carrying the claim id and, when known, the field name
    """
    fmt = spec.format or global_format or DEFAULT_DATE_FORMAT

    if isinstance(spec, FieldDateSpec):
        return _date_from_fields(record, [spec.field, *spec.fallbacks], fmt, claim_id)

    if isinstance(spec, CalculationDateSpec):
        calc = spec.calculation
        base = _date_from_fields(record, [calc.base_field, *spec.fallbacks], fmt, claim_id)
        amount = resolve_calculation_value(record, calc)
        return apply_offset(base, calc.operation, amount, calc.unit)

    if isinstance(spec, FixedDateSpec):
        try:
            return parse_date(spec.value, fmt)
        except DateParseError as e:
            raise e.with_context(claim_id=claim_id, field_name="fixed")

    raise ExtractionError(f"Unknown date spec type: {type(spec).__name__}")


def format_for_display(value: Any, fmt: Optional[str] = "text") -> str:
    """Render a raw value as display text (text, date, currency or number)."""
    if value is None:
        return ""

    if fmt == "date":
        parsed = try_parse_date(value)
        if parsed is None:
            return str(value)
        return f"{parsed.month}/{parsed.day}/{parsed.year}"

    if fmt == "currency":
        amount = safe_float(value, 0.0)
        sign = "-" if amount < 0 else ""
        return f"{sign}${abs(amount):,.2f}"

    if fmt == "number":
        number = safe_float(value, 0.0)
        text = f"{number:,.3f}".rstrip("0").rstrip(".")
        return text or "0"

    return str(value)


def extract_display_fields(
    record: Any, display_fields: List[DisplayFieldConfig]
) -> Dict[str, Dict[str, Any]]:
    """Project display fields into ``{label: {raw, formatted, showInTooltip, showInDetails}}``."""
    result: Dict[str, Dict[str, Any]] = {}
    for field_config in display_fields:
        raw = resolve_path(record, field_config.path)
        result[field_config.label] = {
            "raw": raw,
            "formatted": format_for_display(raw, field_config.format),
            "showInTooltip": field_config.show_in_tooltip,
            "showInDetails": field_config.show_in_details,
        }
    return result
