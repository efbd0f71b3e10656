"""Post-extraction checks on canonical claim records.

Runs independently of the per-item extraction logic: every record is
re-derived to a plain calendar date and re-checked before a strategy
returns.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

from claims_timeline.errors import ValidationError
from claims_timeline.schemas.timeline import ClaimRecord


@dataclass
class ValidationResult:
    """Result of a single validation check."""

    rule: str
    passed: bool
    expected: Optional[str] = None
    actual: Optional[str] = None
    message: Optional[str] = None


@dataclass
class StructureReport:
    """Outcome of a structural check on one document."""

    found: Dict[str, int] = field(default_factory=dict)
    checked_paths: Dict[str, str] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "found": dict(self.found),
            "checked_paths": dict(self.checked_paths),
            "warnings": list(self.warnings),
        }


def describe_value(value: Any) -> str:
    """Short description of what a path resolved to, for diagnostics."""
    if value is None:
        return "missing"
    if isinstance(value, list):
        return f"array with {len(value)} items"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return type(value).__name__


def _non_empty(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate_claim_record(record: ClaimRecord) -> List[ValidationResult]:
    """
    Check one record's structure.

    Checks:
    1. id, type, display_name and color are non-empty strings
    2. start_date and end_date are dates without a time component
    3. end_date >= start_date
    4. details is a mapping

    Returns:
        Failed checks only; an empty list means the record is valid
    """
    failures: List[ValidationResult] = []

    for rule, value in (
        ("id_present", record.id),
        ("type_present", record.type),
        ("display_name_present", record.display_name),
        ("color_present", record.color),
    ):
        if not _non_empty(value):
            failures.append(ValidationResult(rule=rule, passed=False, actual=repr(value)))

    dates_ok = True
    for rule, value in (("start_date_valid", record.start_date), ("end_date_valid", record.end_date)):
        if not isinstance(value, date) or isinstance(value, datetime):
            dates_ok = False
            failures.append(ValidationResult(
                rule=rule,
                passed=False,
                expected="calendar date",
                actual=type(value).__name__,
            ))

    if dates_ok and record.end_date < record.start_date:
        failures.append(ValidationResult(
            rule="end_not_before_start",
            passed=False,
            expected=f">= {record.start_date.isoformat()}",
            actual=record.end_date.isoformat(),
            message=f"Claim {record.id} ends before it starts",
        ))

    if not isinstance(record.details, dict):
        failures.append(ValidationResult(
            rule="details_is_mapping",
            passed=False,
            actual=type(record.details).__name__,
        ))

    return failures


def normalize_records(records: Sequence[ClaimRecord]) -> List[ClaimRecord]:
    """
    Strip time-of-day from every record and re-validate it.

    Raises:
        ValidationError: Naming the first record that fails a check
    """
    normalized: List[ClaimRecord] = []
    for index, record in enumerate(records):
        start, end = record.start_date, record.end_date
        if isinstance(start, datetime) or isinstance(end, datetime):
            record = record.model_copy(update={
                "start_date": start.date() if isinstance(start, datetime) else start,
                "end_date": end.date() if isinstance(end, datetime) else end,
            })

        failures = validate_claim_record(record)
        if failures:
            rules = ", ".join(f.rule for f in failures)
            raise ValidationError(
                f"Claim at index {index} ({record.id!r}) failed validation: {rules}",
                details={"index": index, "failed_rules": [f.rule for f in failures]},
            )
        normalized.append(record)
    return normalized
