"""Assemble canonical records into a TimelineData value."""

from datetime import date
from typing import List, Optional, Sequence

from claims_timeline.schemas.timeline import (
    ClaimRecord,
    DateRange,
    TimelineData,
    TimelineMetadata,
)


def distinct_claim_types(records: Sequence[ClaimRecord]) -> List[str]:
    """Claim type names in order of first occurrence."""
    seen: List[str] = []
    for record in records:
        if record.type not in seen:
            seen.append(record.type)
    return seen


def assemble_timeline(records: Sequence[ClaimRecord], today: Optional[date] = None) -> TimelineData:
    """
    Build the canonical timeline from extracted records.

    Claims are ordered by start date, most recent first; records sharing a
    start date keep their extraction order. Empty input yields an empty
    timeline whose range is ``today`` for both bounds.

    Args:
        records: Canonical claim records in extraction order
        today: Date used for an empty range (defaults to date.today())

    Returns:
        TimelineData
    """
    if not records:
        today = today or date.today()
        return TimelineData(
            claims=[],
            date_range=DateRange(start=today, end=today),
            metadata=TimelineMetadata(total_claims=0, claim_types=[]),
        )

    ordered = sorted(records, key=lambda r: r.start_date, reverse=True)
    return TimelineData(
        claims=ordered,
        date_range=DateRange(
            start=min(r.start_date for r in records),
            end=max(r.end_date for r in records),
        ),
        metadata=TimelineMetadata(
            total_claims=len(records),
            claim_types=distinct_claim_types(records),
        ),
    )
