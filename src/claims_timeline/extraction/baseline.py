"""Last-resort extraction: reads the ``rxTba`` array with positional defaults."""

import threading
from datetime import date
from typing import Any, List, Optional

from claims_timeline.errors import ExtractionError, ValidationError
from claims_timeline.extraction.base import ClaimsExtractor, ExtractionReport, check_cancelled
from claims_timeline.extraction.normalizers import coerce_days, is_blank
from claims_timeline.schemas.timeline import ClaimRecord
from claims_timeline.utils.date_parsing import add_days, try_parse_date

BASELINE_ARRAY = "rxTba"
_DETAIL_FIELDS = ("dosage", "quantity", "prescriber", "pharmacy", "copay")


def positional_fallback_date(index: int) -> date:
    """Placeholder start date cycling through 2024-01-01..2024-01-09."""
    return date(2024, 1, index % 9 + 1)


class BaselineExtractor(ClaimsExtractor):
    """Reads only ``rxTba`` and never fails on individual item content."""

    name = "baseline"

    def extract_records(
        self,
        document: Any,
        report: ExtractionReport,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[ClaimRecord]:
        items = document.get(BASELINE_ARRAY) if isinstance(document, dict) else None
        if not isinstance(items, list):
            raise ValidationError(
                f"No valid claim arrays found in JSON data ({BASELINE_ARRAY})",
                recovery_suggestions=[f"Add a '{BASELINE_ARRAY}' array of prescription claims"],
            )

        color = self.config.color_for(BASELINE_ARRAY)
        records: List[ClaimRecord] = []
        for index, item in enumerate(items):
            check_cancelled(cancel_event, f"{BASELINE_ARRAY}[{index}]")
            if not isinstance(item, dict):
                report.add("not_an_object", f"{BASELINE_ARRAY}[{index}] skipped", BASELINE_ARRAY, index)
                continue

            start = try_parse_date(item.get("dos"))
            if start is None:
                start = positional_fallback_date(index)
                report.add("placeholder_date", f"{BASELINE_ARRAY}[{index}] placed at {start.isoformat()}",
                           BASELINE_ARRAY, index)
                self.logger.debug(f"Invalid date {item.get('dos')!r}, using fallback {start.isoformat()}")

            days_supply = coerce_days(item.get("dayssupply"))
            try:
                end = add_days(start, days_supply)
            except ExtractionError as e:
                report.add(e.kind.value, f"{BASELINE_ARRAY}[{index}] skipped: {e.message}", BASELINE_ARRAY, index)
                self.logger.debug(f"Skipping {BASELINE_ARRAY}[{index}]: {e.message}")
                continue

            medication = item.get("medication")
            details = {name: item.get(name) or "N/A" for name in _DETAIL_FIELDS}
            details["daysSupply"] = days_supply
            details["originalData"] = dict(item)

            records.append(ClaimRecord(
                id=str(item["id"]) if not is_blank(item.get("id")) else f"{BASELINE_ARRAY}-{index}",
                type=BASELINE_ARRAY,
                start_date=start,
                end_date=end,
                display_name=medication.strip() if isinstance(medication, str) and medication.strip()
                else f"Medication {index + 1}",
                color=color,
                details=details,
            ))

        if not records:
            raise ValidationError(
                f"No claims found in {BASELINE_ARRAY}",
                recovery_suggestions=[f"Ensure '{BASELINE_ARRAY}' contains prescription claim objects"],
            )
        return records
