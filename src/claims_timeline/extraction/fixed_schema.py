"""Fixed-schema extraction for the three standard claim export shapes.

- ``rxTba`` / ``rxHistory``: flat arrays of prescription claims, one record
  per item; the end date is the fill date plus the days supply.
- ``medHistory.claims[].lines[]``: adjudicated medical claims, one record per
  service line.

Array locations come from ``ParserConfig``; everything else is fixed.
"""

import threading
from datetime import date
from typing import Any, Dict, List, Optional

from claims_timeline.errors import (
    ClaimsTimelineError,
    DateParseError,
    ExtractionError,
    StructureValidationError,
)
from claims_timeline.extraction.base import ClaimsExtractor, ExtractionReport, check_cancelled
from claims_timeline.extraction.normalizers import (
    DEFAULT_DAYS_SUPPLY,
    MAX_DAYS_SUPPLY,
    first_non_empty_string,
    is_blank,
    parse_leading_int,
)
from claims_timeline.extraction.validators import StructureReport, describe_value, normalize_records
from claims_timeline.schemas.timeline import ClaimRecord
from claims_timeline.utils.date_parsing import add_days, parse_date
from claims_timeline.utils.field_paths import resolve_path

# Substituted when a prescription carries no date in any known field
DEFAULT_RX_START_DATE = date(2024, 1, 1)

RX_DATE_FALLBACKS = ("fillDate", "prescriptionDate", "serviceDate")
RX_NAME_FIELDS = ("medication", "drugName", "productName", "description", "name")

MED_LINE_DATE_FALLBACKS = ("serviceDate", "admissionDate", "procedureDate")
MED_CLAIM_DATE_FALLBACKS = ("claimDate", "serviceDate")
MED_NAME_FIELDS = ("description", "serviceType", "procedureDescription", "serviceName", "procedureCode")

RX_TYPES = ("rxTba", "rxHistory")
MED_TYPE = "medHistory"


class FixedSchemaExtractor(ClaimsExtractor):
    """Extracts rxTba, rxHistory and medHistory claims from their configured paths."""

    name = "fixed_schema"

    def _array_paths(self) -> Dict[str, str]:
        return {
            "rxTba": self.config.rx_tba_path,
            "rxHistory": self.config.rx_history_path,
            MED_TYPE: f"{self.config.med_history_path}.claims",
        }

    def validate_structure(self, document: Any) -> StructureReport:
        """
        Check that at least one claim array is present.

        Present arrays must hold objects; items missing ``dos`` or
        ``dayssupply`` produce warnings only.

        Returns:
            StructureReport with the arrays found and any warnings

        Raises:
            StructureValidationError: If no array is usable or a present array
                holds non-object items
        """
        if not isinstance(document, dict):
            raise StructureValidationError(
                f"Invalid JSON: Expected an object but received {type(document).__name__}",
                ["root object"],
                ["Ensure the JSON file contains a valid object structure"],
            )

        report = StructureReport()
        missing: List[str] = []
        for claim_type, path in self._array_paths().items():
            value = resolve_path(document, path)
            report.checked_paths[path] = describe_value(value)
            if isinstance(value, list):
                report.found[claim_type] = len(value)
            else:
                missing.append(f"{path} ({claim_type})")

        if not report.found:
            raise StructureValidationError(
                "No valid medical claims arrays found in JSON",
                missing,
                [
                    "Ensure your JSON contains at least one of the following arrays: "
                    "rxTba, rxHistory, or medHistory.claims",
                    "Check that the array paths in your configuration match your JSON structure",
                ],
                checked_paths=report.checked_paths,
            )

        errors: List[str] = []
        paths = self._array_paths()
        for claim_type in report.found:
            items = resolve_path(document, paths[claim_type])
            for index, item in enumerate(items):
                label = f"{paths[claim_type]}[{index}]"
                if not isinstance(item, dict):
                    errors.append(f"{label}: Expected object but found {describe_value(item)}")
                    continue
                if claim_type in RX_TYPES:
                    if is_blank(item.get("dos")):
                        report.warnings.append(f"{label}: Missing field 'dos' (date of service)")
                    if item.get("dayssupply") is None:
                        report.warnings.append(
                            f"{label}: Missing field 'dayssupply', {DEFAULT_DAYS_SUPPLY} days will be used"
                        )
                elif not isinstance(item.get("lines"), list):
                    report.warnings.append(f"{label}: No 'lines' array, claim will be skipped")

        if errors:
            raise StructureValidationError(
                "Invalid claim array structures found",
                errors,
                ["Verify that every claim array contains JSON objects"],
                checked_paths=report.checked_paths,
            )

        for warning in report.warnings:
            self.logger.debug(warning)
        return report

    def extract_records(
        self,
        document: Any,
        report: ExtractionReport,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[ClaimRecord]:
        structure = self.validate_structure(document)
        paths = self._array_paths()

        records: List[ClaimRecord] = []
        for claim_type in RX_TYPES:
            if claim_type in structure.found:
                items = resolve_path(document, paths[claim_type])
                records.extend(self._transform_rx_claims(items, claim_type, report, cancel_event))

        if MED_TYPE in structure.found:
            claims = resolve_path(document, paths[MED_TYPE])
            records.extend(self._transform_med_claims(claims, report, cancel_event))

        return normalize_records(records)

    # -- prescriptions -------------------------------------------------

    def _days_supply(self, value: Any, claim_type: str, claim_id: str) -> int:
        days = parse_leading_int(value)
        if days is None or days <= 0:
            self.logger.warning(
                f"Invalid or missing dayssupply {value!r} for {claim_type} claim {claim_id}, "
                f"using default of {DEFAULT_DAYS_SUPPLY} days"
            )
            return DEFAULT_DAYS_SUPPLY
        if days > MAX_DAYS_SUPPLY:
            self.logger.warning(
                f"Unusually large dayssupply {days} for {claim_type} claim {claim_id}, "
                f"capping at {MAX_DAYS_SUPPLY} days"
            )
            return MAX_DAYS_SUPPLY
        return days

    def _rx_start_date(self, item: Dict[str, Any], claim_type: str, claim_id: str) -> date:
        fmt = self.config.date_format
        first_error: Optional[DateParseError] = None

        for field_name in ("dos", *RX_DATE_FALLBACKS):
            raw = item.get(field_name)
            if is_blank(raw):
                continue
            try:
                parsed = parse_date(raw, fmt)
            except DateParseError as e:
                if first_error is None:
                    first_error = e.with_context(claim_type=claim_type, claim_id=claim_id, field_name=field_name)
                continue
            if field_name != "dos":
                self.logger.warning(f"Using fallback date field '{field_name}' for {claim_type} claim {claim_id}")
            return parsed

        if first_error is not None:
            raise first_error

        self.logger.warning(
            f"No date found for {claim_type} claim {claim_id}; "
            f"placing it at default date {DEFAULT_RX_START_DATE.isoformat()}"
        )
        return DEFAULT_RX_START_DATE

    def _transform_rx_claims(
        self,
        items: List[Dict[str, Any]],
        claim_type: str,
        report: ExtractionReport,
        cancel_event: Optional[threading.Event],
    ) -> List[ClaimRecord]:
        color = self.config.color_for(claim_type)
        records: List[ClaimRecord] = []
        errors: List[ClaimsTimelineError] = []

        for index, item in enumerate(items):
            check_cancelled(cancel_event, f"{claim_type}[{index}]")
            claim_id = str(item["id"]) if not is_blank(item.get("id")) else f"{claim_type}_{index}"
            try:
                start = self._rx_start_date(item, claim_type, claim_id)
                if start == DEFAULT_RX_START_DATE and all(
                    is_blank(item.get(f)) for f in ("dos", *RX_DATE_FALLBACKS)
                ):
                    report.add("default_date", f"{claim_type} claim {claim_id} has no date", claim_type, index)

                end = add_days(start, self._days_supply(item.get("dayssupply"), claim_type, claim_id))
                if end < start:
                    self.logger.warning(f"End before start for {claim_type} claim {claim_id}, using 1-day duration")
                    end = add_days(start, 1)

                display_name = first_non_empty_string(item, RX_NAME_FIELDS) or f"{claim_type} Claim {claim_id}"
                records.append(ClaimRecord(
                    id=claim_id,
                    type=claim_type,
                    start_date=start,
                    end_date=end,
                    display_name=display_name,
                    color=color,
                    details=dict(item),
                ))
            except ClaimsTimelineError as e:
                errors.append(e)
                report.add(e.kind.value, f"{claim_type} claim {claim_id}: {e.message}", claim_type, index)
                self.logger.warning(f"Skipping {claim_type} claim {claim_id}: {e.message}")

        return self._check_array_outcome(claim_type, len(items), records, errors)

    # -- medical history -----------------------------------------------

    def _med_start_date(self, line: Dict[str, Any], claim: Dict[str, Any], line_id: str) -> date:
        fmt = self.config.date_format
        first_error: Optional[DateParseError] = None
        candidates = [(line, f) for f in ("srvcStart", *MED_LINE_DATE_FALLBACKS)]
        candidates += [(claim, f) for f in MED_CLAIM_DATE_FALLBACKS]

        for source, field_name in candidates:
            raw = source.get(field_name)
            if is_blank(raw):
                continue
            try:
                parsed = parse_date(raw, fmt)
            except DateParseError as e:
                if first_error is None:
                    first_error = e.with_context(claim_type=MED_TYPE, claim_id=line_id, field_name=field_name)
                continue
            if field_name != "srvcStart":
                self.logger.warning(f"Using fallback start date '{field_name}' for medical claim line {line_id}")
            return parsed

        if first_error is not None:
            raise first_error
        raise DateParseError(
            f"No service start date found for medical claim line {line_id}",
            claim_type=MED_TYPE,
            claim_id=line_id,
            field_name="srvcStart",
            expected_format=fmt,
        )

    def _med_display_name(self, line: Dict[str, Any], claim: Dict[str, Any], line_id: str) -> str:
        name = first_non_empty_string(line, MED_NAME_FIELDS)
        if name:
            return name
        provider = first_non_empty_string(claim, ("provider",))
        if provider:
            return f"{provider} Service"
        return f"Medical Service {line_id}"

    def _transform_med_claims(
        self,
        claims: List[Dict[str, Any]],
        report: ExtractionReport,
        cancel_event: Optional[threading.Event],
    ) -> List[ClaimRecord]:
        color = self.config.color_for(MED_TYPE)
        records: List[ClaimRecord] = []
        errors: List[ClaimsTimelineError] = []
        total_lines = 0

        for claim_index, claim in enumerate(claims):
            lines = claim.get("lines")
            if not isinstance(lines, list) or not lines:
                self.logger.debug(f"Medical claim {claim.get('claimId', claim_index)} has no lines, skipping")
                continue

            for line_index, line in enumerate(lines):
                check_cancelled(cancel_event, f"{MED_TYPE}[{claim_index}].lines[{line_index}]")
                if not isinstance(line, dict):
                    continue
                total_lines += 1
                line_id = (
                    str(line["lineId"]) if not is_blank(line.get("lineId"))
                    else f"{claim_index}_{line_index}"
                )
                try:
                    start = self._med_start_date(line, claim, line_id)
                    try:
                        end = parse_date(line.get("srvcEnd"), self.config.date_format)
                    except DateParseError as e:
                        self.logger.debug(f"Using start date as end date for medical claim line {line_id}: {e.message}")
                        end = start
                    if end < start:
                        self.logger.warning(f"End before start for medical claim line {line_id}, using same-day service")
                        end = start

                    records.append(ClaimRecord(
                        id=line_id,
                        type=MED_TYPE,
                        start_date=start,
                        end_date=end,
                        display_name=self._med_display_name(line, claim, line_id),
                        color=color,
                        details={
                            **line,
                            "claimId": claim.get("claimId"),
                            "provider": claim.get("provider"),
                            "claimDate": claim.get("claimDate"),
                            "totalAmount": claim.get("totalAmount"),
                        },
                    ))
                except ClaimsTimelineError as e:
                    errors.append(e)
                    report.add(e.kind.value, f"medical claim line {line_id}: {e.message}", MED_TYPE, claim_index)
                    self.logger.warning(f"Skipping medical claim line {line_id}: {e.message}")

        return self._check_array_outcome(MED_TYPE, total_lines, records, errors)

    # -- shared --------------------------------------------------------

    def _check_array_outcome(
        self,
        claim_type: str,
        total: int,
        records: List[ClaimRecord],
        errors: List[ClaimsTimelineError],
    ) -> List[ClaimRecord]:
        """Keep partial successes; fail the array only when nothing survived."""
        if errors and records:
            self.logger.warning(f"Skipped {len(errors)} invalid {claim_type} claims out of {total} total")
            return records

        if errors and not records:
            summary = "; ".join(e.message for e in errors[:5])
            first = errors[0]
            if isinstance(first, DateParseError):
                raise DateParseError(
                    f"Failed to transform any {claim_type} claims. Errors: {summary}",
                    value=first.value,
                    attempted_formats=first.attempted_formats,
                    examples=first.examples,
                    claim_type=claim_type,
                    claim_index=first.claim_index,
                    claim_id=first.claim_id,
                    field_name=first.field_name,
                    expected_format=first.expected_format,
                ) from first
            raise ExtractionError(
                f"Failed to transform any {claim_type} claims. Errors: {summary}",
                details={"claim_type": claim_type, "total": total, "errors": len(errors)},
            ) from first

        return records
