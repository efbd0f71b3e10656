"""Configuration-driven extraction.

Every claim type is described by a ``ClaimTypeConfig``: where its array
lives and how to read id, dates and display name from each item. The
packaged defaults describe the three standard export shapes.
"""

import logging
import threading
from typing import Any, Dict, List, Optional

from claims_timeline.config.loader import load_default_claim_types
from claims_timeline.errors import (
    ClaimsTimelineError,
    DateParseError,
    StructureValidationError,
    ValidationError,
)
from claims_timeline.extraction.base import ClaimsExtractor, ExtractionReport, check_cancelled
from claims_timeline.extraction.field_extractor import (
    extract_date,
    extract_display_fields,
    extract_with_config,
)
from claims_timeline.extraction.normalizers import is_blank
from claims_timeline.extraction.validators import StructureReport, describe_value, normalize_records
from claims_timeline.schemas.claim_types import AUTO_GENERATED_ID, ClaimTypeConfig
from claims_timeline.schemas.parser_config import ParserConfig
from claims_timeline.schemas.timeline import ClaimRecord
from claims_timeline.utils.date_parsing import add_days
from claims_timeline.utils.field_paths import resolve_path


class ConfigurableExtractor(ClaimsExtractor):
    """Extracts claims as described by a list of claim type configurations."""

    name = "configurable"

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        logger: Optional[logging.Logger] = None,
        claim_types: Optional[List[ClaimTypeConfig]] = None,
    ):
        super().__init__(config, logger)
        if claim_types is not None:
            self.claim_types = list(claim_types)
        elif self.config.claim_types is not None:
            self.claim_types = list(self.config.claim_types)
        else:
            self.claim_types = load_default_claim_types()
        self.date_format = self.config.effective_date_format

    def _claim_id(self, item: Any, claim_type: ClaimTypeConfig, index: int) -> str:
        value = extract_with_config(item, claim_type.id_field)
        if is_blank(value) or value == AUTO_GENERATED_ID:
            return f"{claim_type.name}_{index}"
        return str(value)

    def _probe_item(self, item: Any, claim_type: ClaimTypeConfig) -> Optional[str]:
        """Try id/start/end on a sample item; return the failure reason or None."""
        if not isinstance(item, dict):
            return f"first item is {describe_value(item)}, expected object"
        try:
            claim_id = self._claim_id(item, claim_type, 0)
            extract_date(item, claim_type.start_date, self.date_format, claim_id)
            extract_date(item, claim_type.end_date, self.date_format, claim_id)
        except ClaimsTimelineError as e:
            return e.message
        return None

    def validate_structure(self, document: Any) -> StructureReport:
        """
        Check that at least one configured claim type has a usable array.

        A claim type counts only if its array is non-empty and its first item
        yields an id, start date and end date.

        Raises:
            StructureValidationError: Listing every claim type and why it failed
        """
        if not isinstance(document, dict):
            raise StructureValidationError(
                f"Invalid JSON: Expected an object but received {type(document).__name__}",
                ["root object"],
                ["Ensure the JSON file contains a valid object structure"],
            )
        if not self.claim_types:
            raise StructureValidationError(
                "No claim type configurations found",
                ["claimTypes configuration"],
                ["Configure at least one claim type"],
            )

        report = StructureReport()
        missing: List[str] = []
        suggestions: List[str] = []
        for claim_type in self.claim_types:
            value = resolve_path(document, claim_type.array_path)
            report.checked_paths[claim_type.array_path] = describe_value(value)

            if not isinstance(value, list) or not value:
                missing.append(f"{claim_type.name} ({claim_type.array_path})")
                suggestions.append(f"Add {claim_type.array_path} array with claim data")
                continue

            reason = self._probe_item(value[0], claim_type)
            if reason is None:
                report.found[claim_type.name] = len(value)
            else:
                missing.append(f"{claim_type.name} ({claim_type.array_path}) - invalid item structure: {reason}")
                suggestions.append(f"Verify items in {claim_type.array_path} contain the configured fields")

        if not report.found:
            suggestions.append("Check that the array paths in your configuration match your JSON structure")
            raise StructureValidationError(
                "No valid claim arrays found in JSON",
                missing,
                suggestions,
                checked_paths=report.checked_paths,
            )

        report.warnings.extend(missing)
        return report

    def _process_item(self, item: Any, claim_type: ClaimTypeConfig, index: int) -> ClaimRecord:
        if not isinstance(item, dict):
            raise ValidationError(f"{claim_type.name}[{index}] is {describe_value(item)}, expected object")

        claim_id = self._claim_id(item, claim_type, index)
        try:
            start = extract_date(item, claim_type.start_date, self.date_format, claim_id)
            end = extract_date(item, claim_type.end_date, self.date_format, claim_id)
        except DateParseError as e:
            raise e.with_context(claim_type=claim_type.name, claim_index=index, claim_id=claim_id)

        if end < start:
            self.logger.warning(f"Claim {claim_id} has end date before start date, adjusting")
            end = add_days(start, 1)

        display_name = extract_with_config(item, claim_type.display_name)
        if is_blank(display_name):
            display_name = f"{claim_type.name} Claim {claim_id}"

        details: Dict[str, Any] = {
            **item,
            "displayFields": extract_display_fields(item, claim_type.display_fields),
        }
        return ClaimRecord(
            id=claim_id,
            type=claim_type.name,
            start_date=start,
            end_date=end,
            display_name=str(display_name),
            color=claim_type.color,
            details=details,
        )

    def extract_records(
        self,
        document: Any,
        report: ExtractionReport,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[ClaimRecord]:
        self.validate_structure(document)

        records: List[ClaimRecord] = []
        failures: List[ClaimsTimelineError] = []

        for claim_type in self.claim_types:
            items = resolve_path(document, claim_type.array_path)
            if not isinstance(items, list):
                self.logger.debug(f"No array at '{claim_type.array_path}' for claim type '{claim_type.name}'")
                continue

            skipped = 0
            for index, item in enumerate(items):
                check_cancelled(cancel_event, f"{claim_type.name}[{index}]")
                try:
                    records.append(self._process_item(item, claim_type, index))
                except ClaimsTimelineError as e:
                    skipped += 1
                    failures.append(e)
                    report.add(e.kind.value, f"{claim_type.name} claim {index}: {e.message}", claim_type.name, index)
                    self.logger.debug(f"Error processing {claim_type.name} claim {index}: {e.message}")

            if skipped:
                self.logger.warning(f"Skipped {skipped} invalid {claim_type.name} claims out of {len(items)} total")

        if failures and not records:
            self.logger.warning(f"Failed to process any claims ({len(failures)} errors)")
            raise failures[0]

        return normalize_records(records)
