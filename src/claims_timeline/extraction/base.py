"""Base class and shared types for extraction strategies."""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from claims_timeline.errors import ExtractionCancelledError
from claims_timeline.extraction.assembler import assemble_timeline
from claims_timeline.schemas.parser_config import ParserConfig
from claims_timeline.schemas.timeline import ClaimRecord, TimelineData


@dataclass
class ExtractionIssue:
    """A recovered problem with one item or array."""

    code: str
    message: str
    claim_type: Optional[str] = None
    index: Optional[int] = None


@dataclass
class ExtractionReport:
    """Warnings collected while extracting one document."""

    issues: List[ExtractionIssue] = field(default_factory=list)

    def add(
        self,
        code: str,
        message: str,
        claim_type: Optional[str] = None,
        index: Optional[int] = None,
    ) -> None:
        self.issues.append(ExtractionIssue(code, message, claim_type, index))

    def by_code(self, code: str) -> List[ExtractionIssue]:
        return [issue for issue in self.issues if issue.code == code]

    def __len__(self) -> int:
        return len(self.issues)


def check_cancelled(cancel_event: Optional[threading.Event], where: str = "") -> None:
    """Raise ExtractionCancelledError if the caller has set ``cancel_event``."""
    if cancel_event is not None and cancel_event.is_set():
        suffix = f" ({where})" if where else ""
        raise ExtractionCancelledError(f"Extraction cancelled{suffix}")


class ClaimsExtractor(ABC):
    """
    Abstract base class for extraction strategies.

    Subclasses turn one parsed JSON document into a ``TimelineData``.
    Instances hold configuration only; per-call state lives in locals, so
    one instance may serve concurrent calls.
    """

    name: str = "base"

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize extractor.

        Args:
            config: Parser configuration (defaults when None)
            logger: Logger for diagnostics (module logger when None)
        """
        self.config = config or ParserConfig()
        self.logger = logger or logging.getLogger(type(self).__module__)

    @abstractmethod
    def extract_records(
        self,
        document: Any,
        report: ExtractionReport,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[ClaimRecord]:
        """Extract canonical records from a parsed document."""
        pass

    def extract_with_report(
        self,
        document: Any,
        cancel_event: Optional[threading.Event] = None,
    ) -> Tuple[TimelineData, ExtractionReport]:
        """Extract a timeline and return it with the recovered issues."""
        report = ExtractionReport()
        records = self.extract_records(document, report, cancel_event)
        if report.issues:
            self.logger.info(f"{self.name}: {len(records)} claims with {len(report)} recovered issues")
        return assemble_timeline(records), report

    def extract(
        self,
        document: Any,
        cancel_event: Optional[threading.Event] = None,
    ) -> TimelineData:
        """Extract and assemble a timeline from a parsed document."""
        return self.extract_with_report(document, cancel_event)[0]
