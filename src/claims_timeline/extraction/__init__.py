"""Extraction strategies and the fallback orchestrator."""

from claims_timeline.extraction.assembler import assemble_timeline
from claims_timeline.extraction.base import ClaimsExtractor, ExtractionIssue, ExtractionReport
from claims_timeline.extraction.baseline import BaselineExtractor
from claims_timeline.extraction.configurable import ConfigurableExtractor
from claims_timeline.extraction.fixed_schema import FixedSchemaExtractor
from claims_timeline.extraction.orchestrator import (
    NO_STRATEGY,
    FallbackOrchestrator,
    StrategyOutcome,
    detect_claims_format,
)
from claims_timeline.extraction.validators import StructureReport

__all__ = [
    "NO_STRATEGY",
    "BaselineExtractor",
    "ClaimsExtractor",
    "ConfigurableExtractor",
    "ExtractionIssue",
    "ExtractionReport",
    "FallbackOrchestrator",
    "FixedSchemaExtractor",
    "StrategyOutcome",
    "StructureReport",
    "assemble_timeline",
    "detect_claims_format",
]
