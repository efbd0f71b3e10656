"""Normalize heterogeneous medical claims JSON into a date-sorted timeline."""

from claims_timeline.extraction import (
    BaselineExtractor,
    ConfigurableExtractor,
    FallbackOrchestrator,
    FixedSchemaExtractor,
    detect_claims_format,
)
from claims_timeline.schemas import ClaimRecord, ParserConfig, TimelineData

__version__ = "0.1.0"

__all__ = [
    "BaselineExtractor",
    "ClaimRecord",
    "ConfigurableExtractor",
    "FallbackOrchestrator",
    "FixedSchemaExtractor",
    "ParserConfig",
    "TimelineData",
    "detect_claims_format",
]
