"""Pydantic schemas for timeline output and parser configuration."""

from claims_timeline.schemas.claim_types import (
    AUTO_GENERATED_ID,
    CalculationDateSpec,
    ClaimTypeConfig,
    DateCalculation,
    DisplayFieldConfig,
    FieldConfig,
    FieldDateSpec,
    FixedDateSpec,
)
from claims_timeline.schemas.parser_config import DEFAULT_COLORS, ParserConfig
from claims_timeline.schemas.timeline import (
    ClaimRecord,
    DateRange,
    TimelineData,
    TimelineMetadata,
)

__all__ = [
    "AUTO_GENERATED_ID",
    "CalculationDateSpec",
    "ClaimRecord",
    "ClaimTypeConfig",
    "DEFAULT_COLORS",
    "DateCalculation",
    "DateRange",
    "DisplayFieldConfig",
    "FieldConfig",
    "FieldDateSpec",
    "FixedDateSpec",
    "ParserConfig",
    "TimelineData",
    "TimelineMetadata",
]
