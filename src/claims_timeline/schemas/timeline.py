"""Pydantic schemas for the canonical timeline output."""

from datetime import date
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class ClaimRecord(BaseModel):
    """One normalized claim placed on the timeline."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(..., min_length=1, description="Claim identifier (source or generated)")
    type: str = Field(..., min_length=1, description="Claim type name (rxTba, medHistory, ...)")
    start_date: date = Field(..., description="First day of the claim")
    end_date: date = Field(..., description="Last day of the claim (>= start_date)")
    display_name: str = Field(..., min_length=1, description="Label shown on the timeline")
    color: str = Field(..., min_length=1, description="Hex color for this claim type")
    details: Dict[str, Any] = Field(
        default_factory=dict,
        description="Original source fields plus any rendered display fields",
    )

    @model_validator(mode="after")
    def validate_date_order(self):
        """Ensure the claim does not end before it starts."""
        if self.end_date < self.start_date:
            raise ValueError(
                f"end_date {self.end_date.isoformat()} is before "
                f"start_date {self.start_date.isoformat()}"
            )
        return self


class DateRange(BaseModel):
    """Earliest start and latest end across all claims."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    start: date
    end: date


class TimelineMetadata(BaseModel):
    """Summary counts for a timeline."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    total_claims: int = Field(..., ge=0)
    claim_types: List[str] = Field(
        default_factory=list,
        description="Distinct claim types in order of first occurrence",
    )


class TimelineData(BaseModel):
    """
    Canonical timeline handed to the renderer.

    Claims are sorted by start date, most recent first. Constructed once per
    parse call and never mutated afterwards.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    claims: List[ClaimRecord] = Field(default_factory=list)
    date_range: DateRange
    metadata: TimelineMetadata

    def to_serializable(self) -> Dict[str, Any]:
        """JSON-ready dict with camelCase keys and ISO ``YYYY-MM-DD`` dates."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_serialized(cls, data: Dict[str, Any]) -> "TimelineData":
        """Rebuild a timeline from ``to_serializable`` output.

        ISO date strings are read back as calendar dates, never as UTC
        instants.
        """
        return cls.model_validate(data)
