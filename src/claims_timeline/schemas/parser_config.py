"""Parser configuration model.

One object carries both the fixed-schema settings (array paths, date format,
colors) and the flexible claim-type list; each extractor reads only what it
needs.
"""

import re
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from claims_timeline.errors import SUPPORTED_DATE_FORMATS
from claims_timeline.schemas.claim_types import ClaimTypeConfig

DEFAULT_COLORS: Dict[str, str] = {
    "rxTba": "#FF6B6B",
    "rxHistory": "#4ECDC4",
    "medHistory": "#45B7D1",
}

_HEX_COLOR_RE = re.compile(r"^#(?:[0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$")


def is_hex_color(value: str) -> bool:
    return bool(_HEX_COLOR_RE.match(value or ""))


class ParserConfig(BaseModel):
    """Settings shared by every extraction strategy."""

    model_config = ConfigDict(
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    rx_tba_path: str = Field(default="rxTba", min_length=1)
    rx_history_path: str = Field(default="rxHistory", min_length=1)
    med_history_path: str = Field(default="medHistory", min_length=1)
    date_format: str = Field(default="YYYY-MM-DD")
    colors: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_COLORS))
    claim_types: Optional[List[ClaimTypeConfig]] = Field(
        default=None,
        description="Flexible claim types; None means use the packaged defaults",
    )
    global_date_format: Optional[str] = None
    custom_mappings: Dict[str, str] = Field(default_factory=dict)
    default_colors: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_COLORS))

    @field_validator("date_format")
    @classmethod
    def validate_date_format(cls, v: str) -> str:
        if v not in SUPPORTED_DATE_FORMATS:
            raise ValueError(
                f"Unsupported date format '{v}'. Use one of: {', '.join(SUPPORTED_DATE_FORMATS)}"
            )
        return v

    @field_validator("global_date_format")
    @classmethod
    def validate_global_date_format(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in SUPPORTED_DATE_FORMATS:
            raise ValueError(
                f"Unsupported date format '{v}'. Use one of: {', '.join(SUPPORTED_DATE_FORMATS)}"
            )
        return v

    @field_validator("colors")
    @classmethod
    def merge_colors(cls, v: Dict[str, str]) -> Dict[str, str]:
        """Fill colors missing from a partial mapping with the defaults."""
        return {**DEFAULT_COLORS, **v}

    @property
    def effective_date_format(self) -> str:
        """Format used by the configurable strategy."""
        return self.global_date_format or self.date_format

    def color_for(self, claim_type: str) -> str:
        return self.colors.get(claim_type) or self.default_colors.get(claim_type) or "#999999"

    def validate_values(self) -> List[str]:
        """Return human-readable problems with this configuration.

        Never raises; an empty list means the configuration is usable.
        """
        problems: List[str] = []

        for label, path in (
            ("rxTbaPath", self.rx_tba_path),
            ("rxHistoryPath", self.rx_history_path),
            ("medHistoryPath", self.med_history_path),
        ):
            if not path.strip():
                problems.append(f"{label} cannot be empty")

        for claim_type, color in self.colors.items():
            if not is_hex_color(color):
                problems.append(f"Invalid color for {claim_type}: {color}")

        if self.claim_types is not None:
            seen = set()
            for claim_type in self.claim_types:
                if claim_type.name in seen:
                    problems.append(f"Duplicate claim type name: {claim_type.name}")
                seen.add(claim_type.name)
                if not is_hex_color(claim_type.color):
                    problems.append(
                        f"Invalid color for claim type {claim_type.name}: {claim_type.color}"
                    )
            if not self.claim_types:
                problems.append("claimTypes is empty; the configurable strategy has nothing to read")

        return problems
