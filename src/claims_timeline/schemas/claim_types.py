"""Pydantic schemas for configuration-driven claim extraction.

Config files use camelCase keys (``arrayPath``, ``idField``); both camelCase
and snake_case are accepted on input.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from claims_timeline.utils.field_paths import parse_path

AUTO_GENERATED_ID = "auto-generated"


def _check_path(value: str) -> str:
    """Validate field path syntax."""
    parse_path(value)
    return value


class _ConfigModel(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class FieldConfig(_ConfigModel):
    """A value read from one path with an optional default."""

    path: str = Field(..., description="Path to the field, e.g. 'details.drugName'")
    default_value: Any = Field(default=None, description="Value used when the path is missing")
    required: bool = Field(default=False, description="Raise when the value is missing")

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        return _check_path(v)


class DateCalculation(_ConfigModel):
    """Offset arithmetic applied to a base date."""

    base_field: str = Field(..., description="Path to the base date")
    operation: Literal["add", "subtract"] = "add"
    value: Union[int, str] = Field(
        default=30,
        description="Literal offset, or a path to a field holding the offset",
    )
    unit: Literal["days", "weeks", "months", "years"] = "days"

    @field_validator("base_field")
    @classmethod
    def validate_base_field(cls, v: str) -> str:
        return _check_path(v)


class FieldDateSpec(_ConfigModel):
    """Date read from a field, with fallback fields tried in order."""

    type: Literal["field"] = "field"
    field: str = Field(..., description="Path to the primary date field")
    fallbacks: List[str] = Field(default_factory=list)
    format: Optional[str] = Field(default=None, description="Overrides the global date format")


class CalculationDateSpec(_ConfigModel):
    """Date computed from a base date plus/minus an offset."""

    type: Literal["calculation"] = "calculation"
    calculation: DateCalculation
    fallbacks: List[str] = Field(
        default_factory=list,
        description="Alternative base date fields tried when the base field fails",
    )
    format: Optional[str] = None


class FixedDateSpec(_ConfigModel):
    """A constant date for every claim of a type."""

    type: Literal["fixed"] = "fixed"
    value: str
    format: Optional[str] = None


DateSpec = Annotated[
    Union[FieldDateSpec, CalculationDateSpec, FixedDateSpec],
    Field(discriminator="type"),
]


def _infer_date_spec_type(data: Any) -> Any:
    """Fill in ``type`` for date specs written without it."""
    if isinstance(data, str):
        return {"type": "field", "field": data}
    if isinstance(data, dict) and "type" not in data:
        data = dict(data)
        if "calculation" in data:
            data["type"] = "calculation"
        elif "field" in data:
            data["type"] = "field"
        elif "value" in data:
            data["type"] = "fixed"
    return data


class DisplayFieldConfig(_ConfigModel):
    """A field projected into tooltips and detail panels."""

    label: str
    path: str
    format: Literal["text", "date", "currency", "number"] = "text"
    show_in_tooltip: bool = True
    show_in_details: bool = True


class ClaimTypeConfig(_ConfigModel):
    """Describes where one claim type lives and how to read its fields."""

    name: str = Field(..., min_length=1)
    array_path: str = Field(..., description="Path to the array holding this claim type")
    color: str = Field(default="#999999")
    id_field: FieldConfig = Field(default_factory=lambda: FieldConfig(path="id", default_value=AUTO_GENERATED_ID))
    start_date: DateSpec
    end_date: DateSpec
    display_name: FieldConfig = Field(default_factory=lambda: FieldConfig(path="name"))
    display_fields: List[DisplayFieldConfig] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def normalize_date_specs(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("startDate", "start_date", "endDate", "end_date"):
            if key in data:
                data[key] = _infer_date_spec_type(data[key])
        for key in ("idField", "id_field", "displayName", "display_name"):
            if isinstance(data.get(key), str):
                data[key] = {"path": data[key]}
        return data

    @field_validator("array_path")
    @classmethod
    def validate_array_path(cls, v: str) -> str:
        return _check_path(v)


def claim_type_from_dict(data: Dict[str, Any]) -> ClaimTypeConfig:
    return ClaimTypeConfig.model_validate(data)
