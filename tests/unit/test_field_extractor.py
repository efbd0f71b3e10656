"""Unit tests for config-driven field and date extraction."""

from datetime import date

import pytest

from claims_timeline.errors import DateParseError, ExtractionError
from claims_timeline.extraction.field_extractor import (
    apply_offset,
    extract_date,
    extract_display_fields,
    extract_field,
    extract_with_config,
    format_for_display,
    resolve_calculation_value,
)
from claims_timeline.schemas.claim_types import (
    CalculationDateSpec,
    DateCalculation,
    DisplayFieldConfig,
    FieldConfig,
    FieldDateSpec,
    FixedDateSpec,
)


def calc_spec(value="dayssupply", operation="add", unit="days", fallbacks=()):
    return CalculationDateSpec(
        calculation=DateCalculation(base_field="dos", operation=operation, value=value, unit=unit),
        fallbacks=list(fallbacks),
    )


class TestExtractWithConfig:
    """Tests for FieldConfig reads."""

    def test_present_value(self):
        assert extract_with_config({"drug": {"name": "X"}}, FieldConfig(path="drug.name")) == "X"

    def test_default_value(self):
        config = FieldConfig(path="missing", default_value="Unknown")
        assert extract_with_config({}, config) == "Unknown"

    def test_required_missing_raises(self):
        with pytest.raises(ExtractionError, match="missing"):
            extract_with_config({}, FieldConfig(path="id", required=True))

    def test_required_present_returns_falsy_value(self):
        assert extract_with_config({"id": 0}, FieldConfig(path="id", required=True)) == 0

    def test_extract_field(self):
        assert extract_field({"a": [{"b": 1}]}, "a[0].b") == 1
        assert extract_field({}, "a", "d") == "d"


class TestFieldDates:
    """Tests for field date specs."""

    def test_primary_field(self):
        spec = FieldDateSpec(field="dos")
        assert extract_date({"dos": "2024-01-15"}, spec) == date(2024, 1, 15)

    def test_fallback_used_when_primary_missing(self):
        spec = FieldDateSpec(field="dos", fallbacks=["fillDate", "serviceDate"])
        assert extract_date({"serviceDate": "2024-02-01"}, spec) == date(2024, 2, 1)

    def test_fallback_used_when_primary_unparseable(self):
        spec = FieldDateSpec(field="dos", fallbacks=["fillDate"])
        assert extract_date({"dos": "bad", "fillDate": "2024-02-01"}, spec) == date(2024, 2, 1)

    def test_nested_path(self):
        spec = FieldDateSpec(field="lines[0].srvcStart")
        assert extract_date({"lines": [{"srvcStart": "2024-03-01"}]}, spec) == date(2024, 3, 1)

    def test_unparseable_value_error_carries_context(self):
        spec = FieldDateSpec(field="dos")
        with pytest.raises(DateParseError) as exc_info:
            extract_date({"dos": "bad"}, spec, claim_id="c9")
        assert exc_info.value.claim_id == "c9"
        assert exc_info.value.field_name == "dos"

    def test_all_fields_missing(self):
        spec = FieldDateSpec(field="dos", fallbacks=["fillDate"])
        with pytest.raises(DateParseError, match="No valid date found"):
            extract_date({}, spec, claim_id="c1")

    def test_spec_format_overrides_global(self):
        spec = FieldDateSpec(field="dos", format="DD/MM/YYYY")
        assert extract_date({"dos": "03/04/2024"}, spec, "MM/DD/YYYY") == date(2024, 4, 3)

    def test_global_format_restricts_attempts(self):
        spec = FieldDateSpec(field="dos")
        with pytest.raises(DateParseError) as exc_info:
            extract_date({"dos": "2024-01-15"}, spec, "MM/DD/YYYY")
        assert exc_info.value.attempted_formats == ["MM/DD/YYYY"]


class TestCalculationDates:
    """Tests for calculation date specs."""

    def test_field_referenced_days(self):
        record = {"dos": "2024-01-15", "dayssupply": 30}
        assert extract_date(record, calc_spec()) == date(2024, 2, 14)

    def test_missing_offset_defaults_to_30(self):
        assert extract_date({"dos": "2024-01-01"}, calc_spec()) == date(2024, 1, 31)

    def test_offset_capped_at_365(self):
        record = {"dos": "2024-01-01", "dayssupply": 500}
        assert extract_date(record, calc_spec()) == date(2024, 12, 31)

    def test_literal_weeks_subtract(self):
        spec = calc_spec(value=2, operation="subtract", unit="weeks")
        assert extract_date({"dos": "2024-01-15"}, spec) == date(2024, 1, 1)

    def test_literal_months(self):
        spec = calc_spec(value=1, unit="months")
        assert extract_date({"dos": "2024-01-31"}, spec) == date(2024, 2, 29)

    def test_base_fallback(self):
        spec = calc_spec(value=10, fallbacks=["fillDate"])
        assert extract_date({"fillDate": "2024-01-01"}, spec) == date(2024, 1, 11)

    def test_missing_base_raises(self):
        with pytest.raises(DateParseError):
            extract_date({"dayssupply": 10}, calc_spec())

    def test_resolve_calculation_value(self):
        assert resolve_calculation_value({}, DateCalculation(base_field="dos", value=7)) == 7
        assert resolve_calculation_value({"n": "14"}, DateCalculation(base_field="dos", value="n")) == 14


class TestFixedDates:
    """Tests for fixed date specs."""

    def test_fixed_value(self):
        assert extract_date({}, FixedDateSpec(value="2024-06-30")) == date(2024, 6, 30)

    def test_invalid_fixed_value(self):
        with pytest.raises(DateParseError) as exc_info:
            extract_date({}, FixedDateSpec(value="someday"), claim_id="c1")
        assert exc_info.value.field_name == "fixed"


class TestDateArithmetic:
    """Tests for unit offsets."""

    def test_weeks(self):
        assert apply_offset(date(2024, 1, 1), "add", 2, "weeks") == date(2024, 1, 15)
        assert apply_offset(date(2024, 1, 15), "subtract", 1, "weeks") == date(2024, 1, 8)

    def test_years(self):
        assert apply_offset(date(2024, 2, 29), "add", 1, "years") == date(2025, 2, 28)

    def test_unknown_unit(self):
        with pytest.raises(ExtractionError):
            apply_offset(date(2024, 1, 1), "add", 1, "fortnights")

    def test_out_of_range_raises_extraction_error(self):
        with pytest.raises(ExtractionError, match="out of range"):
            apply_offset(date(9999, 12, 1), "add", 60, "days")
        with pytest.raises(ExtractionError, match="out of range"):
            apply_offset(date(9999, 12, 1), "add", 1, "years")

    def test_calculation_past_last_date(self):
        record = {"dos": "9999-12-31", "dayssupply": 30}
        with pytest.raises(ExtractionError):
            extract_date(record, calc_spec(), claim_id="c1")


class TestDisplayFormatting:
    """Tests for display field rendering."""

    @pytest.mark.parametrize("value,fmt,expected", [
        ("2024-01-05", "date", "1/5/2024"),
        ("soon", "date", "soon"),
        (1234.5, "currency", "$1,234.50"),
        ("-12", "currency", "-$12.00"),
        (1234567, "number", "1,234,567"),
        (2.5, "number", "2.5"),
        (0, "number", "0"),
        (42, "text", "42"),
        (None, "currency", ""),
    ])
    def test_formats(self, value, fmt, expected):
        assert format_for_display(value, fmt) == expected

    def test_extract_display_fields(self):
        fields = [
            DisplayFieldConfig(label="Copay", path="copay", format="currency", show_in_tooltip=False),
            DisplayFieldConfig(label="Pharmacy", path="pharmacy.name"),
        ]
        result = extract_display_fields({"copay": 5, "pharmacy": {"name": "CVS"}}, fields)
        assert result["Copay"] == {
            "raw": 5,
            "formatted": "$5.00",
            "showInTooltip": False,
            "showInDetails": True,
        }
        assert result["Pharmacy"]["formatted"] == "CVS"

    def test_missing_display_field(self):
        fields = [DisplayFieldConfig(label="Notes", path="notes")]
        assert extract_display_fields({}, fields)["Notes"]["formatted"] == ""
