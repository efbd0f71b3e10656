"""Unit tests for calendar date parsing."""

from datetime import date, datetime

import pytest

from claims_timeline.errors import SUPPORTED_DATE_FORMATS, DateParseError, ExtractionError
from claims_timeline.utils.date_parsing import (
    add_days,
    add_months,
    candidate_formats,
    date_format_examples,
    is_supported_format,
    parse_date,
    parse_with_format,
    try_parse_date,
)


class TestParseDate:
    """Tests for parse_date."""

    def test_iso_date(self):
        assert parse_date("2024-01-15") == date(2024, 1, 15)

    def test_strips_whitespace(self):
        assert parse_date("  2024-01-15 ") == date(2024, 1, 15)

    def test_leap_day_accepted(self):
        assert parse_date("2024-02-29", "YYYY-MM-DD") == date(2024, 2, 29)

    def test_invalid_calendar_day_rejected(self):
        """2024-02-30 must not roll forward into March."""
        with pytest.raises(DateParseError):
            parse_date("2024-02-30", "YYYY-MM-DD")

    def test_non_leap_year_feb_29_rejected(self):
        with pytest.raises(DateParseError):
            parse_date("2023-02-29")

    def test_us_format_found_without_configuration(self):
        assert parse_date("01/15/2024") == date(2024, 1, 15)

    def test_day_first_format_found_when_month_invalid(self):
        assert parse_date("15-01-2024") == date(2024, 1, 15)

    def test_single_digit_components(self):
        assert parse_date("2024-1-5") == date(2024, 1, 5)

    def test_explicit_format_is_only_format_tried(self):
        with pytest.raises(DateParseError) as exc_info:
            parse_date("2024-01-15", "MM/DD/YYYY")
        assert exc_info.value.attempted_formats == ["MM/DD/YYYY"]

    def test_explicit_format_parses_matching_value(self):
        assert parse_date("03/04/2024", "DD/MM/YYYY") == date(2024, 4, 3)

    def test_failure_lists_all_formats_and_examples(self):
        with pytest.raises(DateParseError) as exc_info:
            parse_date("not a date")
        error = exc_info.value
        assert error.attempted_formats == list(SUPPORTED_DATE_FORMATS)
        assert set(error.examples) == set(SUPPORTED_DATE_FORMATS)
        assert "not a date" in error.message

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_empty_input_fails_before_format_trial(self, value):
        with pytest.raises(DateParseError) as exc_info:
            parse_date(value)
        assert exc_info.value.attempted_formats == []

    def test_non_string_rejected(self):
        with pytest.raises(DateParseError) as exc_info:
            parse_date(20240115)
        assert "int" in exc_info.value.message

    def test_datetime_loses_time_of_day(self):
        assert parse_date(datetime(2024, 1, 15, 23, 59)) == date(2024, 1, 15)

    def test_two_digit_year_rejected(self):
        assert try_parse_date("01/15/24") is None


class TestHelpers:
    """Tests for format helpers."""

    def test_candidate_formats_default(self):
        assert candidate_formats("YYYY-MM-DD") == list(SUPPORTED_DATE_FORMATS)
        assert candidate_formats(None) == list(SUPPORTED_DATE_FORMATS)

    def test_candidate_formats_explicit(self):
        assert candidate_formats("DD-MM-YYYY") == ["DD-MM-YYYY"]

    def test_parse_with_format_rejects_letters(self):
        assert parse_with_format("2024-Jan-15", "YYYY-MM-DD") is None

    def test_parse_with_format_unknown_token(self):
        assert parse_with_format("2024-01-15", "YYYYMMDD") is None

    def test_examples_follow_given_day(self):
        examples = date_format_examples(date(2024, 3, 5))
        assert examples["YYYY-MM-DD"] == "2024-03-05"
        assert examples["MM/DD/YYYY"] == "03/05/2024"
        assert examples["DD-MM-YYYY"] == "05-03-2024"

    def test_is_supported_format(self):
        assert is_supported_format("MM-DD-YYYY")
        assert not is_supported_format("YYYY.MM.DD")


class TestDateShifts:
    """Tests for add_days and add_months."""

    def test_add_days(self):
        assert add_days(date(2024, 2, 28), 2) == date(2024, 3, 1)
        assert add_days(date(2024, 1, 1), -1) == date(2023, 12, 31)

    def test_add_days_past_last_date(self):
        with pytest.raises(ExtractionError, match="out of range"):
            add_days(date(9999, 12, 31), 30)

    def test_add_days_huge_offset(self):
        with pytest.raises(ExtractionError):
            add_days(date(2024, 1, 1), 10**12)

    def test_add_months_clamps_to_month_end(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)

    def test_add_months_crosses_year(self):
        assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)
        assert add_months(date(2024, 1, 15), -1) == date(2023, 12, 15)

    def test_add_months_out_of_range(self):
        with pytest.raises(ExtractionError, match="out of range"):
            add_months(date(9999, 6, 1), 12)
        with pytest.raises(ExtractionError):
            add_months(date(1, 1, 1), -1)
