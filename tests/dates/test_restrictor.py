"""Tests for selectable date ranges, disabled checks and validation."""

from datetime import date, datetime

import pytest

from formguard.dates import DateRange, DateRestrictor
from formguard.dates.models import DISABLED, FORMAT_MISMATCH, IMPOSSIBLE_DATE

# A Monday
TODAY = date(2024, 1, 1)


def restrictor(direction=0, date_format="Y-m-d", reference_date=TODAY, **kwargs):
    return DateRestrictor(date_format, direction=direction, reference_date=reference_date, **kwargs)


class TestDirection:
    """Test resolution of the direction setting."""

    def test_unrestricted(self):
        selectable = restrictor(0).compute_selectable_range()

        assert selectable == DateRange(None, None)
        assert not selectable.is_bounded

    def test_future_only(self):
        assert restrictor(True).compute_selectable_range() == DateRange(TODAY, None)

    def test_past_only(self):
        assert restrictor(False).compute_selectable_range() == DateRange(None, TODAY)

    def test_positive_offset(self):
        assert restrictor(5).compute_selectable_range() == DateRange(date(2024, 1, 6), None)

    def test_negative_offset(self):
        assert restrictor(-5).compute_selectable_range() == DateRange(None, date(2023, 12, 27))

    def test_offset_given_as_string(self):
        assert restrictor("5").compute_selectable_range() == DateRange(date(2024, 1, 6), None)

    def test_future_with_length(self):
        selectable = restrictor([True, 10]).compute_selectable_range()

        assert selectable == DateRange(TODAY, date(2024, 1, 11))

    def test_future_with_open_end(self):
        selectable = restrictor([3, False]).compute_selectable_range()

        assert selectable == DateRange(date(2024, 1, 4), None)

    def test_literal_dates(self):
        selectable = restrictor(["2024-03-01", "2024-03-10"]).compute_selectable_range()

        assert selectable == DateRange(date(2024, 3, 1), date(2024, 3, 10))

    def test_literal_dates_use_the_element_format(self):
        selectable = restrictor(
            ["Mar 1, 2024", "Mar 10, 2024"], date_format="M d, Y"
        ).compute_selectable_range()

        assert selectable == DateRange(date(2024, 3, 1), date(2024, 3, 10))

    def test_literal_end_before_start_is_ignored(self):
        selectable = restrictor(["2024-03-10", "2024-03-01"]).compute_selectable_range()

        assert selectable == DateRange(date(2024, 3, 10), None)

    def test_compact_literal_dates_are_not_offsets(self):
        selectable = restrictor(["20240301", "20240310"], date_format="Ymd").compute_selectable_range()

        assert selectable == DateRange(date(2024, 3, 1), date(2024, 3, 10))

    def test_literal_start_with_offset_end(self):
        selectable = restrictor(["20240301", "5"], date_format="Ymd").compute_selectable_range()

        assert selectable == DateRange(date(2024, 3, 1), date(2024, 3, 6))

    def test_offsets_given_as_strings_in_a_pair(self):
        selectable = restrictor(["3", "10"]).compute_selectable_range()

        assert selectable == DateRange(date(2024, 1, 4), date(2024, 1, 14))

    def test_zero_start_is_a_future_pair(self):
        assert restrictor([0, 10]).compute_selectable_range() == DateRange(TODAY, date(2024, 1, 11))

    def test_past_with_length(self):
        selectable = restrictor([-1, 30]).compute_selectable_range()

        assert selectable == DateRange(date(2023, 12, 1), date(2023, 12, 31))

    def test_past_with_literal_start(self):
        selectable = restrictor([False, "2023-06-01"]).compute_selectable_range()

        assert selectable == DateRange(date(2023, 6, 1), TODAY)

    def test_unsupported_direction(self):
        assert restrictor("sometime").compute_selectable_range() == DateRange(None, None)

    def test_pair_of_wrong_length(self):
        with pytest.raises(ValueError):
            restrictor([True, 1, 2])

    def test_unknown_language(self):
        with pytest.raises(ValueError):
            restrictor(True, language="klingon")

    def test_reference_date_accepts_datetime(self):
        selectable = restrictor(True, reference_date=datetime(2024, 1, 1, 15, 30))

        assert selectable.compute_selectable_range() == DateRange(TODAY, None)

    def test_range_is_computed_once(self):
        dates = restrictor(5)

        assert dates.compute_selectable_range() is dates.compute_selectable_range()


class TestDisabledDates:
    """Test moving range bounds over disabled dates."""

    def test_first_skips_disabled_month(self):
        dates = restrictor(True, disabled_dates=["* 01 2024"])

        assert dates.compute_selectable_range().first_selectable == date(2024, 2, 1)

    def test_offset_rolls_forward_past_disabled_month(self):
        dates = restrictor(1, reference_date=date(2024, 1, 15), disabled_dates=["* 01 2024"])

        assert dates.compute_selectable_range() == DateRange(date(2024, 2, 1), None)

    def test_first_skips_disabled_year(self):
        dates = restrictor(True, reference_date=date(2024, 5, 10), disabled_dates=["* * 2024"])

        assert dates.compute_selectable_range().first_selectable == date(2025, 1, 1)

    def test_first_skips_weekends(self):
        dates = restrictor(True, reference_date=date(2024, 1, 6), disabled_dates=["* * * 0,6"])

        assert dates.compute_selectable_range().first_selectable == date(2024, 1, 8)

    def test_last_skips_weekends_backwards(self):
        dates = restrictor(False, reference_date=date(2024, 1, 6), disabled_dates=["* * * 0,6"])

        assert dates.compute_selectable_range().last_selectable == date(2024, 1, 5)

    def test_enabled_dates_override_rules(self):
        dates = restrictor(True, disabled_dates=["* 01 2024"], enabled_dates=["15 01 2024"])

        assert dates.compute_selectable_range().first_selectable == date(2024, 1, 15)
        assert dates.is_disabled(2024, 1, 14)
        assert not dates.is_disabled(2024, 1, 15)
        assert not dates.is_disabled(2024, 1)


class TestIsDisabled:
    """Test disabled checks at year, month and day granularity."""

    def test_outside_range(self):
        dates = restrictor(True)

        assert dates.is_disabled(2023)
        assert dates.is_disabled(2023, 12)
        assert dates.is_disabled(2023, 12, 31)
        assert not dates.is_disabled(2024)
        assert not dates.is_disabled(2024, 1, 1)

    def test_partially_selectable_units(self):
        dates = restrictor([True, 10])

        assert not dates.is_disabled(2024, 1)
        assert not dates.is_disabled(2024, 1, 11)
        assert dates.is_disabled(2024, 1, 12)
        assert dates.is_disabled(2024, 2)

    def test_rules(self):
        dates = restrictor(0, disabled_dates=["25 12 *"])

        assert dates.is_disabled(2024, 12, 25)
        assert not dates.is_disabled(2024, 12, 24)
        assert not dates.is_disabled(2024, 12)

    def test_units_missing_from_the_calendar(self):
        dates = restrictor(0)

        assert dates.is_disabled(2024, 2, 30)
        assert dates.is_disabled(2024, 13)
        assert not dates.is_disabled(2024, 2, 29)

    def test_day_without_month(self):
        with pytest.raises(ValueError):
            restrictor(0).is_disabled(2024, day=1)


class TestValidate:
    """Test validating submitted values."""

    def test_valid_value(self):
        result = restrictor(0, date_format="M d, Y").validate("Mar 5, 2024")

        assert result.is_valid
        assert result.value == "2024-03-05"

    def test_disabled_value(self):
        result = restrictor(0, disabled_dates=["25 12 *"]).validate("2024-12-25")

        assert not result.is_valid
        assert result.reason == DISABLED

    def test_value_outside_range(self):
        assert restrictor(True).validate("2023-12-31").reason == DISABLED

    def test_parse_and_validate_ignores_restrictions(self):
        result = restrictor(True).parse_and_validate("2023-12-31")

        assert result.is_valid

    def test_invalid_values(self):
        dates = restrictor(0)

        assert dates.validate("2024-02-30").reason == IMPOSSIBLE_DATE
        assert dates.validate("tomorrow").reason == FORMAT_MISMATCH
        assert dates.validate(None).reason == FORMAT_MISMATCH

    def test_missing_year_uses_reference_year(self):
        result = restrictor(0, date_format="d.m", reference_date=date(2030, 6, 1)).validate("05.03")

        assert result.value == "2030-03-05"


def test_rules_are_parsed_once():
    dates = restrictor(0, disabled_dates=["1 1 *"])

    assert dates.rules is dates.rules
    assert dates.rules[0].days == frozenset({1})
    assert dates.enabled_rules == ()
