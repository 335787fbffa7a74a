"""Unit tests for civil-day resolution in a fixed time zone."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from fieldops.dates import (
    PLACEHOLDER,
    format_date_label,
    format_local_datetime,
    parse_date,
    resolve_day_range,
    today_in_zone,
    zoned_midnight_to_utc,
)


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestParseDate:
    def test_valid_date(self):
        assert parse_date("2024-03-15") == date(2024, 3, 15)

    def test_surrounding_whitespace_is_ignored(self):
        assert parse_date(" 2024-03-15 ") == date(2024, 3, 15)

    @pytest.mark.parametrize(
        "value",
        ["", None, "2024-3-15", "15/03/2024", "2024-02-30", "2023-02-29", "2024-13-01", "not a date"],
    )
    def test_malformed_or_impossible(self, value):
        assert parse_date(value) is None


class TestResolveDayRange:
    def test_fixed_offset_zone_spans_exactly_one_day(self):
        day_range = resolve_day_range("2024-03-15", "America/Panama")

        assert day_range.start == utc(2024, 3, 15, 5)
        assert day_range.end == utc(2024, 3, 16, 5)
        assert day_range.end - day_range.start == timedelta(hours=24)

    def test_utc_zone(self):
        day_range = resolve_day_range("2024-03-15", "UTC")

        assert day_range.start == utc(2024, 3, 15)
        assert day_range.end == utc(2024, 3, 16)

    def test_spring_forward_day_is_23_hours(self):
        day_range = resolve_day_range("2024-03-10", "America/New_York")

        assert day_range.start == utc(2024, 3, 10, 5)
        assert day_range.end == utc(2024, 3, 11, 4)
        assert day_range.end - day_range.start == timedelta(hours=23)

    def test_fall_back_day_is_25_hours(self):
        day_range = resolve_day_range("2024-11-03", "America/New_York")

        assert day_range.start == utc(2024, 11, 3, 4)
        assert day_range.end == utc(2024, 11, 4, 5)
        assert day_range.end - day_range.start == timedelta(hours=25)

    @pytest.mark.parametrize(
        "zone_name,value",
        [
            ("America/Panama", "2024-06-01"),
            ("America/New_York", "2024-03-10"),
            ("America/New_York", "2024-11-03"),
            ("Europe/Madrid", "2024-03-31"),
            ("Europe/Madrid", "2024-10-27"),
            ("America/Santiago", "2024-09-08"),
            ("Australia/Lord_Howe", "2024-04-07"),
            ("Pacific/Kiritimati", "2024-01-01"),
            ("Antarctica/Casey", "2023-03-08"),
            ("Antarctica/Casey", "2023-03-09"),
            ("Antarctica/Vostok", "2023-12-17"),
            ("Antarctica/Vostok", "2023-12-18"),
        ],
    )
    def test_boundaries_map_to_the_civil_date(self, zone_name, value):
        zone = ZoneInfo(zone_name)
        day = date.fromisoformat(value)
        day_range = resolve_day_range(value, zone_name)
        tick = timedelta(microseconds=1)

        assert day_range.start.astimezone(zone).date() == day
        assert (day_range.start - tick).astimezone(zone).date() == day - timedelta(days=1)
        assert (day_range.end - tick).astimezone(zone).date() == day
        assert day_range.end.astimezone(zone).date() == day + timedelta(days=1)

    def test_clock_going_back_across_midnight_starts_at_first_midnight(self):
        # Casey moved from +11 to +08 at 03:00 local, so 2023-03-09 00:00 happens twice
        day_range = resolve_day_range("2023-03-09", "Antarctica/Casey")
        previous = resolve_day_range("2023-03-08", "Antarctica/Casey")

        assert day_range.start == utc(2023, 3, 8, 13)
        assert previous.end == day_range.start
        assert day_range.end - day_range.start == timedelta(hours=27)

    def test_midnight_in_a_gap_starts_at_the_transition(self):
        # Santiago springs forward from 00:00 to 01:00
        day_range = resolve_day_range("2024-09-08", "America/Santiago")

        assert day_range.start == utc(2024, 9, 8, 4)
        assert day_range.end - day_range.start == timedelta(hours=23)

    def test_range_is_half_open(self):
        day_range = resolve_day_range("2024-06-01", "America/Panama")

        assert day_range.start in day_range
        assert day_range.end not in day_range
        assert day_range.end - timedelta(microseconds=1) in day_range
        assert day_range.start - timedelta(microseconds=1) not in day_range

    @pytest.mark.parametrize("value", ["", "2024-02-30", "yesterday"])
    def test_invalid_input_yields_none(self, value):
        assert resolve_day_range(value, "America/Panama") is None

    def test_accepts_zoneinfo_instance(self):
        assert zoned_midnight_to_utc(date(2024, 6, 1), ZoneInfo("America/Panama")) == utc(
            2024, 6, 1, 5
        )


class TestFormatting:
    def test_today_in_zone_uses_wall_clock(self):
        # 03:00 UTC is still the previous evening in Panama
        assert today_in_zone("America/Panama", now=utc(2024, 5, 11, 3)) == "2024-05-10"
        assert today_in_zone("America/Panama", now=utc(2024, 5, 11, 6)) == "2024-05-11"

    def test_format_local_datetime(self):
        assert format_local_datetime(utc(2024, 6, 1, 14, 30), "America/Panama") == "01/06/2024 09:30"

    def test_format_local_datetime_treats_naive_as_utc(self):
        naive = datetime(2024, 6, 1, 14, 30)
        assert format_local_datetime(naive, "America/Panama") == "01/06/2024 09:30"

    def test_format_local_datetime_missing(self):
        assert format_local_datetime(None, "America/Panama") == PLACEHOLDER

    def test_format_date_label_does_not_shift_the_day(self):
        assert format_date_label("2024-06-01") == "01/06/2024"
        assert format_date_label(date(2024, 6, 1), "%m/%d/%Y") == "06/01/2024"

    def test_format_date_label_passthrough_and_placeholder(self):
        assert format_date_label("junk") == "junk"
        assert format_date_label(None) == PLACEHOLDER
        assert format_date_label("") == PLACEHOLDER
