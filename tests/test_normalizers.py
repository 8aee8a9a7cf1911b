"""Tests for display-value normalizers."""

from datetime import datetime, timedelta, timezone

import pytest

from whoop_cli.services.normalizers import (
    format_clock,
    format_duration_between,
    normalize_whoop_timestamp,
    normalize_workout_name,
    parse_display_int,
    parse_display_number,
    parse_next_update_in,
    parse_timestamp,
    to_local_iso,
    to_utc_iso,
)

T0 = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


class TestTimestamps:
    """Tests for WHOOP timestamp repair and formatting."""

    def test_compact_offset_gets_colon(self):
        assert (
            normalize_whoop_timestamp("2024-01-15T06:42:00.000+0000")
            == "2024-01-15T06:42:00.000+00:00"
        )
        assert (
            normalize_whoop_timestamp("2024-01-15T06:42:00.000-0530")
            == "2024-01-15T06:42:00.000-05:30"
        )

    def test_already_normal_timestamp_untouched(self):
        assert normalize_whoop_timestamp("2024-01-15T06:42:00Z") == "2024-01-15T06:42:00Z"

    @pytest.mark.parametrize("raw", [None, ""])
    def test_empty_timestamp(self, raw):
        assert normalize_whoop_timestamp(raw) is None
        assert parse_timestamp(raw) is None
        assert to_local_iso(raw) is None

    def test_parse_offset_timestamp(self):
        parsed = parse_timestamp("2024-01-15T06:42:00.000-0500")
        assert parsed == datetime(2024, 1, 15, 11, 42, tzinfo=timezone.utc)

    def test_parse_garbage_returns_none(self):
        assert parse_timestamp("yesterday-ish") is None

    def test_naive_timestamp_is_machine_local(self):
        parsed = parse_timestamp("2024-01-15T06:42:00")
        assert parsed == datetime(2024, 1, 15, 6, 42).astimezone()
        assert parsed.tzinfo is not None

    def test_bare_date_is_utc_midnight(self):
        assert parse_timestamp("2024-01-15") == datetime(2024, 1, 15, tzinfo=timezone.utc)

    def test_to_local_iso_in_given_zone(self):
        plus_two = timezone(timedelta(hours=2))
        assert (
            to_local_iso("2024-01-15T06:42:00.000+0000", plus_two)
            == "2024-01-15T08:42:00+02:00"
        )

    def test_to_utc_iso_has_millis_and_z(self):
        value = datetime(2024, 1, 15, 7, 30, 5, 123456, tzinfo=timezone(timedelta(hours=1)))
        assert to_utc_iso(value) == "2024-01-15T06:30:05.123Z"
        assert to_utc_iso(None) is None


class TestDisplayNumbers:
    """Tests for numbers embedded in display strings."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("72 bpm", 72.0),
            ("98.6°F", 98.6),
            ("10,432", 10432.0),
            ("-2.5 yrs", -2.5),
            ("0.8x", 0.8),
            (".5", 0.5),
        ],
    )
    def test_parse_display_number(self, value, expected):
        assert parse_display_number(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", ["--", "", None, "n/a", "-", "."])
    def test_unparsable_display_number_is_none(self, value):
        assert parse_display_number(value) is None
        assert parse_display_int(value) is None

    def test_parse_display_int_rounds(self):
        assert parse_display_int("72 bpm") == 72
        assert parse_display_int("98.6°F") == 99
        assert parse_display_int("2.5") == 3
        assert parse_display_int("94%") == 94


class TestDurations:
    """Tests for duration formatting."""

    def test_identical_start_end_is_none(self):
        assert format_duration_between(T0, T0) is None

    def test_negative_interval_is_none(self):
        assert format_duration_between(T0, T0 - timedelta(minutes=5)) is None

    def test_missing_side_is_none(self):
        assert format_duration_between(None, T0) is None
        assert format_duration_between(T0, None) is None

    @pytest.mark.parametrize(
        "delta,expected",
        [
            (timedelta(hours=1, minutes=5), "1h 5m"),
            (timedelta(seconds=45), "45s"),
            (timedelta(minutes=2, seconds=5), "2m 5s"),
            (timedelta(minutes=30), "30m"),
            (timedelta(hours=2), "2h 0m"),
            (timedelta(hours=1, minutes=5, seconds=30), "1h 5m"),
        ],
    )
    def test_format_duration(self, delta, expected):
        assert format_duration_between(T0, T0 + delta) == expected


class TestText:
    """Tests for clock, name and subtitle helpers."""

    def test_format_clock(self):
        assert format_clock("7:32") == "7h 32m"
        assert format_clock("07:05") == "7h 5m"
        assert format_clock(" 1:37 ") == "1h 37m"

    def test_format_clock_passes_other_text(self):
        assert format_clock(" 45 min ") == "45 min"
        assert format_clock(None) is None
        assert format_clock("") is None

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("FUNCTIONAL_FITNESS", "Functional Fitness"),
            ("functional-fitness", "Functional Fitness"),
            ("running", "Running"),
            ("  HIIT__class ", "Hiit Class"),
            (None, "Workout"),
            ("", "Workout"),
        ],
    )
    def test_normalize_workout_name(self, raw, expected):
        assert normalize_workout_name(raw) == expected

    def test_parse_next_update_in(self):
        assert parse_next_update_in("NEXT UPDATE IN 3 DAYS") == "3 days"
        assert parse_next_update_in("Next update in   12 hours") == "12 hours"
        assert parse_next_update_in("UPDATED TODAY") == "updated today"
        assert parse_next_update_in(None) is None
