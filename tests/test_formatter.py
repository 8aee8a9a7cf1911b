"""Tests for JSON / text rendering of daily stats."""

import json
from datetime import timedelta, timezone

import pytest

from whoop_cli.models.stats import CurrentAndAverage, DailyStatsOutput, HealthspanStats
from whoop_cli.services.formatter import (
    format_daily_stats_json,
    format_daily_stats_text,
    format_human_date,
    format_human_datetime,
)


@pytest.fixture
def fixture_output(expected_daily_stats) -> DailyStatsOutput:
    return DailyStatsOutput.model_validate(expected_daily_stats)


class TestHelpers:
    def test_human_date(self):
        assert format_human_date("2024-01-05") == "Jan 5, 2024"
        assert format_human_date("someday") == "someday"

    def test_human_datetime(self):
        assert format_human_datetime("2024-01-15T06:42:00+00:00", timezone.utc) == "Jan 15, 2024, 6:42 AM"
        assert format_human_datetime("2024-01-15T12:05:00.000Z", timezone.utc) == "Jan 15, 2024, 12:05 PM"
        assert format_human_datetime("2024-01-15T00:30:00+00:00", timezone.utc) == "Jan 15, 2024, 12:30 AM"

    def test_human_datetime_converts_zone(self):
        minus_five = timezone(timedelta(hours=-5))
        assert format_human_datetime("2024-01-15T03:00:00+00:00", minus_five) == "Jan 14, 2024, 10:00 PM"

    def test_human_datetime_missing_or_bad(self):
        assert format_human_datetime(None) == "n/a"
        assert format_human_datetime("later") == "later"


class TestJson:
    def test_camel_case_keys(self, fixture_output: DailyStatsOutput):
        data = json.loads(format_daily_stats_json(fixture_output))
        assert list(data) == ["date", "day", "sleep", "steps", "weight", "workouts", "healthspan"]
        assert "hoursVsNeeded" in data["sleep"]
        assert "hours30dAvg" in data["sleep"]
        assert "avg30d" in data["steps"]
        assert "whoopAge" in data["healthspan"]

    def test_null_fields_present(self):
        data = json.loads(format_daily_stats_json(DailyStatsOutput(date="2024-01-15")))
        assert data["day"] == {"start": None, "end": None}
        assert data["weight"] == {"value": None, "avg30d": None}
        assert data["workouts"] == []

    def test_whole_numbers_render_without_fraction(self):
        output = DailyStatsOutput(
            date="2024-01-15",
            weight=CurrentAndAverage(value=180.0, avg_30d=181.5),
            healthspan=HealthspanStats(whoop_age=31.0, years_difference=-0.0, pace_of_aging=1.3),
        )
        text = format_daily_stats_json(output)

        assert '"value": 180,' in text
        assert '"avg30d": 181.5' in text
        assert '"whoopAge": 31,' in text
        assert '"yearsDifference": 0,' in text
        assert '"paceOfAging": 1.3,' in text


class TestText:
    def test_fixture_report(self, fixture_output: DailyStatsOutput):
        text = format_daily_stats_text(fixture_output, "UTC", timezone.utc)
        lines = text.splitlines()

        assert lines[0] == "WHOOP Stats (Jan 15, 2024)"
        assert lines[1] == "Timezone: UTC"
        for expected in [
            "  Start: Jan 15, 2024, 6:42 AM",
            "  End: Jan 16, 2024, 7:05 AM",
            "  Score: 87%",
            "  Hours: 7h 32m",
            "  Hours vs Needed: 92%",
            "  Hours Needed: 8h 10m",
            "  Efficiency: 94%",
            "  RHR: 52 (30d avg: 54)",
            "  HRV: 68 (30d avg: 61)",
            "  Bed Time: Jan 14, 2024, 11:10 PM",
            "  Stage Deep: 1h 37m",
            "  Value: 10432",
            "  Value: 180.4",
            "  - Functional Fitness",
            "    Duration: 45m 30s",
            "  WHOOP Age: 31.4",
            "  Years Difference: -2.6",
            "  Pace of Aging: 0.8x",
            "  Next Update In: 3 days",
        ]:
            assert expected in lines

    def test_empty_report(self):
        text = format_daily_stats_text(DailyStatsOutput(date="2024-01-15"), "Europe/Berlin")
        lines = text.splitlines()

        assert "Timezone: Europe/Berlin" in lines
        assert "  Score: n/a" in lines
        assert "  RHR: n/a (30d avg: n/a)" in lines
        assert "  Pace of Aging: n/a" in lines
        workouts_at = lines.index("Workouts")
        assert lines[workouts_at + 1] == "  None"
