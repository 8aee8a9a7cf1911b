"""Rendering of DailyStatsOutput as JSON or human-readable text."""

import json
from datetime import date, datetime, tzinfo
from typing import Optional

from whoop_cli.models.stats import DailyStatsOutput

NOT_AVAILABLE = "n/a"


def format_daily_stats_json(output: DailyStatsOutput) -> str:
    """Pretty-printed JSON with the public camelCase keys."""
    return json.dumps(output.to_json_dict(), indent=2, ensure_ascii=False)


def format_number(value: Optional[float], fraction_digits: int = 0) -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"{value:.{fraction_digits}f}"


def format_percent(value: Optional[int]) -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"{value}%"


def format_human_date(value: str) -> str:
    """Calendar date as "Jan 15, 2024"; unparsable input is returned as is."""
    try:
        parsed = date.fromisoformat(value)
    except ValueError:
        return value
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def format_human_datetime(value: Optional[str], tz: Optional[tzinfo] = None) -> str:
    """ISO timestamp as "Jan 15, 2024, 6:30 AM" in tz (machine zone by default)."""
    if not value:
        return NOT_AVAILABLE
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return value
    local = parsed.astimezone(tz) if tz is not None else parsed.astimezone()
    hour = local.hour % 12 or 12
    return f"{local:%b} {local.day}, {local.year}, {hour}:{local:%M %p}"


def format_daily_stats_text(
    output: DailyStatsOutput,
    timezone_name: str,
    tz: Optional[tzinfo] = None,
) -> str:
    """Multi-line report of a day's statistics."""
    sleep = output.sleep
    health = output.healthspan

    def when(value: Optional[str]) -> str:
        return format_human_datetime(value, tz)

    lines: list[str] = [
        f"WHOOP Stats ({format_human_date(output.date)})",
        f"Timezone: {timezone_name}",
        "",
        "Day",
        f"  Start: {when(output.day.start)}",
        f"  End: {when(output.day.end)}",
        "",
        "Sleep",
        f"  Score: {format_percent(sleep.score)}",
        f"  Hours: {sleep.hours or NOT_AVAILABLE}",
        f"  Hours vs Needed: {format_percent(sleep.hours_vs_needed)}",
        f"  Hours Needed: {sleep.hours_needed or NOT_AVAILABLE}",
        f"  Hours 30d Avg: {sleep.hours_30d_avg or NOT_AVAILABLE}",
        f"  Efficiency: {format_percent(sleep.efficiency)}",
        f"  RHR: {format_number(sleep.rhr.value)} (30d avg: {format_number(sleep.rhr.avg_30d)})",
        f"  HRV: {format_number(sleep.hrv.value)} (30d avg: {format_number(sleep.hrv.avg_30d)})",
        f"  Bed Time: {when(sleep.bed_time)}",
        f"  Wake Time: {when(sleep.wake_time)}",
        f"  Stage REM: {sleep.stages.rem or NOT_AVAILABLE}",
        f"  Stage Deep: {sleep.stages.deep or NOT_AVAILABLE}",
        f"  Stage Light: {sleep.stages.light or NOT_AVAILABLE}",
        "",
        "Steps",
        f"  Value: {format_number(output.steps.value)}",
        f"  Avg 30d: {format_number(output.steps.avg_30d)}",
        "",
        "Weight",
        f"  Value: {format_number(output.weight.value, 1)}",
        f"  Avg 30d: {format_number(output.weight.avg_30d, 1)}",
        "",
        "Workouts",
    ]

    if not output.workouts:
        lines.append("  None")
    for workout in output.workouts:
        lines.extend(
            [
                f"  - {workout.name}",
                f"    Start: {when(workout.start)}",
                f"    End: {when(workout.end)}",
                f"    Duration: {workout.duration or NOT_AVAILABLE}",
            ]
        )

    pace = NOT_AVAILABLE if health.pace_of_aging is None else f"{health.pace_of_aging:.1f}x"
    lines.extend(
        [
            "",
            "Healthspan",
            f"  WHOOP Age: {format_number(health.whoop_age, 1)}",
            f"  Years Difference: {format_number(health.years_difference, 1)}",
            f"  Pace of Aging: {pace}",
            f"  Next Update In: {health.next_update_in or NOT_AVAILABLE}",
        ]
    )
    return "\n".join(lines)
