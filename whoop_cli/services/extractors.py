"""Domain extractors for WHOOP payloads.

Each function targets one item type inside one payload and returns a narrow
optional value. Missing or reshaped data yields None (or an empty
collection); nothing here raises on bad input.
"""

import logging
from dataclasses import dataclass
from datetime import tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from whoop_cli.models.stats import HealthspanStats, SleepStages, Workout
from whoop_cli.services.display_tree import (
    as_list,
    find_entry,
    find_item,
    get_number,
    get_path,
    get_str,
    iter_items,
    iter_pillar_items,
)
from whoop_cli.services.normalizers import (
    format_clock,
    format_duration_between,
    normalize_workout_name,
    parse_display_int,
    parse_display_number,
    parse_next_update_in,
    parse_timestamp,
    to_local_iso,
    to_utc_iso,
)

logger = logging.getLogger(__name__)

OVERVIEW_PILLAR = "OVERVIEW"

# Trend keys differ between accounts and regions; order is the priority.
WEIGHT_TREND_KEYS = ("WEIGHT", "BODY_WEIGHT", "WEIGHT_LBS", "WEIGHT_KG", "BODY_MASS")

SLEEP_EFFICIENCY_METRIC = "CONTRIBUTORS_TILE_IN_SLEEP_EFFICIENCY"
HOURS_VS_NEEDED_METRIC = "CONTRIBUTORS_TILE_HOURS_V_NEEDED"

STAGE_ZONES = {
    "REM_SLEEP": "rem",
    "SWS_SLEEP": "deep",
    "LIGHT_SLEEP": "light",
}

_ONE_DECIMAL = Decimal("0.1")


@dataclass(frozen=True)
class KeyStat:
    """Current and 30-day display strings of one KEY_STATISTIC."""

    current: Optional[str] = None
    thirty_day: Optional[str] = None


@dataclass(frozen=True)
class ActivityEntry:
    """An ACTIVITY item, from either the overview or the strain screen."""

    title: Optional[str] = None
    type: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None

    @property
    def is_sleep(self) -> bool:
        return (self.title or "").upper() == "SLEEP" or (self.type or "").upper() == "SLEEP"


@dataclass(frozen=True)
class BedWakeTimes:
    bed_time: Optional[str] = None
    wake_time: Optional[str] = None


# ==================== Overview: key statistics ====================


def get_key_stats(overview: Any) -> dict[str, KeyStat]:
    """KEY_STATISTIC items of the OVERVIEW pillar, keyed by trend_key."""
    stats: dict[str, KeyStat] = {}
    for item in iter_pillar_items(overview, OVERVIEW_PILLAR, "KEY_STATISTIC"):
        trend_key = get_str(item, "content", "trend_key")
        if trend_key is None:
            continue
        stats[trend_key] = KeyStat(
            current=get_str(item, "content", "current_value_display"),
            thirty_day=get_str(item, "content", "thirty_day_value_display"),
        )
    return stats


def get_weight_stat(key_stats: dict[str, KeyStat]) -> Optional[KeyStat]:
    """Weight statistic: preferred keys first, then any key containing WEIGHT."""
    for key in WEIGHT_TREND_KEYS:
        if key in key_stats:
            return key_stats[key]

    for trend_key, stat in key_stats.items():
        if "WEIGHT" in trend_key.upper():
            return stat

    return None


# ==================== Overview / strain: activities ====================


def _activity_entry(content: Any) -> ActivityEntry:
    return ActivityEntry(
        title=get_str(content, "title"),
        type=get_str(content, "type"),
        start=get_str(content, "during", "lower_endpoint"),
        end=get_str(content, "during", "upper_endpoint"),
    )


def _overview_activity_items(overview: Any):
    for card in iter_pillar_items(overview, OVERVIEW_PILLAR, "ITEMS_CARD"):
        for activity in as_list(get_path(card, "content", "items")):
            if isinstance(activity, dict) and activity.get("type") == "ACTIVITY":
                yield activity


def get_activities_from_overview(overview: Any) -> list[ActivityEntry]:
    """ACTIVITY entries nested in the overview's ITEMS_CARD items."""
    return [
        _activity_entry(activity.get("content"))
        for activity in _overview_activity_items(overview)
    ]


def get_activities_from_strain(strain: Any) -> list[ActivityEntry]:
    """Top-level ACTIVITY items of the strain screen."""
    return [_activity_entry(item.get("content")) for item in iter_items(strain, "ACTIVITY")]


def get_sleep_activity_from_overview(overview: Any) -> Optional[dict]:
    """Content of the overview activity tagged as sleep."""
    for activity in _overview_activity_items(overview):
        content = activity.get("content")
        if _activity_entry(content).is_sleep:
            return content if isinstance(content, dict) else None
    return None


def build_workouts(overview: Any, strain: Any) -> list[Workout]:
    """Non-sleep activities from both screens, deduplicated and sorted by start.

    The same workout usually shows up on both screens; entries with identical
    (name, start, end) collapse to the first one seen.
    """
    combined = get_activities_from_overview(overview) + get_activities_from_strain(strain)
    workouts: list[Workout] = []
    seen: set[tuple[str, str, str]] = set()

    for activity in combined:
        if not activity.title or activity.is_sleep:
            continue

        name = normalize_workout_name(activity.title)
        start_dt = parse_timestamp(activity.start)
        end_dt = parse_timestamp(activity.end)
        start = to_utc_iso(start_dt)
        end = to_utc_iso(end_dt)

        key = (name, start or "", end or "")
        if key in seen:
            continue
        seen.add(key)
        workouts.append(
            Workout(
                name=name,
                start=start,
                end=end,
                duration=format_duration_between(start_dt, end_dt),
            )
        )

    workouts.sort(key=lambda workout: workout.start or "")
    return workouts


# ==================== Sleep ====================


def get_sleep_score(sleep: Any) -> Optional[int]:
    """Score of the first SCORE_GAUGE."""
    gauge = find_item(sleep, "SCORE_GAUGE")
    if gauge is None:
        return None
    return parse_display_int(get_str(gauge, "content", "score_display"))


def _contributor_metric(sleep: Any, metric_id: str) -> Optional[int]:
    for tile in iter_items(sleep, "CONTRIBUTORS_TILE"):
        metrics = get_path(tile, "content", "metrics")
        if not isinstance(metrics, list):
            continue
        for metric in metrics:
            if isinstance(metric, dict) and metric.get("id") == metric_id:
                return parse_display_int(get_str(metric, "status"))
    return None


def get_sleep_efficiency(sleep: Any) -> Optional[int]:
    """Sleep efficiency percentage."""
    return _contributor_metric(sleep, SLEEP_EFFICIENCY_METRIC)


def get_sleep_hours_vs_needed(sleep: Any) -> Optional[int]:
    """Hours slept as a percentage of hours needed."""
    return _contributor_metric(sleep, HOURS_VS_NEEDED_METRIC)


def get_sleep_stages(last_night: Any) -> SleepStages:
    """REM / deep / light durations from the hours_of_sleep bar graph."""
    card = find_item(
        last_night,
        "DETAILS_GRAPHING_CARD",
        lambda item: get_path(item, "content", "id") == "hours_of_sleep",
    )
    if card is None:
        return SleepStages()

    bar_card = find_entry(get_path(card, "content", "card_content"), "BAR_GRAPH_CARD")
    stages: dict[str, Optional[str]] = {}
    for zone in as_list(get_path(bar_card, "content", "heart_rate_zones")):
        stage = STAGE_ZONES.get(get_str(zone, "id"))
        if stage is not None:
            stages[stage] = format_clock(get_str(zone, "bar_graph_tile_time_display"))
    return SleepStages(**stages)


def get_bed_wake_times(
    last_night: Any,
    overview: Any,
    tz: Optional[tzinfo] = None,
) -> BedWakeTimes:
    """Bed and wake times, each side falling back to the overview sleep activity."""
    params = get_path(last_night, "header_section", "destination", "parameters")
    bed_time = to_local_iso(get_str(params, "start_time"), tz)
    wake_time = to_local_iso(get_str(params, "end_time"), tz)

    if bed_time and wake_time:
        return BedWakeTimes(bed_time=bed_time, wake_time=wake_time)

    sleep_activity = get_sleep_activity_from_overview(overview)
    if bed_time is None:
        bed_time = to_local_iso(get_str(sleep_activity, "during", "lower_endpoint"), tz)
    if wake_time is None:
        wake_time = to_local_iso(get_str(sleep_activity, "during", "upper_endpoint"), tz)
    return BedWakeTimes(bed_time=bed_time, wake_time=wake_time)


def get_day_end_time(overview: Any, tz: Optional[tzinfo] = None) -> Optional[str]:
    """End of the current physiological cycle."""
    return to_local_iso(
        get_str(overview, "metadata", "cycle_metadata", "during", "upper_endpoint"),
        tz,
    )


# ==================== Healthspan ====================


def _rounded(value: Optional[float]) -> Optional[float]:
    """One decimal, halves away from zero (1.25 -> 1.3, -2.25 -> -2.3)."""
    if value is None:
        return None
    return float(Decimal(value).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def healthspan_summary(healthspan: Any) -> HealthspanStats:
    """WHOOP age, years difference, pace of aging and next-update countdown."""
    amoeba = get_path(healthspan, "unlocked_content", "whoop_age_amoeba")

    whoop_age = _rounded(get_number(amoeba, "style_values", "age"))
    if whoop_age is None:
        whoop_age = parse_display_number(get_str(amoeba, "age_value_display"))

    pace_of_aging = _rounded(get_number(amoeba, "style_values", "pace_of_aging"))
    if pace_of_aging is None:
        pace_of_aging = parse_display_number(get_str(amoeba, "pace_of_aging_display"))

    return HealthspanStats(
        whoop_age=whoop_age,
        years_difference=_rounded(get_number(amoeba, "style_values", "years_difference")),
        pace_of_aging=pace_of_aging,
        next_update_in=parse_next_update_in(get_str(healthspan, "navigation_subtitle")),
    )
