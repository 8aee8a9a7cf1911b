"""Daily statistics aggregation.

Fetches the five WHOOP screens for a day concurrently and folds the
extracted facts into one DailyStatsOutput.
"""

import asyncio
import logging
from datetime import date, tzinfo
from typing import Optional, Union

from whoop_cli.adapters.whoop_adapter import WhoopAdapter
from whoop_cli.models.stats import (
    CurrentAndAverage,
    DailyStatsOutput,
    DayBounds,
    IntCurrentAndAverage,
    SleepStats,
)
from whoop_cli.services.extractors import (
    KeyStat,
    build_workouts,
    get_bed_wake_times,
    get_day_end_time,
    get_key_stats,
    get_sleep_efficiency,
    get_sleep_hours_vs_needed,
    get_sleep_score,
    get_sleep_stages,
    get_weight_stat,
    healthspan_summary,
)
from whoop_cli.services.normalizers import format_clock, parse_display_int, parse_display_number

logger = logging.getLogger(__name__)

_MISSING = KeyStat()


class DailyStatsService:
    """Builds the daily statistics record for one account."""

    def __init__(self, client: WhoopAdapter, tz: Optional[tzinfo] = None):
        """Initialize the service.

        Args:
            client: Authenticated WHOOP adapter.
            tz: Zone for local timestamps (defaults to the machine zone).
        """
        self.client = client
        self.tz = tz

    async def build(self, target_date: Union[date, str]) -> DailyStatsOutput:
        """Fetch and assemble statistics for a day.

        Args:
            target_date: Day to report, as a date or YYYY-MM-DD.

        Returns:
            DailyStatsOutput with null for anything WHOOP did not report.

        Raises:
            AuthenticationError, ApiError: If any fetch fails.
        """
        day = target_date.isoformat() if isinstance(target_date, date) else target_date

        overview, sleep, strain, healthspan, last_night = await asyncio.gather(
            self.client.get_home(day),
            self.client.get_sleep(day),
            self.client.get_strain(day),
            self.client.get_healthspan(day),
            self.client.get_sleep_last_night(day),
        )

        key_stats = get_key_stats(overview)
        bed_wake = get_bed_wake_times(last_night, overview, self.tz)
        weight_stat = get_weight_stat(key_stats) or _MISSING
        workouts = build_workouts(overview, strain)

        sleep_hours = key_stats.get("SLEEP_HOURS", _MISSING)
        sleep_need = key_stats.get("SLEEP_NEED", _MISSING)
        rhr = key_stats.get("RHR", _MISSING)
        hrv = key_stats.get("HRV", _MISSING)
        steps = key_stats.get("STEPS", _MISSING)

        logger.debug(
            f"Extracted {len(key_stats)} key statistics and {len(workouts)} workouts for {day}"
        )

        return DailyStatsOutput(
            date=day,
            day=DayBounds(
                start=bed_wake.wake_time,
                end=get_day_end_time(overview, self.tz),
            ),
            sleep=SleepStats(
                score=get_sleep_score(sleep),
                hours=format_clock(sleep_hours.current),
                hours_vs_needed=get_sleep_hours_vs_needed(sleep),
                hours_needed=format_clock(sleep_need.current),
                hours_30d_avg=format_clock(sleep_hours.thirty_day),
                efficiency=get_sleep_efficiency(sleep),
                rhr=_int_pair(rhr),
                hrv=_int_pair(hrv),
                bed_time=bed_wake.bed_time,
                wake_time=bed_wake.wake_time,
                stages=get_sleep_stages(last_night),
            ),
            steps=_int_pair(steps),
            weight=CurrentAndAverage(
                value=parse_display_number(weight_stat.current),
                avg_30d=parse_display_number(weight_stat.thirty_day),
            ),
            workouts=workouts,
            healthspan=healthspan_summary(healthspan),
        )


def _int_pair(stat: KeyStat) -> IntCurrentAndAverage:
    return IntCurrentAndAverage(
        value=parse_display_int(stat.current),
        avg_30d=parse_display_int(stat.thirty_day),
    )


async def build_daily_stats(
    client: WhoopAdapter,
    target_date: Union[date, str],
    tz: Optional[tzinfo] = None,
) -> DailyStatsOutput:
    """Convenience wrapper around DailyStatsService.build."""
    return await DailyStatsService(client, tz=tz).build(target_date)
