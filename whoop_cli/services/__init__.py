"""Service layer for whoop-cli.

Services turn raw WHOOP payloads into the daily statistics record.
"""

from whoop_cli.services.daily_stats import DailyStatsService, build_daily_stats
from whoop_cli.services.formatter import format_daily_stats_json, format_daily_stats_text

__all__ = [
    "DailyStatsService",
    "build_daily_stats",
    "format_daily_stats_json",
    "format_daily_stats_text",
]
