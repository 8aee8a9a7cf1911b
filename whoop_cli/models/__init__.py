"""Output models for whoop-cli."""

from whoop_cli.models.stats import (
    CurrentAndAverage,
    DailyStatsOutput,
    DayBounds,
    HealthspanStats,
    IntCurrentAndAverage,
    SleepStages,
    SleepStats,
    Workout,
)

__all__ = [
    "CurrentAndAverage",
    "DailyStatsOutput",
    "DayBounds",
    "HealthspanStats",
    "IntCurrentAndAverage",
    "SleepStages",
    "SleepStats",
    "Workout",
]
