"""Daily statistics output schema.

Every field is always present; values are null when WHOOP did not provide
them. Serialized with camelCase keys (``model_dump(by_alias=True)``).
"""

from typing import Annotated, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer


def _compact_number(value: float) -> Union[int, float]:
    return int(value) if value.is_integer() else value


# Whole values serialize as integers (180.0 -> 180)
Number = Annotated[float, PlainSerializer(_compact_number)]


class StatsModel(BaseModel):
    """Base for output groups: immutable, populated by field name or alias."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class DayBounds(StatsModel):
    start: Optional[str] = None
    end: Optional[str] = None


class CurrentAndAverage(StatsModel):
    """A reading with its 30-day average."""

    value: Optional[Number] = None
    avg_30d: Optional[Number] = Field(default=None, alias="avg30d")


class IntCurrentAndAverage(StatsModel):
    value: Optional[int] = None
    avg_30d: Optional[int] = Field(default=None, alias="avg30d")


class SleepStages(StatsModel):
    rem: Optional[str] = None
    deep: Optional[str] = None
    light: Optional[str] = None


class SleepStats(StatsModel):
    score: Optional[int] = None
    hours: Optional[str] = None
    hours_vs_needed: Optional[int] = Field(default=None, alias="hoursVsNeeded")
    hours_needed: Optional[str] = Field(default=None, alias="hoursNeeded")
    hours_30d_avg: Optional[str] = Field(default=None, alias="hours30dAvg")
    efficiency: Optional[int] = None
    rhr: IntCurrentAndAverage = IntCurrentAndAverage()
    hrv: IntCurrentAndAverage = IntCurrentAndAverage()
    bed_time: Optional[str] = Field(default=None, alias="bedTime")
    wake_time: Optional[str] = Field(default=None, alias="wakeTime")
    stages: SleepStages = SleepStages()


class Workout(StatsModel):
    name: str
    start: Optional[str] = None
    end: Optional[str] = None
    duration: Optional[str] = None


class HealthspanStats(StatsModel):
    whoop_age: Optional[Number] = Field(default=None, alias="whoopAge")
    years_difference: Optional[Number] = Field(default=None, alias="yearsDifference")
    pace_of_aging: Optional[Number] = Field(default=None, alias="paceOfAging")
    next_update_in: Optional[str] = Field(default=None, alias="nextUpdateIn")


class DailyStatsOutput(StatsModel):
    """Statistics for one day, as printed by ``whoop stats``."""

    date: str
    day: DayBounds = DayBounds()
    sleep: SleepStats = SleepStats()
    steps: IntCurrentAndAverage = IntCurrentAndAverage()
    weight: CurrentAndAverage = CurrentAndAverage()
    workouts: list[Workout] = []
    healthspan: HealthspanStats = HealthspanStats()

    def to_json_dict(self) -> dict:
        """Plain dict with the public camelCase keys."""
        return self.model_dump(by_alias=True)
