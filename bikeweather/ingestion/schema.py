from datetime import datetime
from enum import Enum
from typing import FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ISD encodes an unmeasured value as +9999 (tenths of a unit)
MISSING_SENTINEL = 9999


class QualityFlag(str, Enum):
    """ISD quality codes attached to each measured field."""

    NOT_CHECKED = "0"
    PASSED = "1"
    SUSPECT = "2"
    ERRONEOUS = "3"
    PASSED_NCEI = "4"
    PASSED_NCEI_ACCEPTED = "5"
    SUSPECT_NCEI = "6"
    ERRONEOUS_NCEI = "7"
    MISSING = "9"
    ACCEPTED = "A"
    CONVERTED = "C"
    INTERPOLATED = "I"
    MANUAL = "M"
    VALIDATOR_REPLACED = "P"
    REPLACED = "R"
    UNCHECKED_SOURCE = "U"

    @classmethod
    def parse(cls, code: Optional[str]) -> Optional["QualityFlag"]:
        if code is None:
            return None
        code = str(code).strip().upper()
        try:
            return cls(code)
        except ValueError:
            return None


class AnomalyFlag(str, Enum):
    REPEATED_VALUE_RUN = "repeated_value_run"
    EXTREME_VALUE = "extreme_value"


class RawWeatherObservation(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    station_id: str = Field(min_length=1)
    observed_at: datetime
    temperature_raw: Optional[int] = None
    temperature_flag: Optional[str] = None
    precipitation_raw: Optional[int] = None
    precipitation_flag: Optional[str] = None
    precipitation_period_hours: Optional[int] = None

    @field_validator("observed_at")
    @classmethod
    def _must_be_aware(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            raise ValueError("observed_at must carry a time zone")
        return v


class RawCounterEvent(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    location: str = Field(min_length=1)
    timestamp: datetime
    count: int = Field(ge=0)

    @field_validator("timestamp")
    @classmethod
    def _must_be_aware(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            raise ValueError("timestamp must carry a time zone")
        return v


class CleaningPolicy(BaseModel):
    """Quality-flag accept sets and anomaly thresholds."""

    model_config = ConfigDict(frozen=True)

    temperature_accept_flags: FrozenSet[QualityFlag] = frozenset(
        {QualityFlag.PASSED, QualityFlag.PASSED_NCEI_ACCEPTED, QualityFlag.ACCEPTED}
    )
    precipitation_accept_flags: FrozenSet[QualityFlag] = frozenset(
        {QualityFlag.PASSED, QualityFlag.PASSED_NCEI_ACCEPTED}
    )
    extreme_value_threshold: float = Field(default=500, gt=0)
    anomaly_run_min_length: int = Field(default=3, ge=2)


# Table layouts passed between stages
HOURLY_WEATHER_COLUMNS = ["hour", "temperature_c", "precipitation_mm"]

CLEANED_COUNTER_COLUMNS = [
    "location",
    "timestamp",
    "count",
    "adjusted_count",
    "was_zero_adjusted",
    "log_count",
    "day_of_week",
    "is_weekend",
    "anomaly_flag",
]

JOINED_COLUMNS = CLEANED_COUNTER_COLUMNS + HOURLY_WEATHER_COLUMNS
