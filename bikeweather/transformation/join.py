import pandas as pd
from .hourly import hour_bucket
from ..ingestion.schema import HOURLY_WEATHER_COLUMNS, JOINED_COLUMNS
from ..utils.logging import get_logger

logger = get_logger(__name__)


class TemporalJoiner:
    """Left join of counter records onto hourly weather by exact UTC hour."""

    def join(self, counters: pd.DataFrame, weather: pd.DataFrame) -> pd.DataFrame:
        weather = weather[HOURLY_WEATHER_COLUMNS].copy()
        weather["hour"] = hour_bucket(weather["hour"])
        if weather["hour"].duplicated().any():
            raise ValueError("Weather table holds more than one row for the same hour")

        left = counters.copy()
        left["hour"] = hour_bucket(left["timestamp"])

        joined = left.merge(weather, on="hour", how="left", validate="many_to_one", sort=False)
        if len(joined) != len(counters):
            raise RuntimeError(f"Join changed the row count: {len(counters)} -> {len(joined)}")

        unmatched = int((~joined["hour"].isin(weather["hour"])).sum())
        logger.info(f"Joined {len(joined)} counter records ({unmatched} without a weather hour)")
        return joined[JOINED_COLUMNS]
