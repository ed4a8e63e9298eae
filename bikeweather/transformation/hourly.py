from enum import Enum
from typing import Iterable, Optional
import pandas as pd
from .quality import FilteredObservation
from ..ingestion.schema import HOURLY_WEATHER_COLUMNS
from ..utils.logging import get_logger

logger = get_logger(__name__)


class Reduction(str, Enum):
    MEAN = "mean"  # intensive quantities (temperature)
    SUM = "sum"    # additive quantities (precipitation depth)


def hour_bucket(values) -> pd.Series:
    """Floor timestamps to the start of their UTC hour."""
    ts = pd.to_datetime(pd.Series(values), utc=True)
    return ts.dt.floor("h").astype("datetime64[ns, UTC]")


def empty_hourly_frame() -> pd.DataFrame:
    return pd.DataFrame({
        "hour": pd.Series([], dtype="datetime64[ns, UTC]"),
        "temperature_c": pd.Series([], dtype="float64"),
        "precipitation_mm": pd.Series([], dtype="float64"),
    })


def _to_frame(observations: Iterable[FilteredObservation]) -> pd.DataFrame:
    obs = list(observations)
    frame = pd.DataFrame({
        "hour": hour_bucket([o.observed_at for o in obs]),
        "temperature_c": pd.Series([o.temperature_c for o in obs], dtype="float64"),
        "precipitation_mm": pd.Series([o.precipitation_mm for o in obs], dtype="float64"),
        "precipitation_period_hours": pd.Series([o.precipitation_period_hours for o in obs], dtype="float64"),
    })
    return frame


class HourlyAggregator:
    """Collapses filtered observations into one row per UTC hour bucket."""

    def __init__(self, precipitation_period_hours: int = 1):
        self.precipitation_period_hours = precipitation_period_hours

    def aggregate_field(
        self,
        observations: Iterable[FilteredObservation],
        field: str,
        reduction: Reduction,
        period_hours: Optional[int] = None,
    ) -> pd.Series:
        """Reduce one field per hour bucket.

        Missing readings never count: a group with no valid value yields NaN
        for both reductions. With ``period_hours`` set, readings with any other
        accumulation period are left out of the aggregation entirely.
        """
        frame = observations if isinstance(observations, pd.DataFrame) else _to_frame(observations)
        if period_hours is not None:
            frame = frame[frame["precipitation_period_hours"] == period_hours]

        grouped = frame.groupby("hour", sort=True)[field]
        if reduction is Reduction.MEAN:
            return grouped.mean()
        if reduction is Reduction.SUM:
            return grouped.sum(min_count=1)
        raise ValueError(f"Unsupported reduction: {reduction}")

    def aggregate(self, observations: Iterable[FilteredObservation]) -> pd.DataFrame:
        frame = _to_frame(observations)
        if frame.empty:
            return empty_hourly_frame()

        temperature = self.aggregate_field(frame, "temperature_c", Reduction.MEAN)
        precipitation = self.aggregate_field(
            frame, "precipitation_mm", Reduction.SUM, period_hours=self.precipitation_period_hours
        )

        # temperature is grouped over every observation, so its index holds every hour
        hourly = pd.DataFrame({
            "temperature_c": temperature,
            "precipitation_mm": precipitation.reindex(temperature.index),
        })
        hourly.index.name = "hour"
        hourly = hourly.reset_index()[HOURLY_WEATHER_COLUMNS]

        logger.info(
            f"Aggregated {len(frame)} observations into {len(hourly)} hours "
            f"({hourly['temperature_c'].isna().sum()} without temperature, "
            f"{hourly['precipitation_mm'].isna().sum()} without hourly precipitation)"
        )
        return hourly
