from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple
import numpy as np
import pandas as pd
from .hourly import hour_bucket
from ..ingestion.schema import CLEANED_COUNTER_COLUMNS, AnomalyFlag, CleaningPolicy, RawCounterEvent
from ..utils.logging import get_logger

logger = get_logger(__name__)

WEEKEND_DAYS = (6, 7)


@dataclass
class CleaningReport:
    input_rows: int = 0
    zero_adjusted: int = 0
    repeated_value_run: int = 0
    extreme_value: int = 0
    duplicate_timestamps: int = 0
    gap_hours: Dict[str, int] = field(default_factory=dict)


class RunDetector:
    """State machine over one location's counts, fed in ascending timestamp order.

    ``step`` returns True when the value extends a run of identical non-zero
    counts to ``min_length`` records or more. A zero or a changed value starts
    a new run of length one.
    """

    def __init__(self, min_length: int = 3):
        if min_length < 2:
            raise ValueError("min_length must be at least 2")
        self.min_length = min_length
        self.last_value: Optional[int] = None
        self.run_length = 0

    def step(self, value: int) -> bool:
        if self.run_length and value == self.last_value and value != 0:
            self.run_length += 1
        else:
            self.run_length = 1
        self.last_value = value
        return self.run_length >= self.min_length


def empty_counter_frame(timezone_name: str) -> pd.DataFrame:
    return pd.DataFrame({
        "location": pd.Series([], dtype="object"),
        "timestamp": pd.Series([], dtype=f"datetime64[ns, {timezone_name}]"),
        "count": pd.Series([], dtype="int64"),
        "adjusted_count": pd.Series([], dtype="int64"),
        "was_zero_adjusted": pd.Series([], dtype="bool"),
        "log_count": pd.Series([], dtype="float64"),
        "day_of_week": pd.Series([], dtype="int64"),
        "is_weekend": pd.Series([], dtype="bool"),
        "anomaly_flag": pd.Series([], dtype="object"),
    })


class CounterSeriesCleaner:
    def __init__(
        self,
        policy: Optional[CleaningPolicy] = None,
        timezone_name: str = "America/Los_Angeles",
        expected_frequency: str = "h",
    ):
        self.policy = policy or CleaningPolicy()
        self.timezone_name = timezone_name
        self.expected_frequency = expected_frequency

    def _to_frame(self, events: Iterable[RawCounterEvent]) -> pd.DataFrame:
        events = list(events)
        timestamps = pd.to_datetime([e.timestamp for e in events], utc=True).tz_convert(self.timezone_name)
        frame = pd.DataFrame({
            "location": pd.Series([e.location for e in events], dtype="object"),
            "timestamp": pd.Series(timestamps),
            "count": pd.Series([e.count for e in events], dtype="int64"),
        })
        # run detection depends on this order
        return frame.sort_values(["location", "timestamp"], kind="mergesort").reset_index(drop=True)

    def flag_anomalies(self, frame: pd.DataFrame) -> List[Optional[str]]:
        """One flag per row of a (location, timestamp)-sorted frame."""
        threshold = self.policy.extreme_value_threshold
        detectors: Dict[str, RunDetector] = {}
        flags: List[Optional[str]] = []
        for location, count in zip(frame["location"], frame["count"]):
            detector = detectors.get(location)
            if detector is None:
                detector = detectors[location] = RunDetector(self.policy.anomaly_run_min_length)
            if detector.step(int(count)):
                flags.append(AnomalyFlag.REPEATED_VALUE_RUN.value)
            elif count > threshold:
                flags.append(AnomalyFlag.EXTREME_VALUE.value)
            else:
                flags.append(None)
        return flags

    def report_gaps(self, frame: pd.DataFrame) -> Dict[str, int]:
        """Missing slots per location between its first and last event."""
        gaps: Dict[str, int] = {}
        for location, group in frame.groupby("location", sort=True):
            observed = pd.DatetimeIndex(hour_bucket(group["timestamp"]).unique())
            expected = pd.date_range(observed.min(), observed.max(), freq=self.expected_frequency)
            missing = len(expected.difference(observed))
            if missing:
                gaps[location] = missing
        return gaps

    def clean(self, events: Iterable[RawCounterEvent]) -> Tuple[pd.DataFrame, CleaningReport]:
        frame = self._to_frame(events)
        report = CleaningReport(input_rows=len(frame))
        if frame.empty:
            return empty_counter_frame(self.timezone_name), report

        zero = frame["count"] == 0
        frame["adjusted_count"] = frame["count"].where(~zero, 1)
        frame["was_zero_adjusted"] = zero
        frame["log_count"] = np.log(frame["adjusted_count"].astype("float64"))
        frame["day_of_week"] = (frame["timestamp"].dt.dayofweek + 1).astype("int64")
        frame["is_weekend"] = frame["day_of_week"].isin(WEEKEND_DAYS)
        frame["anomaly_flag"] = pd.Series(self.flag_anomalies(frame), index=frame.index, dtype="object")

        report.zero_adjusted = int(zero.sum())
        report.repeated_value_run = int((frame["anomaly_flag"] == AnomalyFlag.REPEATED_VALUE_RUN.value).sum())
        report.extreme_value = int((frame["anomaly_flag"] == AnomalyFlag.EXTREME_VALUE.value).sum())
        report.duplicate_timestamps = int(frame.duplicated(["location", "timestamp"]).sum())
        report.gap_hours = self.report_gaps(frame)

        logger.info(
            f"Cleaned {len(frame)} counter events: {report.zero_adjusted} zero-adjusted, "
            f"{report.repeated_value_run} repeated-value, {report.extreme_value} extreme-value"
        )
        if report.duplicate_timestamps:
            logger.warning(f"{report.duplicate_timestamps} duplicate (location, timestamp) event(s) retained")
        for location, missing in report.gap_hours.items():
            logger.warning(f"Location {location}: {missing} missing slot(s) in the counter series")

        return frame[CLEANED_COUNTER_COLUMNS], report
