from dataclasses import dataclass
from datetime import datetime
from typing import Collection, Iterable, List, Optional
from ..ingestion.schema import MISSING_SENTINEL, CleaningPolicy, QualityFlag, RawWeatherObservation


@dataclass(frozen=True)
class FilteredObservation:
    observed_at: datetime
    temperature_c: Optional[float]
    precipitation_mm: Optional[float]
    precipitation_period_hours: Optional[int]


def decode_field(raw: Optional[int], flag: Optional[str], accept: Collection[QualityFlag]) -> Optional[float]:
    """Decode a tenths-encoded ISD value, or None when it must be treated as missing.

    The sentinel is checked first; its quality flag is never consulted.
    """
    if raw is None or raw == MISSING_SENTINEL:
        return None
    parsed = QualityFlag.parse(flag)
    if parsed is None or parsed not in accept:
        return None
    return raw / 10


class WeatherQualityFilter:
    def __init__(self, policy: Optional[CleaningPolicy] = None):
        policy = policy or CleaningPolicy()
        self.temperature_accept = frozenset(policy.temperature_accept_flags)
        self.precipitation_accept = frozenset(policy.precipitation_accept_flags)

    def temperature(self, obs: RawWeatherObservation) -> Optional[float]:
        return decode_field(obs.temperature_raw, obs.temperature_flag, self.temperature_accept)

    def precipitation(self, obs: RawWeatherObservation) -> Optional[float]:
        return decode_field(obs.precipitation_raw, obs.precipitation_flag, self.precipitation_accept)

    def apply(self, obs: RawWeatherObservation) -> FilteredObservation:
        return FilteredObservation(
            observed_at=obs.observed_at,
            temperature_c=self.temperature(obs),
            precipitation_mm=self.precipitation(obs),
            precipitation_period_hours=obs.precipitation_period_hours,
        )

    def apply_all(self, observations: Iterable[RawWeatherObservation]) -> List[FilteredObservation]:
        return [self.apply(o) for o in observations]
