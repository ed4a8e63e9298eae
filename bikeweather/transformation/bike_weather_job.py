from dataclasses import dataclass, field
from typing import Any, Collection, Dict, Iterable, List, Optional, Protocol
import pandas as pd
from .counters import CleaningReport, CounterSeriesCleaner
from .hourly import HourlyAggregator
from .join import TemporalJoiner
from .quality import WeatherQualityFilter
from ..ingestion.ingest_job import IngestJob
from ..utils.logging import get_logger

logger = get_logger(__name__)


class WeatherSource(Protocol):
    def fetch_year(self, station_id: str, year: int) -> List[Dict[str, Any]]: ...


class CounterSource(Protocol):
    def fetch_events(self) -> List[Dict[str, Any]]: ...


@dataclass
class JobReport:
    weather_rows: int = 0
    weather_malformed: int = 0
    hours: int = 0
    counter_rows: int = 0
    counter_malformed: int = 0
    counter_out_of_scope: int = 0
    cleaning: CleaningReport = field(default_factory=CleaningReport)
    joined_rows: int = 0


class BikeWeatherJob:
    """Builds the joined counter/weather table from raw source rows.

    Source errors (``SourceUnavailable``) are not caught here; the caller
    decides whether to retry the run.
    """

    def __init__(
        self,
        weather_source: WeatherSource,
        counter_source: CounterSource,
        ingest: IngestJob,
        quality_filter: WeatherQualityFilter,
        aggregator: HourlyAggregator,
        cleaner: CounterSeriesCleaner,
        joiner: Optional[TemporalJoiner] = None,
        locations: Optional[Collection[str]] = None,
    ):
        self.weather_source = weather_source
        self.counter_source = counter_source
        self.ingest = ingest
        self.quality_filter = quality_filter
        self.aggregator = aggregator
        self.cleaner = cleaner
        self.joiner = joiner or TemporalJoiner()
        self.locations = locations
        self.report = JobReport()

    def build_weather(self, station_id: str, years: Iterable[int]) -> pd.DataFrame:
        rows: List[Dict[str, Any]] = []
        for year in years:
            rows.extend(self.weather_source.fetch_year(station_id, year))
        self.report.weather_rows = len(rows)

        ingested = self.ingest.ingest_weather(rows)
        self.report.weather_malformed = ingested.malformed

        filtered = self.quality_filter.apply_all(ingested.records)
        hourly = self.aggregator.aggregate(filtered)
        self.report.hours = len(hourly)
        return hourly

    def build_counters(self) -> pd.DataFrame:
        rows = self.counter_source.fetch_events()
        self.report.counter_rows = len(rows)

        ingested = self.ingest.ingest_counters(rows, locations=self.locations)
        self.report.counter_malformed = ingested.malformed
        self.report.counter_out_of_scope = ingested.out_of_scope

        cleaned, self.report.cleaning = self.cleaner.clean(ingested.records)
        return cleaned

    def run(self, station_id: str, years: Iterable[int]) -> pd.DataFrame:
        self.report = JobReport()
        weather = self.build_weather(station_id, years)
        counters = self.build_counters()
        joined = self.joiner.join(counters, weather)
        self.report.joined_rows = len(joined)
        logger.info(
            f"Built {len(joined)} joined rows from {self.report.hours} weather hours "
            f"({self.report.weather_malformed} weather / {self.report.counter_malformed} counter rows dropped)"
        )
        return joined
