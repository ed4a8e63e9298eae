from dataclasses import dataclass
from typing import List
import os

from bikeweather.ingestion.schema import CleaningPolicy


def split_list(value: str) -> List[str]:
    return [p.strip() for p in value.split(",") if p.strip()]


@dataclass(frozen=True)
class Settings:
    # Weather (NOAA ISD global-hourly, one CSV per station and year)
    weather_station_id: str = os.environ.get("WEATHER_STATION_ID", "72793024233")
    isd_base_url: str = os.environ.get("ISD_BASE_URL", "https://www.ncei.noaa.gov/data/global-hourly/access")
    isd_data_dir: str = os.environ.get("ISD_DATA_DIR", "")  # read local copies instead of the API when set
    start_year: int = int(os.environ.get("START_YEAR", "2014"))
    end_year: int = int(os.environ.get("END_YEAR", "2015"))

    # Counters
    counter_csv_path: str = os.environ.get("COUNTER_CSV_PATH", "data/counters.csv")
    counter_locations: str = os.environ.get("COUNTER_LOCATIONS", "")  # empty keeps every location
    counter_timezone: str = os.environ.get("COUNTER_TIMEZONE", "America/Los_Angeles")

    # Cleaning policy
    temperature_accept_flags: str = os.environ.get("TEMPERATURE_ACCEPT_FLAGS", "1,5,A")
    precipitation_accept_flags: str = os.environ.get("PRECIPITATION_ACCEPT_FLAGS", "1,5")
    extreme_value_threshold: float = float(os.environ.get("EXTREME_VALUE_THRESHOLD", "500"))
    anomaly_run_min_length: int = int(os.environ.get("ANOMALY_RUN_MIN_LENGTH", "3"))

    # Output: "csv" or "trino"
    output_sink: str = os.environ.get("OUTPUT_SINK", "csv")
    output_path: str = os.environ.get("OUTPUT_PATH", "data/bike_weather_hourly.csv")

    # Trino
    trino_host: str = os.environ.get("TRINO_HOST", "localhost")
    trino_port: int = int(os.environ.get("TRINO_PORT", "8080"))
    trino_user: str = os.environ.get("TRINO_USER", "pipeline")
    trino_catalog: str = os.environ.get("TRINO_CATALOG", "iceberg")
    trino_schema: str = os.environ.get("TRINO_SCHEMA", "bike_weather")
    joined_table: str = os.environ.get("JOINED_TABLE", "counter_weather_hourly")

    # Logging
    log_level: str = os.environ.get("LOG_LEVEL", "INFO")

    # HTTP
    request_timeout_s: int = int(os.environ.get("REQUEST_TIMEOUT_S", "30"))
    request_max_attempts: int = int(os.environ.get("REQUEST_MAX_ATTEMPTS", "5"))

    @property
    def years(self) -> List[int]:
        return list(range(self.start_year, self.end_year + 1))

    @property
    def locations(self) -> List[str]:
        return split_list(self.counter_locations)

    def cleaning_policy(self) -> CleaningPolicy:
        return CleaningPolicy(
            temperature_accept_flags=split_list(self.temperature_accept_flags),
            precipitation_accept_flags=split_list(self.precipitation_accept_flags),
            extreme_value_threshold=self.extreme_value_threshold,
            anomaly_run_min_length=self.anomaly_run_min_length,
        )
