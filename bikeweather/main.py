import pandas as pd

from bikeweather.config import Settings
from bikeweather.db.trino_client import TrinoClient
from bikeweather.db import ddl

from bikeweather.ingestion.noaa_client import NOAAClient
from bikeweather.ingestion.normalizer import CounterNormalizer
from bikeweather.ingestion.sources import CounterFileSource, IsdFileSource
from bikeweather.ingestion.ingest_job import IngestJob

from bikeweather.transformation.quality import WeatherQualityFilter
from bikeweather.transformation.hourly import HourlyAggregator
from bikeweather.transformation.counters import CounterSeriesCleaner
from bikeweather.transformation.bike_weather_job import BikeWeatherJob

from bikeweather.output.csv_writer import CsvTableWriter
from bikeweather.output.trino_writer import TrinoTableWriter

from bikeweather.utils.logging import setup_logging

def _trino(s: Settings) -> TrinoClient:
    return TrinoClient(s.trino_host, s.trino_port, s.trino_user, s.trino_catalog, s.trino_schema)

def init():
    s = Settings()
    if s.output_sink != "trino":
        return
    trino = _trino(s)
    trino.execute(ddl.create_schema(s.trino_schema))
    trino.execute(ddl.create_joined_table(s.trino_schema, s.joined_table))

def build() -> pd.DataFrame:
    s = Settings()
    policy = s.cleaning_policy()

    if s.isd_data_dir:
        weather_source = IsdFileSource(s.isd_data_dir)
    else:
        weather_source = NOAAClient(s.isd_base_url, timeout_s=s.request_timeout_s, max_attempts=s.request_max_attempts)

    job = BikeWeatherJob(
        weather_source=weather_source,
        counter_source=CounterFileSource(s.counter_csv_path),
        ingest=IngestJob(counter_normalizer=CounterNormalizer(s.counter_timezone)),
        quality_filter=WeatherQualityFilter(policy),
        aggregator=HourlyAggregator(),
        cleaner=CounterSeriesCleaner(policy, timezone_name=s.counter_timezone),
        locations=s.locations,
    )
    return job.run(s.weather_station_id, s.years)

def export(joined: pd.DataFrame):
    s = Settings()
    if s.output_sink == "trino":
        TrinoTableWriter(_trino(s), s.trino_schema, s.joined_table).write(joined)
    elif s.output_sink == "csv":
        CsvTableWriter(s.output_path).write(joined)
    else:
        raise ValueError(f"Unknown OUTPUT_SINK: {s.output_sink}")

def main():
    setup_logging(Settings().log_level)
    init()
    export(build())

if __name__ == "__main__":
    main()
