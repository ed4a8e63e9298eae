import pandas as pd
import pytest

from bikeweather.errors import SourceUnavailable
from bikeweather.ingestion.ingest_job import IngestJob
from bikeweather.output.csv_writer import CsvTableWriter
from bikeweather.transformation.bike_weather_job import BikeWeatherJob
from bikeweather.transformation.counters import CounterSeriesCleaner
from bikeweather.transformation.hourly import HourlyAggregator
from bikeweather.transformation.quality import WeatherQualityFilter

STATION = "72793024233"

WEATHER_ROWS = {
    2014: [],
    2015: [
        {"STATION": STATION, "DATE": "2015-01-01T00:10:00", "TMP": "+0200,1", "AA1": "01,0050,9,1"},
        {"STATION": STATION, "DATE": "2015-01-01T00:40:00", "TMP": "+0220,5", "AA1": "01,0030,9,1"},
        {"STATION": STATION, "DATE": "2015-01-01T01:53:00", "TMP": "+9999,1", "AA1": ""},
        {"STATION": STATION, "DATE": "garbage", "TMP": "+0100,1", "AA1": ""},
    ],
}

COUNTER_ROWS = [
    {"location": "fremont", "timestamp": "2014-12-31 17:00:00", "count": "12"},
    {"location": "fremont", "timestamp": "2014-12-31 16:00:00", "count": "0"},
    {"location": "fremont", "timestamp": "2014-12-31 18:00:00", "count": "7"},
    {"location": "fremont", "timestamp": "not a date", "count": "3"},
    {"location": "elsewhere", "timestamp": "2014-12-31 16:00:00", "count": "4"},
]


class FakeWeatherSource:
    def __init__(self, rows_by_year, fail=False):
        self.rows_by_year = rows_by_year
        self.fail = fail

    def fetch_year(self, station_id, year):
        if self.fail:
            raise SourceUnavailable(f"{station_id}/{year} unavailable")
        return [dict(r) for r in self.rows_by_year.get(year, [])]


class FakeCounterSource:
    def __init__(self, rows):
        self.rows = rows

    def fetch_events(self):
        return [dict(r) for r in self.rows]


def make_job(weather_source=None):
    return BikeWeatherJob(
        weather_source=weather_source or FakeWeatherSource(WEATHER_ROWS),
        counter_source=FakeCounterSource(COUNTER_ROWS),
        ingest=IngestJob(),
        quality_filter=WeatherQualityFilter(),
        aggregator=HourlyAggregator(),
        cleaner=CounterSeriesCleaner(),
        locations=["fremont", "burke"],
    )


def test_end_to_end():
    job = make_job()
    joined = job.run(STATION, [2014, 2015])

    assert len(joined) == 3
    assert list(joined["count"]) == [0, 12, 7]
    assert list(joined["adjusted_count"]) == [1, 12, 7]
    assert joined["temperature_c"].iloc[0] == 21.0
    assert joined["precipitation_mm"].iloc[0] == 8.0
    assert joined["temperature_c"].iloc[1:].isna().all()
    assert joined["precipitation_mm"].iloc[1:].isna().all()
    assert list(joined["hour"]) == list(pd.to_datetime(
        ["2015-01-01 00:00", "2015-01-01 01:00", "2015-01-01 02:00"], utc=True
    ))

    report = job.report
    assert report.weather_rows == 4
    assert report.weather_malformed == 1
    assert report.hours == 2
    assert report.counter_rows == 5
    assert report.counter_malformed == 1
    assert report.counter_out_of_scope == 1
    assert report.cleaning.zero_adjusted == 1
    assert report.joined_rows == 3


def test_weather_table_from_raw_rows():
    weather = make_job().build_weather(STATION, [2015])
    assert len(weather) == 2
    assert weather["temperature_c"].iloc[0] == 21.0
    # the 01:00 hour only has a sentinel reading
    assert pd.isna(weather["temperature_c"].iloc[1])


def test_rerun_is_byte_identical(tmp_path):
    first, second = tmp_path / "first.csv", tmp_path / "second.csv"
    CsvTableWriter(str(first)).write(make_job().run(STATION, [2014, 2015]))
    job = make_job()
    job.run(STATION, [2014, 2015])
    CsvTableWriter(str(second)).write(job.run(STATION, [2014, 2015]))
    assert first.read_bytes() == second.read_bytes()


def test_source_unavailable_is_surfaced():
    job = make_job(FakeWeatherSource(WEATHER_ROWS, fail=True))
    with pytest.raises(SourceUnavailable):
        job.run(STATION, [2015])
