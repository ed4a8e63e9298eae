from datetime import datetime, timedelta, timezone

import pytest
from dateutil import tz

from bikeweather.ingestion.schema import RawCounterEvent, RawWeatherObservation
from bikeweather.transformation.quality import FilteredObservation

CIVIL_TZ = tz.gettz("America/Los_Angeles")


@pytest.fixture
def civil_tz():
    return CIVIL_TZ


@pytest.fixture
def make_observation():
    def make(
        observed_at=datetime(2015, 1, 1, 0, 53, tzinfo=timezone.utc),
        temperature_raw=200,
        temperature_flag="1",
        precipitation_raw=None,
        precipitation_flag=None,
        precipitation_period_hours=None,
    ):
        return RawWeatherObservation(
            station_id="72793024233",
            observed_at=observed_at,
            temperature_raw=temperature_raw,
            temperature_flag=temperature_flag,
            precipitation_raw=precipitation_raw,
            precipitation_flag=precipitation_flag,
            precipitation_period_hours=precipitation_period_hours,
        )
    return make


@pytest.fixture
def make_filtered():
    def make(minute_of_day, temperature_c=None, precipitation_mm=None, period=None, day=1):
        return FilteredObservation(
            observed_at=datetime(2015, 1, day, tzinfo=timezone.utc) + timedelta(minutes=minute_of_day),
            temperature_c=temperature_c,
            precipitation_mm=precipitation_mm,
            precipitation_period_hours=period,
        )
    return make


@pytest.fixture
def make_event():
    def make(location, year, month, day, hour, count, minute=0):
        return RawCounterEvent(
            location=location,
            timestamp=datetime(year, month, day, hour, minute, tzinfo=CIVIL_TZ),
            count=count,
        )
    return make
