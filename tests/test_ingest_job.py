from bikeweather.ingestion.ingest_job import IngestJob
from bikeweather.ingestion.schema import RawCounterEvent, RawWeatherObservation


def test_weather_rows_are_validated_and_malformed_dropped():
    result = IngestJob().ingest_weather([
        {"STATION": "72793024233", "DATE": "2015-01-01T00:53:00", "TMP": "+0200,1"},
        {"STATION": "72793024233", "DATE": "garbage", "TMP": "+0200,1"},
        {"STATION": "", "DATE": "2015-01-01T01:53:00", "TMP": "+0200,1"},
    ])
    assert len(result.records) == 1
    assert isinstance(result.records[0], RawWeatherObservation)
    assert result.malformed == 2


def test_counter_rows_are_validated_and_malformed_dropped():
    result = IngestJob().ingest_counters([
        {"location": "fremont", "timestamp": "2015-01-05 08:00", "count": "3"},
        {"location": "fremont", "timestamp": "", "count": "3"},
        {"location": "fremont", "timestamp": "2015-01-05 09:00", "count": "-1"},
        {"location": "", "timestamp": "2015-01-05 09:00", "count": "1"},
    ])
    assert [type(r) for r in result.records] == [RawCounterEvent]
    assert result.malformed == 3
    assert result.out_of_scope == 0


def test_counter_rows_outside_known_locations_are_skipped():
    result = IngestJob().ingest_counters(
        [
            {"location": "fremont", "timestamp": "2015-01-05 08:00", "count": "3"},
            {"location": "elsewhere", "timestamp": "2015-01-05 08:00", "count": "3"},
        ],
        locations=["fremont", "burke"],
    )
    assert [r.location for r in result.records] == ["fremont"]
    assert result.out_of_scope == 1
    assert result.malformed == 0


def test_counter_timestamps_without_a_full_date_are_dropped():
    result = IngestJob().ingest_counters([
        {"location": "fremont", "timestamp": "2015", "count": "3"},
        {"location": "fremont", "timestamp": "7", "count": "3"},
        {"location": "fremont", "timestamp": "2015-01-05 08:00", "count": "3"},
    ])
    assert [r.timestamp.date().isoformat() for r in result.records] == ["2015-01-05"]
    assert result.malformed == 2
