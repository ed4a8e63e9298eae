import pandas as pd
import pytest

from bikeweather.ingestion.schema import JOINED_COLUMNS
from bikeweather.output.csv_writer import CsvTableWriter
from bikeweather.output.trino_writer import TrinoTableWriter
from bikeweather.transformation.counters import CounterSeriesCleaner
from bikeweather.transformation.join import TemporalJoiner


class FakeTrino:
    def __init__(self):
        self.statements = []

    def execute(self, sql):
        self.statements.append(sql)
        return []


@pytest.fixture
def joined(make_event):
    counters, _ = CounterSeriesCleaner().clean([
        make_event("fremont", 2015, 1, 5, 8, 0),
        make_event("fremont", 2015, 1, 5, 9, 700),
        make_event("o'hare", 2015, 1, 5, 8, 4),
    ])
    weather = pd.DataFrame({
        "hour": pd.to_datetime(["2015-01-05 16:00"], utc=True),
        "temperature_c": [4.5],
        "precipitation_mm": [float("nan")],
    })
    return TemporalJoiner().join(counters, weather)


def test_csv_writer(tmp_path, joined):
    path = tmp_path / "out" / "joined.csv"
    CsvTableWriter(str(path)).write(joined)

    lines = path.read_text().splitlines()
    assert lines[0] == ",".join(JOINED_COLUMNS)
    assert len(lines) == 4
    fremont_unmatched = [l for l in lines if l.startswith("fremont") and "extreme_value" in l]
    assert len(fremont_unmatched) == 1
    assert fremont_unmatched[0].endswith(",,")


def test_trino_writer_batches(joined):
    trino = FakeTrino()
    TrinoTableWriter(trino, "bike_weather", "counter_weather_hourly", batch_size=2).write(joined)

    assert trino.statements[0].strip() == "DELETE FROM bike_weather.counter_weather_hourly"
    inserts = trino.statements[1:]
    assert len(inserts) == 2
    sql = " ".join(inserts)
    assert "INSERT INTO bike_weather.counter_weather_hourly" in sql
    assert "'o''hare'" in sql
    assert "'extreme_value'" in sql
    assert "4.5" in sql
    assert "NULL" in sql
    # 2015-01-05 16:00 UTC
    assert "1420473600000" in sql


def test_trino_writer_empty_table():
    trino = FakeTrino()
    empty = pd.DataFrame(columns=JOINED_COLUMNS)
    TrinoTableWriter(trino, "s", "t").write(empty)
    assert len(trino.statements) == 1
