import csv
import os
from typing import Dict, List
from ..errors import SourceUnavailable
from ..utils.logging import get_logger

logger = get_logger(__name__)


def _read_csv(path: str) -> List[Dict[str, str]]:
    try:
        with open(path, newline="", encoding="utf-8") as f:
            return list(csv.DictReader(f))
    except OSError as e:
        raise SourceUnavailable(f"Cannot read {path}: {e}") from e


class IsdFileSource:
    """Reads ISD yearly CSV files laid out as <directory>/<year>/<station>.csv"""

    def __init__(self, directory: str):
        self.directory = directory

    def fetch_year(self, station_id: str, year: int) -> List[Dict[str, str]]:
        path = os.path.join(self.directory, str(year), f"{station_id}.csv")
        rows = _read_csv(path)
        logger.info(f"Read {len(rows):,} ISD rows from {path}")
        return rows


class CounterFileSource:
    """Reads raw counter events from a CSV export"""

    def __init__(self, path: str):
        self.path = path

    def fetch_events(self) -> List[Dict[str, str]]:
        rows = _read_csv(self.path)
        logger.info(f"Read {len(rows):,} counter rows from {self.path}")
        return rows
