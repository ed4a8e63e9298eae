from datetime import datetime, timezone, tzinfo
from typing import Any, Dict, Optional, Tuple
from dateutil import parser as dt_parser
from dateutil import tz

from ..errors import MalformedRecord

# ISD precipitation groups, in the order they appear in a record
PRECIP_GROUPS = ("AA1", "AA2", "AA3", "AA4")

# two defaults that differ in every date part; a parse that depends on them is incomplete
_DEFAULT_DATES = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class WeatherNormalizer:
    """Turns one ISD global-hourly CSV row into RawWeatherObservation fields."""

    def _split_value_flag(self, s: Optional[str]) -> Tuple[Optional[int], Optional[str]]:
        # "+0200,1" -> (200, "1")
        if _blank(s):
            return None, None
        parts = [p.strip() for p in s.split(",")]
        if len(parts) < 2:
            raise MalformedRecord(f"Unexpected TMP group: {s!r}")
        try:
            value = int(parts[0])
        except ValueError:
            raise MalformedRecord(f"Non-numeric TMP value: {s!r}")
        return value, parts[1] or None

    def _split_precip(self, s: Optional[str]) -> Optional[Tuple[Optional[int], Optional[int], Optional[str]]]:
        # "01,0005,9,1" -> period hours, depth, condition code, quality flag
        if _blank(s):
            return None
        parts = [p.strip() for p in s.split(",")]
        if len(parts) < 4:
            raise MalformedRecord(f"Unexpected precipitation group: {s!r}")
        try:
            period = int(parts[0])
            depth = int(parts[1])
        except ValueError:
            raise MalformedRecord(f"Non-numeric precipitation group: {s!r}")
        if period == 99:
            period = None
        return period, depth, parts[3] or None

    def _pick_precip(self, record: Dict[str, Any]):
        groups = [self._split_precip(record.get(name)) for name in PRECIP_GROUPS]
        groups = [g for g in groups if g is not None]
        if not groups:
            return None, None, None
        for g in groups:
            if g[0] == 1:
                return g
        return groups[0]

    def _parse_instant(self, date_str: Optional[str]) -> datetime:
        if _blank(date_str):
            raise MalformedRecord("Missing DATE")
        try:
            dt = dt_parser.isoparse(date_str.strip())
        except (ValueError, OverflowError):
            raise MalformedRecord(f"Unparseable DATE: {date_str!r}")
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    def normalize(self, record: Dict[str, Any]) -> Dict[str, Any]:
        temperature_raw, temperature_flag = self._split_value_flag(record.get("TMP"))
        period, depth, precip_flag = self._pick_precip(record)

        return {
            "station_id": (record.get("STATION") or "").strip(),
            "observed_at": self._parse_instant(record.get("DATE")),
            "temperature_raw": temperature_raw,
            "temperature_flag": temperature_flag,
            "precipitation_raw": depth,
            "precipitation_flag": precip_flag,
            "precipitation_period_hours": period,
        }


class CounterNormalizer:
    """Parses raw counter rows as wall-clock times in a fixed civil time zone."""

    def __init__(
        self,
        timezone_name: str = "America/Los_Angeles",
        location_field: str = "location",
        timestamp_field: str = "timestamp",
        count_field: str = "count",
    ):
        self.civil_tz: tzinfo = tz.gettz(timezone_name)
        if self.civil_tz is None:
            raise ValueError(f"Unknown time zone: {timezone_name}")
        self.location_field = location_field
        self.timestamp_field = timestamp_field
        self.count_field = count_field

    def _parse_timestamp(self, value: Any) -> datetime:
        if _blank(value):
            raise MalformedRecord("Missing timestamp")
        if isinstance(value, datetime):
            dt = value
        else:
            try:
                dt, other = (dt_parser.parse(str(value), default=d) for d in _DEFAULT_DATES)
            except (ValueError, OverflowError):
                raise MalformedRecord(f"Unparseable timestamp: {value!r}")
            if dt.date() != other.date():
                raise MalformedRecord(f"Timestamp without a full date: {value!r}")
        if dt.tzinfo is not None:
            return dt.astimezone(self.civil_tz)
        # wall-clock: skip over spring-forward gaps, take the first of repeated hours
        return tz.resolve_imaginary(dt.replace(tzinfo=self.civil_tz, fold=0))

    def _parse_count(self, value: Any) -> int:
        if _blank(value):
            raise MalformedRecord("Missing count")
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise MalformedRecord(f"Non-numeric count: {value!r}")
        if number != number or not number.is_integer():
            raise MalformedRecord(f"Count is not a whole number: {value!r}")
        return int(number)

    def normalize(self, record: Dict[str, Any]) -> Dict[str, Any]:
        location = record.get(self.location_field)
        return {
            "location": str(location).strip() if location is not None else "",
            "timestamp": self._parse_timestamp(record.get(self.timestamp_field)),
            "count": self._parse_count(record.get(self.count_field)),
        }
