from dataclasses import dataclass, field
from typing import Any, Collection, Dict, Iterable, List, Optional
from .normalizer import CounterNormalizer, WeatherNormalizer
from .schema import RawCounterEvent, RawWeatherObservation
from .validator import DataValidator
from ..errors import MalformedRecord
from ..utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class IngestResult:
    records: List[Any] = field(default_factory=list)
    malformed: int = 0
    out_of_scope: int = 0


class IngestJob:
    """Normalizes and validates raw rows, dropping the ones that cannot be used."""

    def __init__(
        self,
        weather_normalizer: Optional[WeatherNormalizer] = None,
        counter_normalizer: Optional[CounterNormalizer] = None,
    ):
        self.weather_normalizer = weather_normalizer or WeatherNormalizer()
        self.counter_normalizer = counter_normalizer or CounterNormalizer()
        self.weather_validator = DataValidator(RawWeatherObservation)
        self.counter_validator = DataValidator(RawCounterEvent)

    def _ingest(self, rows: Iterable[Dict[str, Any]], normalizer, validator, kind: str) -> IngestResult:
        result = IngestResult()
        for r in rows:
            try:
                n = normalizer.normalize(r)
            except MalformedRecord as e:
                logger.debug(f"Dropped malformed {kind} row: {e}")
                result.malformed += 1
                continue
            record, err = validator.validate(n)
            if record is None:
                logger.debug(f"Dropped invalid {kind} row: {err}")
                result.malformed += 1
                continue
            result.records.append(record)

        if result.malformed:
            logger.warning(f"Dropped {result.malformed} malformed {kind} row(s)")
        return result

    def ingest_weather(self, rows: Iterable[Dict[str, Any]]) -> IngestResult:
        result = self._ingest(rows, self.weather_normalizer, self.weather_validator, "weather")
        logger.info(f"Ingested {len(result.records)} weather observations ({result.malformed} invalid skipped)")
        return result

    def ingest_counters(
        self,
        rows: Iterable[Dict[str, Any]],
        locations: Optional[Collection[str]] = None,
    ) -> IngestResult:
        result = self._ingest(rows, self.counter_normalizer, self.counter_validator, "counter")

        if locations:
            known = set(locations)
            kept = [e for e in result.records if e.location in known]
            result.out_of_scope = len(result.records) - len(kept)
            result.records = kept
            if result.out_of_scope:
                logger.info(f"Skipped {result.out_of_scope} counter row(s) for unknown locations")

        logger.info(f"Ingested {len(result.records)} counter events ({result.malformed} invalid skipped)")
        return result
