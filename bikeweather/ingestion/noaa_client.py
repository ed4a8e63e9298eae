import csv
import io
import requests
from typing import Dict, List, Optional
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential
from ..errors import SourceUnavailable
from ..utils.logging import get_logger

logger = get_logger(__name__)


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return exc.response.status_code >= 500
    return False


class NOAAClient:
    """Fetches yearly ISD global-hourly CSV files for a station."""

    def __init__(
        self,
        base_url: str,
        timeout_s: int = 30,
        max_attempts: int = 5,
        min_wait_s: float = 1,
        max_wait_s: float = 10,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.max_attempts = max_attempts
        self.min_wait_s = min_wait_s
        self.max_wait_s = max_wait_s
        self.session = session or requests.Session()

    def _get(self, url: str) -> str:
        r = self.session.get(url, timeout=self.timeout_s)
        r.raise_for_status()
        return r.text

    def _get_with_retry(self, url: str) -> str:
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(min=self.min_wait_s, max=self.max_wait_s),
            retry=retry_if_exception(_is_transient),
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    return self._get(url)
        except requests.RequestException as e:
            raise SourceUnavailable(f"GET {url} failed: {e}") from e

    def fetch_year(self, station_id: str, year: int) -> List[Dict[str, str]]:
        url = f"{self.base_url}/{year}/{station_id}.csv"
        text = self._get_with_retry(url)
        rows = list(csv.DictReader(io.StringIO(text)))
        logger.info(f"Fetched {len(rows):,} ISD rows for station {station_id}, {year}")
        return rows
