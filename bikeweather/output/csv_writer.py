import os
import pandas as pd
from ..utils.logging import get_logger

logger = get_logger(__name__)

class CsvTableWriter:
    """Writes the joined table as CSV; identical frames produce identical bytes."""

    def __init__(self, path: str):
        self.path = path

    def write(self, joined: pd.DataFrame) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        joined.to_csv(
            self.path,
            index=False,
            date_format="%Y-%m-%dT%H:%M:%S%z",
            float_format="%.6f",
            lineterminator="\n",
        )
        logger.info(f"Wrote {len(joined)} rows to {self.path}")
