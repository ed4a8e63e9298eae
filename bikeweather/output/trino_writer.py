import math
from typing import Any, Dict, List
import pandas as pd
from ..db import ddl
from ..db.trino_client import TrinoClient
from ..utils.logging import get_logger

logger = get_logger(__name__)

class TrinoTableWriter:
    """Replaces the contents of the joined Iceberg table with a new run."""

    def __init__(self, trino: TrinoClient, schema: str, table: str, batch_size: int = 500):
        self.trino = trino
        self.schema = schema
        self.table = table
        self.batch_size = batch_size

    def write(self, joined: pd.DataFrame) -> None:
        self.trino.execute(ddl.truncate_table(self.schema, self.table))

        records = joined.to_dict("records")
        if not records:
            logger.warning("No joined rows to write.")
            return

        # Insert in batches to avoid huge SQL statements
        total_batches = (len(records) + self.batch_size - 1) // self.batch_size
        logger.info(f"Inserting {len(records)} rows in {total_batches} batch(es)...")

        for i in range(0, len(records), self.batch_size):
            batch = records[i:i + self.batch_size]
            self._insert_batch(batch)
            logger.info(f"  Batch {i // self.batch_size + 1}/{total_batches} inserted ({len(batch)} rows)")

        logger.info(f"Wrote {len(records)} rows to {self.schema}.{self.table}")

    def _insert_batch(self, batch: List[Dict[str, Any]]) -> None:
        values_sql = []
        for r in batch:
            values_sql.append("(" + ",".join([
                self._sql_str(r["location"]),
                self._sql_epoch_ms(r["timestamp"]),
                self._sql_epoch_ms(r["hour"]),
                str(int(r["count"])),
                str(int(r["adjusted_count"])),
                self._sql_bool(r["was_zero_adjusted"]),
                self._sql_float(r["log_count"]),
                str(int(r["day_of_week"])),
                self._sql_bool(r["is_weekend"]),
                self._sql_str(r["anomaly_flag"]),
                self._sql_float(r["temperature_c"]),
                self._sql_float(r["precipitation_mm"]),
            ]) + ")")

        sql = f"""
        INSERT INTO {self.schema}.{self.table}
        (location, event_time_ms, hour_ms, count, adjusted_count, was_zero_adjusted, log_count,
         day_of_week, is_weekend, anomaly_flag, temperature_c, precipitation_mm)
        VALUES {",".join(values_sql)}
        """
        self.trino.execute(sql)

    def _sql_str(self, s) -> str:
        if s is None or pd.isna(s):
            return "NULL"
        escaped = str(s).replace("'", "''")
        return f"'{escaped}'"

    def _sql_float(self, v) -> str:
        if v is None or math.isnan(v):
            return "NULL"
        return repr(float(v))

    def _sql_bool(self, v) -> str:
        return "TRUE" if bool(v) else "FALSE"

    def _sql_epoch_ms(self, ts) -> str:
        if ts is None or pd.isna(ts):
            return "NULL"
        return str(int(pd.Timestamp(ts).timestamp() * 1000))
