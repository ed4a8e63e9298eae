from trino.dbapi import connect
from typing import Any, List, Tuple

class TrinoClient:
    def __init__(self, host: str, port: int, user: str, catalog: str, schema: str):
        self.host = host
        self.port = port
        self.user = user
        self.catalog = catalog
        self.schema = schema

    def _connect(self):
        return connect(
            host=self.host,
            port=self.port,
            user=self.user,
            catalog=self.catalog,
            schema=self.schema,
        )

    def execute(self, sql: str) -> List[Tuple[Any, ...]]:
        conn = self._connect()
        cur = conn.cursor()
        try:
            cur.execute(sql)
            # DDL and INSERT still return a row count; trino needs the fetch to finish the query
            rows = cur.fetchall()
        finally:
            cur.close()
            conn.close()
        return [tuple(r) for r in rows]
