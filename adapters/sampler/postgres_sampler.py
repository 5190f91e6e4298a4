import logging
import math
from typing import List, Optional

import psycopg

from adapters.sampler.sql import distinct_values_sql

log = logging.getLogger(__name__)


class PostgresSampler:
    name = "postgres"
    dialect = "postgres"

    def __init__(self, dsn: str, schema: str = "public"):
        self.dsn = dsn
        self.schema = schema

    def sample_distinct_values(
        self,
        table: str,
        column: str,
        *,
        schema: Optional[str] = None,
        limit: int = 10,
        timeout: float = 2.0,
    ) -> List[str]:
        sql = distinct_values_sql(
            table, column, schema=schema or self.schema, limit=limit, dialect=self.dialect
        )
        timeout_ms = max(1, int(timeout * 1000))
        with psycopg.connect(self.dsn, connect_timeout=max(1, math.ceil(timeout))) as conn:
            conn.read_only = True
            with conn.cursor() as cur:
                cur.execute("SELECT set_config('statement_timeout', %s, true);", (str(timeout_ms),))
                log.debug("Sampling values: %s", sql)
                cur.execute(sql)
                rows = cur.fetchall() or []
        return [str(r[0]) for r in rows if r and r[0] is not None]
