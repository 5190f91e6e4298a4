import logging
import sqlite3
import time
from pathlib import Path
from typing import List, Optional

from adapters.sampler.sql import distinct_values_sql

log = logging.getLogger(__name__)

# progress handler granularity (VM instructions between deadline checks)
_PROGRESS_STEPS = 1000


class SQLiteSampler:
    name = "sqlite"
    dialect = "sqlite"

    def __init__(self, path: str):
        self.path = Path(path).resolve()

    def sample_distinct_values(
        self,
        table: str,
        column: str,
        *,
        schema: Optional[str] = None,
        limit: int = 10,
        timeout: float = 2.0,
    ) -> List[str]:
        if not self.path.exists():
            raise FileNotFoundError(f"SQLite DB does not exist: {self.path}")

        # sqlite schemas are attached databases; catalogue schema names do not apply
        sql = distinct_values_sql(table, column, limit=limit, dialect=self.dialect)
        deadline = time.monotonic() + timeout

        conn = sqlite3.connect(f"file:{self.path}?mode=ro", uri=True, timeout=timeout)
        try:
            # non-zero return aborts the statement with OperationalError("interrupted")
            conn.set_progress_handler(lambda: int(time.monotonic() > deadline), _PROGRESS_STEPS)
            log.debug("Sampling values: %s", sql)
            rows = conn.execute(sql).fetchall()
        finally:
            conn.close()
        return [str(r[0]) for r in rows if r and r[0] is not None]
