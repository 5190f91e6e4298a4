import logging
import sqlite3
from pathlib import Path
from typing import List

from promptcore.schema.types import ColumnMetadata, TableMetadata

log = logging.getLogger(__name__)


class SQLiteCatalog:
    name = "sqlite"

    def __init__(self, path: str, schema: str = "main"):
        self.path = Path(path).resolve()
        self.schema = schema
        log.info("SQLiteCatalog initialized with DB path: %s", self.path)

    def get_schema(self) -> List[TableMetadata]:
        if not self.path.exists():
            raise FileNotFoundError(f"SQLite DB does not exist: {self.path}")

        tables: List[TableMetadata] = []
        with sqlite3.connect(f"file:{self.path}?mode=ro", uri=True) as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT name FROM sqlite_master "
                "WHERE type='table' AND name NOT LIKE 'sqlite_%' "
                "ORDER BY name;"
            )
            names = [t[0] for t in cur.fetchall() if t and t[0]]

            for t in names:
                cur.execute("SELECT \"from\" FROM pragma_foreign_key_list(?);", (t,))
                fk_cols = {r[0] for r in cur.fetchall()}

                # (cid, name, type, notnull, dflt_value, pk)
                cur.execute("SELECT * FROM pragma_table_info(?);", (t,))
                columns = tuple(
                    ColumnMetadata(
                        name=c[1],
                        data_type=c[2] or "",
                        is_primary_key=bool(c[5]),
                        is_foreign_key=c[1] in fk_cols,
                        is_nullable=not bool(c[3]) and not bool(c[5]),
                    )
                    for c in cur.fetchall()
                )
                tables.append(TableMetadata(name=t, schema=self.schema, columns=columns))

        log.debug("Loaded %d tables from %s", len(tables), self.path)
        return tables
