from typing import Dict, List, Set, Tuple

import psycopg

from promptcore.schema.types import ColumnMetadata, TableMetadata

_COLUMNS_SQL = """
SELECT c.table_name, c.column_name, c.data_type, c.is_nullable
FROM information_schema.columns c
JOIN information_schema.tables t
  ON t.table_schema = c.table_schema AND t.table_name = c.table_name
WHERE c.table_schema = %s AND t.table_type = 'BASE TABLE'
ORDER BY c.table_name, c.ordinal_position;
"""

_KEYS_SQL = """
SELECT kcu.table_name, kcu.column_name, tc.constraint_type
FROM information_schema.table_constraints tc
JOIN information_schema.key_column_usage kcu
  ON kcu.constraint_name = tc.constraint_name
 AND kcu.table_schema = tc.table_schema
WHERE tc.table_schema = %s
  AND tc.constraint_type IN ('PRIMARY KEY', 'FOREIGN KEY');
"""


class PostgresCatalog:
    name = "postgres"

    def __init__(self, dsn: str, schema: str = "public", connect_timeout: int = 5):
        """
        DSN example:
        "dbname=demo user=postgres password=postgres host=localhost port=5432"
        """
        self.dsn = dsn
        self.schema = schema
        self.connect_timeout = connect_timeout

    def get_schema(self) -> List[TableMetadata]:
        with psycopg.connect(self.dsn, connect_timeout=self.connect_timeout) as conn:
            conn.read_only = True
            with conn.cursor() as cur:
                cur.execute(_KEYS_SQL, (self.schema,))
                keys: Set[Tuple[str, str, str]] = {
                    (r[0], r[1], r[2]) for r in cur.fetchall() or []
                }
                cur.execute(_COLUMNS_SQL, (self.schema,))
                col_rows = cur.fetchall() or []

        by_table: Dict[str, List[ColumnMetadata]] = {}
        for table, column, data_type, nullable in col_rows:
            by_table.setdefault(table, []).append(
                ColumnMetadata(
                    name=column,
                    data_type=data_type or "",
                    is_primary_key=(table, column, "PRIMARY KEY") in keys,
                    is_foreign_key=(table, column, "FOREIGN KEY") in keys,
                    is_nullable=(nullable == "YES"),
                )
            )
        return [
            TableMetadata(name=t, schema=self.schema, columns=tuple(cols))
            for t, cols in by_table.items()
        ]
