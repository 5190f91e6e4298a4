from __future__ import annotations

from typing import Optional

from sqlglot import exp

# longer values are free text, not an enumeration worth listing
MAX_VALUE_LENGTH = 50


def distinct_values_sql(
    table: str,
    column: str,
    *,
    schema: Optional[str] = None,
    limit: int = 10,
    dialect: str = "sqlite",
) -> str:
    """
    SELECT DISTINCT "col" FROM "schema"."table" WHERE "col" IS NOT NULL
    AND "col" <> '' AND LENGTH(CAST("col" AS TEXT)) < 50
    ORDER BY "col" LIMIT n, rendered for `dialect`.

    Identifiers are always quoted so catalogue names cannot inject SQL.
    """
    if limit < 1:
        raise ValueError("limit must be >= 1")

    def col() -> exp.Column:
        return exp.column(column, quoted=True)

    query = (
        exp.select(col())
        .distinct()
        .from_(exp.table_(table, db=schema or None, quoted=True))
        .where(
            exp.not_(col().is_(exp.null())),
            exp.NEQ(this=col(), expression=exp.Literal.string("")),
            exp.LT(
                this=exp.Length(this=exp.cast(col(), "TEXT")),
                expression=exp.Literal.number(MAX_VALUE_LENGTH),
            ),
        )
        .order_by(col())
        .limit(int(limit))
    )
    return query.sql(dialect=dialect)
