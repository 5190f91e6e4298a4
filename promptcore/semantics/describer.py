from __future__ import annotations

import logging
import time
import traceback
from typing import Any, List, Optional, Sequence

from promptcore.errors.codes import ErrorCode
from promptcore.schema.types import ColumnMetadata, TableMetadata
from promptcore.semantics.glossary import (
    column_business_meaning,
    is_low_cardinality,
    known_field_values,
    render_values,
    table_business_context,
)
from promptcore.types import StageResult, StageTrace

log = logging.getLogger(__name__)


class SchemaDescriber:
    """
    Renders selected tables into the schema block of the prompt.

    With a live `sampler`, low-cardinality columns are probed for up to
    `sample_limit` distinct literals under `sample_timeout` seconds. Without
    one, the static known-values catalogue is used instead.
    """

    MAX_COLUMNS = 15

    def __init__(
        self,
        *,
        sampler: Any = None,
        sample_limit: int = 10,
        sample_timeout: float = 2.0,
        max_columns: int = MAX_COLUMNS,
    ) -> None:
        self.sampler = sampler
        self.sample_limit = sample_limit
        self.sample_timeout = sample_timeout
        self.max_columns = max_columns
        self.sample_failures = 0

    # ---------------------------- sampling ----------------------------
    def sample_values(self, table: TableMetadata, column: ColumnMetadata) -> StageResult:
        t0 = time.perf_counter()
        try:
            values = self.sampler.sample_distinct_values(
                table.name,
                column.name,
                schema=table.schema,
                limit=self.sample_limit,
                timeout=self.sample_timeout,
            )
        except Exception as e:
            self.sample_failures += 1
            log.warning(
                "Could not sample values for %s.%s: %s",
                table.name,
                column.name,
                e,
            )
            return StageResult(
                ok=False,
                data=[],
                error=[str(e), traceback.format_exc()],
                error_code=ErrorCode.SAMPLER_FAILED,
                retryable=True,
            )
        cleaned = [str(v) for v in values or [] if v is not None and str(v).strip()]
        dt = (time.perf_counter() - t0) * 1000.0
        return StageResult(
            ok=True,
            data=cleaned[: self.sample_limit],
            trace=StageTrace(stage="sampler", duration_ms=dt, notes={"values": len(cleaned)}),
        )

    def field_values(self, table: TableMetadata, column: ColumnMetadata) -> str:
        if self.sampler is None:
            return known_field_values(table.name, column.name)
        if not is_low_cardinality(column.name):
            return ""
        r = self.sample_values(table, column)
        if not r.ok or not r.data:
            return ""
        return render_values(r.data)

    # ---------------------------- rendering ----------------------------
    def describe_column(self, table: TableMetadata, column: ColumnMetadata) -> str:
        line = f"    - {column.name} ({column.data_type})"
        if column.is_primary_key:
            line += " [PRIMARY KEY]"
        if column.is_foreign_key:
            line += " [FOREIGN KEY]"
        if not column.is_nullable:
            line += " [NOT NULL]"

        meaning = column.business_meaning or column_business_meaning(column.name)
        if meaning:
            line += f" - {meaning}"

        values = self.field_values(table, column)
        if values:
            line += f" - Valid values: {values}"
        return line

    def describe_table(self, table: TableMetadata) -> str:
        parts: List[str] = [f"TABLE: {table.qualified_name}"]
        if table.description:
            parts.append(f"  Purpose: {table.description}")
        context = table_business_context(table.name)
        if context:
            parts.append(f"  Business Context: {context}")
        parts.append("  Columns:")

        for column in table.columns[: self.max_columns]:
            parts.append(self.describe_column(table, column))
        hidden = len(table.columns) - self.max_columns
        if hidden > 0:
            parts.append(f"    ... and {hidden} more columns")
        return "\n".join(parts)

    def describe(self, tables: Sequence[TableMetadata]) -> str:
        log.debug(
            "Describing schema",
            extra={"tables": [t.name for t in tables], "sampler": self.sampler is not None},
        )
        return "\n\n".join(self.describe_table(t) for t in tables)

    def describe_brief(self, tables: Sequence[TableMetadata], max_columns: Optional[int] = None) -> str:
        """One line per table; used when the full description is unavailable."""
        limit = max_columns or 10
        lines = []
        for t in tables:
            cols = ", ".join(c.name for c in t.columns[:limit])
            lines.append(f"{t.qualified_name} ({cols})")
        return "\n".join(lines)
