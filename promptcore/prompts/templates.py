from __future__ import annotations

import logging
import time
import traceback
from typing import Dict, List, Optional

from adapters.store.base import TemplateStore
from promptcore.errors.codes import ErrorCode
from promptcore.errors.exceptions import TemplateNotFound, TemplateStoreError
from promptcore.prompts.types import PromptTemplate, utcnow
from promptcore.types import StageResult, StageTrace

log = logging.getLogger(__name__)

SQL_GENERATION = "sql_generation"

# current name -> name used by older stores
LEGACY_NAMES: Dict[str, str] = {SQL_GENERATION: "BasicQueryGeneration"}

SQL_GENERATION_CONTENT = """You are an expert SQL developer specializing in business intelligence and gaming/casino data analysis.

BUSINESS DOMAIN CONTEXT:
- This is a gaming/casino database tracking player activities, bonuses, and financial transactions
- 'Daily actions' refer to player activities that occurred on a specific date
- 'Totals' usually mean aggregated amounts, counts, or sums of financial values
- 'Today' means the current date (use CAST(GETDATE() AS DATE) for today's date)
- 'Bonus balances' are financial amounts related to player bonuses
- Players perform actions that may trigger bonus calculations

DATABASE SCHEMA:
{schema}

USER QUESTION: {question}
{context}

BUSINESS LOGIC RULES:
{business_rules}

EXAMPLE QUERIES:
{examples}

TECHNICAL RULES:
1. Only use SELECT statements - never INSERT, UPDATE, DELETE
2. Use proper table and column names exactly as shown in schema
3. CRITICAL: For deposits, ALWAYS use 'Deposits' column, NEVER 'Amount'
4. CRITICAL: For game analytics, use tbl_Daily_actions_games and ALWAYS join with Games table
5. CRITICAL: Games table join: INNER JOIN dbo.Games g WITH (NOLOCK) ON g.GameID = dag.GameID - 1000000
6. CRITICAL: For game queries, NEVER show GameID - ALWAYS show g.GameName, g.Provider, g.GameType
7. Include appropriate WHERE clauses for filtering (Date or GameDate)
8. Use JOINs when querying multiple tables based on foreign key relationships
9. Add meaningful column aliases (e.g., SUM(RealBetAmount) AS TotalBets)
10. Add ORDER BY for logical sorting (usually by date DESC or amount DESC)
11. Use SELECT TOP 100 at the beginning to limit results (NEVER put TOP at the end)
12. Return only the SQL query without explanations or markdown formatting
13. Ensure all referenced columns exist in the schema
14. Always add WITH (NOLOCK) hint to all table references for better read performance
15. Format table hints as: FROM TableName alias WITH (NOLOCK) - never use AS keyword with table hints
16. For game queries: SELECT g.GameName, g.Provider, g.GameType and GROUP BY these fields for readable results

CORRECT SQL STRUCTURE:
SELECT TOP 100 column1, column2, column3
FROM table1 t1 WITH (NOLOCK)
JOIN table2 t2 WITH (NOLOCK) ON t1.id = t2.id
WHERE condition
ORDER BY column1 DESC"""

INSIGHT_GENERATION_CONTENT = """Analyze the following query results and provide business insights:

Query: {query}
Data preview: {data_preview}
Columns: {column_info}
Total rows: {row_count}

Provide 2-3 key insights focusing on:
1. Notable patterns or trends
2. Business implications
3. Potential areas for further investigation

Keep insights concise and actionable."""

VISUALIZATION_GENERATION_CONTENT = """Based on the query and data structure, suggest the best visualization:

Query: {query}
Columns: {column_info}
Data characteristics: {data_characteristics}

Return JSON configuration with:
- type: (bar, line, pie, table, scatter, etc.)
- title: descriptive title
- xAxis: column for x-axis (if applicable)
- yAxis: column for y-axis (if applicable)
- groupBy: column for grouping (if applicable)

Return only valid JSON."""

DEFAULT_TEMPLATES: Dict[str, PromptTemplate] = {
    SQL_GENERATION: PromptTemplate(
        name=SQL_GENERATION,
        version="2.0",
        content=SQL_GENERATION_CONTENT,
        description="Enhanced SQL generation template with business context",
    ),
    "insight_generation": PromptTemplate(
        name="insight_generation",
        version="1.0",
        content=INSIGHT_GENERATION_CONTENT,
        description="Default insight generation template",
    ),
    "visualization_generation": PromptTemplate(
        name="visualization_generation",
        version="1.0",
        content=VISUALIZATION_GENERATION_CONTENT,
        description="Default visualization generation template",
    ),
}


def default_template(name: str) -> PromptTemplate:
    """Built-in template for `name`; unknown names get a generic placeholder."""
    if name in DEFAULT_TEMPLATES:
        return DEFAULT_TEMPLATES[name]
    return PromptTemplate(
        name=name,
        version="1.0",
        content=f"Default template content for {name}",
        description=f"Default template for {name}",
    )


class TemplateManager:
    """
    Template lookup with store -> legacy name -> built-in fallback.

    Reads never raise: a failing store degrades to the built-in default and the
    returned StageResult carries the error code. Writes (create/update)
    propagate store errors to the caller.
    """

    def __init__(self, store: Optional[TemplateStore] = None) -> None:
        self.store = store

    # ---------------------------- reads ----------------------------
    def _lookup(self, name: str, version: Optional[str]) -> Optional[PromptTemplate]:
        assert self.store is not None
        found = self.store.get_template(name, version)
        if found is None and name in LEGACY_NAMES:
            legacy = LEGACY_NAMES[name]
            log.info(
                "Template %r not found, trying legacy name %r", name, legacy
            )
            found = self.store.get_template(legacy)
        return found

    def fetch(self, name: str, version: Optional[str] = None) -> StageResult:
        t0 = time.perf_counter()
        if self.store is None:
            return StageResult(
                ok=True,
                data=default_template(name),
                trace=self._trace(t0, source="default"),
            )
        try:
            found = self._lookup(name, version)
        except Exception as e:
            log.error("Error getting prompt template %s: %s", name, e)
            return StageResult(
                ok=False,
                data=default_template(name),
                trace=self._trace(t0, source="default", fallback=True),
                error=[str(e), traceback.format_exc()],
                error_code=ErrorCode.TEMPLATE_STORE_FAILED,
                retryable=True,
            )

        if found is None:
            log.warning("No template found for %s, using default", name)
            return StageResult(
                ok=True,
                data=default_template(name),
                trace=self._trace(t0, source="default"),
            )

        if found.id is not None:
            self.increment_usage(found.id)
        return StageResult(ok=True, data=found, trace=self._trace(t0, source="store"))

    def increment_usage(self, template_id: int) -> StageResult:
        assert self.store is not None
        try:
            self.store.increment_usage(template_id)
        except Exception as e:
            log.warning("Failed to increment usage count for template %s: %s", template_id, e)
            return StageResult(
                ok=False,
                error=[str(e)],
                error_code=ErrorCode.TEMPLATE_STORE_FAILED,
                retryable=True,
            )
        return StageResult(ok=True)

    def list_templates(self) -> List[PromptTemplate]:
        if self.store is None:
            return []
        try:
            return self.store.list_templates()
        except Exception as e:
            log.error("Error getting prompt templates: %s", e)
            return []

    # ---------------------------- writes ----------------------------
    def create_template(self, template: PromptTemplate) -> PromptTemplate:
        store = self._require_store()
        try:
            saved = store.save(
                template.with_changes(id=None, created_at=utcnow(), usage_count=0)
            )
        except Exception as e:
            log.error("Error creating prompt template %s: %s", template.name, e)
            raise TemplateStoreError(str(e)) from e
        log.info("Created prompt template %s v%s", saved.name, saved.version)
        return saved

    def update_template(self, template: PromptTemplate) -> PromptTemplate:
        store = self._require_store()
        try:
            existing = store.find_template(template.name, template.version)
        except Exception as e:
            log.error("Error updating prompt template %s: %s", template.name, e)
            raise TemplateStoreError(str(e)) from e
        if existing is None:
            raise TemplateNotFound(
                f"Prompt template {template.name} v{template.version} not found"
            )

        updated = existing.with_changes(
            content=template.content,
            description=template.description,
            is_active=template.is_active,
            parameters=template.parameters,
            updated_at=utcnow(),
        )
        try:
            saved = store.save(updated)
        except Exception as e:
            log.error("Error updating prompt template %s: %s", template.name, e)
            raise TemplateStoreError(str(e)) from e
        log.info("Updated prompt template %s v%s", saved.name, saved.version)
        return saved

    # ---------------------------- helpers ----------------------------
    def _require_store(self) -> TemplateStore:
        if self.store is None:
            raise TemplateStoreError("No template store configured")
        return self.store

    @staticmethod
    def _trace(t0: float, *, source: str, fallback: bool = False) -> StageTrace:
        return StageTrace(
            stage="template",
            duration_ms=(time.perf_counter() - t0) * 1000.0,
            notes={"source": source},
            fallback=fallback,
        )
