from __future__ import annotations

import logging
import re
import time
import traceback
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from adapters.metrics.base import Metrics
from adapters.metrics.noop import NoOpMetrics
from adapters.store.base import PromptLogSink
from promptcore.analyzer import SemanticAnalysis
from promptcore.errors.codes import ErrorCode
from promptcore.guidance.examples import DEFAULT_EXAMPLES, render_examples, select_examples
from promptcore.guidance.rules import DEFAULT_RULES, business_rules_for, render_rules
from promptcore.prompts.analytics import FALLBACK_TEMPLATE, build_generation_record
from promptcore.prompts.templates import SQL_GENERATION, TemplateManager, default_template
from promptcore.prompts.types import PromptDetails, PromptSection, PromptTemplate, estimate_tokens
from promptcore.schema.types import SchemaContext, TableMetadata
from promptcore.semantics.describer import SchemaDescriber
from promptcore.types import StageResult

log = logging.getLogger(__name__)

SchemaInput = Union[SchemaContext, Sequence[TableMetadata]]

FALLBACK_PROMPT = """You are an expert SQL developer specializing in gaming/casino business intelligence.

BUSINESS CONTEXT:
- Gaming/casino database with player activities, bonuses, and transactions
- 'Today' = CAST(GETDATE() AS DATE)
- 'Totals' = SUM() aggregations of amounts/values
- Focus on daily actions and bonus relationships

DATABASE SCHEMA:
{schema}

BUSINESS RULES:
{business_rules}

USER QUESTION: {question}
{context}

Generate a SQL SELECT query that:
1. Uses proper table/column names from schema
2. Includes appropriate WHERE clauses for date filtering
3. Uses meaningful JOINs based on relationships
4. Returns aggregated totals when requested
5. Limits results with SELECT TOP 100 at the beginning (NEVER put TOP at the end)
6. Uses clear column aliases
7. Always adds WITH (NOLOCK) hint to all table references for better read performance
8. Formats as: FROM TableName alias WITH (NOLOCK) - never use AS keyword with table hints

CORRECT STRUCTURE: SELECT TOP 100 columns FROM table WITH (NOLOCK) WHERE condition ORDER BY column

Return only the SQL query without explanations."""

PLACEHOLDERS = ("{schema}", "{question}", "{context}", "{business_rules}", "{examples}")
_PLACEHOLDER_RE = re.compile("|".join(re.escape(p) for p in PLACEHOLDERS))


def _tables_of(schema: Optional[SchemaInput]) -> List[TableMetadata]:
    if schema is None:
        return []
    if isinstance(schema, SchemaContext):
        return list(schema.relevant_tables)
    return list(schema)


def substitute(content: str, variables: Dict[str, str]) -> str:
    """Literal placeholder replacement; values are never re-scanned for placeholders."""
    return _PLACEHOLDER_RE.sub(lambda m: variables.get(m.group(0), m.group(0)), content or "")


class PromptAssembler:
    """
    Template + schema description + rules + examples -> final prompt.

    Every step yields a StageResult and the assembler picks the fallback for a
    failed step itself. Any unexpected exception during assembly produces the
    inline fallback prompt; neither public build method raises.
    """

    def __init__(
        self,
        *,
        templates: Optional[TemplateManager] = None,
        describer: Optional[SchemaDescriber] = None,
        log_sink: Optional[PromptLogSink] = None,
        metrics: Optional[Metrics] = None,
        template_name: str = SQL_GENERATION,
        rules_for: Callable[[str], List[str]] = business_rules_for,
    ) -> None:
        self.templates = templates or TemplateManager()
        self.describer = describer or SchemaDescriber()
        self.log_sink = log_sink
        self.metrics: Metrics = metrics or NoOpMetrics()
        self.template_name = template_name
        self.rules_for = rules_for

    # ---------------------------- steps ----------------------------
    def _step(self, stage: str, fn: Callable[..., Any], **kwargs: Any) -> StageResult:
        t0 = time.perf_counter()
        try:
            r = fn(**kwargs)
            if not isinstance(r, StageResult):
                r = StageResult(ok=True, data=r)
        except Exception as e:
            r = StageResult(
                ok=False,
                error=[str(e), traceback.format_exc()],
                error_code=ErrorCode.ASSEMBLY_FAILED,
            )
        dt = (time.perf_counter() - t0) * 1000.0
        self.metrics.observe_stage_duration_ms(stage=stage, dt_ms=dt)
        self.metrics.inc_stage_call(stage=stage, ok=r.ok)
        if not r.ok and r.error_code is not None:
            self.metrics.inc_stage_error(stage=stage, error_code=r.error_code.value)
        return r

    def _template(self, version: Optional[str]) -> PromptTemplate:
        r = self._step("template", self.templates.fetch, name=self.template_name, version=version)
        if r.ok and isinstance(r.data, PromptTemplate):
            return r.data
        self.metrics.inc_fallback(stage="template", reason="default")
        if isinstance(r.data, PromptTemplate):
            return r.data
        return default_template(self.template_name)

    def _describe(self, tables: List[TableMetadata]) -> str:
        r = self._step("describe", self.describer.describe, tables=tables)
        if r.ok:
            return r.data or ""
        log.warning("Schema description failed, using brief listing: %s", (r.error or [""])[0])
        self.metrics.inc_fallback(stage="describe", reason="brief")
        brief = self._step("describe", self.describer.describe_brief, tables=tables)
        if not brief.ok:
            return ""
        return brief.data or ""

    def _rules(self, query: str) -> str:
        r = self._step("rules", self.rules_for, query=query)
        return render_rules(r.data if r.ok else list(DEFAULT_RULES))

    def _examples(self, query: str) -> str:
        r = self._step("examples", select_examples, query=query)
        if r.ok:
            return render_examples(r.data)
        self.metrics.inc_fallback(stage="examples", reason="default")
        return render_examples(list(DEFAULT_EXAMPLES))

    def _log(
        self,
        query: str,
        details: PromptDetails,
        tables: List[TableMetadata],
        context: Optional[str],
        analysis: Optional[SemanticAnalysis],
    ) -> StageResult:
        if self.log_sink is None:
            return StageResult(ok=True)
        try:
            record = build_generation_record(
                query,
                details,
                [t.name for t in tables],
                context=context,
                analysis=analysis,
            )
            self.log_sink.log_prompt_generation(record)
        except Exception as e:
            log.warning("Failed to log prompt generation analytics, continuing: %s", e)
            return StageResult(
                ok=False,
                error=[str(e)],
                error_code=ErrorCode.LOG_SINK_FAILED,
                retryable=True,
            )
        log.debug(
            "Logged prompt generation",
            extra={
                "request_id": record.request_id,
                "intent": record.intent,
                "tokens": record.token_count,
            },
        )
        return StageResult(ok=True, data=record)

    # ---------------------------- assembly ----------------------------
    def _assemble(
        self,
        query: str,
        tables: List[TableMetadata],
        context: Optional[str],
        version: Optional[str],
    ) -> PromptDetails:
        template = self._template(version)
        schema_text = self._describe(tables)
        rules = self._rules(query)
        examples = self._examples(query)
        context_info = f"\nAdditional context: {context}" if context else ""

        variables = {
            "{schema}": schema_text,
            "{question}": query,
            "{business_rules}": rules,
            "{examples}": examples,
            "{context}": context_info,
        }
        prompt = substitute(template.content, variables)

        sections = [
            PromptSection(
                name="template",
                title="Base Template",
                content=template.content,
                type="template",
                order=1,
                metadata={
                    "templateName": template.name,
                    "templateVersion": template.version,
                    "description": template.description or "",
                },
            ),
            PromptSection(
                name="user_question",
                title="User Question",
                content=query,
                type="user_input",
                order=2,
            ),
            PromptSection(
                name="schema",
                title="Database Schema",
                content=schema_text,
                type="schema",
                order=3,
                metadata={
                    "tableCount": len(tables),
                    "totalColumns": sum(len(t.columns) for t in tables),
                },
            ),
            PromptSection(
                name="business_rules",
                title="Business Rules",
                content=rules,
                type="business_rules",
                order=4,
            ),
            PromptSection(
                name="examples",
                title="Example Queries",
                content=examples,
                type="examples",
                order=5,
            ),
        ]
        if context_info:
            sections.append(
                PromptSection(
                    name="context",
                    title="Additional Context",
                    content=context_info,
                    type="context",
                    order=6,
                )
            )

        return PromptDetails(
            full_prompt=prompt,
            template_name=template.name,
            template_version=template.version,
            sections=sections,
            variables=variables,
            token_count=estimate_tokens(prompt),
        )

    # ---------------------------- fallback ----------------------------
    def fallback_prompt(
        self, query: str, tables: Sequence[TableMetadata], context: Optional[str] = None
    ) -> str:
        try:
            schema_text = self.describer.describe(tables)
        except Exception as e:
            log.warning("Fallback schema description failed: %s", e)
            schema_text = ", ".join(t.qualified_name for t in tables)
        try:
            rules = render_rules(self.rules_for(query))
        except Exception as e:
            log.warning("Fallback business rules failed: %s", e)
            rules = render_rules(list(DEFAULT_RULES))

        return substitute(
            FALLBACK_PROMPT,
            {
                "{schema}": schema_text,
                "{business_rules}": rules,
                "{question}": query,
                "{context}": f"ADDITIONAL CONTEXT: {context}" if context else "",
            },
        )

    def fallback_details(
        self, query: str, tables: Sequence[TableMetadata], context: Optional[str] = None
    ) -> PromptDetails:
        prompt = self.fallback_prompt(query, tables, context)
        return PromptDetails(
            full_prompt=prompt,
            template_name=FALLBACK_TEMPLATE,
            template_version="1.0",
            sections=[
                PromptSection(
                    name="fallback",
                    title="Fallback Prompt",
                    content=prompt,
                    type="fallback",
                    order=1,
                )
            ],
            variables={},
            token_count=estimate_tokens(prompt),
        )

    # ---------------------------- public ----------------------------
    def build_detailed_query_prompt(
        self,
        query: str,
        schema: Optional[SchemaInput] = None,
        context: Optional[str] = None,
        *,
        version: Optional[str] = None,
        analysis: Optional[SemanticAnalysis] = None,
    ) -> PromptDetails:
        query = query or ""
        t0 = time.perf_counter()
        tables: List[TableMetadata] = []
        try:
            tables = _tables_of(schema)
            details = self._assemble(query, tables, context, version)
        except Exception as e:
            log.error(
                "Error building detailed query prompt, using fallback: %s",
                e,
                extra={"query": query},
            )
            self.metrics.inc_fallback(stage="assemble", reason="exception")
            self.metrics.inc_prompt_build(status="fallback")
            details = self.fallback_details(query, tables, context)
            log.warning(
                "Using fallback prompt details",
                extra={"template": details.template_name, "sections": len(details.sections)},
            )
            return details

        self._log(query, details, tables, context, analysis)
        self.metrics.inc_prompt_build(status="ok")
        self.metrics.observe_stage_duration_ms(
            stage="assemble", dt_ms=(time.perf_counter() - t0) * 1000.0
        )
        log.info(
            "Prompt details created",
            extra={
                "template": details.template_name,
                "version": details.template_version,
                "sections": len(details.sections),
                "tokens": details.token_count,
            },
        )
        return details

    def build_query_prompt(
        self,
        query: str,
        schema: Optional[SchemaInput] = None,
        context: Optional[str] = None,
        *,
        analysis: Optional[SemanticAnalysis] = None,
    ) -> str:
        return self.build_detailed_query_prompt(
            query, schema, context, analysis=analysis
        ).full_prompt

