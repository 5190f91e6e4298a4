from __future__ import annotations

import logging
import time
import traceback
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from adapters.catalog.base import SchemaCatalog
from adapters.metrics.base import Metrics
from adapters.metrics.noop import NoOpMetrics
from promptcore.analyzer import KeywordSemanticAnalyzer, SemanticAnalysis, SemanticAnalyzer
from promptcore.errors.codes import ErrorCode
from promptcore.prompts.assembler import PromptAssembler, SchemaInput
from promptcore.prompts.types import PromptDetails, PromptTemplate
from promptcore.schema.relationships import (
    business_terms,
    column_mappings,
    infer_relationships,
    suggest_joins,
)
from promptcore.schema.scorer import RelevanceScorer, Selection
from promptcore.schema.types import SchemaContext, TableMetadata
from promptcore.types import StageResult, StageTrace

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    prompt: PromptDetails
    schema: SchemaContext
    traces: List[dict] = field(default_factory=list)

    @property
    def fallback(self) -> bool:
        return self.prompt.template_name == "fallback"


class PromptPipeline:
    """
    catalogue -> semantic analysis -> relevance selection -> prompt assembly.

    Each stage runs through `_run_stage`, which times it, records metrics and
    turns exceptions into failed StageResults. Failed stages fall back:
    no analysis means keyword-only scoring, a scoring crash means the first
    few catalogue tables, and the assembler never raises.
    """

    def __init__(
        self,
        *,
        catalog: Optional[SchemaCatalog] = None,
        analyzer: Optional[SemanticAnalyzer] = None,
        scorer: Optional[RelevanceScorer] = None,
        assembler: Optional[PromptAssembler] = None,
        metrics: Optional[Metrics] = None,
    ) -> None:
        self.catalog = catalog
        self.analyzer: SemanticAnalyzer = analyzer or KeywordSemanticAnalyzer()
        self.scorer = scorer or RelevanceScorer()
        self.metrics: Metrics = metrics or NoOpMetrics()
        self.assembler = assembler or PromptAssembler(metrics=self.metrics)

    # ---------------------------- helpers ----------------------------
    def _run_stage(
        self,
        stage: str,
        fn: Callable[..., Any],
        *,
        error_code: ErrorCode,
        traces: Optional[List[dict]] = None,
        **kwargs: Any,
    ) -> StageResult:
        t0 = time.perf_counter()
        try:
            out = fn(**kwargs)
            r = out if isinstance(out, StageResult) else StageResult(ok=True, data=out)
        except Exception as e:
            r = StageResult(
                ok=False,
                error=[str(e), traceback.format_exc()],
                error_code=error_code,
            )
        dt = (time.perf_counter() - t0) * 1000.0

        self.metrics.observe_stage_duration_ms(stage=stage, dt_ms=dt)
        self.metrics.inc_stage_call(stage=stage, ok=r.ok)
        if not r.ok:
            log.warning(
                "Stage %s failed: %s",
                stage,
                (r.error or ["unknown"])[0],
                extra={"stage": stage, "error_code": str(r.error_code)},
            )
            if r.error_code is not None:
                self.metrics.inc_stage_error(stage=stage, error_code=r.error_code.value)

        if traces is not None:
            trace = r.trace or StageTrace(
                stage=stage, duration_ms=dt, summary="ok" if r.ok else "failed"
            )
            traces.append(trace.__dict__)
        return r

    def load_catalog(self, traces: Optional[List[dict]] = None) -> List[TableMetadata]:
        if self.catalog is None:
            return []
        r = self._run_stage(
            "catalog", self.catalog.get_schema, error_code=ErrorCode.CATALOG_FAILED, traces=traces
        )
        return list(r.data or []) if r.ok else []

    def _select(
        self,
        tables: Sequence[TableMetadata],
        query: str,
        analysis: Optional[SemanticAnalysis],
        traces: Optional[List[dict]],
    ) -> Selection:
        r = self._run_stage(
            "relevance",
            self.scorer.select,
            error_code=ErrorCode.SCORING_FAILED,
            traces=traces,
            tables=tables,
            query=query,
            analysis=analysis,
        )
        if r.ok:
            selection: Selection = r.data
            if selection.strategy not in ("scored", "empty"):
                self.metrics.inc_fallback(stage="relevance", reason=selection.strategy)
            return selection

        n = self.scorer.weights.fallback_table_count
        self.metrics.inc_fallback(stage="relevance", reason="fallback")
        return Selection(tables=list(tables[:n]), scores={}, strategy="fallback")

    # ---------------------------- schema ----------------------------
    def _relevant(
        self,
        query: str,
        tables: Optional[Sequence[TableMetadata]],
        traces: Optional[List[dict]],
    ) -> Tuple[SchemaContext, Optional[SemanticAnalysis]]:
        catalogue = list(tables) if tables is not None else self.load_catalog(traces)

        a = self._run_stage(
            "analyzer",
            self.analyzer.analyze,
            error_code=ErrorCode.ANALYZER_FAILED,
            traces=traces,
            query=query,
        )
        analysis: Optional[SemanticAnalysis] = a.data if a.ok else None
        if not a.ok:
            self.metrics.inc_fallback(stage="analyzer", reason="keyword_only")

        selection = self._select(catalogue, query, analysis, traces)
        relationships = infer_relationships(selection.tables)

        ctx = SchemaContext(
            relevant_tables=selection.tables,
            scores=selection.scores,
            relationships=relationships,
            suggested_joins=suggest_joins(relationships),
            column_mappings=column_mappings(selection.tables),
            business_terms=business_terms(analysis),
            selection_strategy=selection.strategy,
            forced_tables=selection.forced,
        )
        log.info(
            "Selected %d relevant tables",
            len(ctx.relevant_tables),
            extra={"tables": ctx.table_names, "strategy": ctx.selection_strategy},
        )
        return ctx, analysis

    def get_relevant_schema(
        self,
        query: str,
        tables: Optional[Sequence[TableMetadata]] = None,
        *,
        traces: Optional[List[dict]] = None,
    ) -> SchemaContext:
        ctx, _ = self._relevant(query or "", tables, traces)
        return ctx

    # ---------------------------- prompts ----------------------------
    def build_detailed_query_prompt(
        self,
        query: str,
        schema: Optional[SchemaInput] = None,
        context: Optional[str] = None,
    ) -> PromptDetails:
        if schema is None:
            schema = self.get_relevant_schema(query)
        return self.assembler.build_detailed_query_prompt(query, schema, context)

    def build_query_prompt(
        self,
        query: str,
        schema: Optional[SchemaInput] = None,
        context: Optional[str] = None,
    ) -> str:
        return self.build_detailed_query_prompt(query, schema, context).full_prompt

    def run(self, *, query: str, context: Optional[str] = None) -> PipelineResult:
        traces: List[dict] = []
        t0 = time.perf_counter()

        schema, analysis = self._relevant(query or "", None, traces)

        t1 = time.perf_counter()
        details = self.assembler.build_detailed_query_prompt(
            query or "", schema, context, analysis=analysis
        )
        traces.append(
            StageTrace(
                stage="assemble",
                duration_ms=(time.perf_counter() - t1) * 1000.0,
                summary=details.template_name,
                token_count=details.token_count,
                table_count=len(schema.relevant_tables),
                fallback=details.template_name == "fallback",
            ).__dict__
        )

        log.info(
            "Prompt pipeline finished",
            extra={
                "duration_ms": round((time.perf_counter() - t0) * 1000.0, 2),
                "tables": schema.table_names,
                "tokens": details.token_count,
            },
        )
        return PipelineResult(prompt=details, schema=schema, traces=traces)

    # ---------------------------- templates ----------------------------
    def list_templates(self) -> List[PromptTemplate]:
        return self.assembler.templates.list_templates()

    def create_template(self, template: PromptTemplate) -> PromptTemplate:
        return self.assembler.templates.create_template(template)

    def update_template(self, template: PromptTemplate) -> PromptTemplate:
        return self.assembler.templates.update_template(template)

    def stats(self) -> Dict[str, Any]:
        return {"sample_failures": self.assembler.describer.sample_failures}
