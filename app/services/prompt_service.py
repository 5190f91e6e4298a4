from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from app.errors import DuplicateTableError, FeedbackUnavailableError
from app.settings import Settings
from promptcore.errors.codes import ErrorCode
from promptcore.errors.exceptions import PromptCoreError
from promptcore.learning.adjuster import FeedbackLearningAdjuster
from promptcore.learning.types import FeedbackEntry, LearningInsights, QueryFeedback
from promptcore.pipeline import PipelineResult, PromptPipeline
from promptcore.prompts.types import PromptDetails, PromptTemplate
from promptcore.schema.types import SchemaContext, TableMetadata

log = logging.getLogger(__name__)


@dataclass
class InsightsView:
    insights: LearningInsights
    confidence: Optional[float] = None
    optimized_prompt: Optional[str] = None


@dataclass
class PromptService:
    """
    Application-level service for prompt building and feedback learning.

    Responsibilities:
        - Validate request-level input the core tolerates silently.
        - Route inline schemas past the configured catalogue.
        - Turn best-effort core failures into HTTP-facing errors where a
          caller explicitly asked for a write.
    """

    settings: Settings
    pipeline: PromptPipeline
    adjuster: FeedbackLearningAdjuster

    @staticmethod
    def _require_query(query: str) -> str:
        if not (query or "").strip():
            raise PromptCoreError("query must not be empty", code=ErrorCode.EMPTY_QUERY)
        return query.strip()

    @staticmethod
    def _check_tables(tables: Optional[Sequence[TableMetadata]]) -> None:
        if tables is None:
            return
        seen = set()
        for t in tables:
            key = t.qualified_name.lower()
            if key in seen:
                raise DuplicateTableError(
                    f"Duplicate table in inline schema: {t.qualified_name}",
                    details=[t.qualified_name],
                )
            seen.add(key)

    # ---------------------------- prompts ----------------------------
    def build_prompt(
        self,
        query: str,
        context: Optional[str] = None,
        tables: Optional[Sequence[TableMetadata]] = None,
    ) -> tuple[PromptDetails, Optional[SchemaContext], List[dict]]:
        query = self._require_query(query)
        self._check_tables(tables)
        if tables is None:
            result: PipelineResult = self.pipeline.run(query=query, context=context)
            return result.prompt, result.schema, result.traces

        traces: List[dict] = []
        schema = self.pipeline.get_relevant_schema(query, tables, traces=traces)
        details = self.pipeline.build_detailed_query_prompt(query, schema, context)
        return details, schema, traces

    def relevant_schema(
        self, query: str, tables: Optional[Sequence[TableMetadata]] = None
    ) -> SchemaContext:
        self._check_tables(tables)
        return self.pipeline.get_relevant_schema(query or "", tables)

    # ---------------------------- templates ----------------------------
    def list_templates(self) -> List[PromptTemplate]:
        return self.pipeline.list_templates()

    def create_template(self, template: PromptTemplate) -> PromptTemplate:
        return self.pipeline.create_template(template)

    def update_template(self, template: PromptTemplate) -> PromptTemplate:
        return self.pipeline.update_template(template)

    # ---------------------------- learning ----------------------------
    def submit_feedback(
        self,
        original_prompt: str,
        generated_sql: str,
        feedback: QueryFeedback,
        user_id: Optional[str] = None,
    ) -> FeedbackEntry:
        original_prompt = self._require_query(original_prompt)
        entry = self.adjuster.process_feedback(
            original_prompt,
            generated_sql,
            feedback,
            user_id or self.settings.default_user_id,
        )
        if entry is None:
            raise FeedbackUnavailableError(
                "Feedback could not be stored.",
                extra={"code": ErrorCode.FEEDBACK_STORE_FAILED.value},
            )
        return entry

    def insights(
        self,
        prompt: str,
        *,
        generated_sql: Optional[str] = None,
        base_confidence: Optional[float] = None,
        optimize: bool = False,
    ) -> InsightsView:
        insights = self.adjuster.get_learning_insights(prompt or "")
        view = InsightsView(insights=insights)
        if base_confidence is not None:
            view.confidence = self.adjuster.enhance_confidence(
                base_confidence, prompt or "", generated_sql or "", insights
            )
        if optimize:
            view.optimized_prompt = self.adjuster.optimize_prompt(prompt or "", insights)
        return view

    def learning_statistics(self):
        return self.adjuster.get_learning_statistics()
