from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence, Union

from adapters.store.base import FeedbackStore
from promptcore.learning.cache import InsightsCache
from promptcore.learning.optimizer import optimize_prompt
from promptcore.learning.patterns import prompt_pattern, sql_pattern, top_keywords
from promptcore.learning.types import (
    SUCCESS_RATING,
    FeedbackEntry,
    LearningInsights,
    LearningStatistics,
    QueryFeedback,
    rating_from_feedback,
)
from promptcore.schema.types import TableMetadata

log = logging.getLogger(__name__)

OPTIMIZATION_SUGGESTIONS = (
    "Use more specific table and column names",
    "Include proper JOIN conditions",
    "Add appropriate WHERE clauses for filtering",
)

PATTERN_SUGGESTIONS = {
    "display_query": "Show me all records from {table}",
    "count_query": "Count the total number of records in {table}",
    "average_query": "Calculate the average value of a numeric column",
    "sum_query": "Sum up values in a numeric column",
    "group_query": "Group data by a specific column and show counts",
}


class FeedbackLearningAdjuster:
    """
    Turns rated feedback into per-pattern insights and confidence nudges.

    Reads degrade to neutral values when the feedback store fails; writes are
    best-effort and only logged on failure. The insights cache is owned by the
    instance and invalidated per pattern on every new feedback entry.
    """

    history_limit = 100
    successful_keyword_count = 10
    mistake_keyword_count = 5
    suggestion_window_days = 30

    def __init__(self, store: FeedbackStore, cache: Optional[InsightsCache] = None) -> None:
        self.store = store
        self.cache = cache if cache is not None else InsightsCache()

    # ---------------------------- insights ----------------------------
    @staticmethod
    def _modifier(entries: Sequence[FeedbackEntry]) -> float:
        if not entries:
            return 0.0
        success_rate = sum(1 for e in entries if e.rating >= SUCCESS_RATING) / len(entries)
        return (success_rate - 0.5) * 0.3

    def _build_insights(self, pattern: str, entries: Sequence[FeedbackEntry]) -> LearningInsights:
        good = [e for e in entries if e.rating >= SUCCESS_RATING]
        bad = [e for e in entries if e.rating < 3]
        return LearningInsights(
            prompt_pattern=pattern,
            successful_patterns=top_keywords(
                (e.original_query for e in good), self.successful_keyword_count
            ),
            common_mistakes=top_keywords(
                (e.generated_sql for e in bad), self.mistake_keyword_count
            ),
            optimization_suggestions=list(OPTIMIZATION_SUGGESTIONS) if good and bad else [],
            confidence_modifier=self._modifier(entries),
            sample_count=len(entries),
        )

    def get_learning_insights(self, prompt: str) -> LearningInsights:
        pattern = prompt_pattern(prompt)
        cached = self.cache.get(pattern)
        if cached is not None:
            return cached
        try:
            entries = self.store.query_feedback(pattern=pattern, limit=self.history_limit)
            insights = self._build_insights(pattern, entries)
        except Exception as e:
            log.error("Error getting learning insights for pattern %s: %s", pattern, e)
            return LearningInsights.empty(pattern)
        self.cache.put(pattern, insights)
        return insights

    # ---------------------------- feedback ----------------------------
    def process_feedback(
        self,
        original_prompt: str,
        generated_sql: str,
        feedback: Union[QueryFeedback, str],
        user_id: str,
    ) -> Optional[FeedbackEntry]:
        if isinstance(feedback, str):
            feedback = QueryFeedback(feedback=feedback)
        pattern = prompt_pattern(original_prompt)
        entry = FeedbackEntry(
            original_query=original_prompt,
            generated_sql=generated_sql or "",
            rating=rating_from_feedback(feedback.feedback),
            category=pattern,
            user_id=user_id,
            comments=feedback.comments or "",
            feedback_type=feedback.feedback or "neutral",
        )
        try:
            self.store.append_feedback(entry)
        except Exception as e:
            log.error("Error processing feedback: %s", e, extra={"pattern": pattern})
            return None
        self.cache.invalidate(pattern)
        log.info(
            "Processed feedback: rating %s, pattern %s",
            entry.rating,
            pattern,
            extra={"user_id": user_id},
        )
        return entry

    def enhance_confidence(
        self,
        base_confidence: float,
        prompt: str,
        generated_sql: str,
        insights: Optional[LearningInsights] = None,
    ) -> float:
        try:
            if insights is None:
                insights = self.get_learning_insights(prompt)
            enhancement = insights.confidence_modifier
            if insights.sample_count > 10:
                enhancement += 0.1
            lower_prompt = (prompt or "").lower()
            if any(p.lower() in lower_prompt for p in insights.successful_patterns):
                enhancement += 0.15
            lower_sql = (generated_sql or "").lower()
            if any(m.lower() in lower_sql for m in insights.common_mistakes):
                enhancement -= 0.2
            return max(0.0, min(1.0, base_confidence + enhancement))
        except Exception as e:
            log.warning("Error enhancing confidence, using base confidence: %s", e)
            return base_confidence

    # ---------------------------- reporting ----------------------------
    def get_learning_statistics(self) -> LearningStatistics:
        try:
            entries = self.store.query_feedback()
        except Exception as e:
            log.error("Error getting learning statistics: %s", e)
            return LearningStatistics()
        if not entries:
            return LearningStatistics()

        popular = Counter(e.category or "unknown" for e in entries if e.is_successful)
        return LearningStatistics(
            total_feedback=len(entries),
            average_rating=sum(e.rating for e in entries) / len(entries),
            unique_users=len({e.user_id for e in entries}),
            popular_patterns=[p for p, _ in popular.most_common(10)],
        )

    def get_personalized_suggestions(
        self, context: str, tables: Sequence[TableMetadata] = ()
    ) -> List[str]:
        try:
            entries = self.store.query_feedback()
        except Exception as e:
            log.warning("Error generating personalized suggestions: %s", e)
            return []

        since = datetime.now(timezone.utc) - timedelta(days=self.suggestion_window_days)
        popular = Counter(
            e.category or "General"
            for e in entries
            if e.is_successful and e.created_at > since
        )
        table = tables[0].name if tables else "table"
        out: List[str] = []
        for pattern, _ in popular.most_common(5):
            text = PATTERN_SUGGESTIONS.get(pattern)
            if text:
                out.append(text.format(table=table))
        return out

    def get_insight_context(self, sql: str) -> dict:
        """Comments from well-rated feedback sharing the query's SQL shape."""
        pattern = sql_pattern(sql)
        try:
            entries = self.store.query_feedback(pattern=pattern)
        except Exception as e:
            log.warning("Error getting insight context: %s", e)
            return {"query_pattern": pattern, "related_insights": [], "contextual_hints": []}

        related = [e.comments for e in entries if e.is_successful and e.comments][:10]
        hints = [
            part for c in related for part in c.split(".") if len(part.strip()) > 10
        ][:5]
        return {"query_pattern": pattern, "related_insights": related, "contextual_hints": hints}

    def optimize_prompt(self, prompt: str, insights: Optional[LearningInsights] = None) -> str:
        if insights is None:
            insights = self.get_learning_insights(prompt)
        return optimize_prompt(prompt, insights)
