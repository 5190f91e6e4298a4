from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

# explicit feedback labels -> 1..5 rating
FEEDBACK_RATINGS: Dict[str, int] = {"positive": 5, "neutral": 3, "negative": 1}
NEUTRAL_RATING = 3
SUCCESS_RATING = 4


def rating_from_feedback(feedback: str) -> int:
    return FEEDBACK_RATINGS.get((feedback or "").strip().lower(), NEUTRAL_RATING)


@dataclass(frozen=True)
class QueryFeedback:
    """Feedback as submitted by a caller, before it is tagged and rated."""

    feedback: str
    comments: str = ""
    query_id: Optional[str] = None


@dataclass(frozen=True)
class FeedbackEntry:
    original_query: str
    generated_sql: str
    rating: int
    category: str
    user_id: str = ""
    comments: str = ""
    feedback_type: str = "prompt_learning"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_successful(self) -> bool:
        return self.rating >= SUCCESS_RATING


@dataclass(frozen=True)
class LearningInsights:
    prompt_pattern: str
    successful_patterns: List[str] = field(default_factory=list)
    common_mistakes: List[str] = field(default_factory=list)
    optimization_suggestions: List[str] = field(default_factory=list)
    confidence_modifier: float = 0.0
    sample_count: int = 0

    @classmethod
    def empty(cls, pattern: str = "general_query") -> "LearningInsights":
        return cls(prompt_pattern=pattern)


@dataclass(frozen=True)
class LearningStatistics:
    total_feedback: int = 0
    average_rating: float = 0.0
    unique_users: int = 0
    popular_patterns: List[str] = field(default_factory=list)
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
