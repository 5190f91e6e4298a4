from datetime import datetime, timedelta, timezone

import pytest

from adapters.store.memory import InMemoryFeedbackStore
from conftest import BrokenFeedbackStore
from promptcore.learning.adjuster import OPTIMIZATION_SUGGESTIONS, FeedbackLearningAdjuster
from promptcore.learning.cache import InsightsCache
from promptcore.learning.types import FeedbackEntry, LearningInsights, QueryFeedback
from promptcore.schema.types import TableMetadata

GOOD_PROMPT = "show total deposits today"
GOOD_SQL = "SELECT SUM(Deposits) FROM common.tbl_Daily_actions"
BAD_SQL = "SELECT * FROM tbl_Bonus_balances"


@pytest.fixture
def adjuster():
    adj = FeedbackLearningAdjuster(InMemoryFeedbackStore())
    for user in ("ana", "bo", "cy"):
        adj.process_feedback(GOOD_PROMPT, GOOD_SQL, QueryFeedback("positive"), user)
    adj.process_feedback(GOOD_PROMPT, BAD_SQL, QueryFeedback("negative", "wrong table"), "ana")
    return adj


def test_insights_from_feedback(adjuster):
    insights = adjuster.get_learning_insights("show players")

    assert insights.prompt_pattern == "display_query"
    assert insights.sample_count == 4
    assert insights.successful_patterns == ["show", "total", "deposits", "today"]
    assert insights.common_mistakes == ["select", "from", "tbl_bonus_balances"]
    assert insights.optimization_suggestions == list(OPTIMIZATION_SUGGESTIONS)
    assert insights.confidence_modifier == pytest.approx((0.75 - 0.5) * 0.3)


def test_insights_empty_store():
    insights = FeedbackLearningAdjuster(InMemoryFeedbackStore()).get_learning_insights("revenue")

    assert insights == LearningInsights.empty("general_query")


def test_insights_are_cached_until_new_feedback(adjuster):
    first = adjuster.get_learning_insights("show players")
    assert adjuster.get_learning_insights("list games") is first

    adjuster.process_feedback("show brands", GOOD_SQL, "positive", "dee")
    again = adjuster.get_learning_insights("show players")

    assert again is not first
    assert again.sample_count == 5


def test_store_failure_gives_empty_uncached_insights():
    cache = InsightsCache()
    adj = FeedbackLearningAdjuster(BrokenFeedbackStore(), cache=cache)

    insights = adj.get_learning_insights("count players")

    assert insights == LearningInsights.empty("count_query")
    assert len(cache) == 0


def test_process_feedback_entry(adjuster):
    entry = adjuster.process_feedback("average bet", "SELECT AVG(BetsReal) FROM t", "negative", "u1")

    assert entry.rating == 1
    assert entry.category == "average_query"
    assert entry.feedback_type == "negative"
    assert entry.user_id == "u1"


def test_process_feedback_store_failure_is_swallowed():
    adj = FeedbackLearningAdjuster(BrokenFeedbackStore())
    assert adj.process_feedback("count players", "SELECT 1", "positive", "u") is None


def test_enhance_confidence(adjuster):
    # +0.075 modifier, +0.15 successful keyword in prompt, -0.2 "select" mistake in sql
    value = adjuster.enhance_confidence(0.5, GOOD_PROMPT, GOOD_SQL)
    assert value == pytest.approx(0.525)


@pytest.mark.parametrize("base", [0.0, 0.3, 0.99, 1.0])
def test_enhance_confidence_is_clamped(base):
    insights = LearningInsights(
        prompt_pattern="p",
        successful_patterns=["deposits"],
        confidence_modifier=0.15,
        sample_count=50,
    )
    adj = FeedbackLearningAdjuster(InMemoryFeedbackStore())
    value = adj.enhance_confidence(base, "deposits", "", insights)

    assert 0.0 <= value <= 1.0


def test_enhance_confidence_failure_returns_base():
    adj = FeedbackLearningAdjuster(InMemoryFeedbackStore())
    assert adj.enhance_confidence(0.42, "p", "s", object()) == 0.42  # type: ignore[arg-type]


def test_learning_statistics(adjuster):
    stats = adjuster.get_learning_statistics()

    assert stats.total_feedback == 4
    assert stats.average_rating == 4.0
    assert stats.unique_users == 3
    assert stats.popular_patterns == ["display_query"]


def test_learning_statistics_empty_and_failing():
    assert FeedbackLearningAdjuster(InMemoryFeedbackStore()).get_learning_statistics().total_feedback == 0
    assert FeedbackLearningAdjuster(BrokenFeedbackStore()).get_learning_statistics().total_feedback == 0


def test_personalized_suggestions(adjuster):
    old = FeedbackEntry(
        original_query="count players",
        generated_sql="SELECT COUNT(*) FROM p",
        rating=5,
        category="count_query",
        created_at=datetime.now(timezone.utc) - timedelta(days=45),
    )
    adjuster.store.append_feedback(old)

    out = adjuster.get_personalized_suggestions("", [TableMetadata(name="tbl_Daily_actions")])

    assert out == ["Show me all records from tbl_Daily_actions"]


def test_insight_context():
    store = InMemoryFeedbackStore(
        [
            FeedbackEntry(
                original_query="revenue by brand",
                generated_sql="SELECT b, SUM(r) FROM t GROUP BY b",
                rating=5,
                category="grouped_query",
                comments="Group by the brand column first. ok",
            )
        ]
    )
    ctx = FeedbackLearningAdjuster(store).get_insight_context("SELECT x FROM t GROUP BY x")

    assert ctx["query_pattern"] == "grouped_query"
    assert ctx["related_insights"] == ["Group by the brand column first. ok"]
    assert ctx["contextual_hints"] == ["Group by the brand column first"]


def test_optimize_prompt_uses_insights(adjuster):
    out = adjuster.optimize_prompt("show players")
    assert out.startswith("Context: Focus on show, total, deposits. Query: show players")
