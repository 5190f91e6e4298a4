import pytest

from promptcore.guidance.examples import (
    BASIC_DAILY_STATISTICS,
    TOTALS_TODAY,
    render_examples,
    select_examples,
)
from promptcore.guidance.rules import DEFAULT_RULES, business_rules_for, render_rules
from promptcore.guidance.triggers import Trigger, fire, has_any


def titles(examples):
    return [e.title for e in examples]


# ---------------------------------------------------------------------------
# Business rules
# ---------------------------------------------------------------------------


def test_rules_follow_trigger_order():
    rules = business_rules_for("Total deposits today")

    assert rules[0].startswith("For 'today':")
    assert rules[2].startswith("For 'totals':")
    assert any("'Deposits' column" in r for r in rules)
    assert not any("game analytics" in r for r in rules)


def test_rules_default_when_nothing_fires():
    assert business_rules_for("") == list(DEFAULT_RULES)
    assert business_rules_for("hello there") == list(DEFAULT_RULES)


@pytest.mark.parametrize(
    "query,expected,absent",
    [
        ("deposits in the last week", "For 'last 7 days'", "For 'last 30 days'"),
        ("deposits in the last 30 days", "For 'last 30 days'", "For 'last 7 days'"),
        ("deposits in the last 3 days", "For 'last 3 days'", "For 'last 7 days'"),
    ],
)
def test_relative_period_rules_are_exclusive(query, expected, absent):
    rules = business_rules_for(query)

    assert any(r.startswith(expected) for r in rules)
    assert not any(r.startswith(absent) for r in rules)
    assert any(r.startswith("Always use Date column") for r in rules)


def test_suspended_maps_to_blocked():
    rules = business_rules_for("list suspended players")

    assert any(r.startswith("TERMINOLOGY MAPPING") for r in rules)
    assert any("use 'Blocked' status instead" in r for r in rules)


def test_game_queries_require_games_join():
    rules = business_rules_for("top games by revenue this month")

    assert rules[0] == "CRITICAL: For game analytics, use tbl_Daily_actions_games as the primary table"
    assert any("GameID - 1000000" in r for r in rules)


def test_render_rules():
    assert render_rules(["a", "b"]) == "- a\n- b"
    assert render_rules([]) == ""


# ---------------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------------


def test_fire_deduplicates_effects_in_declaration_order():
    triggers = (
        Trigger("one", has_any("x"), ("a", "b")),
        Trigger("two", has_any("x"), ("b", "c")),
        Trigger("three", has_any("y"), ("d",)),
    )
    assert fire(triggers, "X marks") == ["a", "b", "c"]


# ---------------------------------------------------------------------------
# Worked examples
# ---------------------------------------------------------------------------


def test_game_examples():
    picked = select_examples("top games by revenue this month")

    assert titles(picked) == [
        "game performance by provider",
        "top games by revenue",
        "top 10 games by revenue this month",
    ]


def test_default_example_when_nothing_matches():
    assert select_examples("") == [BASIC_DAILY_STATISTICS]


def test_multiple_triggers_combine():
    assert titles(select_examples("deposits by brand")) == [
        "deposits by brand today",
        "revenue by brand today",
    ]


def test_status_examples():
    assert titles(select_examples("blocked players")) == [
        "suspended players by brand",
        "players by status last 7 days",
    ]


def test_render_examples():
    text = render_examples([TOTALS_TODAY])

    assert text.startswith("\nEXAMPLE: 'totals today'\nSQL: ")
    assert "FROM common.tbl_Daily_actions" in text
