from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from promptcore.learning.types import LearningInsights

log = logging.getLogger(__name__)

TEMPORAL_KEYWORDS = ("date", "time", "day", "month", "year", "recent", "last", "today", "yesterday", "week")
AGGREGATION_KEYWORDS = ("count", "sum", "average", "total", "max", "min", "group")
ENTITY_KEYWORDS = ("customer", "order", "product", "user", "account", "transaction", "invoice", "payment")

_DATE_FORMAT = re.compile(r"\d{4}-\d{2}-\d{2}|\d{2}/\d{2}/\d{4}|yyyy|mm|dd", re.IGNORECASE)


def has_temporal(prompt: str) -> bool:
    p = prompt.lower()
    return any(k in p for k in TEMPORAL_KEYWORDS)


def has_aggregation(prompt: str) -> bool:
    p = prompt.lower()
    return any(k in p for k in AGGREGATION_KEYWORDS)


def has_date_format(prompt: str) -> bool:
    return _DATE_FORMAT.search(prompt) is not None


def has_multiple_entities(prompt: str) -> bool:
    p = prompt.lower()
    return sum(1 for k in ENTITY_KEYWORDS if k in p) > 1


@dataclass(frozen=True)
class OptimizationRule:
    name: str
    condition: Callable[[str], bool]
    transform: Callable[[str], str]


# applied in order, each seeing the output of the previous one
OPTIMIZATION_RULES: Tuple[OptimizationRule, ...] = (
    OptimizationRule(
        "add_table_context",
        lambda p: "table" not in p and "from" not in p,
        lambda p: f"Generate SQL query for the appropriate table: {p}",
    ),
    OptimizationRule(
        "clarify_aggregation",
        lambda p: has_aggregation(p) and "group" not in p,
        lambda p: f"{p} (Include appropriate grouping if needed)",
    ),
    OptimizationRule(
        "add_limit_guidance",
        lambda p: "show" in p.lower() and "limit" not in p and "top" not in p,
        lambda p: f"{p} (Consider adding LIMIT/TOP for large datasets)",
    ),
    OptimizationRule(
        "temporal_clarity",
        lambda p: has_temporal(p) and not has_date_format(p),
        lambda p: f"{p} (Specify date format and range clearly)",
    ),
    OptimizationRule(
        "join_guidance",
        lambda p: has_multiple_entities(p) and "join" not in p,
        lambda p: f"{p} (Consider relationships between entities)",
    ),
)


def apply_learning(prompt: str, insights: LearningInsights) -> str:
    out = prompt
    if insights.successful_patterns:
        focus = ", ".join(insights.successful_patterns[:3])
        out = f"Context: Focus on {focus}. Query: {out}"
    if insights.optimization_suggestions:
        out += f" (Guidelines: {'; '.join(insights.optimization_suggestions[:2])})"
    if insights.common_mistakes:
        out += f" (Avoid: {', '.join(insights.common_mistakes[:2])})"
    return out


def apply_rules(prompt: str, rules: Tuple[OptimizationRule, ...] = OPTIMIZATION_RULES) -> Tuple[str, List[str]]:
    out = prompt
    applied: List[str] = []
    for rule in rules:
        if rule.condition(out):
            out = rule.transform(out)
            applied.append(rule.name)
    return out, applied


def add_notes(prompt: str) -> str:
    out = prompt
    if has_temporal(out):
        out += " (Note: Use appropriate date/time functions and consider timezone)"
    if has_aggregation(out):
        out += " (Note: Consider GROUP BY clauses and NULL handling)"
    return out


def optimize_prompt(prompt: str, insights: Optional[LearningInsights] = None) -> str:
    """Learning context, then rule-based rewrites, then notes. Never raises."""
    try:
        out = apply_learning(prompt, insights) if insights is not None else prompt
        out, applied = apply_rules(out)
        out = add_notes(out)
    except Exception as e:
        log.warning("Error optimizing prompt, using original: %s", e)
        return prompt
    log.debug(
        "Prompt optimized",
        extra={"from_len": len(prompt), "to_len": len(out), "rules": applied},
    )
    return out
