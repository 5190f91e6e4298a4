"""Coarse pattern tags and keyword extraction for feedback learning."""

from __future__ import annotations

import re
from collections import Counter
from typing import Iterable, List, Tuple

from promptcore.guidance.triggers import Trigger, fired_names, has_any

GENERAL_QUERY = "general_query"

# first matching tag wins
PROMPT_PATTERNS: Tuple[Trigger[str], ...] = (
    Trigger("display_query", has_any("show", "display", "list"), ()),
    Trigger("count_query", has_any("count", "total", "number"), ()),
    Trigger("average_query", has_any("average", "mean", "avg"), ()),
    Trigger("sum_query", has_any("sum", "total"), ()),
    Trigger("group_query", has_any("group", "by"), ()),
    Trigger("join_query", has_any("join", "combine"), ()),
    Trigger("filter_query", has_any("filter", "where", "condition"), ()),
)

SQL_PATTERNS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("grouped_query", ("GROUP BY",)),
    ("joined_query", ("JOIN",)),
    ("union_query", ("UNION",)),
    ("subquery", ("SUBQUERY", "(SELECT")),
    ("ordered_query", ("ORDER BY",)),
    ("having_query", ("HAVING",)),
)

STOP_WORDS = frozenset(
    {
        "the", "and", "for", "are", "but", "not", "you", "all", "can", "had",
        "her", "was", "one", "our", "out", "day", "get", "has", "him", "his",
        "how", "its", "may", "new", "now", "old", "see", "two", "who", "boy",
        "did", "man", "men", "put", "say", "she", "too", "use",
    }
)

_WORD_SPLIT = re.compile(r"\W+")


def prompt_pattern(prompt: str) -> str:
    names = fired_names(PROMPT_PATTERNS, prompt or "")
    return names[0] if names else GENERAL_QUERY


def sql_pattern(sql: str) -> str:
    upper = (sql or "").upper()
    for tag, needles in SQL_PATTERNS:
        if any(n in upper for n in needles):
            return tag
    return "simple_query"


def extract_keywords(text: str) -> List[str]:
    """Words longer than three characters that are not stop words; duplicates kept."""
    return [
        w
        for w in _WORD_SPLIT.split((text or "").lower())
        if len(w) > 3 and w not in STOP_WORDS
    ]


def top_keywords(texts: Iterable[str], n: int) -> List[str]:
    counts: Counter = Counter()
    for text in texts:
        counts.update(extract_keywords(text))
    return [word for word, _ in counts.most_common(n)]
