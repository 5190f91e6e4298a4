from __future__ import annotations

import re
import logging
from dataclasses import dataclass, field
from typing import List, Protocol, Tuple

log = logging.getLogger(__name__)

__all__ = [
    "SemanticEntity",
    "SemanticAnalysis",
    "SemanticAnalyzer",
    "KeywordSemanticAnalyzer",
    "classify_question",
    "extract_entities",
]


@dataclass(frozen=True)
class SemanticEntity:
    text: str
    type: str  # table | metric | entity | temporal | ...


@dataclass(frozen=True)
class SemanticAnalysis:
    query: str
    entities: List[SemanticEntity] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    intent: str = "ANALYSIS"
    domain: str = "General"


class SemanticAnalyzer(Protocol):
    def analyze(self, query: str) -> SemanticAnalysis: ...


# ---------------------------- classification ----------------------------
# (label, words) in priority order; first hit wins
INTENT_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("REPORTING", ("show", "list", "display")),
    ("COMPARATIVE", ("compare", "vs", "versus")),
    ("TREND_ANALYSIS", ("trend", "over time", "growth")),
    ("AGGREGATION", ("total", "sum", "count")),
)

DOMAIN_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Sales", ("sales", "revenue", "customer")),
    ("Finance", ("finance", "cost", "profit")),
    ("Product", ("product", "inventory", "stock")),
    ("HR", ("employee", "hr", "staff")),
)

ENTITY_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("sales", "metric"),
    ("revenue", "metric"),
    ("profit", "metric"),
    ("deposit", "metric"),
    ("bets", "metric"),
    ("wins", "metric"),
    ("customer", "entity"),
    ("product", "entity"),
    ("order", "entity"),
    ("employee", "entity"),
    ("player", "entity"),
    ("game", "entity"),
    ("bonus", "entity"),
    ("country", "entity"),
    ("brand", "entity"),
    ("date", "temporal"),
    ("today", "temporal"),
    ("week", "temporal"),
    ("month", "temporal"),
    ("year", "temporal"),
    ("quarter", "temporal"),
)

STOP_WORDS = frozenset(
    {
        "the", "and", "for", "are", "but", "not", "you", "all", "can", "was",
        "one", "our", "out", "get", "has", "how", "its", "may", "new", "now",
        "see", "who", "did", "too", "use", "show", "me", "what", "which",
        "with", "from", "this", "that", "give", "list", "by", "of", "in", "a",
    }
)


def _first_label(text: str, rules, default: str) -> str:
    for label, words in rules:
        if any(w in text for w in words):
            return label
    return default


def classify_question(question: str) -> Tuple[str, str]:
    """Coarse (intent, domain) labels used for prompt analytics."""
    q = (question or "").lower()
    return (
        _first_label(q, INTENT_RULES, "ANALYSIS"),
        _first_label(q, DOMAIN_RULES, "General"),
    )


def extract_entities(question: str) -> List[SemanticEntity]:
    q = (question or "").lower()
    return [SemanticEntity(text=w, type=t) for w, t in ENTITY_KEYWORDS if w in q]


class KeywordSemanticAnalyzer:
    """Default analyzer: tokenizes the query, no model calls."""

    min_keyword_length = 3

    def analyze(self, query: str) -> SemanticAnalysis:
        text = query or ""
        tokens = re.findall(r"[a-z0-9_]+", text.lower())

        seen: set[str] = set()
        keywords: List[str] = []
        for tok in tokens:
            if len(tok) < self.min_keyword_length or tok in STOP_WORDS or tok.isdigit():
                continue
            if tok not in seen:
                seen.add(tok)
                keywords.append(tok)

        intent, domain = classify_question(text)
        analysis = SemanticAnalysis(
            query=text,
            entities=extract_entities(text),
            keywords=keywords,
            intent=intent,
            domain=domain,
        )
        log.debug(
            "Analyzed query",
            extra={"keywords": len(keywords), "intent": intent, "domain": domain},
        )
        return analysis
