from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from promptcore.analyzer import SemanticAnalysis
from promptcore.schema.taxonomy import (
    COMPANIONS,
    GAME_FACT,
    GAME_KEYWORDS,
    GAME_MASTER,
    PRIMARY_FACT,
    NamePattern,
    TableKind,
    classify_table,
    first_matching,
    pattern_for,
)
from promptcore.schema.types import TableMetadata

log = logging.getLogger(__name__)

__all__ = ["TableRule", "ScoringWeights", "Selection", "RelevanceScorer"]


@dataclass(frozen=True)
class TableRule:
    """
    A query-keyword trigger bound to a table-name pattern.

    Fires when the query contains any of `query_any` (or `query_any` is empty)
    and none of `query_none`, and the table name matches `table`.
    """

    name: str
    table: NamePattern
    weight: float = 0.0
    query_any: Tuple[str, ...] = ()
    query_none: Tuple[str, ...] = ()

    def applies(self, lower_query: str, table_name: str) -> bool:
        if self.query_any and not any(k in lower_query for k in self.query_any):
            return False
        if any(k in lower_query for k in self.query_none):
            return False
        return self.table.matches(table_name)


DEPOSIT_TOP_PLAYER = ("deposit", "top", "player")

DEFAULT_BASE_WEIGHTS: Dict[str, float] = {
    TableKind.PRIMARY_FACT.value: 0.9,
    TableKind.PLAYER_DIMENSION.value: 0.6,
    TableKind.GAME_FACT.value: 0.7,
    TableKind.GAME_MASTER.value: 0.5,
    TableKind.LOOKUP.value: 0.4,
    TableKind.OTHER.value: 0.0,
}

DEFAULT_BOOSTS: Tuple[TableRule, ...] = (
    # game topic
    TableRule("game_fact", GAME_FACT, 0.9, GAME_KEYWORDS),
    TableRule("game_master", GAME_MASTER, 0.8, GAME_KEYWORDS),
    TableRule("game_primary_fact", PRIMARY_FACT, 0.3, GAME_KEYWORDS),
    # entity topics
    TableRule("deposit_player_fact", PRIMARY_FACT, 0.8, DEPOSIT_TOP_PLAYER),
    TableRule("player_table", NamePattern(("players",)), 0.6, ("player",)),
    TableRule("bonus_table", NamePattern(("bonus",)), 0.7, ("bonus",)),
    TableRule("country_table", NamePattern(("countries",)), 0.6, ("country",)),
    TableRule(
        "brand_table",
        NamePattern(("whitelabels", "daily_actions")),
        0.6,
        ("brand", "whitelabel"),
    ),
    # penalties
    TableRule(
        "bonus_off_topic",
        NamePattern(("bonus",)),
        -0.8,
        DEPOSIT_TOP_PLAYER,
        ("bonus",),
    ),
    TableRule("games_off_topic", NamePattern(("games",)), -0.5, (), GAME_KEYWORDS),
)

DEFAULT_KEYWORD_SCAN: Tuple[TableRule, ...] = (
    TableRule("scan_game_fact", GAME_FACT, query_any=GAME_KEYWORDS),
    TableRule("scan_game_master", GAME_MASTER, query_any=GAME_KEYWORDS),
    TableRule("scan_primary_fact", PRIMARY_FACT),
    TableRule("scan_players", NamePattern(("players",)), query_any=("player",)),
    TableRule("scan_countries", NamePattern(("countries",)), query_any=("country",)),
    TableRule("scan_currencies", NamePattern(("currencies",)), query_any=("currency",)),
    TableRule(
        "scan_whitelabels",
        NamePattern(("whitelabels",)),
        query_any=("brand", "whitelabel"),
    ),
)

MAX_TABLES = 7

DEFAULT_SUBSET: Tuple[NamePattern, ...] = (
    PRIMARY_FACT,
    NamePattern(("players",)),
    NamePattern(("countries",)),
)


@dataclass(frozen=True)
class ScoringWeights:
    """All relevance knobs; defaults reproduce the production heuristics."""

    base: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_BASE_WEIGHTS))
    boosts: Tuple[TableRule, ...] = DEFAULT_BOOSTS
    keyword_scan: Tuple[TableRule, ...] = DEFAULT_KEYWORD_SCAN
    default_subset: Tuple[NamePattern, ...] = DEFAULT_SUBSET
    companions: Dict[str, str] = field(
        default_factory=lambda: {k.value: v.value for k, v in COMPANIONS.items()}
    )

    entity_match: float = 0.8
    keyword_match: float = 0.2
    threshold: float = 0.4
    max_tables: int = MAX_TABLES
    fallback_table_count: int = 3

    @classmethod
    def from_dict(cls, raw: Optional[Mapping[str, Any]]) -> "ScoringWeights":
        """Overlay a (YAML-sourced) mapping on top of the defaults."""
        w = cls()
        if not raw:
            return w

        base = dict(w.base)
        for kind, value in (raw.get("base") or {}).items():
            if kind not in base:
                raise ValueError(f"Unknown table kind in scoring.base: {kind}")
            base[kind] = float(value)

        overrides = {str(k): float(v) for k, v in (raw.get("boosts") or {}).items()}
        known = {b.name for b in w.boosts}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown boost names in scoring.boosts: {sorted(unknown)}")
        boosts = tuple(
            replace(b, weight=overrides[b.name]) if b.name in overrides else b
            for b in w.boosts
        )

        subset = w.default_subset
        if raw.get("default_subset"):
            subset = tuple(NamePattern.from_dict(p) for p in raw["default_subset"])

        companions = dict(w.companions)
        companions.update({str(k): str(v) for k, v in (raw.get("companions") or {}).items()})

        max_tables = int(raw.get("max_tables", w.max_tables))
        if not 1 <= max_tables <= MAX_TABLES:
            raise ValueError(
                f"scoring.max_tables must be between 1 and {MAX_TABLES}, got {max_tables}"
            )

        return replace(
            w,
            base=base,
            boosts=boosts,
            default_subset=subset,
            companions=companions,
            entity_match=float(raw.get("entity_match", w.entity_match)),
            keyword_match=float(raw.get("keyword_match", w.keyword_match)),
            threshold=float(raw.get("threshold", w.threshold)),
            max_tables=max_tables,
            fallback_table_count=int(
                raw.get("fallback_table_count", w.fallback_table_count)
            ),
        )


@dataclass(frozen=True)
class Selection:
    tables: List[TableMetadata]
    scores: Dict[str, float]
    strategy: str
    forced: List[str] = field(default_factory=list)


class RelevanceScorer:
    """Weighted table relevance with keyword and default fallbacks."""

    def __init__(self, weights: ScoringWeights | None = None) -> None:
        self.weights = weights or ScoringWeights()

    # ---------------------------- scoring ----------------------------
    def score_table(
        self,
        table: TableMetadata,
        lower_query: str,
        analysis: Optional[SemanticAnalysis] = None,
    ) -> float:
        w = self.weights
        name = table.name.lower()
        score = w.base.get(classify_table(name).value, 0.0)

        penalized = False
        for rule in w.boosts:
            if rule.applies(lower_query, name):
                score += rule.weight
                penalized = penalized or rule.weight < 0

        # semantic signals never lift a table the query steers away from
        if analysis is not None and not penalized:
            if any(
                e.type == "table" and e.text and e.text.lower() in name
                for e in analysis.entities
            ):
                score += w.entity_match
            for kw in analysis.keywords:
                if kw and kw.lower() in name:
                    score += w.keyword_match

        return max(0.0, min(1.0, score))

    def score_all(
        self,
        tables: Sequence[TableMetadata],
        query: str,
        analysis: Optional[SemanticAnalysis] = None,
    ) -> Dict[str, float]:
        lower_query = (query or "").lower()
        return {t.name: self.score_table(t, lower_query, analysis) for t in tables}

    # ---------------------------- selection ----------------------------
    def keyword_scan(self, tables: Sequence[TableMetadata], lower_query: str) -> List[TableMetadata]:
        found = [
            t
            for t in tables
            if any(r.applies(lower_query, t.name) for r in self.weights.keyword_scan)
        ]
        return found[: self.weights.max_tables]

    def default_subset(self, tables: Sequence[TableMetadata]) -> List[TableMetadata]:
        picked: List[TableMetadata] = []
        for pattern in self.weights.default_subset:
            t = first_matching(tables, pattern)
            if t is not None and t not in picked:
                picked.append(t)
        return picked

    def apply_companions(
        self, selected: List[TableMetadata], catalogue: Sequence[TableMetadata]
    ) -> List[str]:
        """Append missing companion tables in place; returns the names added."""
        forced: List[str] = []
        kinds = {classify_table(t.name).value for t in selected}
        for fact, companion in self.weights.companions.items():
            if fact not in kinds or companion in kinds:
                continue
            pattern = pattern_for(TableKind(companion))
            extra = first_matching(catalogue, pattern) if pattern else None
            if extra is None or extra in selected:
                continue
            if len(selected) >= self.weights.max_tables:
                log.info(
                    "Companion table skipped, selection is full",
                    extra={"table": extra.name, "cap": self.weights.max_tables},
                )
                continue
            selected.append(extra)
            kinds.add(companion)
            forced.append(extra.name)
        return forced

    def select(
        self,
        tables: Sequence[TableMetadata],
        query: str,
        analysis: Optional[SemanticAnalysis] = None,
    ) -> Selection:
        w = self.weights
        if not tables:
            return Selection(tables=[], scores={}, strategy="empty")

        lower_query = (query or "").strip().lower()
        scores = self.score_all(tables, lower_query, analysis)

        if not lower_query:
            chosen = self.default_subset(tables)
            strategy = "default"
        else:
            kept = [t for t in tables if scores[t.name] > w.threshold]
            # sorted() is stable: ties keep catalogue order
            chosen = sorted(kept, key=lambda t: -scores[t.name])
            strategy = "scored"
            if not chosen:
                chosen = self.keyword_scan(tables, lower_query)
                strategy = "keyword"
            if not chosen:
                chosen = self.default_subset(tables)
                strategy = "default"

        if not chosen:
            chosen = list(tables[: w.fallback_table_count])
            strategy = "fallback"

        chosen = chosen[: w.max_tables]
        forced = self.apply_companions(chosen, tables)

        log.debug(
            "Relevance selection",
            extra={
                "strategy": strategy,
                "selected": [t.name for t in chosen],
                "forced": forced,
            },
        )
        return Selection(tables=chosen, scores=scores, strategy=strategy, forced=forced)

