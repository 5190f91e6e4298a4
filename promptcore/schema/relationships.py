from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence

from promptcore.analyzer import SemanticAnalysis
from promptcore.schema.types import ColumnMetadata, RelationshipInfo, TableMetadata

GENERIC_TERMS = frozenset({"data", "info", "value", "item", "record", "entry"})
TABLE_PREFIXES = ("tbl_",)


def _bare_name(table_name: str) -> str:
    n = table_name.lower()
    for p in TABLE_PREFIXES:
        if n.startswith(p):
            n = n[len(p):]
    return n


def _names_entity(table_name: str, entity: str) -> bool:
    """`daily_actions_players` names `player`; `games` names `game`."""
    bare = _bare_name(table_name)
    for candidate in (entity, entity + "s"):
        if bare == candidate or bare.endswith("_" + candidate):
            return True
    return False


def _target_column(target: TableMetadata, column: ColumnMetadata) -> str:
    pk = target.primary_key
    if pk is not None:
        return pk.name
    same = target.column(column.name)
    return same.name if same is not None else "Id"


def _resolve_target(
    source: TableMetadata, column: ColumnMetadata, tables: Sequence[TableMetadata]
) -> Optional[TableMetadata]:
    entity = column.name.lower()[:-2].rstrip("_")
    if not entity:
        return None
    for t in tables:
        if t is source:
            continue
        if _names_entity(t.name, entity):
            return t
    # fall back to any table that owns this column as its key
    for t in tables:
        if t is source:
            continue
        pk = t.primary_key
        if pk is not None and pk.name.lower() == column.name.lower():
            return t
    return None


def infer_relationships(tables: Sequence[TableMetadata]) -> List[RelationshipInfo]:
    """Many-to-one links from `<Entity>Id` columns (or declared FKs) to the owning table."""
    found: List[RelationshipInfo] = []
    seen: set[tuple[str, str, str]] = set()
    for source in tables:
        for col in source.columns:
            lowered = col.name.lower()
            if lowered == "id" or not lowered.endswith("id"):
                continue
            if col.is_primary_key and not col.is_foreign_key:
                continue
            target = _resolve_target(source, col, tables)
            if target is None:
                continue
            key = (source.name, col.name, target.name)
            if key in seen:
                continue
            seen.add(key)
            found.append(
                RelationshipInfo(
                    from_table=source.name,
                    to_table=target.name,
                    from_column=col.name,
                    to_column=_target_column(target, col),
                    cardinality="ManyToOne",
                    confidence=0.9 if col.is_foreign_key else 0.8,
                )
            )
    return found


def suggest_joins(relationships: Sequence[RelationshipInfo]) -> List[str]:
    return [r.join_condition for r in relationships]


def to_business_term(column_name: str) -> str:
    """`NetGamingRevenue` / `net_gaming_revenue` -> `net gaming revenue`."""
    spaced = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", " ", column_name)
    return " ".join(w for w in re.split(r"[\s_]+", spaced.lower()) if w)


def column_mappings(tables: Sequence[TableMetadata]) -> Dict[str, str]:
    mappings: Dict[str, str] = {}
    for t in tables:
        for c in t.columns:
            term = to_business_term(c.name)
            if term and term not in mappings:
                mappings[term] = f"{t.name}.{c.name}"
    return mappings


def business_terms(analysis: Optional[SemanticAnalysis]) -> List[str]:
    if analysis is None:
        return []
    out: List[str] = []
    for kw in analysis.keywords:
        k = kw.lower()
        if len(k) > 3 and k not in GENERIC_TERMS and k not in out:
            out.append(k)
    return out
