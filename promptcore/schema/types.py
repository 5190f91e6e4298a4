from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class ColumnMetadata:
    name: str
    data_type: str = ""
    is_primary_key: bool = False
    is_foreign_key: bool = False
    is_nullable: bool = True
    business_meaning: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ColumnMetadata":
        return cls(
            name=str(raw["name"]),
            data_type=str(raw.get("data_type") or raw.get("type") or ""),
            is_primary_key=bool(raw.get("is_primary_key", False)),
            is_foreign_key=bool(raw.get("is_foreign_key", False)),
            is_nullable=bool(raw.get("is_nullable", True)),
            business_meaning=raw.get("business_meaning"),
        )


@dataclass(frozen=True)
class TableMetadata:
    """Immutable catalogue snapshot of one table."""

    name: str
    schema: str = "dbo"
    description: str = ""
    columns: Tuple[ColumnMetadata, ...] = ()

    @property
    def qualified_name(self) -> str:
        return f"{self.schema}.{self.name}" if self.schema else self.name

    @property
    def primary_key(self) -> Optional[ColumnMetadata]:
        for c in self.columns:
            if c.is_primary_key:
                return c
        return None

    def column(self, name: str) -> Optional[ColumnMetadata]:
        lowered = name.lower()
        for c in self.columns:
            if c.name.lower() == lowered:
                return c
        return None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "TableMetadata":
        return cls(
            name=str(raw["name"]),
            schema=str(raw.get("schema") or "dbo"),
            description=str(raw.get("description") or ""),
            columns=tuple(ColumnMetadata.from_dict(c) for c in raw.get("columns") or []),
        )


@dataclass(frozen=True)
class RelationshipInfo:
    from_table: str
    to_table: str
    from_column: str
    to_column: str
    cardinality: str = "ManyToOne"
    confidence: float = 0.8

    @property
    def join_condition(self) -> str:
        return f"{self.from_table}.{self.from_column} = {self.to_table}.{self.to_column}"


@dataclass(frozen=True)
class SchemaContext:
    """Per-request result of relevance selection; discarded after assembly."""

    relevant_tables: List[TableMetadata] = field(default_factory=list)
    scores: Dict[str, float] = field(default_factory=dict)
    relationships: List[RelationshipInfo] = field(default_factory=list)
    suggested_joins: List[str] = field(default_factory=list)
    column_mappings: Dict[str, str] = field(default_factory=dict)
    business_terms: List[str] = field(default_factory=list)

    # scored | keyword | default | fallback | empty
    selection_strategy: str = "scored"
    forced_tables: List[str] = field(default_factory=list)

    @property
    def table_names(self) -> List[str]:
        return [t.name for t in self.relevant_tables]
