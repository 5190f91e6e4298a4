from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Sequence

import yaml  # type: ignore[import-untyped]

from promptcore.schema.types import TableMetadata


class StaticCatalog:
    """Catalogue held in memory, usually loaded from a YAML schema file."""

    name = "static"

    def __init__(self, tables: Sequence[TableMetadata]) -> None:
        self.tables = list(tables)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "StaticCatalog":
        default_schema = raw.get("schema") or "dbo"
        tables = []
        for t in raw.get("tables") or []:
            t = dict(t)
            t.setdefault("schema", default_schema)
            tables.append(TableMetadata.from_dict(t))
        return cls(tables)

    @classmethod
    def from_yaml(cls, path: str) -> "StaticCatalog":
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(f"Schema file does not exist: {p}")
        with p.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
        return cls.from_dict(raw)

    def get_schema(self) -> List[TableMetadata]:
        return list(self.tables)
