from typing import List, Protocol

from promptcore.schema.types import TableMetadata


class SchemaCatalog(Protocol):
    """Source of the full table catalogue for one database."""

    name: str

    def get_schema(self) -> List[TableMetadata]:
        """All tables with their columns, in a stable order."""
