from typing import List, Optional, Protocol


class ValueSampler(Protocol):
    """Reads a handful of distinct literals from a live column."""

    dialect: str

    def sample_distinct_values(
        self,
        table: str,
        column: str,
        *,
        schema: Optional[str] = None,
        limit: int = 10,
        timeout: float = 2.0,
    ) -> List[str]:
        """Up to `limit` non-null distinct values; raise on failure or timeout."""
