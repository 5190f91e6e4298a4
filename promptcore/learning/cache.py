from __future__ import annotations

import time
from typing import Dict, Optional, Tuple

from adapters.metrics.base import Metrics
from adapters.metrics.noop import NoOpMetrics
from promptcore.learning.types import LearningInsights


def insights_key(pattern: str) -> str:
    return f"insights_{pattern}"


class InsightsCache:
    """
    In-memory cache of LearningInsights keyed by pattern tag.

    `ttl=None` keeps entries until invalidated. When `max_entries` is reached
    the oldest entry is evicted. Hits and misses go to the injected Metrics.

    Shared across request threads: removals tolerate a key that another
    thread already dropped.
    """

    def __init__(
        self,
        ttl: Optional[float] = None,
        max_entries: int = 256,
        metrics: Optional[Metrics] = None,
    ) -> None:
        self.ttl = ttl
        self.max_entries = max_entries
        self.metrics = metrics or NoOpMetrics()
        self._store: Dict[str, Tuple[float, LearningInsights]] = {}

    def _expired(self, ts: float, now: float) -> bool:
        return self.ttl is not None and now - ts > self.ttl

    def get(self, pattern: str) -> Optional[LearningInsights]:
        key = insights_key(pattern)
        entry = self._store.get(key)
        if entry is None:
            self.metrics.inc_cache_event(hit=False)
            return None

        ts, insights = entry
        if self._expired(ts, time.time()):
            self._store.pop(key, None)
            self.metrics.inc_cache_event(hit=False)
            return None

        self.metrics.inc_cache_event(hit=True)
        return insights

    def put(self, pattern: str, insights: LearningInsights) -> None:
        key = insights_key(pattern)
        if key not in self._store and len(self._store) >= self.max_entries:
            snapshot = list(self._store.items())
            if snapshot:
                oldest = min(snapshot, key=lambda kv: kv[1][0])[0]
                self._store.pop(oldest, None)
        self._store[key] = (time.time(), insights)

    def invalidate(self, pattern: str) -> None:
        self._store.pop(insights_key(pattern), None)

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, pattern: object) -> bool:
        return isinstance(pattern, str) and insights_key(pattern) in self._store
