from __future__ import annotations

from adapters.metrics.base import BuildStatus, Metrics


class NoOpMetrics(Metrics):
    def observe_stage_duration_ms(self, *, stage: str, dt_ms: float) -> None:
        return

    def inc_stage_call(self, *, stage: str, ok: bool) -> None:
        return

    def inc_stage_error(self, *, stage: str, error_code: str) -> None:
        return

    def inc_fallback(self, *, stage: str, reason: str) -> None:
        return

    def inc_prompt_build(self, *, status: BuildStatus) -> None:
        return

    def inc_cache_event(self, *, hit: bool) -> None:
        return
