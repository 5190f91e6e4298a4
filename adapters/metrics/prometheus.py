from __future__ import annotations

from prometheus_client import Counter, Histogram
from promptcore.prom import REGISTRY

from adapters.metrics.base import BuildStatus, Metrics

# -----------------------------------------------------------------------------
# Stage-level metrics
# -----------------------------------------------------------------------------
stage_duration_ms = Histogram(
    "stage_duration_ms",
    "Duration (ms) of each prompt pipeline stage",
    ["stage"],
    buckets=(0.5, 1, 2, 5, 10, 20, 50, 100, 200, 500, 1000, 2000, 5000),
    registry=REGISTRY,
)

stage_calls_total = Counter(
    "stage_calls_total",
    "Count of stage calls labeled by stage and ok",
    ["stage", "ok"],
    registry=REGISTRY,
)

stage_errors_total = Counter(
    "stage_errors_total",
    "Count of stage errors labeled by stage and error_code",
    ["stage", "error_code"],
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Degradation metrics
# -----------------------------------------------------------------------------
stage_fallbacks_total = Counter(
    "stage_fallbacks_total",
    "Count of fallbacks taken labeled by stage and reason",
    ["stage", "reason"],
    registry=REGISTRY,
)

prompt_builds_total = Counter(
    "prompt_builds_total",
    "Total prompt builds by outcome",
    ["status"],
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Learning insights cache
# -----------------------------------------------------------------------------
cache_events_total = Counter(
    "cache_events_total",
    "Insights cache hit/miss events",
    ["hit"],
    registry=REGISTRY,
)


class PrometheusMetrics(Metrics):
    def observe_stage_duration_ms(self, *, stage: str, dt_ms: float) -> None:
        stage_duration_ms.labels(stage=stage).observe(float(dt_ms))

    def inc_stage_call(self, *, stage: str, ok: bool) -> None:
        stage_calls_total.labels(stage=stage, ok=("true" if ok else "false")).inc()

    def inc_stage_error(self, *, stage: str, error_code: str) -> None:
        stage_errors_total.labels(stage=stage, error_code=str(error_code)).inc()

    def inc_fallback(self, *, stage: str, reason: str) -> None:
        stage_fallbacks_total.labels(stage=stage, reason=str(reason)).inc()

    def inc_prompt_build(self, *, status: BuildStatus) -> None:
        prompt_builds_total.labels(status=status).inc()

    def inc_cache_event(self, *, hit: bool) -> None:
        cache_events_total.labels(hit=("true" if hit else "false")).inc()


# -----------------------------------------------------------------------------
# Label priming to keep /metrics stable
# -----------------------------------------------------------------------------
for status in ("ok", "fallback"):
    prompt_builds_total.labels(status=status).inc(0)

for hit in ("true", "false"):
    cache_events_total.labels(hit=hit).inc(0)

for stage in ("catalog", "analyzer", "relevance", "template", "describe", "assemble"):
    for ok in ("true", "false"):
        stage_calls_total.labels(stage=stage, ok=ok).inc(0)

for stage, reason in (
    ("relevance", "keyword"),
    ("relevance", "default"),
    ("relevance", "fallback"),
    ("template", "default"),
    ("assemble", "exception"),
):
    stage_fallbacks_total.labels(stage=stage, reason=reason).inc(0)
