from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, cast

import yaml  # type: ignore[import-untyped]
from dotenv import load_dotenv

from adapters.catalog.base import SchemaCatalog
from adapters.metrics.base import Metrics
from adapters.metrics.noop import NoOpMetrics
from adapters.metrics.prometheus import PrometheusMetrics
from promptcore.learning.adjuster import FeedbackLearningAdjuster
from promptcore.learning.cache import InsightsCache
from promptcore.pipeline import PromptPipeline
from promptcore.prompts.assembler import PromptAssembler
from promptcore.prompts.templates import TemplateManager
from promptcore.registry import (
    ANALYZERS,
    CATALOGS,
    FEEDBACK_STORES,
    LOG_SINKS,
    SAMPLERS,
    TEMPLATE_STORES,
)
from promptcore.schema.scorer import RelevanceScorer, ScoringWeights
from promptcore.semantics.describer import SchemaDescriber

load_dotenv()


# ------------------------------ helpers ------------------------------ #
def _require_str(value: Any, *, name: str) -> str:
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValueError(f"Config {name} must be a non-empty string")
    return value.strip()


def _section(cfg: Dict[str, Any], key: str) -> Dict[str, Any]:
    raw = cfg.get(key)
    if raw is None:
        return {}
    if isinstance(raw, str):
        return {"kind": raw}
    if not isinstance(raw, dict):
        raise ValueError(f"Config {key} must be a mapping or a kind name")
    return dict(raw)


def _resolve(path: str, base: Path) -> str:
    if path == ":memory:":
        return path
    p = Path(path)
    return str(p if p.is_absolute() else (base / p).resolve())


def load_config(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as fh:
        cfg = yaml.safe_load(fh) or {}
    if not isinstance(cfg, dict):
        raise ValueError(f"Config root must be a mapping: {path}")
    return cast(Dict[str, Any], cfg)


class _Builder:
    """Builds adapters from config sections; SQLite stores are shared per file."""

    def __init__(self, base: Path) -> None:
        self.base = base
        self._shared: Dict[tuple, Any] = {}

    def _store(self, registry: Dict[str, Any], section: Dict[str, Any], *, name: str) -> Any:
        kind = (section.get("kind") or "memory").lower()
        if kind == "none":
            return None
        if kind not in registry:
            raise ValueError(f"Unknown {name} kind: {kind}")
        if kind == "sqlite":
            path = _resolve(_require_str(section.get("path"), name=f"{name}.path"), self.base)
            key = ("sqlite", path)
            if key not in self._shared:
                self._shared[key] = registry[kind](path)
            return self._shared[key]
        return registry[kind]()

    def template_store(self, section: Dict[str, Any]) -> Any:
        return self._store(TEMPLATE_STORES, section, name="templates")

    def log_sink(self, section: Dict[str, Any]) -> Any:
        return self._store(LOG_SINKS, section, name="log_sink")

    def feedback_store(self, section: Dict[str, Any]) -> Any:
        return self._store(FEEDBACK_STORES, section, name="feedback")

    def catalog(self, section: Dict[str, Any]) -> Optional[SchemaCatalog]:
        if not section:
            return None
        kind = (section.get("kind") or "static").lower()
        if kind not in CATALOGS:
            raise ValueError(f"Unknown catalog kind: {kind}")
        if kind == "postgres":
            return CATALOGS[kind](
                _require_str(section.get("dsn"), name="catalog.dsn"),
                schema=section.get("schema") or "public",
            )
        path = _resolve(_require_str(section.get("path"), name="catalog.path"), self.base)
        return CATALOGS[kind](path)

    def sampler(self, section: Dict[str, Any]) -> Any:
        kind = (section.get("kind") or "none").lower()
        if kind == "none":
            return None
        if kind not in SAMPLERS:
            raise ValueError(f"Unknown sampler kind: {kind}")
        if kind == "postgres":
            return SAMPLERS[kind](_require_str(section.get("dsn"), name="sampler.dsn"))
        path = _resolve(_require_str(section.get("path"), name="sampler.path"), self.base)
        return SAMPLERS[kind](path)


def _build_metrics(cfg: Dict[str, Any]) -> Metrics:
    kind = str(cfg.get("metrics") or "prometheus").lower()
    if kind == "prometheus":
        return PrometheusMetrics()
    if kind == "noop":
        return NoOpMetrics()
    raise ValueError(f"Unknown metrics kind: {kind}")


# ------------------------------ factory ------------------------------ #
def pipeline_from_config(
    path: str,
    *,
    catalog: Optional[SchemaCatalog] = None,
    metrics: Optional[Metrics] = None,
) -> PromptPipeline:
    """
    Build a PromptPipeline from YAML configuration (dependency-injected).
    An explicit `catalog` overrides the configured one.
    """
    cfg = load_config(path)
    builder = _Builder(Path(path).resolve().parent)
    metrics = metrics or _build_metrics(cfg)

    analyzer_kind = str(cfg.get("analyzer") or "keyword")
    if analyzer_kind not in ANALYZERS:
        raise ValueError(f"Unknown analyzer kind: {analyzer_kind}")

    describer_cfg = _section(cfg, "describer")
    describer = SchemaDescriber(
        sampler=builder.sampler(_section(cfg, "sampler")),
        sample_limit=int(describer_cfg.get("sample_limit", 10)),
        sample_timeout=float(describer_cfg.get("sample_timeout", 2.0)),
        max_columns=int(describer_cfg.get("max_columns", SchemaDescriber.MAX_COLUMNS)),
    )

    prompt_cfg = _section(cfg, "prompt")
    assembler = PromptAssembler(
        templates=TemplateManager(builder.template_store(_section(cfg, "templates"))),
        describer=describer,
        log_sink=builder.log_sink(_section(cfg, "log_sink")),
        metrics=metrics,
        template_name=str(prompt_cfg.get("template") or "sql_generation"),
    )

    return PromptPipeline(
        catalog=catalog or builder.catalog(_section(cfg, "catalog")),
        analyzer=ANALYZERS[analyzer_kind](),
        scorer=RelevanceScorer(ScoringWeights.from_dict(cfg.get("scoring"))),
        assembler=assembler,
        metrics=metrics,
    )


def adjuster_from_config(path: str) -> FeedbackLearningAdjuster:
    cfg = load_config(path)
    builder = _Builder(Path(path).resolve().parent)
    store = builder.feedback_store(_section(cfg, "feedback"))
    if store is None:
        raise ValueError("Config feedback store is required for learning")

    learning = _section(cfg, "learning")
    ttl = learning.get("cache_ttl")
    cache = InsightsCache(
        ttl=float(ttl) if ttl is not None else None,
        max_entries=int(learning.get("cache_max_entries", 256)),
        metrics=_build_metrics(cfg),
    )
    return FeedbackLearningAdjuster(store, cache=cache)
