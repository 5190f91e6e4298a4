"""
Registry mapping simple string keys to concrete component classes.
Used by promptcore.factory to perform lightweight dependency injection.
"""

from typing import Any, Dict

from adapters.catalog.postgres_catalog import PostgresCatalog
from adapters.catalog.sqlite_catalog import SQLiteCatalog
from adapters.catalog.static import StaticCatalog
from adapters.sampler.postgres_sampler import PostgresSampler
from adapters.sampler.sqlite_sampler import SQLiteSampler
from adapters.store.logging_sink import LoggingPromptLog
from adapters.store.memory import InMemoryFeedbackStore, InMemoryPromptLog, InMemoryTemplateStore
from adapters.store.sqlite_store import SQLiteStore
from promptcore.analyzer import KeywordSemanticAnalyzer

CATALOGS: Dict[str, Any] = {
    "static": StaticCatalog.from_yaml,
    "sqlite": SQLiteCatalog,
    "postgres": PostgresCatalog,
}
SAMPLERS: Dict[str, Any] = {"sqlite": SQLiteSampler, "postgres": PostgresSampler}
ANALYZERS: Dict[str, Any] = {"keyword": KeywordSemanticAnalyzer}
TEMPLATE_STORES: Dict[str, Any] = {"memory": InMemoryTemplateStore, "sqlite": SQLiteStore}
LOG_SINKS: Dict[str, Any] = {
    "memory": InMemoryPromptLog,
    "sqlite": SQLiteStore,
    "logging": LoggingPromptLog,
}
FEEDBACK_STORES: Dict[str, Any] = {"memory": InMemoryFeedbackStore, "sqlite": SQLiteStore}
