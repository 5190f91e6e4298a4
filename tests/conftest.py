import os
from pathlib import Path
from typing import List

import pytest
from dotenv import load_dotenv

from adapters.catalog.static import StaticCatalog
from adapters.store.memory import InMemoryFeedbackStore, InMemoryPromptLog, InMemoryTemplateStore
from app.main import app
from app.security import require_api_key
from app.services.prompt_service import PromptService
from app.settings import Settings
from promptcore.learning.adjuster import FeedbackLearningAdjuster
from promptcore.pipeline import PromptPipeline
from promptcore.prompts.assembler import PromptAssembler
from promptcore.prompts.templates import TemplateManager
from promptcore.schema.types import ColumnMetadata, TableMetadata

# Load .env once for tests
ROOT = Path(__file__).resolve().parents[1]
load_dotenv(os.path.join(ROOT, ".env"))

DEMO_SCHEMA = ROOT / "configs" / "demo_schema.yaml"
DEMO_CONFIG = ROOT / "configs" / "prompting.yaml"


@pytest.fixture(autouse=True)
def disable_api_key_auth():
    """Disable X-API-Key auth for tests."""
    prev = app.dependency_overrides.get(require_api_key)
    app.dependency_overrides[require_api_key] = lambda: None
    try:
        yield
    finally:
        if prev is None:
            app.dependency_overrides.pop(require_api_key, None)
        else:
            app.dependency_overrides[require_api_key] = prev


@pytest.fixture
def demo_tables() -> List[TableMetadata]:
    return StaticCatalog.from_yaml(str(DEMO_SCHEMA)).get_schema()


@pytest.fixture
def many_tables(demo_tables) -> List[TableMetadata]:
    """The demo catalogue padded to 20 tables with unrelated ones."""
    filler = [
        TableMetadata(
            name=f"tbl_Audit_{i}",
            columns=(ColumnMetadata("AuditID", "int", is_primary_key=True),),
        )
        for i in range(20 - len(demo_tables))
    ]
    return filler[:6] + list(demo_tables) + filler[6:]


class FakeSampler:
    def __init__(self, values=None, exc: Exception | None = None):
        self.values = values or ["Active", "Blocked"]
        self.exc = exc
        self.calls = []

    def sample_distinct_values(self, table, column, *, schema=None, limit=10, timeout=2.0):
        self.calls.append((table, column, schema, limit, timeout))
        if self.exc is not None:
            raise self.exc
        return list(self.values)


class BrokenTemplateStore:
    """A template store whose backend is unreachable."""

    def get_template(self, name, version=None):
        raise ConnectionError("template store unreachable")

    def find_template(self, name, version):
        raise ConnectionError("template store unreachable")

    def increment_usage(self, template_id):
        raise ConnectionError("template store unreachable")

    def save(self, template):
        raise ConnectionError("template store unreachable")

    def list_templates(self):
        raise ConnectionError("template store unreachable")


class BrokenFeedbackStore:
    def append_feedback(self, entry):
        raise ConnectionError("feedback store unreachable")

    def query_feedback(self, pattern=None, limit=None):
        raise ConnectionError("feedback store unreachable")


@pytest.fixture
def fake_sampler():
    return FakeSampler()


@pytest.fixture
def memory_service(demo_tables):
    """PromptService wired to in-memory stores over the demo catalogue."""
    log_sink = InMemoryPromptLog()
    pipeline = PromptPipeline(
        catalog=StaticCatalog(demo_tables),
        assembler=PromptAssembler(
            templates=TemplateManager(InMemoryTemplateStore()),
            log_sink=log_sink,
        ),
    )
    adjuster = FeedbackLearningAdjuster(InMemoryFeedbackStore())
    return PromptService(settings=Settings(), pipeline=pipeline, adjuster=adjuster)
