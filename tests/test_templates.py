import pytest

from adapters.store.memory import InMemoryTemplateStore
from conftest import BrokenTemplateStore
from promptcore.errors.codes import ErrorCode
from promptcore.errors.exceptions import TemplateNotFound, TemplateStoreError
from promptcore.prompts.templates import (
    SQL_GENERATION,
    SQL_GENERATION_CONTENT,
    TemplateManager,
    default_template,
)
from promptcore.prompts.types import PromptTemplate


def make_template(name="sql_generation", version="3.0", content="Q: {question}", **kw):
    return PromptTemplate(name=name, version=version, content=content, **kw)


def test_defaults():
    t = default_template(SQL_GENERATION)
    assert t.version == "2.0"
    assert t.content == SQL_GENERATION_CONTENT

    other = default_template("summary")
    assert other.content == "Default template content for summary"
    assert other.version == "1.0"


def test_fetch_without_store_uses_default():
    r = TemplateManager().fetch(SQL_GENERATION)

    assert r.ok
    assert r.data.content == SQL_GENERATION_CONTENT
    assert r.trace.notes == {"source": "default"}


def test_fetch_from_store_counts_usage():
    store = InMemoryTemplateStore([make_template()])
    mgr = TemplateManager(store)

    r = mgr.fetch(SQL_GENERATION)

    assert r.ok
    assert r.data.version == "3.0"
    assert r.trace.notes == {"source": "store"}
    assert store.find_template(SQL_GENERATION, "3.0").usage_count == 1


def test_fetch_specific_version():
    store = InMemoryTemplateStore([make_template(version="1.0"), make_template(version="2.5")])
    r = TemplateManager(store).fetch(SQL_GENERATION, "1.0")

    assert r.data.version == "1.0"


def test_fetch_legacy_name():
    store = InMemoryTemplateStore([make_template(name="BasicQueryGeneration", version="1.0")])
    r = TemplateManager(store).fetch(SQL_GENERATION)

    assert r.ok
    assert r.data.name == "BasicQueryGeneration"


def test_inactive_template_is_skipped():
    store = InMemoryTemplateStore([make_template(is_active=False)])
    r = TemplateManager(store).fetch(SQL_GENERATION)

    assert r.data.content == SQL_GENERATION_CONTENT


def test_unreachable_store_degrades_to_default():
    r = TemplateManager(BrokenTemplateStore()).fetch(SQL_GENERATION)

    assert r.ok is False
    assert r.error_code == ErrorCode.TEMPLATE_STORE_FAILED
    assert r.retryable is True
    assert r.data.content == SQL_GENERATION_CONTENT
    assert r.trace.fallback is True


def test_list_templates_never_raises():
    assert TemplateManager(BrokenTemplateStore()).list_templates() == []
    assert TemplateManager().list_templates() == []


def test_create_resets_bookkeeping():
    store = InMemoryTemplateStore()
    saved = TemplateManager(store).create_template(make_template(id=99, usage_count=7))

    assert saved.id is not None and saved.id != 99
    assert saved.usage_count == 0


def test_update_existing():
    store = InMemoryTemplateStore([make_template(content="old")])
    mgr = TemplateManager(store)

    saved = mgr.update_template(make_template(content="new", description="v3"))

    assert saved.content == "new"
    assert saved.description == "v3"
    assert saved.updated_at is not None
    assert store.find_template(SQL_GENERATION, "3.0").content == "new"


def test_update_missing_raises_not_found():
    with pytest.raises(TemplateNotFound, match="sql_generation v9.9 not found"):
        TemplateManager(InMemoryTemplateStore()).update_template(make_template(version="9.9"))


def test_writes_propagate_store_errors():
    mgr = TemplateManager(BrokenTemplateStore())
    with pytest.raises(TemplateStoreError):
        mgr.create_template(make_template())
    with pytest.raises(TemplateStoreError):
        mgr.update_template(make_template())
    with pytest.raises(TemplateStoreError):
        TemplateManager().create_template(make_template())
