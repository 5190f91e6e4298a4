from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.dependencies import get_prompt_service
from app.main import app
from app.security import require_api_key
from app.settings import get_settings
from promptcore.errors.codes import ErrorCode

client = TestClient(app)


@pytest.fixture
def svc(memory_service):
    app.dependency_overrides[get_prompt_service] = lambda: memory_service
    try:
        yield memory_service
    finally:
        app.dependency_overrides.pop(get_prompt_service, None)


def assert_error_shape(body: dict) -> dict:
    assert "error" in body and isinstance(body["error"], dict)
    err = body["error"]
    for key in ("code", "message", "retryable", "request_id", "extra"):
        assert key in err
    return err


def test_empty_query_is_422(svc):
    resp = client.post(app.url_path_for("build_prompt"), json={"query": "   "})

    assert resp.status_code == 422, resp.text
    err = assert_error_shape(resp.json())
    assert err["code"] == ErrorCode.EMPTY_QUERY.value
    assert err["retryable"] is False


def test_missing_template_update_is_404(svc):
    resp = client.put(
        app.url_path_for("update_template"),
        json={"name": "nope", "version": "9.9", "content": "x"},
    )

    assert resp.status_code == 404, resp.text
    assert assert_error_shape(resp.json())["code"] == ErrorCode.TEMPLATE_NOT_FOUND.value


def test_duplicate_inline_tables_is_400(svc):
    table = {"name": "t", "schema": "dbo", "columns": [{"name": "a"}]}
    resp = client.post(
        app.url_path_for("relevant_schema"), json={"query": "a", "tables": [table, table]}
    )

    assert resp.status_code == 400, resp.text
    err = assert_error_shape(resp.json())
    assert err["code"] == "duplicate_table"
    assert err["details"] == ["dbo.t"]


def test_feedback_store_failure_is_503_and_retryable(svc, monkeypatch):
    monkeypatch.setattr(svc.adjuster, "process_feedback", lambda *a, **k: None)

    resp = client.post(
        app.url_path_for("submit_feedback"),
        json={"original_prompt": "total deposits", "feedback": "positive"},
    )

    assert resp.status_code == 503, resp.text
    err = assert_error_shape(resp.json())
    assert err["retryable"] is True
    assert err["code"] == "feedback_unavailable"
    assert err["extra"]["code"] == ErrorCode.FEEDBACK_STORE_FAILED.value
    assert resp.headers.get("Retry-After") == "2"


def test_request_id_is_echoed(svc):
    resp = client.post(
        app.url_path_for("build_prompt"),
        json={"query": ""},
        headers={"X-Request-ID": "req-123"},
    )

    assert resp.json()["error"]["request_id"] == "req-123"
    assert resp.headers["X-Request-ID"] == "req-123"


def test_api_key_required_when_configured(svc, monkeypatch):
    monkeypatch.setenv("API_KEYS", "k1, k2")
    get_settings.cache_clear()
    app.dependency_overrides.pop(require_api_key, None)
    try:
        path = app.url_path_for("build_prompt")
        denied = client.post(path, json={"query": "total deposits"})
        allowed = client.post(path, json={"query": "total deposits"}, headers={"X-API-Key": "k2"})
        public = client.get(app.url_path_for("list_templates"))
    finally:
        monkeypatch.delenv("API_KEYS")
        get_settings.cache_clear()

    assert denied.status_code == 401
    assert allowed.status_code == 200
    assert public.status_code == 200
