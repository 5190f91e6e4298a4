from __future__ import annotations

import json
import logging
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from promptcore.learning.types import FeedbackEntry
from promptcore.prompts.types import PromptGenerationRecord, PromptTemplate

log = logging.getLogger(__name__)

_DDL = """
CREATE TABLE IF NOT EXISTS prompt_templates (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    version TEXT NOT NULL,
    content TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    is_active INTEGER NOT NULL DEFAULT 1,
    created_by TEXT NOT NULL DEFAULT 'System',
    created_at TEXT NOT NULL,
    updated_at TEXT,
    usage_count INTEGER NOT NULL DEFAULT 0,
    parameters TEXT,
    UNIQUE (name, version)
);
CREATE TABLE IF NOT EXISTS prompt_generation_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    request_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    user_query TEXT NOT NULL,
    generated_prompt TEXT NOT NULL,
    template_name TEXT NOT NULL,
    template_version TEXT NOT NULL,
    intent TEXT NOT NULL,
    domain TEXT NOT NULL,
    entities TEXT NOT NULL,
    tables_used TEXT NOT NULL,
    token_count INTEGER NOT NULL,
    confidence_score REAL NOT NULL,
    cost_estimate REAL NOT NULL,
    time_context TEXT,
    created_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS feedback_entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    original_query TEXT NOT NULL,
    generated_sql TEXT NOT NULL,
    rating INTEGER NOT NULL,
    category TEXT NOT NULL,
    user_id TEXT NOT NULL,
    comments TEXT NOT NULL DEFAULT '',
    feedback_type TEXT NOT NULL,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS ix_feedback_category ON feedback_entries (category, created_at);
"""

_TEMPLATE_COLS = (
    "id, name, version, content, description, is_active, created_by, "
    "created_at, updated_at, usage_count, parameters"
)


def _ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class SQLiteStore:
    """
    Templates, prompt-generation logs and feedback in one SQLite file.

    Implements TemplateStore, PromptLogSink and FeedbackStore. A single
    connection is shared and serialized with a lock so ":memory:" works too.
    """

    def __init__(self, path: str) -> None:
        self.path = path if path == ":memory:" else str(Path(path).resolve())
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self.path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        with self._lock:
            self._conn.executescript(_DDL)
        log.info("SQLiteStore initialized at: %s", self.path)

    def close(self) -> None:
        self._conn.close()

    # ---------------------------- templates ----------------------------
    @staticmethod
    def _template(row: sqlite3.Row) -> PromptTemplate:
        return PromptTemplate(
            id=row["id"],
            name=row["name"],
            version=row["version"],
            content=row["content"],
            description=row["description"],
            is_active=bool(row["is_active"]),
            created_by=row["created_by"],
            created_at=_dt(row["created_at"]),
            updated_at=_dt(row["updated_at"]),
            usage_count=row["usage_count"],
            parameters=row["parameters"],
        )

    def get_template(self, name: str, version: Optional[str] = None) -> Optional[PromptTemplate]:
        sql = f"SELECT {_TEMPLATE_COLS} FROM prompt_templates WHERE name = ? AND is_active = 1"
        params: list = [name]
        if version is not None:
            sql += " AND version = ?"
            params.append(version)
        sql += " ORDER BY created_at DESC LIMIT 1"
        with self._lock:
            row = self._conn.execute(sql, params).fetchone()
        return self._template(row) if row else None

    def find_template(self, name: str, version: str) -> Optional[PromptTemplate]:
        with self._lock:
            row = self._conn.execute(
                f"SELECT {_TEMPLATE_COLS} FROM prompt_templates WHERE name = ? AND version = ?",
                (name, version),
            ).fetchone()
        return self._template(row) if row else None

    def increment_usage(self, template_id: int) -> None:
        with self._lock, self._conn:
            self._conn.execute(
                "UPDATE prompt_templates SET usage_count = usage_count + 1 WHERE id = ?",
                (template_id,),
            )

    def save(self, template: PromptTemplate) -> PromptTemplate:
        with self._lock, self._conn:
            self._conn.execute(
                """
                INSERT INTO prompt_templates
                    (name, version, content, description, is_active, created_by,
                     created_at, updated_at, usage_count, parameters)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (name, version) DO UPDATE SET
                    content = excluded.content,
                    description = excluded.description,
                    is_active = excluded.is_active,
                    updated_at = excluded.updated_at,
                    parameters = excluded.parameters
                """,
                (
                    template.name,
                    template.version,
                    template.content,
                    template.description,
                    int(template.is_active),
                    template.created_by,
                    _ts(template.created_at),
                    _ts(template.updated_at),
                    template.usage_count,
                    template.parameters,
                ),
            )
        saved = self.find_template(template.name, template.version)
        assert saved is not None
        return saved

    def list_templates(self) -> List[PromptTemplate]:
        with self._lock:
            rows = self._conn.execute(
                f"SELECT {_TEMPLATE_COLS} FROM prompt_templates WHERE is_active = 1 "
                "ORDER BY name, created_at DESC"
            ).fetchall()
        return [self._template(r) for r in rows]

    # ---------------------------- prompt log ----------------------------
    def log_prompt_generation(self, record: PromptGenerationRecord) -> None:
        with self._lock, self._conn:
            self._conn.execute(
                """
                INSERT INTO prompt_generation_logs
                    (request_id, user_id, user_query, generated_prompt, template_name,
                     template_version, intent, domain, entities, tables_used,
                     token_count, confidence_score, cost_estimate, time_context, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.request_id,
                    record.user_id,
                    record.user_query,
                    record.generated_prompt,
                    record.template_name,
                    record.template_version,
                    record.intent,
                    record.domain,
                    json.dumps(record.entities),
                    json.dumps(record.tables_used),
                    record.token_count,
                    record.confidence_score,
                    record.cost_estimate,
                    record.time_context,
                    _ts(record.created_at),
                ),
            )

    def count_prompt_logs(self) -> int:
        with self._lock:
            return int(self._conn.execute("SELECT COUNT(*) FROM prompt_generation_logs").fetchone()[0])

    # ---------------------------- feedback ----------------------------
    def append_feedback(self, entry: FeedbackEntry) -> None:
        with self._lock, self._conn:
            self._conn.execute(
                """
                INSERT INTO feedback_entries
                    (original_query, generated_sql, rating, category, user_id,
                     comments, feedback_type, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.original_query,
                    entry.generated_sql,
                    entry.rating,
                    entry.category,
                    entry.user_id,
                    entry.comments,
                    entry.feedback_type,
                    _ts(entry.created_at),
                ),
            )

    def query_feedback(
        self, pattern: Optional[str] = None, limit: Optional[int] = None
    ) -> List[FeedbackEntry]:
        sql = (
            "SELECT original_query, generated_sql, rating, category, user_id, "
            "comments, feedback_type, created_at FROM feedback_entries"
        )
        params: list = []
        if pattern is not None:
            sql += " WHERE category = ?"
            params.append(pattern)
        sql += " ORDER BY created_at DESC, id DESC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))
        with self._lock:
            rows = self._conn.execute(sql, params).fetchall()
        return [
            FeedbackEntry(
                original_query=r["original_query"],
                generated_sql=r["generated_sql"],
                rating=r["rating"],
                category=r["category"],
                user_id=r["user_id"],
                comments=r["comments"],
                feedback_type=r["feedback_type"],
                created_at=_dt(r["created_at"]),
            )
            for r in rows
        ]
