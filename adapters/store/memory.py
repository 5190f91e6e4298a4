from __future__ import annotations

from dataclasses import replace
from itertools import count
from typing import Dict, List, Optional, Tuple

from promptcore.learning.types import FeedbackEntry
from promptcore.prompts.types import PromptGenerationRecord, PromptTemplate


class InMemoryTemplateStore:
    """Process-local template store; used for tests and the demo config."""

    def __init__(self, templates: Optional[List[PromptTemplate]] = None) -> None:
        self._rows: Dict[Tuple[str, str], PromptTemplate] = {}
        self._ids = count(1)
        for t in templates or []:
            self.save(t)

    def get_template(self, name: str, version: Optional[str] = None) -> Optional[PromptTemplate]:
        candidates = [
            t
            for t in self._rows.values()
            if t.name == name and t.is_active and (version is None or t.version == version)
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda t: t.created_at)

    def find_template(self, name: str, version: str) -> Optional[PromptTemplate]:
        return self._rows.get((name, version))

    def increment_usage(self, template_id: int) -> None:
        for key, t in self._rows.items():
            if t.id == template_id:
                self._rows[key] = replace(t, usage_count=t.usage_count + 1)
                return

    def save(self, template: PromptTemplate) -> PromptTemplate:
        key = (template.name, template.version)
        existing = self._rows.get(key)
        if template.id is None:
            template = replace(template, id=existing.id if existing else next(self._ids))
        self._rows[key] = template
        return template

    def list_templates(self) -> List[PromptTemplate]:
        active = [t for t in self._rows.values() if t.is_active]
        active.sort(key=lambda t: t.created_at, reverse=True)
        active.sort(key=lambda t: t.name)
        return active


class InMemoryPromptLog:
    def __init__(self) -> None:
        self.records: List[PromptGenerationRecord] = []

    def log_prompt_generation(self, record: PromptGenerationRecord) -> None:
        self.records.append(record)


class InMemoryFeedbackStore:
    def __init__(self, entries: Optional[List[FeedbackEntry]] = None) -> None:
        self.entries: List[FeedbackEntry] = list(entries or [])

    def append_feedback(self, entry: FeedbackEntry) -> None:
        self.entries.append(entry)

    def query_feedback(
        self, pattern: Optional[str] = None, limit: Optional[int] = None
    ) -> List[FeedbackEntry]:
        rows = [e for e in self.entries if pattern is None or e.category == pattern]
        rows.sort(key=lambda e: e.created_at, reverse=True)
        return rows[:limit] if limit is not None else rows
