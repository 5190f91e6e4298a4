from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PromptTemplate:
    name: str
    version: str
    content: str
    description: str = ""
    is_active: bool = True
    created_by: str = "System"
    id: Optional[int] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None
    usage_count: int = 0
    parameters: Optional[str] = None

    def with_changes(self, **changes: Any) -> "PromptTemplate":
        return replace(self, **changes)


@dataclass(frozen=True)
class PromptSection:
    name: str
    title: str
    content: str
    type: str
    order: int
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PromptDetails:
    full_prompt: str
    template_name: str
    template_version: str
    sections: List[PromptSection]
    variables: Dict[str, str]
    token_count: int
    generated_at: datetime = field(default_factory=utcnow)

    def section(self, name: str) -> Optional[PromptSection]:
        for s in self.sections:
            if s.name == name:
                return s
        return None


@dataclass(frozen=True)
class PromptGenerationRecord:
    """Audit row written to the prompt log sink after every successful build."""

    user_query: str
    generated_prompt: str
    template_name: str
    template_version: str
    intent: str
    domain: str
    entities: List[str]
    tables_used: List[str]
    token_count: int
    confidence_score: float
    cost_estimate: float
    request_id: str
    user_id: str = "system"
    time_context: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)


def estimate_tokens(text: str) -> int:
    """ceil(len/4); a rough GPT-style estimate."""
    n = len(text or "")
    return (n + 3) // 4
