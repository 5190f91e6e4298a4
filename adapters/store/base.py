from typing import List, Optional, Protocol

from promptcore.learning.types import FeedbackEntry
from promptcore.prompts.types import PromptGenerationRecord, PromptTemplate


class TemplateStore(Protocol):
    """Versioned prompt-template persistence."""

    def get_template(self, name: str, version: Optional[str] = None) -> Optional[PromptTemplate]:
        """Newest active template with this name (and version, if given), or None."""

    def find_template(self, name: str, version: str) -> Optional[PromptTemplate]:
        """Exact (name, version) lookup, active or not."""

    def increment_usage(self, template_id: int) -> None:
        """Bump the usage counter; unknown ids are ignored."""

    def save(self, template: PromptTemplate) -> PromptTemplate:
        """Insert or replace by (name, version); returns the stored row with its id."""

    def list_templates(self) -> List[PromptTemplate]:
        """Active templates ordered by name, newest first within a name."""


class PromptLogSink(Protocol):
    def log_prompt_generation(self, record: PromptGenerationRecord) -> None:
        """Persist one prompt-generation audit record."""


class FeedbackStore(Protocol):
    def append_feedback(self, entry: FeedbackEntry) -> None:
        """Append one feedback entry."""

    def query_feedback(
        self, pattern: Optional[str] = None, limit: Optional[int] = None
    ) -> List[FeedbackEntry]:
        """Entries newest first, optionally restricted to one pattern tag."""
