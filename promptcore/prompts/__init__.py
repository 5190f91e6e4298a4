"""Prompt templates, assembly and generation analytics."""

from .types import (
    PromptTemplate,
    PromptSection,
    PromptDetails,
    PromptGenerationRecord,
)

__all__ = [
    "PromptTemplate",
    "PromptSection",
    "PromptDetails",
    "PromptGenerationRecord",
]
