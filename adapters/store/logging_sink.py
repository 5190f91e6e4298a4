from __future__ import annotations

import logging

from promptcore.prompts.types import PromptGenerationRecord

log = logging.getLogger("promptcore.audit")


class LoggingPromptLog:
    """Writes prompt-generation records to the audit logger instead of a table."""

    def __init__(self, level: int = logging.INFO) -> None:
        self.level = level

    def log_prompt_generation(self, record: PromptGenerationRecord) -> None:
        log.log(
            self.level,
            "prompt_generated",
            extra={
                "request_id": record.request_id,
                "template": record.template_name,
                "template_version": record.template_version,
                "intent": record.intent,
                "domain": record.domain,
                "tables_used": record.tables_used,
                "token_count": record.token_count,
                "confidence": record.confidence_score,
                "cost_estimate": record.cost_estimate,
            },
        )
