from __future__ import annotations

from promptcore.errors.codes import ErrorCode


class PromptCoreError(Exception):
    """Base for the few errors the core lets escape (explicit writes only)."""

    code: ErrorCode = ErrorCode.ASSEMBLY_FAILED

    def __init__(self, message: str, *, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class TemplateNotFound(PromptCoreError):
    code = ErrorCode.TEMPLATE_NOT_FOUND


class TemplateStoreError(PromptCoreError):
    code = ErrorCode.TEMPLATE_STORE_FAILED
