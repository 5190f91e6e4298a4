from dataclasses import dataclass
from typing import Any, Dict, Optional, List

from promptcore.errors.codes import ErrorCode, ErrorKind
from promptcore.errors.mapper import kind_of


# =====================
# Tracing / Observability
# =====================


@dataclass(frozen=True)
class StageTrace:
    stage: str
    duration_ms: float
    summary: str = ""
    notes: Optional[Dict[str, Any]] = None

    # Optional observability fields
    token_count: Optional[int] = None
    table_count: Optional[int] = None
    fallback: bool = False


# =====================
# Stage-level contract
# =====================


@dataclass(frozen=True)
class StageResult:
    ok: bool

    data: Optional[Any] = None
    trace: Optional[StageTrace] = None

    # Human-readable error messages (debug / logs only)
    error: Optional[List[str]] = None

    # === Contract-level semantics ===
    error_code: Optional[ErrorCode] = None
    retryable: Optional[bool] = None

    # Free-form notes (internal use)
    notes: Optional[Dict[str, Any]] = None

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        return kind_of(self.error_code)
