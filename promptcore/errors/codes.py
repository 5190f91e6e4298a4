from enum import Enum


class ErrorKind(str, Enum):
    LOOKUP_MISS = "LOOKUP_MISS"
    UPSTREAM_DEPENDENCY_FAILURE = "UPSTREAM_DEPENDENCY_FAILURE"
    MALFORMED_INPUT = "MALFORMED_INPUT"
    INTERNAL = "INTERNAL"


class ErrorCode(str, Enum):
    # --- Lookup ---
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"

    # --- Collaborators ---
    CATALOG_FAILED = "CATALOG_FAILED"
    ANALYZER_FAILED = "ANALYZER_FAILED"
    SAMPLER_FAILED = "SAMPLER_FAILED"
    TEMPLATE_STORE_FAILED = "TEMPLATE_STORE_FAILED"
    FEEDBACK_STORE_FAILED = "FEEDBACK_STORE_FAILED"
    LOG_SINK_FAILED = "LOG_SINK_FAILED"

    # --- Input ---
    EMPTY_QUERY = "EMPTY_QUERY"
    EMPTY_SCHEMA = "EMPTY_SCHEMA"

    # --- Internal ---
    SCORING_FAILED = "SCORING_FAILED"
    ASSEMBLY_FAILED = "ASSEMBLY_FAILED"
    LEARNING_FAILED = "LEARNING_FAILED"
