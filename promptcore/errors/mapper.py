from promptcore.errors.codes import ErrorCode, ErrorKind

# code -> (kind, http status, retryable)
ERROR_MAP = {
    ErrorCode.TEMPLATE_NOT_FOUND: (ErrorKind.LOOKUP_MISS, 404, False),
    ErrorCode.CATALOG_FAILED: (ErrorKind.UPSTREAM_DEPENDENCY_FAILURE, 503, True),
    ErrorCode.ANALYZER_FAILED: (ErrorKind.UPSTREAM_DEPENDENCY_FAILURE, 503, True),
    ErrorCode.SAMPLER_FAILED: (ErrorKind.UPSTREAM_DEPENDENCY_FAILURE, 503, True),
    ErrorCode.TEMPLATE_STORE_FAILED: (ErrorKind.UPSTREAM_DEPENDENCY_FAILURE, 503, True),
    ErrorCode.FEEDBACK_STORE_FAILED: (ErrorKind.UPSTREAM_DEPENDENCY_FAILURE, 503, True),
    ErrorCode.LOG_SINK_FAILED: (ErrorKind.UPSTREAM_DEPENDENCY_FAILURE, 503, True),
    ErrorCode.EMPTY_QUERY: (ErrorKind.MALFORMED_INPUT, 422, False),
    ErrorCode.EMPTY_SCHEMA: (ErrorKind.MALFORMED_INPUT, 422, False),
    ErrorCode.SCORING_FAILED: (ErrorKind.INTERNAL, 500, False),
    ErrorCode.ASSEMBLY_FAILED: (ErrorKind.INTERNAL, 500, False),
    ErrorCode.LEARNING_FAILED: (ErrorKind.INTERNAL, 500, False),
}


def map_error(code: ErrorCode | None) -> tuple[int, bool]:
    if code is None:
        return (500, False)
    _, status, retryable = ERROR_MAP.get(code, (ErrorKind.INTERNAL, 500, False))
    return (status, retryable)


def kind_of(code: ErrorCode | None) -> ErrorKind | None:
    if code is None:
        return None
    return ERROR_MAP.get(code, (ErrorKind.INTERNAL, 500, False))[0]
