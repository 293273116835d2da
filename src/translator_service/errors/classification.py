"""错误分类模块：将 HTTP 状态码和服务错误码映射到标准错误类别。

Error classification for service errors.

Translator and Speech error codes are six digits whose first three digits
are the HTTP status (401001 -> 401). The library never retries on its own;
these helpers let callers build a retry or backoff policy on top of
ServiceError.
"""

from __future__ import annotations

from enum import Enum


class ErrorClass(str, Enum):
    """Coarse error category.

    Only RATE_LIMITED, TIMEOUT, SERVER_ERROR and OVERLOADED are worth
    retrying; everything else needs a change to the request or credential.
    """

    INVALID_REQUEST = "invalid_request"
    AUTHENTICATION = "authentication"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    REQUEST_TOO_LARGE = "request_too_large"
    TIMEOUT = "timeout"
    SERVER_ERROR = "server_error"
    OVERLOADED = "overloaded"
    OTHER = "other"


_STATUS_CLASSES: dict[int, ErrorClass] = {
    400: ErrorClass.INVALID_REQUEST,
    401: ErrorClass.AUTHENTICATION,
    403: ErrorClass.PERMISSION_DENIED,
    404: ErrorClass.NOT_FOUND,
    408: ErrorClass.TIMEOUT,
    413: ErrorClass.REQUEST_TOO_LARGE,
    429: ErrorClass.RATE_LIMITED,
    503: ErrorClass.OVERLOADED,
    504: ErrorClass.TIMEOUT,
}

# Service codes whose meaning is narrower than their HTTP status
_SERVICE_CODE_CLASSES: dict[int, ErrorClass] = {
    400050: ErrorClass.REQUEST_TOO_LARGE,  # input text too long
    400077: ErrorClass.REQUEST_TOO_LARGE,  # maximum request size exceeded
}

_RETRYABLE = frozenset(
    {
        ErrorClass.RATE_LIMITED,
        ErrorClass.TIMEOUT,
        ErrorClass.SERVER_ERROR,
        ErrorClass.OVERLOADED,
    }
)


def classify_status(status_or_code: int) -> ErrorClass:
    """Classify an HTTP status or a six-digit service error code.

    Example:
        >>> classify_status(401001)
        <ErrorClass.AUTHENTICATION: 'authentication'>
        >>> classify_status(502)
        <ErrorClass.SERVER_ERROR: 'server_error'>
    """
    if status_or_code in _SERVICE_CODE_CLASSES:
        return _SERVICE_CODE_CLASSES[status_or_code]

    status = status_or_code // 1000 if status_or_code >= 100_000 else status_or_code
    if status in _STATUS_CLASSES:
        return _STATUS_CLASSES[status]
    if 400 <= status < 500:
        return ErrorClass.INVALID_REQUEST
    if 500 <= status < 600:
        return ErrorClass.SERVER_ERROR
    return ErrorClass.OTHER


def is_retryable(error_class: ErrorClass) -> bool:
    return error_class in _RETRYABLE
