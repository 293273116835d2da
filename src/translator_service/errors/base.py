"""错误基类：提供分层错误体系和结构化错误上下文。

Base error classes for translator-service.

Provides a layered error hierarchy:
- TranslatorError: Base class for all library errors
- ValidationError: Caller input violates a documented precondition
- AuthError: Missing subscription credential
- ServiceError: Non-success response from the auth or API endpoints
- TransportError: HTTP/network errors
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from translator_service.telemetry import get_logger

if TYPE_CHECKING:
    import httpx

    from translator_service.errors.classification import ErrorClass

UNKNOWN_ERROR_CODE = 500
UNKNOWN_ERROR_MESSAGE = "Unknown error"

logger = get_logger(__name__)


@dataclass
class ErrorContext:
    """Where an error came from and what the caller can do about it."""

    field_path: str | None = None
    """Path to the problematic field (e.g., 'texts[3]')"""

    details: dict[str, Any] = field(default_factory=dict)
    """Additional details about the error"""

    source: str | None = None
    """Error source (e.g., 'validation', 'transport', 'remote')"""

    hint: str | None = None
    """Actionable hint for resolving the error"""

    def __str__(self) -> str:
        parts = (
            f"[{self.source}]" if self.source else None,
            f"at '{self.field_path}'" if self.field_path else None,
            f"(hint: {self.hint})" if self.hint else None,
        )
        return " ".join(p for p in parts if p)


class TranslatorError(Exception):
    """Base class for all translator-service errors.

    Catching TranslatorError covers every failure the translator and
    speech clients raise.

    Attributes:
        message: What went wrong
        context: Source, field path, details and hint
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message."""
        ctx_str = str(self.context)
        if ctx_str:
            return f"{self.message} {ctx_str}"
        return self.message

    def with_hint(self, hint: str) -> TranslatorError:
        """Add a hint to this error."""
        self.context.hint = hint
        return self


class ValidationError(TranslatorError):
    """Caller input violates a documented precondition.

    Raised when:
    - A required argument is missing
    - An input array is empty or exceeds the element limit
    - A single text exceeds the character limit

    Always raised before any network call.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        field: str | None = None,
        expected: Any = None,
        actual: Any = None,
    ) -> None:
        ctx = context or ErrorContext(source="validation")
        if field:
            ctx.field_path = field
        if expected is not None:
            ctx.details["expected"] = expected
        if actual is not None:
            ctx.details["actual"] = actual
        super().__init__(message, ctx)
        self.field = field
        self.expected = expected
        self.actual = actual


class AuthError(TranslatorError):
    """Missing or unusable subscription credential.

    Raised before any network call when no subscription key is configured.
    A key rejected by the server surfaces as ServiceError instead.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="auth")
        super().__init__(message, ctx)


class TransportError(TranslatorError):
    """A request never produced an HTTP response.

    Wraps the httpx exception (connection refused, DNS failure, TLS or
    proxy failure, timeout) as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="transport")
        if url:
            ctx.details["url"] = url
        super().__init__(message, ctx)
        self.url = url
        self.__cause__ = cause


class ServiceError(TranslatorError):
    """Error returned by the remote service.

    Attributes:
        code: Service error code (e.g. 401001), or 500 when the error
            body could not be decoded
        status_code: HTTP status of the response, when there was one
    """

    def __init__(
        self,
        code: int,
        message: str,
        *,
        status_code: int | None = None,
    ) -> None:
        ctx = ErrorContext(source="remote")
        ctx.details["code"] = code
        if status_code is not None:
            ctx.details["status_code"] = status_code
        super().__init__(message, ctx)
        self.code = code
        self.status_code = status_code

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def __repr__(self) -> str:
        return f"ServiceError(code={self.code!r}, message={self.message!r})"

    @property
    def error_class(self) -> ErrorClass:
        """Classification of this error for caller-side retry decisions."""
        from translator_service.errors.classification import classify_status

        # A six-digit service code is more specific than the HTTP status
        if self.code >= 100_000 or self.status_code is None:
            return classify_status(self.code)
        return classify_status(self.status_code)

    @property
    def retryable(self) -> bool:
        """Whether a caller may reasonably retry the request."""
        from translator_service.errors.classification import is_retryable

        return is_retryable(self.error_class)

    @staticmethod
    def _decode_envelope(body: str | bytes | None) -> tuple[int, str] | None:
        """Decode ``{"error": {"code": int, "message": str}}``."""
        if not body:
            return None
        try:
            error = json.loads(body)["error"]
            return int(error["code"]), str(error["message"])
        except (ValueError, TypeError, KeyError) as e:
            logger.debug("Could not decode error envelope", reason=str(e))
            return None

    @classmethod
    def from_json(
        cls,
        body: str | bytes | None,
        *,
        status_code: int | None = None,
    ) -> ServiceError:
        """Create a ServiceError from an error envelope.

        Falls back to a generic "Unknown error" with code 500 when the body
        is not a well-formed envelope.
        """
        decoded = cls._decode_envelope(body)
        if decoded is None:
            return cls(UNKNOWN_ERROR_CODE, UNKNOWN_ERROR_MESSAGE, status_code=status_code)
        code, message = decoded
        return cls(code, message, status_code=status_code)

    @classmethod
    def from_response(cls, response: httpx.Response) -> ServiceError:
        """Create a ServiceError from a non-success HTTP response.

        The JSON error envelope is preferred; otherwise the raw body text
        (or the reason phrase for an empty body) becomes the message.
        """
        body = response.text
        decoded = cls._decode_envelope(body)
        if decoded is None:
            message = body.strip() or response.reason_phrase or UNKNOWN_ERROR_MESSAGE
            return cls(UNKNOWN_ERROR_CODE, message, status_code=response.status_code)
        code, message = decoded
        return cls(code, message, status_code=response.status_code)
