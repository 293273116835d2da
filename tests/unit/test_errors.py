"""Tests for error module."""

import httpx

from translator_service.errors import (
    AuthError,
    ErrorClass,
    ErrorContext,
    ServiceError,
    TranslatorError,
    TransportError,
    ValidationError,
    classify_status,
    is_retryable,
)


class TestErrorContext:
    """Tests for ErrorContext."""

    def test_empty_context(self) -> None:
        """Test empty context string representation."""
        ctx = ErrorContext()
        assert str(ctx) == ""

    def test_context_with_source_and_field(self) -> None:
        """Test context with source and field path."""
        ctx = ErrorContext(source="validation", field_path="texts[3]")
        assert str(ctx) == "[validation] at 'texts[3]'"

    def test_context_with_hint(self) -> None:
        """Test context with hint."""
        ctx = ErrorContext(hint="Check your subscription key")
        assert "(hint: Check your subscription key)" in str(ctx)


class TestTranslatorError:
    """Tests for base error class."""

    def test_basic_error(self) -> None:
        """Test basic error creation."""
        error = TranslatorError("Something went wrong")
        assert error.message == "Something went wrong"
        assert str(error) == "Something went wrong"

    def test_with_hint(self) -> None:
        """Test adding hint to error."""
        error = TranslatorError("Failed").with_hint("Check the region")
        assert error.context.hint == "Check the region"

    def test_hierarchy(self) -> None:
        """Every library error derives from TranslatorError."""
        for error_type in (ValidationError, AuthError, TransportError):
            assert issubclass(error_type, TranslatorError)
        assert issubclass(ServiceError, TranslatorError)


class TestValidationError:
    """Tests for ValidationError."""

    def test_field_details(self) -> None:
        """Test field, expected and actual are kept in the context."""
        error = ValidationError("too many", field="texts", expected="<= 25", actual=26)
        assert error.context.source == "validation"
        assert error.context.field_path == "texts"
        assert error.context.details["expected"] == "<= 25"
        assert error.context.details["actual"] == 26


class TestTransportError:
    """Tests for TransportError."""

    def test_url_and_cause(self) -> None:
        """Test url and cause are recorded."""
        cause = httpx.ConnectError("refused")
        error = TransportError("Connection failed", url="https://example.com", cause=cause)
        assert error.url == "https://example.com"
        assert error.__cause__ is cause
        assert error.context.details["url"] == "https://example.com"


class TestServiceError:
    """Tests for ServiceError."""

    def test_str(self) -> None:
        """Test code and message formatting."""
        error = ServiceError(401001, "The request is not authorized")
        assert str(error) == "401001: The request is not authorized"
        assert error.code == 401001
        assert error.message == "The request is not authorized"

    def test_from_json_envelope(self) -> None:
        """Test decoding of the error envelope."""
        body = '{"error": {"code": 400036, "message": "The target language is not valid."}}'
        error = ServiceError.from_json(body, status_code=400)
        assert error.code == 400036
        assert error.message == "The target language is not valid."
        assert error.status_code == 400

    def test_from_json_fallback(self) -> None:
        """Test malformed bodies fall back to the generic error."""
        for body in (None, "", "not json", '{"other": 1}', '{"error": {"code": "x"}}'):
            error = ServiceError.from_json(body)
            assert error.code == 500
            assert error.message == "Unknown error"

    def test_from_response_envelope(self) -> None:
        """Test decoding an error response."""
        response = httpx.Response(
            401, json={"error": {"code": 401000, "message": "Invalid credentials"}}
        )
        error = ServiceError.from_response(response)
        assert error.code == 401000
        assert error.message == "Invalid credentials"
        assert error.status_code == 401

    def test_from_response_raw_body(self) -> None:
        """Test a non-envelope body becomes the message."""
        response = httpx.Response(502, text="Bad gateway from proxy\n")
        error = ServiceError.from_response(response)
        assert error.code == 500
        assert error.message == "Bad gateway from proxy"
        assert error.status_code == 502

    def test_from_response_empty_body(self) -> None:
        """Test an empty body uses the reason phrase."""
        error = ServiceError.from_response(httpx.Response(503))
        assert error.message == "Service Unavailable"

    def test_classification(self) -> None:
        """Test error class and retryability."""
        assert ServiceError(429001, "Too many requests").error_class == ErrorClass.RATE_LIMITED
        assert ServiceError(429001, "Too many requests").retryable
        assert ServiceError(401001, "Unauthorized").error_class == ErrorClass.AUTHENTICATION
        assert not ServiceError(401001, "Unauthorized").retryable

    def test_status_code_wins(self) -> None:
        """Test the HTTP status is classified before the service code."""
        error = ServiceError(500, "Unknown error", status_code=503)
        assert error.error_class == ErrorClass.OVERLOADED


class TestClassification:
    """Tests for status classification."""

    def test_http_statuses(self) -> None:
        """Test plain HTTP statuses."""
        assert classify_status(400) == ErrorClass.INVALID_REQUEST
        assert classify_status(403) == ErrorClass.PERMISSION_DENIED
        assert classify_status(408) == ErrorClass.TIMEOUT
        assert classify_status(418) == ErrorClass.INVALID_REQUEST
        assert classify_status(599) == ErrorClass.SERVER_ERROR
        assert classify_status(302) == ErrorClass.OTHER

    def test_service_codes(self) -> None:
        """Test six-digit service codes map through their HTTP prefix."""
        assert classify_status(401001) == ErrorClass.AUTHENTICATION
        assert classify_status(413050) == ErrorClass.REQUEST_TOO_LARGE
        assert classify_status(503000) == ErrorClass.OVERLOADED

    def test_is_retryable(self) -> None:
        """Test retryable classes."""
        assert is_retryable(ErrorClass.SERVER_ERROR)
        assert is_retryable(ErrorClass.TIMEOUT)
        assert not is_retryable(ErrorClass.INVALID_REQUEST)
        assert not is_retryable(ErrorClass.OTHER)
