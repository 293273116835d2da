"""错误体系：提供翻译与语音客户端的结构化错误类型。

Error hierarchy for translator-service.
"""

from translator_service.errors.base import (
    AuthError,
    ErrorContext,
    ServiceError,
    TranslatorError,
    TransportError,
    ValidationError,
)
from translator_service.errors.classification import (
    ErrorClass,
    classify_status,
    is_retryable,
)

__all__ = [
    "AuthError",
    # Classification
    "ErrorClass",
    "ErrorContext",
    "ServiceError",
    # Base errors
    "TranslatorError",
    "TransportError",
    "ValidationError",
    "classify_status",
    "is_retryable",
]
