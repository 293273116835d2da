"""
Telemetry module for translator-service.

Provides structured logging with secret masking.
"""

from translator_service.telemetry.logger import (
    JsonFormatter,
    LogLevel,
    SensitiveDataMasker,
    TextFormatter,
    TranslatorLogger,
    get_logger,
)

__all__ = [
    "JsonFormatter",
    "LogLevel",
    "SensitiveDataMasker",
    "TextFormatter",
    "TranslatorLogger",
    "get_logger",
]
