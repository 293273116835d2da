"""
Structured logging for translator-service.

All library loggers live under the ``translator_service`` logger, which owns
the single handler; keyword fields passed to a log call are rendered after
the message (text) or as top-level keys (JSON). Subscription keys and bearer
tokens are masked in both.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar

ROOT_LOGGER_NAME = "translator_service"
REDACTED = "***REDACTED***"

_SECRET_FIELD_MARKERS = ("key", "token", "secret", "password", "auth")


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_logging_level(self) -> int:
        return logging.getLevelName(self.value)


class SensitiveDataMasker:
    """Redacts credentials from log text and structured fields.

    Covers the bearer token and the subscription key as they appear in
    headers, environment assignments and keyword arguments, plus bare
    32 character hex keys.
    """

    SECRET_HEADERS: ClassVar[tuple[str, ...]] = (
        "Authorization",
        "Ocp-Apim-Subscription-Key",
        "subscription[_-]?key",
    )
    SECRET_ENV_VARS: ClassVar[tuple[str, ...]] = (
        "TRANSLATOR_SUBSCRIPTION_KEY",
        "SPEECH_SUBSCRIPTION_KEY",
    )

    def __init__(self, extra_patterns: list[str] | None = None) -> None:
        """Initialize the masker.

        Args:
            extra_patterns: Additional regular expressions whose whole
                match is redacted
        """
        rules: list[tuple[re.Pattern[str], str]] = [
            (re.compile(r"(Bearer\s+)[^\s\"']+", re.IGNORECASE), rf"\1{REDACTED}"),
        ]
        for header in self.SECRET_HEADERS:
            rules.append(
                (
                    re.compile(rf"({header}[\"']?\s*[:=]\s*[\"']?)[^\"'\s]+", re.IGNORECASE),
                    rf"\1{REDACTED}",
                )
            )
        for name in self.SECRET_ENV_VARS:
            rules.append((re.compile(rf"({name}=)\S+"), rf"\1{REDACTED}"))
        rules.append((re.compile(r"\b[0-9a-fA-F]{32}\b"), REDACTED))
        for pattern in extra_patterns or []:
            rules.append((re.compile(pattern), REDACTED))
        self._rules = rules

    def mask(self, text: str) -> str:
        for pattern, replacement in self._rules:
            text = pattern.sub(replacement, text)
        return text

    def _mask_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return self.mask(value)
        if isinstance(value, dict):
            return self.mask_dict(value)
        if isinstance(value, (list, tuple)):
            return [self._mask_value(v) for v in value]
        return value

    def mask_dict(self, data: dict[str, Any]) -> dict[str, Any]:
        """Mask a mapping of structured fields.

        Fields whose name looks like a credential are redacted outright.
        """
        return {
            key: REDACTED
            if any(marker in key.lower() for marker in _SECRET_FIELD_MARKERS)
            else self._mask_value(value)
            for key, value in data.items()
        }


class _StructuredFormatter(logging.Formatter):
    """Base formatter exposing the masked message and keyword fields."""

    def __init__(self, masker: SensitiveDataMasker | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._masker = masker or SensitiveDataMasker()

    def masked_message(self, record: logging.LogRecord) -> str:
        return self._masker.mask(record.getMessage())

    def masked_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        fields = getattr(record, "fields", None)
        return self._masker.mask_dict(fields) if fields else {}


class JsonFormatter(_StructuredFormatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": self.masked_message(record),
        }
        payload.update(self.masked_fields(record))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=False)


class TextFormatter(_StructuredFormatter):
    """``time | level | logger | message | key=value ...``"""

    def __init__(self, masker: SensitiveDataMasker | None = None) -> None:
        super().__init__(masker, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            self.formatTime(record, self.datefmt),
            f"{record.levelname:<8}",
            record.name,
            self.masked_message(record),
        ]
        fields = self.masked_fields(record)
        if fields:
            parts.append(" ".join(f"{k}={v}" for k, v in fields.items()))
        line = " | ".join(parts)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class TranslatorLogger:
    """Keyword-field logger used throughout translator-service.

    Example:
        >>> TranslatorLogger.configure(LogLevel.DEBUG, format="json")
        >>> logger = get_logger("translator_service.auth")
        >>> logger.info("Fetching access token", region="westeurope")
    """

    _configured: ClassVar[bool] = False

    @classmethod
    def configure(
        cls,
        level: LogLevel = LogLevel.INFO,
        format: str = "text",
        stream: Any = None,
        masker: SensitiveDataMasker | None = None,
    ) -> None:
        """Configure library logging.

        Replaces the handler of the ``translator_service`` logger, so
        repeated calls do not duplicate output.

        Args:
            level: Log level
            format: Output format ('json' or 'text')
            stream: Output stream (default: stderr)
            masker: Sensitive data masker
        """
        formatter = JsonFormatter(masker) if format == "json" else TextFormatter(masker)
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(formatter)

        root = logging.getLogger(ROOT_LOGGER_NAME)
        for old in list(root.handlers):
            root.removeHandler(old)
        root.addHandler(handler)
        root.setLevel(level.to_logging_level())
        root.propagate = False
        cls._configured = True

    @classmethod
    def get_logger(cls, name: str) -> TranslatorLogger:
        if not cls._configured:
            cls.configure(LogLevel.WARNING)
        return cls(logging.getLogger(name))

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(self, level: int, msg: str, exc_info: bool = False, **fields: Any) -> None:
        if self._logger.isEnabledFor(level):
            self._logger.log(level, msg, exc_info=exc_info, extra={"fields": fields})

    def debug(self, msg: str, **fields: Any) -> None:
        self._log(logging.DEBUG, msg, **fields)

    def info(self, msg: str, **fields: Any) -> None:
        self._log(logging.INFO, msg, **fields)

    def warning(self, msg: str, **fields: Any) -> None:
        self._log(logging.WARNING, msg, **fields)

    def error(self, msg: str, exc_info: bool = False, **fields: Any) -> None:
        self._log(logging.ERROR, msg, exc_info=exc_info, **fields)

    def exception(self, msg: str, **fields: Any) -> None:
        """Log at error level with the current traceback."""
        self._log(logging.ERROR, msg, exc_info=True, **fields)


def get_logger(name: str) -> TranslatorLogger:
    """Get a structured logger; use ``__name__`` inside the package."""
    return TranslatorLogger.get_logger(name)
