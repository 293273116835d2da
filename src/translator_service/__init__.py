"""Microsoft Translator 与语音服务的异步 Python 客户端。

translator-service: async Python client for the Microsoft Translator and
Speech services.

A token cache obtains short-lived bearer tokens, shares them across
concurrent callers and refreshes them before they expire; the translator and
speech clients sign every request with it.
"""
from __future__ import annotations

from translator_service._features import HAS_HTTP2, HAS_KEYRING, require_extra
from translator_service.auth import Credential, TokenCache, TokenProvider
from translator_service.config import TranslatorSettings
from translator_service.errors import (
    AuthError,
    ServiceError,
    TranslatorError,
    TransportError,
    ValidationError,
)
from translator_service.speech import (
    AudioOutput,
    AudioOutputFormat,
    Gender,
    RecognitionResultFormat,
    SpeechClient,
    SpeechProfanityMode,
    SpeechRecognitionResponse,
    TextToSpeechParameters,
)
from translator_service.telemetry import TranslatorLogger, get_logger
from translator_service.translator import (
    DetectedLanguageResponse,
    ServiceLanguage,
    TranslationResponse,
    TranslatorClient,
)
from translator_service.transport import HttpTransport, PoolConfig

__version__ = "0.1.0"

__all__ = [
    # Auth
    "Credential",
    "TokenCache",
    "TokenProvider",
    # Config
    "TranslatorSettings",
    # Errors
    "AuthError",
    "ServiceError",
    "TranslatorError",
    "TransportError",
    "ValidationError",
    # Feature flags
    "HAS_HTTP2",
    "HAS_KEYRING",
    "require_extra",
    # Speech
    "AudioOutput",
    "AudioOutputFormat",
    "Gender",
    "RecognitionResultFormat",
    "SpeechClient",
    "SpeechProfanityMode",
    "SpeechRecognitionResponse",
    "TextToSpeechParameters",
    # Telemetry
    "TranslatorLogger",
    "get_logger",
    # Translator
    "DetectedLanguageResponse",
    "ServiceLanguage",
    "TranslationResponse",
    "TranslatorClient",
    # Transport
    "HttpTransport",
    "PoolConfig",
    # Version
    "__version__",
]
