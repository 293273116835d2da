"""
Translator module: text translation and language detection.
"""

from translator_service.translator.client import (
    MAX_ARRAY_LENGTH_FOR_DETECTION,
    MAX_ARRAY_LENGTH_FOR_TRANSLATION,
    MAX_TEXT_LENGTH_FOR_DETECTION,
    MAX_TEXT_LENGTH_FOR_TRANSLATION,
    TranslatorClient,
    TranslatorClientBuilder,
)
from translator_service.translator.models import (
    DetectedLanguage,
    DetectedLanguageBase,
    DetectedLanguageResponse,
    LanguageDirectionality,
    ServiceLanguage,
    Translation,
    TranslationResponse,
)

__all__ = [
    "DetectedLanguage",
    "DetectedLanguageBase",
    "DetectedLanguageResponse",
    "LanguageDirectionality",
    "MAX_ARRAY_LENGTH_FOR_DETECTION",
    "MAX_ARRAY_LENGTH_FOR_TRANSLATION",
    "MAX_TEXT_LENGTH_FOR_DETECTION",
    "MAX_TEXT_LENGTH_FOR_TRANSLATION",
    "ServiceLanguage",
    "Translation",
    "TranslationResponse",
    "TranslatorClient",
    "TranslatorClientBuilder",
]
