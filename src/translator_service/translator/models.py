"""
Translator wire models.

Map the camelCase JSON of the Translator v3 API to snake_case fields.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class LanguageDirectionality(str, Enum):
    """Writing direction of a language, as sent on the wire."""

    LEFT_TO_RIGHT = "ltr"
    RIGHT_TO_LEFT = "rtl"


class Translation(_WireModel):
    """A translated text in one target language."""

    text: str
    to: str


class DetectedLanguageBase(_WireModel):
    """Language detected for a text, with its confidence score."""

    language: str
    score: float = 0.0

    def __str__(self) -> str:
        return self.language


class DetectedLanguage(DetectedLanguageBase):
    """Detected language with the operations it supports."""

    is_translation_supported: bool = False
    is_transliteration_supported: bool = False


class DetectedLanguageResponse(DetectedLanguage):
    """Result of language detection for one input text."""

    alternatives: list[DetectedLanguage] = Field(default_factory=list)


class TranslationResponse(_WireModel):
    """Result of translating one input text into every target language."""

    detected_language: DetectedLanguageBase | None = None
    translations: list[Translation] = Field(default_factory=list)

    @property
    def translation(self) -> Translation | None:
        """The first translation, if any."""
        return self.translations[0] if self.translations else None


class ServiceLanguage(_WireModel):
    """A language supported by the translation service."""

    code: str = ""
    name: str
    native_name: str = ""
    directionality: LanguageDirectionality = Field(
        default=LanguageDirectionality.LEFT_TO_RIGHT, alias="dir"
    )

    def __str__(self) -> str:
        return self.name
