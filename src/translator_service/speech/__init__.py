"""
Speech module: region-scoped text-to-speech and speech recognition.
"""

from translator_service.speech.client import (
    MAX_TEXT_LENGTH_FOR_SPEAK,
    SpeechClient,
    SpeechClientBuilder,
)
from translator_service.speech.models import (
    AudioOutput,
    AudioOutputFormat,
    Gender,
    RecognitionAlternative,
    RecognitionResultFormat,
    RecognitionStatus,
    SpeechProfanityMode,
    SpeechRecognitionResponse,
    TextToSpeechParameters,
)
from translator_service.speech.ssml import build_ssml

__all__ = [
    "AudioOutput",
    "AudioOutputFormat",
    "Gender",
    "MAX_TEXT_LENGTH_FOR_SPEAK",
    "RecognitionAlternative",
    "RecognitionResultFormat",
    "RecognitionStatus",
    "SpeechClient",
    "SpeechClientBuilder",
    "SpeechProfanityMode",
    "SpeechRecognitionResponse",
    "TextToSpeechParameters",
    "build_ssml",
]
