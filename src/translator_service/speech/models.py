"""
Speech models: synthesis parameters, output formats and recognition results.

Every enum value is the exact string sent on the wire.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_pascal

SSML_MEDIA_TYPE = "application/ssml+xml"
WAV_MEDIA_TYPE = "audio/wav"
OUTPUT_FORMAT_HEADER = "X-Microsoft-OutputFormat"


class Gender(str, Enum):
    """Voice gender used in SSML."""

    MALE = "Male"
    FEMALE = "Female"


class AudioOutputFormat(str, Enum):
    """Audio formats supported by text-to-speech."""

    RAW_16KHZ_16BIT_MONO_PCM = "raw-16khz-16bit-mono-pcm"
    RAW_8KHZ_8BIT_MONO_MULAW = "raw-8khz-8bit-mono-mulaw"
    RIFF_16KHZ_16BIT_MONO_PCM = "riff-16khz-16bit-mono-pcm"
    RIFF_8KHZ_8BIT_MONO_MULAW = "riff-8khz-8bit-mono-mulaw"
    SSML_16KHZ_16BIT_MONO_SILK = "ssml-16khz-16bit-mono-silk"
    RAW_16KHZ_16BIT_MONO_TRUESILK = "raw-16khz-16bit-mono-truesilk"
    SSML_16KHZ_16BIT_MONO_TTS = "ssml-16khz-16bit-mono-tts"
    AUDIO_16KHZ_128KBITRATE_MONO_MP3 = "audio-16khz-128kbitrate-mono-mp3"
    AUDIO_16KHZ_64KBITRATE_MONO_MP3 = "audio-16khz-64kbitrate-mono-mp3"
    AUDIO_16KHZ_32KBITRATE_MONO_MP3 = "audio-16khz-32kbitrate-mono-mp3"
    AUDIO_16KHZ_16KBPS_MONO_SIREN = "audio-16khz-16kbps-mono-siren"
    RIFF_16KHZ_16KBPS_MONO_SIREN = "riff-16khz-16kbps-mono-siren"
    RAW_24KHZ_16BIT_MONO_PCM = "raw-24khz-16bit-mono-pcm"
    RIFF_24KHZ_16BIT_MONO_PCM = "riff-24khz-16bit-mono-pcm"
    AUDIO_24KHZ_48KBITRATE_MONO_MP3 = "audio-24khz-48kbitrate-mono-mp3"
    AUDIO_24KHZ_96KBITRATE_MONO_MP3 = "audio-24khz-96kbitrate-mono-mp3"
    AUDIO_24KHZ_160KBITRATE_MONO_MP3 = "audio-24khz-160kbitrate-mono-mp3"

    @property
    def media_type(self) -> str:
        """Best-effort MIME type of audio in this format."""
        if self.value.endswith("mp3"):
            return "audio/mpeg"
        if self.value.startswith("riff"):
            return "audio/wav"
        return "application/octet-stream"


class RecognitionResultFormat(str, Enum):
    """Shape of the recognition result."""

    SIMPLE = "simple"
    DETAILED = "detailed"


class SpeechProfanityMode(str, Enum):
    """How profanity is handled in recognition results."""

    MASKED = "masked"
    REMOVED = "removed"
    RAW = "raw"


class RecognitionStatus(str, Enum):
    SUCCESS = "Success"
    NO_MATCH = "NoMatch"
    INITIAL_SILENCE_TIMEOUT = "InitialSilenceTimeout"
    BABBLE_TIMEOUT = "BabbleTimeout"
    ERROR = "Error"
    END_OF_DICTATION = "EndOfDictation"


@dataclass
class TextToSpeechParameters:
    """Parameters of a text-to-speech request.

    Attributes:
        text: Text to speak (at most 800 characters)
        language: Voice locale, e.g. "en-us"
        voice_type: Voice gender
        voice_name: Voice name, e.g. "en-US-AriaNeural"
        output_format: Requested audio format
    """

    text: str
    language: str = "en-us"
    voice_type: Gender = Gender.FEMALE
    voice_name: str = "en-US-AriaNeural"
    output_format: AudioOutputFormat = AudioOutputFormat.RIFF_16KHZ_16BIT_MONO_PCM

    def headers(self) -> dict[str, str]:
        """Request headers describing the SSML body and the audio format."""
        return {OUTPUT_FORMAT_HEADER: AudioOutputFormat(self.output_format).value}


@dataclass(frozen=True)
class AudioOutput:
    """Synthesized audio."""

    content: bytes
    output_format: AudioOutputFormat
    content_type: str | None = None

    def __len__(self) -> int:
        return len(self.content)


class _SpeechWireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        extra="ignore",
    )


class RecognitionAlternative(_SpeechWireModel):
    """One candidate transcription in a detailed result."""

    confidence: float = 0.0
    lexical: str = ""
    itn: str = Field(default="", alias="ITN")
    masked_itn: str = Field(default="", alias="MaskedITN")
    display: str = ""


class SpeechRecognitionResponse(_SpeechWireModel):
    """Result of a speech-to-text request.

    Offset and duration are in 100-nanosecond ticks. In detailed results the
    display text is taken from the best alternative.
    """

    recognition_status: RecognitionStatus
    offset: int = 0
    duration: int = 0
    display_text: str | None = None
    n_best: list[RecognitionAlternative] = Field(default_factory=list, alias="NBest")

    @model_validator(mode="after")
    def _fill_display_text(self) -> SpeechRecognitionResponse:
        if self.display_text is None and self.n_best:
            self.display_text = self.n_best[0].display
        return self

    @property
    def succeeded(self) -> bool:
        return self.recognition_status is RecognitionStatus.SUCCESS
