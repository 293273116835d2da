"""语音客户端：区域化的文本转语音与语音识别。

Speech client for the region-scoped text-to-speech and speech-to-text APIs.
"""

from __future__ import annotations

from collections.abc import AsyncIterable
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, BinaryIO

from pydantic import TypeAdapter

from translator_service.auth import Credential, TokenCache
from translator_service.config import TranslatorSettings
from translator_service.errors import AuthError, ValidationError
from translator_service.speech.models import (
    SSML_MEDIA_TYPE,
    WAV_MEDIA_TYPE,
    AudioOutput,
    AudioOutputFormat,
    RecognitionResultFormat,
    SpeechProfanityMode,
    SpeechRecognitionResponse,
    TextToSpeechParameters,
)
from translator_service.speech.ssml import build_ssml
from translator_service.telemetry import get_logger
from translator_service.transport import HttpTransport, PoolConfig, RequestSigner, decode_json

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    import httpx

    from translator_service.auth import TokenProvider

logger = get_logger(__name__)

TTS_URL = "https://{region}.tts.speech.microsoft.com/cognitiveservices/v1"
STT_URL = (
    "https://{region}.stt.speech.microsoft.com/speech/recognition/"
    "conversation/cognitiveservices/v1"
)

MAX_TEXT_LENGTH_FOR_SPEAK = 800
UPLOAD_CHUNK_SIZE = 1024

AudioSource = bytes | bytearray | memoryview | BinaryIO | AsyncIterable[bytes]

_RECOGNITION = TypeAdapter(SpeechRecognitionResponse)


async def _iter_audio(
    audio: AudioSource, chunk_size: int = UPLOAD_CHUNK_SIZE
) -> AsyncIterator[bytes]:
    """Yield the audio in chunks without buffering the whole source."""
    if isinstance(audio, (bytes, bytearray, memoryview)):
        view = memoryview(audio)
        for start in range(0, len(view), chunk_size):
            yield bytes(view[start : start + chunk_size])
    elif isinstance(audio, AsyncIterable):
        async for chunk in audio:
            if chunk:
                yield bytes(chunk)
    else:
        while chunk := audio.read(chunk_size):
            yield chunk


class SpeechClient:
    """Client for the Microsoft Speech REST API.

    The speech service has no global endpoint, so a region is required.

    Example:
        >>> async with SpeechClient.create("<key>", region="westeurope") as client:
        ...     audio = await client.speak(TextToSpeechParameters("Hello"))
        ...     with open("sample.wav", "rb") as f:
        ...         result = await client.recognize(f, "en-US")
    """

    def __init__(
        self,
        transport: HttpTransport,
        token_provider: TokenProvider,
        *,
        region: str | None = None,
        timeout: float | None = None,
    ) -> None:
        region = region or token_provider.region
        if not region or not region.strip():
            raise ValidationError(
                "A region is required for the speech service", field="region", expected="non-empty"
            )
        self._transport = transport
        self._token_provider = token_provider
        self._signer = RequestSigner(token_provider)
        self._region = region.strip()
        self._timeout = timeout
        self._owns_transport = False

    @classmethod
    def create(
        cls,
        subscription_key: str | None = None,
        region: str | None = None,
        *,
        transport: HttpTransport | None = None,
        settings: TranslatorSettings | None = None,
    ) -> SpeechClient:
        """Create a client with its own token cache.

        Missing values are read from the SPEECH_* environment variables.
        """
        settings = settings or TranslatorSettings.from_env(
            "SPEECH", subscription_key=subscription_key, region=region
        )
        owns_transport = transport is None
        transport = transport or HttpTransport(PoolConfig.speech(), timeout=settings.timeout)

        client = cls(
            transport, TokenCache.from_settings(transport, settings), region=settings.region
        )
        client._owns_transport = owns_transport
        return client

    @classmethod
    def builder(cls) -> SpeechClientBuilder:
        """Get a builder for creating speech clients."""
        return SpeechClientBuilder()

    @property
    def region(self) -> str:
        return self._region

    @property
    def token_provider(self) -> TokenProvider:
        return self._token_provider

    @property
    def tts_url(self) -> str:
        return TTS_URL.format(region=self._region)

    @property
    def stt_url(self) -> str:
        return STT_URL.format(region=self._region)

    def set_credential(self, subscription_key: str | None, region: str | None = None) -> None:
        """Replace the subscription credential; the cached token is invalidated.

        The token endpoint follows the new region; the speech endpoints keep
        the region the client was created with.
        """
        self._token_provider.set_credential(Credential(subscription_key, region or self._region))

    async def initialize(self) -> None:
        """Fetch an access token ahead of the first call."""
        await self._token_provider.get_access_token(timeout=self._timeout)

    def _check_speak(self, params: TextToSpeechParameters | None) -> TextToSpeechParameters:
        if params is None:
            raise ValidationError(
                "params is required", field="params", expected="TextToSpeechParameters"
            )
        text = params.text or ""
        if len(text) > MAX_TEXT_LENGTH_FOR_SPEAK:
            raise ValidationError(
                f"Text cannot be longer than {MAX_TEXT_LENGTH_FOR_SPEAK} characters",
                field="params.text",
                expected=f"<= {MAX_TEXT_LENGTH_FOR_SPEAK} characters",
                actual=len(text),
            )
        return params

    async def _speak_headers(
        self, params: TextToSpeechParameters, timeout: float | None
    ) -> dict[str, str]:
        return await self._signer.sign(
            params.headers(), content_type=SSML_MEDIA_TYPE, timeout=timeout
        )

    async def speak(
        self,
        params: TextToSpeechParameters,
        *,
        timeout: float | None = None,
    ) -> AudioOutput:
        """Synthesize speech.

        Args:
            params: Text and voice settings (text at most 800 characters)
            timeout: Per-request timeout in seconds

        Returns:
            The synthesized audio

        Raises:
            ValidationError: params is missing or the text is too long
            ServiceError: The service returned an error
            TransportError: The request could not be sent
        """
        params = self._check_speak(params)
        timeout = timeout if timeout is not None else self._timeout
        headers = await self._speak_headers(params, timeout)

        logger.debug("Speech synthesis request", region=self._region, chars=len(params.text))
        response = await self._transport.request(
            "POST",
            self.tts_url,
            headers=headers,
            content=build_ssml(params).encode("utf-8"),
            timeout=timeout,
        )
        return AudioOutput(
            content=response.content,
            output_format=AudioOutputFormat(params.output_format),
            content_type=response.headers.get("Content-Type"),
        )

    @asynccontextmanager
    async def stream_speech(
        self,
        params: TextToSpeechParameters,
        *,
        timeout: float | None = None,
    ) -> AsyncIterator[httpx.Response]:
        """Synthesize speech and stream the audio.

        Example:
            >>> async with client.stream_speech(params) as response:
            ...     async for chunk in response.aiter_bytes():
            ...         player.feed(chunk)
        """
        params = self._check_speak(params)
        timeout = timeout if timeout is not None else self._timeout
        headers = await self._speak_headers(params, timeout)

        async with self._transport.stream_request(
            "POST",
            self.tts_url,
            headers=headers,
            content=build_ssml(params).encode("utf-8"),
            timeout=timeout,
        ) as response:
            yield response

    async def recognize(
        self,
        audio: AudioSource,
        language: str,
        *,
        result_format: RecognitionResultFormat = RecognitionResultFormat.SIMPLE,
        profanity: SpeechProfanityMode = SpeechProfanityMode.MASKED,
        timeout: float | None = None,
    ) -> SpeechRecognitionResponse:
        """Recognize speech in a WAV audio source.

        The audio is uploaded with chunked transfer encoding in 1024 byte
        chunks, so file objects and async byte streams are never read into
        memory as a whole.

        Args:
            audio: WAV audio as bytes, a binary file object or an async
                iterable of bytes
            language: Spoken language, e.g. "en-US"
            result_format: Simple or detailed result
            profanity: Profanity handling
            timeout: Per-request timeout in seconds

        Returns:
            The recognition result
        """
        if audio is None:
            raise ValidationError("audio is required", field="audio", expected="audio source")
        if not language or not language.strip():
            raise ValidationError("language is required", field="language", expected="non-empty")

        timeout = timeout if timeout is not None else self._timeout
        headers = await self._signer.sign(content_type=WAV_MEDIA_TYPE, timeout=timeout)
        params = [
            ("language", language.strip()),
            ("format", RecognitionResultFormat(result_format).value),
            ("profanity", SpeechProfanityMode(profanity).value),
        ]

        logger.debug("Speech recognition request", region=self._region, language=language)
        response = await self._transport.request(
            "POST",
            self.stt_url,
            headers=headers,
            params=params,
            content=_iter_audio(audio),
            timeout=timeout,
        )
        return decode_json(response, _RECOGNITION)

    async def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            await self._transport.close()

    async def __aenter__(self) -> SpeechClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


class SpeechClientBuilder:
    """Builder for SpeechClient."""

    def __init__(self) -> None:
        self._subscription_key: str | None = None
        self._region: str | None = None
        self._timeout: float | None = None
        self._transport: HttpTransport | None = None

    def subscription_key(self, key: str | None) -> SpeechClientBuilder:
        self._subscription_key = key
        return self

    def region(self, region: str | None) -> SpeechClientBuilder:
        self._region = region
        return self

    def timeout(self, timeout: float) -> SpeechClientBuilder:
        self._timeout = timeout
        return self

    def transport(self, transport: HttpTransport) -> SpeechClientBuilder:
        self._transport = transport
        return self

    async def build(self) -> SpeechClient:
        """Build the speech client."""
        settings = TranslatorSettings.from_env(
            "SPEECH", subscription_key=self._subscription_key, region=self._region
        )
        if not settings.subscription_key:
            raise AuthError("Subscription key required (SPEECH_SUBSCRIPTION_KEY)")
        if not settings.region:
            raise ValidationError(
                "Region required (SPEECH_REGION)", field="region", expected="non-empty"
            )

        owns_transport = self._transport is None
        transport = self._transport or HttpTransport(
            PoolConfig.speech(), timeout=self._timeout or settings.timeout
        )
        client = SpeechClient(
            transport,
            TokenCache.from_settings(transport, settings),
            region=settings.region,
            timeout=self._timeout,
        )
        client._owns_transport = owns_transport
        return client
