"""
Translator client.

Translates text, detects languages and lists the supported languages using
the Microsoft Translator v3 REST API.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter

from translator_service.auth import Credential, TokenCache
from translator_service.config import TranslatorSettings, default_language
from translator_service.errors import AuthError, ServiceError, ValidationError
from translator_service.telemetry import get_logger
from translator_service.transport import HttpTransport, RequestSigner, decode_json
from translator_service.transport.signer import JSON_MEDIA_TYPE
from translator_service.translator.models import (
    DetectedLanguageResponse,
    ServiceLanguage,
    TranslationResponse,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    import httpx

    from translator_service.auth import TokenProvider

logger = get_logger(__name__)

BASE_URL = "https://api.cognitive.microsofttranslator.com"
API_VERSION = "3.0"

MAX_ARRAY_LENGTH_FOR_TRANSLATION = 25
MAX_TEXT_LENGTH_FOR_TRANSLATION = 5000
MAX_ARRAY_LENGTH_FOR_DETECTION = 100
MAX_TEXT_LENGTH_FOR_DETECTION = 10000

_TRANSLATIONS = TypeAdapter(list[TranslationResponse])
_DETECTIONS = TypeAdapter(list[DetectedLanguageResponse])


def _as_list(value: str | Iterable[str] | None) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    return list(value)


class TranslatorClient:
    """Client for the Microsoft Translator text API.

    The client does not own its transport or token provider unless it was
    built through create() or the builder; several clients may share one
    HttpTransport and therefore one connection pool.

    Example:
        >>> async with TranslatorClient.create("<key>", region="westeurope") as client:
        ...     results = await client.translate(["Hello"], to="fr")
        ...     print(results[0].translation.text)
        Bonjour
    """

    def __init__(
        self,
        transport: HttpTransport,
        token_provider: TokenProvider,
        *,
        language: str | None = None,
        base_url: str = BASE_URL,
        timeout: float | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            transport: Shared HTTP transport
            token_provider: Source of bearer tokens
            language: Default target language and Accept-Language; the
                process locale when omitted
            base_url: Translator API base URL
            timeout: Default per-request timeout in seconds
        """
        self._transport = transport
        self._token_provider = token_provider
        self._signer = RequestSigner(token_provider)
        self.language = language or default_language()
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._owns_transport = False

    @classmethod
    def create(
        cls,
        subscription_key: str | None = None,
        region: str | None = None,
        language: str | None = None,
        *,
        transport: HttpTransport | None = None,
        settings: TranslatorSettings | None = None,
    ) -> TranslatorClient:
        """Create a client with its own token cache.

        Missing values are read from the environment (see TranslatorSettings).
        A transport is created, and closed with the client, when none is given.
        """
        settings = settings or TranslatorSettings.from_env(
            subscription_key=subscription_key, region=region, language=language
        )
        owns_transport = transport is None
        transport = transport or HttpTransport(timeout=settings.timeout)

        client = cls(
            transport,
            TokenCache.from_settings(transport, settings),
            language=settings.language,
        )
        client._owns_transport = owns_transport
        return client

    @classmethod
    def builder(cls) -> TranslatorClientBuilder:
        """Get a builder for creating translator clients."""
        return TranslatorClientBuilder()

    @property
    def token_provider(self) -> TokenProvider:
        return self._token_provider

    @property
    def transport(self) -> HttpTransport:
        return self._transport

    @property
    def subscription_key(self) -> str | None:
        return self._token_provider.subscription_key

    @property
    def region(self) -> str | None:
        return self._token_provider.region

    def set_credential(self, subscription_key: str | None, region: str | None = None) -> None:
        """Replace the subscription credential; the cached token is invalidated.

        Without a region the current one is kept.
        """
        self._token_provider.set_credential(Credential(subscription_key, region or self.region))

    async def initialize(self) -> None:
        """Fetch an access token ahead of the first call."""
        await self._token_provider.get_access_token(timeout=self._timeout)

    async def translate(
        self,
        texts: str | Iterable[str],
        to: str | Iterable[str] | None = None,
        *,
        from_language: str | None = None,
        timeout: float | None = None,
    ) -> list[TranslationResponse]:
        """Translate a batch of texts.

        Args:
            texts: Texts to translate (at most 25, each at most 5000 characters)
            to: Target language(s); the client language when omitted
            from_language: Source language; auto-detected when omitted
            timeout: Per-request timeout in seconds

        Returns:
            One TranslationResponse per input text, in input order

        Raises:
            ValidationError: Input violates the batch or length limits
            ServiceError: The service returned an error
            TransportError: The request could not be sent
        """
        items = _as_list(texts)
        if not items:
            raise ValidationError(
                "texts must contain at least 1 element", field="texts", expected=">= 1", actual=0
            )
        if len(items) > MAX_ARRAY_LENGTH_FOR_TRANSLATION:
            raise ValidationError(
                f"texts can have at most {MAX_ARRAY_LENGTH_FOR_TRANSLATION} elements",
                field="texts",
                expected=f"<= {MAX_ARRAY_LENGTH_FOR_TRANSLATION}",
                actual=len(items),
            )
        for index, text in enumerate(items):
            if not text or not text.strip() or len(text) > MAX_TEXT_LENGTH_FOR_TRANSLATION:
                raise ValidationError(
                    "Each text cannot be empty or longer than "
                    f"{MAX_TEXT_LENGTH_FOR_TRANSLATION} characters",
                    field=f"texts[{index}]",
                    expected=f"1..{MAX_TEXT_LENGTH_FOR_TRANSLATION} characters",
                    actual=len(text) if text else 0,
                )

        targets = _as_list(to) or [self.language]

        params: list[tuple[str, str]] = [("api-version", API_VERSION)]
        params.extend(("to", target) for target in targets)
        if from_language:
            params.append(("from", from_language))

        response = await self._send(
            "POST",
            "/translate",
            params=params,
            json=[{"text": text} for text in items],
            timeout=timeout,
        )
        return decode_json(response, _TRANSLATIONS)

    async def translate_text(
        self,
        text: str,
        to: str | Iterable[str] | None = None,
        *,
        from_language: str | None = None,
        timeout: float | None = None,
    ) -> TranslationResponse:
        """Translate a single text."""
        results = await self.translate(
            [text], to, from_language=from_language, timeout=timeout
        )
        return results[0]

    async def detect_languages(
        self,
        texts: str | Iterable[str],
        *,
        timeout: float | None = None,
    ) -> list[DetectedLanguageResponse]:
        """Detect the language of a batch of texts.

        Texts longer than 10000 characters are truncated, not rejected.

        Args:
            texts: Texts to inspect (at most 100)
            timeout: Per-request timeout in seconds

        Returns:
            One DetectedLanguageResponse per input text, in input order
        """
        items = _as_list(texts)
        if not items:
            raise ValidationError(
                "texts must contain at least 1 element", field="texts", expected=">= 1", actual=0
            )
        if len(items) > MAX_ARRAY_LENGTH_FOR_DETECTION:
            raise ValidationError(
                f"texts can have at most {MAX_ARRAY_LENGTH_FOR_DETECTION} elements",
                field="texts",
                expected=f"<= {MAX_ARRAY_LENGTH_FOR_DETECTION}",
                actual=len(items),
            )

        response = await self._send(
            "POST",
            "/detect",
            params=[("api-version", API_VERSION)],
            json=[{"text": text[:MAX_TEXT_LENGTH_FOR_DETECTION]} for text in items],
            timeout=timeout,
        )
        return decode_json(response, _DETECTIONS)

    async def detect_language(
        self, text: str, *, timeout: float | None = None
    ) -> DetectedLanguageResponse:
        """Detect the language of a single text."""
        results = await self.detect_languages([text], timeout=timeout)
        return results[0]

    async def get_languages(
        self,
        language: str | None = None,
        *,
        timeout: float | None = None,
    ) -> list[ServiceLanguage]:
        """List the languages supported for translation.

        Args:
            language: Language used to localize the names (Accept-Language);
                the client language when omitted
            timeout: Per-request timeout in seconds

        Returns:
            Supported languages sorted by display name
        """
        language = language or self.language
        headers = {"Accept-Language": language} if language else None

        response = await self._send(
            "GET",
            "/languages",
            params=[("scope", "translation"), ("api-version", API_VERSION)],
            headers=headers,
            timeout=timeout,
        )

        try:
            entries = response.json()["translation"]
            languages = [
                ServiceLanguage.model_validate({**entry, "code": code})
                for code, entry in entries.items()
            ]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise ServiceError(
                500,
                f"Unexpected response body: {e}",
                status_code=response.status_code,
            ) from e

        return sorted(languages, key=lambda lang: lang.name)

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: list[tuple[str, str]],
        json: Any = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        timeout = timeout if timeout is not None else self._timeout
        signed = await self._signer.sign(
            headers,
            content_type=JSON_MEDIA_TYPE if json is not None else None,
            timeout=timeout,
        )
        logger.debug("Translator request", path=path)
        return await self._transport.request(
            method,
            f"{self._base_url}{path}",
            headers=signed,
            params=params,
            json=json,
            timeout=timeout,
        )

    async def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            await self._transport.close()

    async def __aenter__(self) -> TranslatorClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


class TranslatorClientBuilder:
    """Builder for TranslatorClient."""

    def __init__(self) -> None:
        self._subscription_key: str | None = None
        self._region: str | None = None
        self._language: str | None = None
        self._base_url: str | None = None
        self._timeout: float | None = None
        self._transport: HttpTransport | None = None

    def subscription_key(self, key: str | None) -> TranslatorClientBuilder:
        self._subscription_key = key
        return self

    def region(self, region: str | None) -> TranslatorClientBuilder:
        self._region = region
        return self

    def language(self, language: str | None) -> TranslatorClientBuilder:
        self._language = language
        return self

    def base_url(self, url: str | None) -> TranslatorClientBuilder:
        self._base_url = url
        return self

    def timeout(self, timeout: float) -> TranslatorClientBuilder:
        self._timeout = timeout
        return self

    def transport(self, transport: HttpTransport) -> TranslatorClientBuilder:
        self._transport = transport
        return self

    async def build(self) -> TranslatorClient:
        """Build the translator client."""
        settings = TranslatorSettings.from_env(
            subscription_key=self._subscription_key,
            region=self._region,
            language=self._language,
        )
        if not settings.subscription_key:
            raise AuthError("Subscription key required (TRANSLATOR_SUBSCRIPTION_KEY)")

        owns_transport = self._transport is None
        transport = self._transport or HttpTransport(timeout=self._timeout or settings.timeout)
        client = TranslatorClient(
            transport,
            TokenCache.from_settings(transport, settings),
            language=settings.language,
            base_url=self._base_url or BASE_URL,
            timeout=self._timeout,
        )
        client._owns_transport = owns_transport
        return client
