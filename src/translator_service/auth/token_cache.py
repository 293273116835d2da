"""
Bearer token cache for the Cognitive Services issue-token endpoint.

A token is valid for 10 minutes on the server; the cache reuses it for 8
minutes and then fetches a new one. Concurrent callers share a single
in-flight fetch per credential.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

from translator_service.auth.provider import CachedToken, Credential, TokenProvider
from translator_service.errors import AuthError, ServiceError, TransportError
from translator_service.telemetry import get_logger
from translator_service.transport.auth import (
    SUBSCRIPTION_KEY_HEADER,
    SUBSCRIPTION_REGION_HEADER,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from translator_service.config import TranslatorSettings
    from translator_service.transport.http import HttpTransport

logger = get_logger(__name__)

GLOBAL_AUTH_URL = "https://api.cognitive.microsoft.com/sts/v1.0/issueToken"
REGION_AUTH_URL = "https://{region}.api.cognitive.microsoft.com/sts/v1.0/issueToken"

TOKEN_REFRESH_AFTER = 8 * 60.0
"""Seconds a token is reused; below the 10 minute server lifetime."""

_MISSING_KEY_MESSAGE = (
    "A subscription key is required. Go to Azure Portal and sign up for "
    "Microsoft Translator: https://portal.azure.com/#create/"
    "Microsoft.CognitiveServices/apitype/TextTranslation"
)


def auth_url_for(region: str | None) -> str:
    """Issue-token URL for a region, or the global one without a region."""
    if region and region.strip():
        return REGION_AUTH_URL.format(region=region.strip())
    return GLOBAL_AUTH_URL


class TokenCache(TokenProvider):
    """Fetches, caches and refreshes bearer tokens for one credential scope.

    States: empty -> fetching -> cached -> (age >= refresh_after) -> fetching.
    Replacing the credential through set_credential drops the cached token
    immediately, and a fetch still in flight for the old credential is not
    committed.

    Example:
        >>> async with HttpTransport() as transport:
        ...     cache = TokenCache(transport, Credential("<key>", "westeurope"))
        ...     token = await cache.get_access_token()
    """

    def __init__(
        self,
        transport: HttpTransport,
        credential: Credential | None = None,
        *,
        auth_url: str | None = None,
        refresh_after: float = TOKEN_REFRESH_AFTER,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the token cache.

        Args:
            transport: Transport used for issue-token requests
            credential: Subscription credential
            auth_url: Override for the issue-token URL
            refresh_after: Seconds after which a cached token is refetched
            clock: Monotonic clock returning seconds
        """
        self._transport = transport
        self._credential = credential or Credential()
        self._auth_url_override = auth_url
        self._refresh_after = refresh_after
        self._clock = clock

        self._token: CachedToken | None = None
        self._generation = 0
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(
        cls,
        transport: HttpTransport,
        settings: TranslatorSettings,
    ) -> TokenCache:
        """Create a token cache from settings."""
        return cls(transport, settings.credential())

    @property
    def credential(self) -> Credential:
        return self._credential

    @property
    def auth_url(self) -> str:
        return self._auth_url_override or auth_url_for(self._credential.region)

    @property
    def cached_token(self) -> CachedToken | None:
        """The cached token, if any (including an expired one)."""
        return self._token

    def set_credential(self, credential: Credential) -> None:
        """Replace the credential, invalidating the cached token.

        An equal credential leaves the cache untouched.
        """
        if credential == self._credential:
            return

        self._credential = credential
        self.invalidate()
        logger.debug("Credential replaced; token cache invalidated", region=credential.region)

    def invalidate(self) -> None:
        """Drop the cached token so the next call fetches a new one."""
        self._token = None
        self._generation += 1
        # Waiters on the old credential keep the old lock
        self._lock = asyncio.Lock()

    def _fresh_token(self) -> CachedToken | None:
        token = self._token
        if token is not None and token.age(self._clock()) < self._refresh_after:
            return token
        return None

    async def get_access_token(self, *, timeout: float | None = None) -> str:
        """Return a ``"Bearer <token>"`` string for the current credential.

        Args:
            timeout: Timeout in seconds for the issue-token request

        Raises:
            AuthError: No subscription key is set (no network call is made)
            ServiceError: The issue-token request failed
        """
        while True:
            credential = self._credential
            if not credential.is_configured:
                raise AuthError(_MISSING_KEY_MESSAGE)

            token = self._fresh_token()
            if token is not None:
                logger.debug("Using cached access token")
                return token.value

            generation = self._generation
            url = self.auth_url
            async with self._lock:
                # The credential changed while we waited; start over with the new one
                if generation != self._generation:
                    continue

                # Another caller may have committed a token while we waited
                token = self._fresh_token()
                if token is not None:
                    return token.value

                value = await self._fetch(credential, url, timeout)

                if generation == self._generation:
                    self._token = CachedToken(value=value, obtained_at=self._clock())

            return value

    async def _fetch(
        self, credential: Credential, url: str, timeout: float | None
    ) -> str:
        headers = {SUBSCRIPTION_KEY_HEADER: credential.subscription_key or ""}
        if credential.region:
            headers[SUBSCRIPTION_REGION_HEADER] = credential.region

        logger.info("Fetching access token", url=url, region=credential.region)
        try:
            response = await self._transport.request(
                "POST",
                url,
                headers=headers,
                content=b"",
                timeout=timeout,
                check_status=False,
            )
        except TransportError as e:
            raise ServiceError(500, e.message) from e

        if not response.is_success:
            error = ServiceError.from_json(response.text, status_code=response.status_code)
            logger.warning(
                "Access token request failed",
                status=response.status_code,
                code=error.code,
            )
            raise error

        return f"Bearer {response.text}"
