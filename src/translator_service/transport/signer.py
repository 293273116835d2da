"""
Request signing.

Attaches the current bearer token and the standard headers to an outbound
request just before it is sent. No retries happen here.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
from typing import TYPE_CHECKING

from translator_service.transport.auth import AUTHORIZATION_HEADER

if TYPE_CHECKING:
    from collections.abc import Mapping

    from translator_service.auth.provider import TokenProvider

JSON_MEDIA_TYPE = "application/json"

_UA_VERSION: str | None = None


def _get_ua_version() -> str:
    """Get package version for User-Agent (cached)."""
    global _UA_VERSION
    if _UA_VERSION is None:
        try:
            _UA_VERSION = version("translator-service")
        except PackageNotFoundError:
            _UA_VERSION = "0.1.0"
    return _UA_VERSION


def default_user_agent() -> str:
    return f"translator-service-python/{_get_ua_version()}"


class RequestSigner:
    """Builds the headers of an authorized request.

    Example:
        >>> signer = RequestSigner(token_cache)
        >>> headers = await signer.sign({"Accept-Language": "it"})
        >>> headers["Authorization"]
        'Bearer eyJ...'
    """

    def __init__(
        self,
        token_provider: TokenProvider | None,
        *,
        user_agent: str | None = None,
    ) -> None:
        """Initialize the signer.

        Args:
            token_provider: Source of bearer tokens; None sends unsigned
                requests with only the standard headers
            user_agent: User-Agent header value
        """
        self._token_provider = token_provider
        self._user_agent = user_agent or default_user_agent()

    @property
    def token_provider(self) -> TokenProvider | None:
        return self._token_provider

    async def sign(
        self,
        headers: Mapping[str, str] | None = None,
        *,
        content_type: str | None = JSON_MEDIA_TYPE,
        timeout: float | None = None,
    ) -> dict[str, str]:
        """Return a new header mapping for an authorized request.

        Args:
            headers: Request-specific headers; they override the defaults
                but never the Authorization header
            content_type: Content-Type of the body, None for bodiless requests
            timeout: Timeout for a token fetch, if one is needed

        Returns:
            Complete headers dictionary
        """
        signed: dict[str, str] = {"User-Agent": self._user_agent}
        if content_type:
            signed["Content-Type"] = content_type

        if headers:
            signed.update(headers)

        if self._token_provider is not None:
            signed[AUTHORIZATION_HEADER] = await self._token_provider.get_access_token(
                timeout=timeout
            )

        return signed
