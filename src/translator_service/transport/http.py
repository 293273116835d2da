"""HTTP 传输层：基于 httpx 的共享异步 HTTP 客户端。

HTTP transport using httpx for async requests.

Provides:
- One shared connection pool for every client built on the transport
- Per-request timeouts
- Streaming requests and chunked uploads
- Uniform mapping of network failures and error responses
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager, suppress
from typing import TYPE_CHECKING, Any, TypeVar

import httpx

from translator_service._features import HAS_HTTP2
from translator_service.errors import ServiceError, TransportError
from translator_service.telemetry import get_logger
from translator_service.transport.pool import PoolConfig

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from pydantic import TypeAdapter

logger = get_logger(__name__)

T = TypeVar("T")


def _trust_env_enabled() -> bool:
    """Use env proxy settings only when explicitly enabled."""
    return os.getenv("TRANSLATOR_HTTP_TRUST_ENV", "0") == "1"


def _network_error(error: httpx.HTTPError, url: str) -> TransportError:
    if isinstance(error, httpx.ConnectError):
        reason = "Connection failed"
    elif isinstance(error, httpx.TimeoutException):
        reason = "Request timed out"
    else:
        reason = "HTTP error"
    return TransportError(f"{reason}: {error}", url=url, cause=error)


def decode_json(response: httpx.Response, adapter: TypeAdapter[T]) -> T:
    """Decode a success body, mapping malformed payloads to ServiceError."""
    try:
        return adapter.validate_json(response.content)
    except ValueError as e:
        raise ServiceError(
            500,
            f"Unexpected response body: {e}",
            status_code=response.status_code,
        ) from e


class HttpTransport:
    """HTTP transport shared by the translator and speech clients.

    Error responses (status >= 400) raise ServiceError; network failures
    raise TransportError.

    Example:
        >>> async with HttpTransport(timeout=10.0) as transport:
        ...     translator = TranslatorClient(transport, token_cache)
        ...     speech = SpeechClient(transport, token_cache, region="westeurope")
    """

    def __init__(
        self,
        pool_config: PoolConfig | None = None,
        *,
        timeout: float | None = None,
        proxy: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize HTTP transport.

        Args:
            pool_config: Connection pool limits and default timeouts
            timeout: Request timeout in seconds
            proxy: Proxy URL
            client: Existing httpx client to use; it is not closed by
                this transport
        """
        self._pool_config = pool_config or PoolConfig.default()

        if timeout is None:
            env_timeout = os.getenv("TRANSLATOR_HTTP_TIMEOUT_SECS")
            if env_timeout:
                with suppress(ValueError):
                    parsed = float(env_timeout)
                    if parsed > 0:
                        timeout = parsed
        if timeout is not None:
            self._pool_config = self._pool_config.with_timeout(timeout)

        # Resolve proxy: default to direct connection unless trust_env is enabled.
        if proxy is not None:
            self._proxy = proxy
        elif _trust_env_enabled():
            self._proxy = os.getenv("TRANSLATOR_PROXY_URL")
        else:
            self._proxy = None

        self._client = client
        self._owns_client = client is None

    @property
    def pool_config(self) -> PoolConfig:
        return self._pool_config

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._pool_config.to_httpx_timeout(),
                limits=self._pool_config.to_httpx_limits(),
                proxy=self._proxy,
                http2=HAS_HTTP2,
                trust_env=_trust_env_enabled(),
            )
            self._owns_client = True

        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def _request_kwargs(
        headers: dict[str, str] | None,
        params: Any,
        json: Any,
        content: Any,
        timeout: float | None,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"headers": headers, "params": params}
        if json is not None:
            kwargs["json"] = json
        if content is not None:
            kwargs["content"] = content
        # httpx treats timeout=None as "no timeout", so only pass explicit values
        if timeout is not None:
            kwargs["timeout"] = timeout
        return kwargs

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        params: Any = None,
        json: Any = None,
        content: Any = None,
        timeout: float | None = None,
        check_status: bool = True,
    ) -> httpx.Response:
        """Make an HTTP request.

        Args:
            method: HTTP method
            url: Absolute request URL
            headers: Request headers
            params: Query parameters (mapping or list of pairs)
            json: JSON body
            content: Raw body; an (async) iterator of bytes is sent with
                chunked transfer encoding
            timeout: Per-request timeout in seconds
            check_status: Raise ServiceError for status >= 400

        Returns:
            HTTP response

        Raises:
            TransportError: On network/connection errors
            ServiceError: On error responses when check_status is set
        """
        client = self._get_client()
        kwargs = self._request_kwargs(headers, params, json, content, timeout)

        logger.debug("HTTP request", method=method, url=url)
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise _network_error(e, url) from e

        logger.debug("HTTP response", url=url, status=response.status_code)
        if check_status and response.status_code >= 400:
            raise ServiceError.from_response(response)

        return response

    @asynccontextmanager
    async def stream_request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        params: Any = None,
        json: Any = None,
        content: Any = None,
        timeout: float | None = None,
    ) -> AsyncIterator[httpx.Response]:
        """Make a streaming HTTP request.

        The response body is not read; error responses are read in full
        and raised as ServiceError.

        Example:
            >>> async with transport.stream_request("POST", url, content=ssml) as resp:
            ...     async for chunk in resp.aiter_bytes():
            ...         sink.write(chunk)
        """
        client = self._get_client()
        kwargs = self._request_kwargs(headers, params, json, content, timeout)

        logger.debug("HTTP stream request", method=method, url=url)
        try:
            async with client.stream(method, url, **kwargs) as response:
                if response.status_code >= 400:
                    await response.aread()
                    raise ServiceError.from_response(response)

                yield response

        except httpx.HTTPError as e:
            raise _network_error(e, url) from e

    async def __aenter__(self) -> HttpTransport:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
