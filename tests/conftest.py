"""Root pytest fixtures for translator-service tests."""

from __future__ import annotations

import inspect
import os
from collections import defaultdict, deque
from typing import Any, Callable
from unittest.mock import patch

import httpx
import pytest

from translator_service.transport import HttpTransport

AUTH_URL = "https://westeurope.api.cognitive.microsoft.com/sts/v1.0/issueToken"
GLOBAL_AUTH_URL = "https://api.cognitive.microsoft.com/sts/v1.0/issueToken"
TRANSLATOR_URL = "https://api.cognitive.microsofttranslator.com"

Handler = Callable[[httpx.Request], Any]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class MockService:
    """Routes requests by method and URL (without query) and records them.

    Each route holds a queue of handlers; the last one keeps answering once
    the others are used up. A handler is an httpx.Response, or a callable
    (sync or async) taking the request and returning one or raising.
    """

    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], deque[Any]] = defaultdict(deque)
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        url: str,
        handler: httpx.Response | Handler | None = None,
        **response_kwargs: Any,
    ) -> None:
        if handler is None:
            response_kwargs.setdefault("status_code", 200)
            handler = httpx.Response(**response_kwargs)
        self._routes[(method.upper(), url)].append(handler)

    def add_token(self, token: str = "test-token", url: str = AUTH_URL) -> None:
        self.add("POST", url, text=token)

    def calls(self, method: str | None = None, url: str | None = None) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if (method is None or r.method == method.upper())
            and (url is None or _base_url(r.url) == url)
        ]

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, _base_url(request.url))
        queue = self._routes.get(key)
        if not queue:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")

        handler = queue.popleft() if len(queue) > 1 else queue[0]
        if isinstance(handler, httpx.Response):
            # Responses are single-use, so hand out a copy
            return httpx.Response(
                handler.status_code,
                headers=handler.headers,
                content=handler.content,
            )

        result = handler(request)
        if inspect.isawaitable(result):
            result = await result
        return result


def _base_url(url: httpx.URL) -> str:
    return str(url).split("?", 1)[0]


@pytest.fixture(autouse=True)
def _isolated_env():
    """Hide real credentials and the system keyring from every test."""
    env = {
        k: v
        for k, v in os.environ.items()
        if not k.startswith(("TRANSLATOR_", "SPEECH_"))
    }
    with patch.dict(os.environ, env, clear=True), patch(
        "translator_service.transport.auth._try_keyring", return_value=None
    ):
        yield


@pytest.fixture
def service() -> MockService:
    return MockService()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def transport(service: MockService) -> HttpTransport:
    """Transport whose requests are answered by the mock service."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(service.handle))
    return HttpTransport(client=client)


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "speech: tests of the speech client")
