"""
Connection pool settings for HTTP transport.

One HttpTransport owns one httpx.AsyncClient; every client built on that
transport shares the pool configured here.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

import httpx


@dataclass(frozen=True)
class PoolConfig:
    """Limits and timeouts of the shared connection pool.

    Timeouts are in seconds. ``read_timeout`` and ``write_timeout`` also
    bound how long a single audio chunk may take on the wire.
    """

    max_connections: int = 100
    max_keepalive_connections: int = 20
    keepalive_expiry: float = 30.0
    connect_timeout: float = 10.0
    read_timeout: float = 30.0
    write_timeout: float = 30.0
    pool_timeout: float = 30.0

    @classmethod
    def default(cls) -> PoolConfig:
        return cls()

    @classmethod
    def speech(cls) -> PoolConfig:
        """Fewer, longer-lived connections for audio uploads and downloads."""
        return cls(
            max_connections=20,
            max_keepalive_connections=10,
            read_timeout=120.0,
            write_timeout=120.0,
        )

    def with_timeout(self, timeout: float) -> PoolConfig:
        """Copy with read/write timeouts set to ``timeout``.

        The connect timeout never exceeds ``timeout``.
        """
        return replace(
            self,
            connect_timeout=min(self.connect_timeout, timeout),
            read_timeout=timeout,
            write_timeout=timeout,
        )

    def to_httpx_limits(self) -> httpx.Limits:
        return httpx.Limits(
            max_connections=self.max_connections,
            max_keepalive_connections=self.max_keepalive_connections,
            keepalive_expiry=self.keepalive_expiry,
        )

    def to_httpx_timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self.connect_timeout,
            read=self.read_timeout,
            write=self.write_timeout,
            pool=self.pool_timeout,
        )
