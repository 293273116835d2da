"""
Credential and token types, and the token provider interface.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Credential:
    """Subscription credential for Cognitive Services.

    Attributes:
        subscription_key: Long-lived subscription secret
        region: Azure region of the resource, None for the global service
    """

    subscription_key: str | None = field(default=None, repr=False)
    region: str | None = None

    @property
    def is_configured(self) -> bool:
        """Whether a non-blank subscription key is set."""
        return bool(self.subscription_key and self.subscription_key.strip())

    @property
    def cache_key(self) -> str:
        """Stable key identifying this credential without exposing the secret."""
        raw = f"{self.subscription_key or ''}|{self.region or ''}"
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class CachedToken:
    """A bearer token and the clock reading at which it was obtained.

    Attributes:
        value: Token prefixed with "Bearer "
        obtained_at: Clock reading (seconds) when the token was fetched
    """

    value: str = field(repr=False)
    obtained_at: float

    def age(self, now: float) -> float:
        """Get age in seconds."""
        return now - self.obtained_at


class TokenProvider(ABC):
    """Source of bearer tokens for the translator and speech clients."""

    @property
    @abstractmethod
    def credential(self) -> Credential:
        """The credential tokens are issued for."""
        raise NotImplementedError

    @abstractmethod
    def set_credential(self, credential: Credential) -> None:
        """Replace the credential.

        Postcondition: any token cached for the previous credential is
        invalidated and will not be returned again.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_access_token(self, *, timeout: float | None = None) -> str:
        """Return a usable ``"Bearer <token>"`` string.

        Args:
            timeout: Timeout in seconds for a token fetch, if one is needed
        """
        raise NotImplementedError

    @property
    def subscription_key(self) -> str | None:
        return self.credential.subscription_key

    @property
    def region(self) -> str | None:
        return self.credential.region
