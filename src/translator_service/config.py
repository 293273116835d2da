"""
Client settings.

Settings can be built explicitly or read from the environment:

- ``{PREFIX}_SUBSCRIPTION_KEY`` (falls back to the system keyring)
- ``{PREFIX}_REGION``
- ``{PREFIX}_LANGUAGE``
- ``{PREFIX}_HTTP_TIMEOUT_SECS``

where PREFIX defaults to ``TRANSLATOR`` (``SPEECH`` for the speech client).
"""

from __future__ import annotations

import locale
import os
from contextlib import suppress

from pydantic import BaseModel, ConfigDict, Field

from translator_service.auth.provider import Credential
from translator_service.transport.auth import resolve_subscription_key

DEFAULT_LANGUAGE = "en"
DEFAULT_TIMEOUT = 30.0


def default_language() -> str:
    """Language of the current process locale (``en_US`` -> ``en-us``)."""
    name: str | None = None
    with suppress(ValueError):
        name = locale.getlocale()[0]
    if not name or name in ("C", "POSIX"):
        return DEFAULT_LANGUAGE
    return name.replace("_", "-").lower()


class TranslatorSettings(BaseModel):
    """Connection settings shared by the translator and speech clients."""

    model_config = ConfigDict(frozen=True)

    subscription_key: str | None = Field(
        default=None, repr=False, description="Cognitive Services subscription key"
    )
    region: str | None = Field(
        default=None, description="Azure region; None selects the global service"
    )
    language: str = Field(
        default_factory=default_language,
        description="Default target language and Accept-Language",
    )
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="Timeout in seconds")

    @classmethod
    def from_env(
        cls,
        prefix: str = "TRANSLATOR",
        *,
        subscription_key: str | None = None,
        region: str | None = None,
        language: str | None = None,
    ) -> TranslatorSettings:
        """Build settings from environment variables.

        Explicit arguments take precedence over the environment.
        """
        prefix = prefix.upper()
        timeout = DEFAULT_TIMEOUT
        env_timeout = os.getenv(f"{prefix}_HTTP_TIMEOUT_SECS")
        if env_timeout:
            with suppress(ValueError):
                parsed = float(env_timeout)
                # Zero or negative values are ignored like unparsable ones
                if parsed > 0:
                    timeout = parsed

        return cls(
            subscription_key=resolve_subscription_key(prefix, subscription_key),
            region=region or os.getenv(f"{prefix}_REGION") or None,
            language=language or os.getenv(f"{prefix}_LANGUAGE") or default_language(),
            timeout=timeout,
        )

    def credential(self) -> Credential:
        """Credential for the token cache."""
        return Credential(subscription_key=self.subscription_key, region=self.region)
