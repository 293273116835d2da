"""
Subscription key resolution utilities.

Resolves subscription keys from multiple sources:
1. Explicit value
2. Environment variables
3. System keyring (optional)
"""

from __future__ import annotations

import os

from translator_service._features import require_extra

SUBSCRIPTION_KEY_HEADER = "Ocp-Apim-Subscription-Key"
SUBSCRIPTION_REGION_HEADER = "Ocp-Apim-Subscription-Region"
AUTHORIZATION_HEADER = "Authorization"

_KEYRING_SERVICE = "translator-service"


def resolve_subscription_key(
    prefix: str = "TRANSLATOR",
    explicit_key: str | None = None,
) -> str | None:
    """Resolve a subscription key.

    Resolution order:
    1. Explicit key if provided
    2. Environment variable ``{PREFIX}_SUBSCRIPTION_KEY``
    3. System keyring entry ``translator-service`` / ``prefix.lower()``

    Args:
        prefix: Environment prefix (e.g., "TRANSLATOR", "SPEECH")
        explicit_key: Explicitly provided subscription key

    Returns:
        Resolved subscription key or None if not found
    """
    if explicit_key:
        return explicit_key

    key = os.getenv(f"{prefix.upper()}_SUBSCRIPTION_KEY")
    if key:
        return key

    return _try_keyring(prefix.lower())


def _try_keyring(username: str) -> str | None:
    """Try to get the subscription key from the system keyring."""
    try:
        import keyring
        from keyring.errors import KeyringError
    except ImportError:
        # keyring is an optional extra
        return None

    try:
        return keyring.get_password(_KEYRING_SERVICE, username)
    except KeyringError:
        # No usable backend (common in containers, WSL, etc.)
        return None


def store_subscription_key(key: str, prefix: str = "TRANSLATOR") -> None:
    """Save a subscription key in the system keyring.

    Requires the ``keyring`` extra.

    Example:
        >>> store_subscription_key("<key>", prefix="SPEECH")
        >>> resolve_subscription_key("SPEECH")
        '<key>'
    """
    require_extra("keyring", "keyring")
    import keyring

    keyring.set_password(_KEYRING_SERVICE, prefix.lower(), key)
