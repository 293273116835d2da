"""
Authentication - bearer tokens for Cognitive Services.

Provides:
- Credential and CachedToken value types
- The TokenProvider interface
- TokenCache, the caching issue-token client
"""

from translator_service.auth.provider import CachedToken, Credential, TokenProvider
from translator_service.auth.token_cache import (
    GLOBAL_AUTH_URL,
    REGION_AUTH_URL,
    TOKEN_REFRESH_AFTER,
    TokenCache,
    auth_url_for,
)

__all__ = [
    "CachedToken",
    "Credential",
    "GLOBAL_AUTH_URL",
    "REGION_AUTH_URL",
    "TOKEN_REFRESH_AFTER",
    "TokenCache",
    "TokenProvider",
    "auth_url_for",
]
