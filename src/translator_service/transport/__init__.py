"""
Transport layer - HTTP plumbing shared by the translator and speech clients.

Provides:
- httpx-based transport with a shared connection pool
- Request signing with bearer tokens
- Subscription key resolution
"""

from translator_service.transport.auth import (
    AUTHORIZATION_HEADER,
    SUBSCRIPTION_KEY_HEADER,
    SUBSCRIPTION_REGION_HEADER,
    resolve_subscription_key,
    store_subscription_key,
)
from translator_service.transport.http import HttpTransport, decode_json
from translator_service.transport.pool import PoolConfig
from translator_service.transport.signer import RequestSigner, default_user_agent

__all__ = [
    "AUTHORIZATION_HEADER",
    "HttpTransport",
    "PoolConfig",
    "RequestSigner",
    "SUBSCRIPTION_KEY_HEADER",
    "SUBSCRIPTION_REGION_HEADER",
    "decode_json",
    "default_user_agent",
    "resolve_subscription_key",
    "store_subscription_key",
]
