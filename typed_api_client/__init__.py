"""
Typed HTTP API client.

Wraps a base URL, one of three auth modes and pydantic-based JSON
(de)serialization behind GET/POST/PUT/PATCH/DELETE, plus the OAuth2
authorization-code and refresh-token exchanges.
"""

from typed_api_client.auth import AuthConfig, AuthorizationHeader, NoAuth, OAuth2Config
from typed_api_client.client import TRACE, ApiClient, Queries
from typed_api_client.errors import (
    ApiClientError,
    ApiDecodeError,
    ApiTransportError,
    ApiUrlError,
    ClientConfigurationError,
    OAuth2ExecuteError,
)
from typed_api_client.oauth import AuthType, OAuth2Client, StandardToken
from typed_api_client.settings import Settings

__all__ = [
    "TRACE",
    "ApiClient",
    "ApiClientError",
    "ApiDecodeError",
    "ApiTransportError",
    "ApiUrlError",
    "AuthConfig",
    "AuthType",
    "AuthorizationHeader",
    "ClientConfigurationError",
    "NoAuth",
    "OAuth2Client",
    "OAuth2Config",
    "OAuth2ExecuteError",
    "Queries",
    "Settings",
    "StandardToken",
]
