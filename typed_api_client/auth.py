"""Authentication configuration variants and their resolution into client state."""

from dataclasses import dataclass, field

import httpx

from typed_api_client.http_client import join_url, parse_absolute_url
from typed_api_client.oauth import AuthType, OAuth2Client


@dataclass(frozen=True, slots=True)
class NoAuth:
    """Requests are sent without credentials."""


@dataclass(frozen=True, slots=True)
class AuthorizationHeader:
    """A static ``Authorization`` header value sent with every request."""

    token: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class OAuth2Config:
    """OAuth2 client credentials and endpoint paths relative to the base URL."""

    client_id: str
    client_secret: str = field(repr=False)
    authorize_path: str
    token_path: str
    refresh_path: str
    redirect_url: str
    scopes: list[str] = field(default_factory=list)
    auth_type: AuthType = AuthType.BASIC_AUTH


AuthConfig = NoAuth | AuthorizationHeader | OAuth2Config


def _validate_header_value(value: str) -> str:
    # Visible characters, space and horizontal tab only.
    for char in value:
        code = ord(char)
        if (code < 0x20 and char != "\t") or code == 0x7F:
            raise ValueError("Invalid API token value: contains characters not allowed in a header.")
    return value


def build_oauth2_client(config: OAuth2Config, base_url: httpx.URL) -> OAuth2Client:
    """Create the OAuth2 handle with every endpoint resolved against ``base_url``."""
    authorize_url = join_url(base_url, config.authorize_path)
    token_url = join_url(base_url, config.token_path)
    refresh_url = join_url(base_url, config.refresh_path)

    oauth_client = OAuth2Client(config.client_id, authorize_url, token_url)
    oauth_client.set_refresh_url(refresh_url)
    oauth_client.set_client_secret(config.client_secret)
    oauth_client.set_auth_type(config.auth_type)
    oauth_client.set_redirect_url(parse_absolute_url(config.redirect_url, field_name="OAuth2 redirect URL"))
    for scope in config.scopes:
        oauth_client.add_scope(scope)
    return oauth_client


def resolve_auth(
    auth: AuthConfig,
    base_url: httpx.URL,
    headers: httpx.Headers,
) -> tuple[httpx.Headers, OAuth2Client | None]:
    """
    Apply ``auth`` to the default header set.

    Returns the (possibly updated) headers and the OAuth2 handle, which is
    only present for ``OAuth2Config``. OAuth2 bearer tokens are not injected
    as a default header; callers attach them per request.
    """
    if isinstance(auth, NoAuth):
        return headers, None
    if isinstance(auth, AuthorizationHeader):
        headers["Authorization"] = _validate_header_value(auth.token)
        return headers, None
    if isinstance(auth, OAuth2Config):
        return headers, build_oauth2_client(auth, base_url)
    raise TypeError(f"Unsupported auth configuration: {type(auth).__name__}")
