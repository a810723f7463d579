"""
OAuth2 client handle for the authorization-code and refresh-token grants.

The handle only holds endpoint and credential configuration; every token
request is executed over an ``httpx.AsyncClient`` supplied by the caller so
that proxy, TLS and default header settings match the plain API calls.
"""

import logging
import secrets
from enum import Enum
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from typed_api_client.errors import OAuth2ExecuteError

logger = logging.getLogger(__name__)


class AuthType(str, Enum):
    """How client credentials are sent to the token endpoint."""

    BASIC_AUTH = "basic"
    REQUEST_BODY = "request_body"


class StandardToken(BaseModel):
    """Standard OAuth2 token response (RFC 6749 section 5.1)."""

    model_config = ConfigDict(extra="allow")

    access_token: str = Field(repr=False)
    token_type: str
    expires_in: int | None = None
    refresh_token: str | None = Field(default=None, repr=False)
    scope: str | None = None

    @property
    def scopes(self) -> list[str]:
        return self.scope.split() if self.scope else []

    def authorization_header(self) -> dict[str, str]:
        """Header for attaching this token to a single API request."""
        return {"Authorization": f"Bearer {self.access_token}"}


class OAuth2Client:
    """Configured OAuth2 endpoints, credentials and scopes."""

    def __init__(self, client_id: str, authorize_url: httpx.URL, token_url: httpx.URL) -> None:
        self.client_id = client_id
        self.authorize_endpoint = authorize_url
        self.token_url = token_url
        self.refresh_url: httpx.URL | None = None
        self.client_secret: str | None = None
        self.auth_type = AuthType.BASIC_AUTH
        self.redirect_url: httpx.URL | None = None
        self.scopes: list[str] = []

    def __repr__(self) -> str:
        return (
            f"OAuth2Client(client_id={self.client_id!r}, token_url={str(self.token_url)!r}, "
            f"auth_type={self.auth_type.value!r}, scopes={self.scopes!r})"
        )

    def set_refresh_url(self, url: httpx.URL) -> None:
        self.refresh_url = url

    def set_client_secret(self, secret: str) -> None:
        self.client_secret = secret

    def set_auth_type(self, auth_type: AuthType) -> None:
        self.auth_type = auth_type

    def set_redirect_url(self, url: httpx.URL) -> None:
        self.redirect_url = url

    def add_scope(self, scope: str) -> None:
        self.scopes.append(scope)

    def authorize_url(self, state: str | None = None) -> tuple[httpx.URL, str]:
        """
        Build the URL the resource owner is sent to, and the CSRF state used.

        A random URL-safe state is generated when none is given; the caller
        must compare it with the ``state`` returned on the redirect.
        """
        csrf_state = state if state is not None else secrets.token_urlsafe(16)
        params: list[tuple[str, str]] = [
            ("response_type", "code"),
            ("client_id", self.client_id),
        ]
        if self.redirect_url is not None:
            params.append(("redirect_uri", str(self.redirect_url)))
        if self.scopes:
            params.append(("scope", " ".join(self.scopes)))
        params.append(("state", csrf_state))
        return self.authorize_endpoint.copy_merge_params(params), csrf_state

    async def exchange_code(self, code: str, *, http_client: httpx.AsyncClient) -> StandardToken:
        """Exchange an authorization code at the token endpoint."""
        form = {"grant_type": "authorization_code", "code": code}
        if self.redirect_url is not None:
            form["redirect_uri"] = str(self.redirect_url)
        return await self._request_token(self.token_url, form, http_client)

    async def exchange_refresh_token(
        self,
        refresh_token: str,
        *,
        http_client: httpx.AsyncClient,
    ) -> StandardToken:
        """Obtain a new token from the refresh endpoint."""
        form = {"grant_type": "refresh_token", "refresh_token": refresh_token}
        if self.scopes:
            form["scope"] = " ".join(self.scopes)
        url = self.refresh_url if self.refresh_url is not None else self.token_url
        return await self._request_token(url, form, http_client)

    async def _request_token(
        self,
        url: httpx.URL,
        form: dict[str, str],
        http_client: httpx.AsyncClient,
    ) -> StandardToken:
        grant_type = form["grant_type"]
        auth: httpx.BasicAuth | None = None
        if self.auth_type is AuthType.BASIC_AUTH and self.client_secret is not None:
            # RFC 6749 section 2.3.1: credentials are form-urlencoded before Basic encoding.
            auth = httpx.BasicAuth(quote(self.client_id, safe=""), quote(self.client_secret, safe=""))
        else:
            form["client_id"] = self.client_id
            if self.client_secret is not None:
                form["client_secret"] = self.client_secret

        logger.debug("Requesting OAuth2 token", extra={"grant_type": grant_type, "url": str(url)})
        try:
            response = await http_client.post(
                url,
                data=form,
                headers={
                    "Accept": "application/json",
                    "Content-Type": "application/x-www-form-urlencoded",
                },
                auth=auth if auth is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.RequestError as exc:
            logger.error(
                "OAuth2 token request failed",
                extra={"grant_type": grant_type, "url": str(url)},
                exc_info=exc,
            )
            raise OAuth2ExecuteError(f"OAuth2 token request failed ({grant_type}): {exc!s}") from exc

        if response.is_error:
            raise _error_response(response, grant_type)

        try:
            token = StandardToken.model_validate_json(response.content)
        except ValidationError as exc:
            logger.error(
                "OAuth2 token response could not be parsed",
                extra={"grant_type": grant_type, "status_code": response.status_code},
            )
            raise OAuth2ExecuteError(
                f"OAuth2 token response could not be parsed ({grant_type}).",
                status_code=response.status_code,
            ) from exc

        logger.info(
            "OAuth2 token obtained",
            extra={"grant_type": grant_type, "expires_in": token.expires_in},
        )
        return token


def _error_response(response: httpx.Response, grant_type: str) -> OAuth2ExecuteError:
    """Translate an RFC 6749 error response into ``OAuth2ExecuteError``."""
    error_code: str | None = None
    description = ""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        error_code = payload.get("error")
        description = payload.get("error_description") or ""

    if error_code:
        message = f"OAuth2 server rejected {grant_type} ({response.status_code}): {error_code}"
        if description:
            message = f"{message}: {description}"
    else:
        snippet = response.text.strip()
        if len(snippet) > 512:
            snippet = f"{snippet[:512]}..."
        message = f"OAuth2 token endpoint error ({response.status_code}) during {grant_type}: {snippet or 'no body provided.'}"

    logger.warning(
        "OAuth2 token endpoint responded with error",
        extra={"grant_type": grant_type, "status_code": response.status_code, "error_code": error_code},
    )
    return OAuth2ExecuteError(message, error_code=error_code, status_code=response.status_code)
