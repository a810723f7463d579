"""
Generic typed API client.

One request path serves every verb and every auth mode: paths are resolved
against the base URL, the body is sent as JSON, and the response text is
validated into whatever type the caller asks for.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError
from pydantic_core import to_jsonable_python

from typed_api_client.auth import AuthConfig, NoAuth, resolve_auth
from typed_api_client.errors import ApiDecodeError, ApiTransportError, ClientConfigurationError
from typed_api_client.http_client import DEFAULT_TIMEOUT, create_http_client, join_url, parse_absolute_url
from typed_api_client.oauth import OAuth2Client, StandardToken
from typed_api_client.settings import Settings

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

logger = logging.getLogger(__name__)

T = TypeVar("T")

Queries = Sequence[tuple[str, str]]


@lru_cache(maxsize=256)
def _cached_adapter(response_model: Any) -> TypeAdapter[Any]:
    return TypeAdapter(response_model)


def _type_adapter(response_model: Any) -> TypeAdapter[Any]:
    try:
        return _cached_adapter(response_model)
    except TypeError:
        # Unhashable annotations cannot be cached.
        return TypeAdapter(response_model)


@dataclass(frozen=True, slots=True)
class ApiClient:
    """
    Typed wrapper around a shared AsyncClient, bound to one base URL and auth mode.

    Request paths use RFC 3986 resolution against ``base_url``: keep a trailing
    slash on the base URL (``https://api.example.com/v1/``) and use relative
    paths (``users/42``), otherwise the last base segment is replaced.

    HTTP status codes are not inspected. Any response whose body validates as
    the requested type is returned, including 4xx/5xx responses.
    """

    _client: httpx.AsyncClient
    base_url: httpx.URL
    oauth_client: OAuth2Client | None = None
    logger: logging.Logger = field(default=logger, repr=False)

    @classmethod
    def create(
        cls,
        api_url: str,
        auth: AuthConfig | None = None,
        default_headers: Mapping[str, str] | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: logging.Logger | None = None,
    ) -> "ApiClient":
        """Parse the base URL, resolve ``auth`` and build the shared transport."""
        base_url = parse_absolute_url(api_url, field_name="API base URL")
        headers = httpx.Headers(default_headers)
        headers, oauth_client = resolve_auth(auth if auth is not None else NoAuth(), base_url, headers)
        client = create_http_client(headers=headers, timeout=timeout, transport=transport)
        kwargs: dict[str, Any] = {}
        if logger is not None:
            kwargs["logger"] = logger
        return cls(client, base_url, oauth_client, **kwargs)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        default_headers: Mapping[str, str] | None = None,
    ) -> "ApiClient":
        """Factory that builds the client from Settings."""
        return cls.create(
            settings.api_base_url,
            settings.auth_config(),
            default_headers,
            timeout=settings.api_timeout,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP resources."""
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def join_url(self, path: str) -> httpx.URL:
        """Resolve ``path`` against the base URL (RFC 3986, see class docstring)."""
        return join_url(self.base_url, path)

    async def get(
        self,
        path: str,
        response_model: type[T],
        query: Queries | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> T:
        """GET ``path`` with optional query pairs and parse the body as ``response_model``."""
        return await self._handle_request("GET", path, response_model, query=query, headers=headers)

    async def post(
        self,
        path: str,
        response_model: type[T],
        json_body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> T:
        """POST ``json_body`` to ``path`` and parse the response."""
        return await self._handle_request("POST", path, response_model, json_body=json_body, headers=headers)

    async def put(
        self,
        path: str,
        response_model: type[T],
        json_body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> T:
        """PUT ``json_body`` to ``path`` and parse the response."""
        return await self._handle_request("PUT", path, response_model, json_body=json_body, headers=headers)

    async def patch(
        self,
        path: str,
        response_model: type[T],
        json_body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> T:
        """PATCH ``path`` with ``json_body`` and parse the response."""
        return await self._handle_request("PATCH", path, response_model, json_body=json_body, headers=headers)

    async def delete(
        self,
        path: str,
        response_model: type[T],
        headers: Mapping[str, str] | None = None,
    ) -> T:
        """DELETE ``path`` and parse the response."""
        return await self._handle_request("DELETE", path, response_model, headers=headers)

    async def _handle_request(
        self,
        method: str,
        path: str,
        response_model: type[T],
        *,
        query: Queries | None = None,
        json_body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> T:
        """Normalized request handler for all outgoing API calls."""
        url = self.join_url(path)
        request_kwargs: dict[str, Any] = {}
        if query is not None:
            request_kwargs["params"] = list(query)
        if json_body is not None:
            request_kwargs["json"] = to_jsonable_python(json_body)
        if headers is not None:
            request_kwargs["headers"] = headers

        def _transport_error(message: str, *, exc: Exception) -> ApiTransportError:
            self.logger.error(
                message,
                extra={"method": method, "path": path},
                exc_info=exc,
            )
            return ApiTransportError(message)

        self.logger.debug("Sending API request", extra={"method": method, "url": str(url)})
        try:
            response = await self._client.request(method, url, **request_kwargs)
        except httpx.TimeoutException as exc:
            raise _transport_error(f"API request timed out ({method} {path}).", exc=exc) from exc
        except httpx.RequestError as exc:
            raise _transport_error(f"API request failed ({method} {path}): {exc!s}", exc=exc) from exc

        return self._parse_response(response, response_model)

    def _parse_response(self, response: httpx.Response, response_model: type[T]) -> T:
        text = response.text
        self.logger.log(TRACE, "Raw API response: %s", text, extra={"status_code": response.status_code})
        try:
            parsed = _type_adapter(response_model).validate_json(text)
        except ValidationError as exc:
            self.logger.error(
                "API response parsing failed! Raw response: %s",
                text,
                extra={"status_code": response.status_code},
            )
            request = response.request
            raise ApiDecodeError(
                f"API response could not be parsed ({request.method} {request.url.path}, "
                f"status {response.status_code}): {exc.error_count()} validation error(s).",
                body=text,
                status_code=response.status_code,
            ) from exc

        # TODO: inspect response.status_code and decode the API error body once its format is defined.
        self.logger.debug("API response: %r", parsed)
        return parsed

    def _ensure_oauth(self) -> OAuth2Client:
        if self.oauth_client is None:
            raise ClientConfigurationError("OAuth2 not in use")
        return self.oauth_client

    def authorize_url(self, state: str | None = None) -> tuple[httpx.URL, str]:
        """Authorization endpoint URL to send the user to, with its CSRF state."""
        return self._ensure_oauth().authorize_url(state)

    async def exchange_code(self, code: str) -> StandardToken:
        """Exchange an authorization code for a token over the shared transport."""
        oauth = self._ensure_oauth()
        return await oauth.exchange_code(code, http_client=self._client)

    async def refresh(self, refresh_token: str) -> StandardToken:
        """Refresh a token over the shared transport."""
        oauth = self._ensure_oauth()
        return await oauth.exchange_refresh_token(refresh_token, http_client=self._client)
