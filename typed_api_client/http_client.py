"""HTTP transport factory and URL helpers shared by the API and OAuth2 clients."""

import httpx

from typed_api_client.errors import ApiUrlError

DEFAULT_TIMEOUT = 30.0


def create_http_client(
    *,
    headers: httpx.Headers | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Build the AsyncClient shared by plain API calls and OAuth2 token calls.

    No base_url is configured on the transport: paths are resolved by the
    caller with RFC 3986 semantics (see ``join_url``).
    """
    return httpx.AsyncClient(
        headers=headers,
        timeout=timeout,
        transport=transport,
    )


def parse_absolute_url(value: str, *, field_name: str = "URL") -> httpx.URL:
    """Parse ``value`` and require a scheme and host."""
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL as exc:
        raise ApiUrlError(f"{field_name} could not be parsed: {exc!s}") from exc
    if not url.is_absolute_url:
        raise ApiUrlError(f"{field_name} must be an absolute URL, got {value!r}.")
    return url


def join_url(base_url: httpx.URL, path: str) -> httpx.URL:
    """
    Resolve ``path`` against ``base_url`` using RFC 3986 reference resolution.

    The last segment of a base path without a trailing slash is replaced:
    ``https://api.example.com/v1`` + ``users/42`` gives
    ``https://api.example.com/users/42``, while ``https://api.example.com/v1/``
    gives ``https://api.example.com/v1/users/42``. A path starting with ``/``
    replaces the whole base path.
    """
    try:
        return base_url.join(path)
    except httpx.InvalidURL as exc:
        raise ApiUrlError(f"Path {path!r} could not be resolved against {base_url}: {exc!s}") from exc
