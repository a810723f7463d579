"""Error taxonomy for the typed API client.

Every failure surfaces to the caller as one of the flat subclasses below;
nothing is retried or swallowed internally.
"""


class ApiClientError(RuntimeError):
    """Base class for failures raised by the API client."""


class ClientConfigurationError(ApiClientError):
    """An operation was invoked that the client was not configured for."""


class ApiTransportError(ApiClientError):
    """The HTTP transport failed (connect, TLS, timeout, protocol)."""


class ApiUrlError(ApiClientError):
    """A configured or request-time URL failed to parse or resolve."""


class ApiDecodeError(ApiClientError):
    """The response body could not be parsed as the requested type."""

    def __init__(self, message: str, *, body: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.body = body
        self.status_code = status_code


class OAuth2ExecuteError(ApiClientError):
    """The OAuth2 code exchange or token refresh failed."""

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.status_code = status_code
