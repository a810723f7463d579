"""Environment-driven configuration for the API client."""

import os
import re
from dataclasses import dataclass, field

from dotenv import find_dotenv, load_dotenv

from typed_api_client.auth import AuthConfig, AuthorizationHeader, NoAuth, OAuth2Config
from typed_api_client.oauth import AuthType

AUTH_MODES = ("none", "token", "oauth2")


def _optional(name: str) -> str:
    return os.getenv(name, "").strip()


def _required(name: str, *, reason: str = "") -> str:
    value = _optional(name)
    if not value:
        suffix = f" {reason}" if reason else ""
        raise ValueError(f"{name} is required but was not provided.{suffix}")
    return value


@dataclass(frozen=True, slots=True)
class Settings:
    """Container for runtime configuration."""

    api_base_url: str
    api_timeout: float = 30.0
    auth_mode: str = "none"
    api_token: str = field(default="", repr=False)
    oauth2_client_id: str = ""
    oauth2_client_secret: str = field(default="", repr=False)
    oauth2_authorize_path: str = ""
    oauth2_token_path: str = ""
    oauth2_refresh_path: str = ""
    oauth2_redirect_url: str = ""
    oauth2_scopes: tuple[str, ...] = ()
    oauth2_auth_type: AuthType = AuthType.BASIC_AUTH

    @classmethod
    def load(cls) -> "Settings":
        """
        Load configuration from environment variables.

        Python-dotenv is used so developers can rely on a local .env file without
        exporting variables globally. The file is looked up from the
        current working directory upwards.
        """
        load_dotenv(find_dotenv(usecwd=True))

        api_base_url = _required("API_BASE_URL")

        api_timeout_raw = _optional("API_TIMEOUT") or "30"
        try:
            api_timeout = float(api_timeout_raw)
        except ValueError as exc:
            raise ValueError("API_TIMEOUT must be a numeric value.") from exc
        if api_timeout <= 0:
            raise ValueError("API_TIMEOUT must be greater than zero.")

        auth_mode = (_optional("API_AUTH_MODE") or "none").lower()
        if auth_mode not in AUTH_MODES:
            raise ValueError(f"API_AUTH_MODE must be one of {', '.join(AUTH_MODES)}.")

        if auth_mode == "token":
            return cls(
                api_base_url=api_base_url,
                api_timeout=api_timeout,
                auth_mode=auth_mode,
                api_token=_required("API_TOKEN", reason="It is needed when API_AUTH_MODE=token."),
            )

        if auth_mode == "oauth2":
            reason = "It is needed when API_AUTH_MODE=oauth2."
            auth_type_raw = (_optional("OAUTH2_AUTH_TYPE") or AuthType.BASIC_AUTH.value).lower()
            try:
                auth_type = AuthType(auth_type_raw)
            except ValueError as exc:
                choices = ", ".join(t.value for t in AuthType)
                raise ValueError(f"OAUTH2_AUTH_TYPE must be one of {choices}.") from exc
            return cls(
                api_base_url=api_base_url,
                api_timeout=api_timeout,
                auth_mode=auth_mode,
                oauth2_client_id=_required("OAUTH2_CLIENT_ID", reason=reason),
                oauth2_client_secret=_required("OAUTH2_CLIENT_SECRET", reason=reason),
                oauth2_authorize_path=_required("OAUTH2_AUTHORIZE_PATH", reason=reason),
                oauth2_token_path=_required("OAUTH2_TOKEN_PATH", reason=reason),
                oauth2_refresh_path=_required("OAUTH2_REFRESH_PATH", reason=reason),
                oauth2_redirect_url=_required("OAUTH2_REDIRECT_URL", reason=reason),
                oauth2_scopes=tuple(scope for scope in re.split(r"[\s,]+", _optional("OAUTH2_SCOPES")) if scope),
                oauth2_auth_type=auth_type,
            )

        return cls(api_base_url=api_base_url, api_timeout=api_timeout)

    def auth_config(self) -> AuthConfig:
        """Translate the configured auth mode into an ``AuthConfig`` variant."""
        if self.auth_mode == "token":
            return AuthorizationHeader(token=self.api_token)
        if self.auth_mode == "oauth2":
            return OAuth2Config(
                client_id=self.oauth2_client_id,
                client_secret=self.oauth2_client_secret,
                authorize_path=self.oauth2_authorize_path,
                token_path=self.oauth2_token_path,
                refresh_path=self.oauth2_refresh_path,
                redirect_url=self.oauth2_redirect_url,
                scopes=list(self.oauth2_scopes),
                auth_type=self.oauth2_auth_type,
            )
        return NoAuth()
