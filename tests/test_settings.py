import os

import pytest

from typed_api_client import ApiClient, AuthorizationHeader, AuthType, NoAuth, OAuth2Config, Settings

ENV_VARS = (
    "API_BASE_URL",
    "API_TIMEOUT",
    "API_AUTH_MODE",
    "API_TOKEN",
    "OAUTH2_CLIENT_ID",
    "OAUTH2_CLIENT_SECRET",
    "OAUTH2_AUTHORIZE_PATH",
    "OAUTH2_TOKEN_PATH",
    "OAUTH2_REFRESH_PATH",
    "OAUTH2_REDIRECT_URL",
    "OAUTH2_SCOPES",
    "OAUTH2_AUTH_TYPE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    # load_dotenv writes into os.environ; give every test its own copy.
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(os, "environ", {k: v for k, v in os.environ.items() if k not in ENV_VARS})


def test_defaults_to_no_auth(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "https://api.example.com/v1/")
    settings = Settings.load()

    assert settings.api_base_url == "https://api.example.com/v1/"
    assert settings.api_timeout == 30.0
    assert settings.auth_config() == NoAuth()


def test_base_url_is_required() -> None:
    with pytest.raises(ValueError, match="API_BASE_URL"):
        Settings.load()


@pytest.mark.parametrize("timeout", ["abc", "0", "-5"])
def test_invalid_timeout(monkeypatch: pytest.MonkeyPatch, timeout: str) -> None:
    monkeypatch.setenv("API_BASE_URL", "https://api.example.com/")
    monkeypatch.setenv("API_TIMEOUT", timeout)
    with pytest.raises(ValueError, match="API_TIMEOUT"):
        Settings.load()


def test_unknown_auth_mode(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "https://api.example.com/")
    monkeypatch.setenv("API_AUTH_MODE", "kerberos")
    with pytest.raises(ValueError, match="API_AUTH_MODE"):
        Settings.load()


def test_token_mode(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "https://api.example.com/")
    monkeypatch.setenv("API_AUTH_MODE", "token")
    monkeypatch.setenv("API_TOKEN", "Bearer from-env")
    settings = Settings.load()

    assert settings.auth_config() == AuthorizationHeader(token="Bearer from-env")
    assert "from-env" not in repr(settings)


def test_token_mode_requires_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "https://api.example.com/")
    monkeypatch.setenv("API_AUTH_MODE", "token")
    with pytest.raises(ValueError, match="API_TOKEN"):
        Settings.load()


def _set_oauth_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "https://api.example.com/v1/")
    monkeypatch.setenv("API_AUTH_MODE", "OAuth2")
    monkeypatch.setenv("OAUTH2_CLIENT_ID", "cid")
    monkeypatch.setenv("OAUTH2_CLIENT_SECRET", "csecret")
    monkeypatch.setenv("OAUTH2_AUTHORIZE_PATH", "oauth/authorize")
    monkeypatch.setenv("OAUTH2_TOKEN_PATH", "oauth/token")
    monkeypatch.setenv("OAUTH2_REFRESH_PATH", "oauth/refresh")
    monkeypatch.setenv("OAUTH2_REDIRECT_URL", "https://app.example.com/cb")


def test_oauth2_mode(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_oauth_env(monkeypatch)
    monkeypatch.setenv("OAUTH2_SCOPES", "read, write  admin")
    monkeypatch.setenv("OAUTH2_AUTH_TYPE", "request_body")
    settings = Settings.load()

    assert settings.auth_config() == OAuth2Config(
        client_id="cid",
        client_secret="csecret",
        authorize_path="oauth/authorize",
        token_path="oauth/token",
        refresh_path="oauth/refresh",
        redirect_url="https://app.example.com/cb",
        scopes=["read", "write", "admin"],
        auth_type=AuthType.REQUEST_BODY,
    )
    assert "csecret" not in repr(settings)


def test_oauth2_mode_without_scopes_uses_basic_auth(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_oauth_env(monkeypatch)
    settings = Settings.load()
    assert settings.oauth2_scopes == ()
    assert settings.oauth2_auth_type is AuthType.BASIC_AUTH


def test_oauth2_mode_rejects_unknown_auth_type(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_oauth_env(monkeypatch)
    monkeypatch.setenv("OAUTH2_AUTH_TYPE", "mtls")
    with pytest.raises(ValueError, match="OAUTH2_AUTH_TYPE"):
        Settings.load()


def test_oauth2_mode_requires_every_endpoint(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_oauth_env(monkeypatch)
    monkeypatch.delenv("OAUTH2_REFRESH_PATH")
    with pytest.raises(ValueError, match="OAUTH2_REFRESH_PATH"):
        Settings.load()


def test_dotenv_file_is_read(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    (tmp_path / ".env").write_text("API_BASE_URL=https://dotenv.example.com/\nAPI_TIMEOUT=5\n")
    settings = Settings.load()
    assert settings.api_base_url == "https://dotenv.example.com/"
    assert settings.api_timeout == 5.0


@pytest.mark.anyio
async def test_client_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_oauth_env(monkeypatch)
    client = ApiClient.from_settings(Settings.load())

    assert str(client.base_url) == "https://api.example.com/v1/"
    assert client.oauth_client is not None
    assert str(client.oauth_client.token_url) == "https://api.example.com/v1/oauth/token"
    await client.aclose()
