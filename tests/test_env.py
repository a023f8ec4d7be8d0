import pytest

from auth.session import LoginRedirect
from auth.token_store import FileTokenStore
from tokenpipe.app import create_client
from tokenpipe.env import Settings, is_truthy, load_settings, validate_settings

ENV_KEYS = (
    "TOKENPIPE_BASE_URL",
    "TOKENPIPE_TIMEOUT",
    "TOKENPIPE_REFRESH_URL",
    "TOKENPIPE_LOGIN_URL",
    "TOKENPIPE_TOKEN_STORE_PATH",
    "TOKENPIPE_REFRESH_TIMEOUT",
    "TOKENPIPE_DEBUG",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    settings = load_settings()

    assert settings.base_url == "http://localhost:3000"
    assert settings.timeout == 20.0
    assert settings.refresh_url == "/refresh_token"
    assert settings.login_url == "/login"
    assert settings.refresh_timeout is None
    assert settings.debug is True


def test_overrides(monkeypatch) -> None:
    monkeypatch.setenv("TOKENPIPE_BASE_URL", "https://api.example.com")
    monkeypatch.setenv("TOKENPIPE_TIMEOUT", "5")
    monkeypatch.setenv("TOKENPIPE_REFRESH_TIMEOUT", "2.5")
    monkeypatch.setenv("TOKENPIPE_DEBUG", "off")

    settings = load_settings()

    assert settings.base_url == "https://api.example.com"
    assert settings.timeout == 5.0
    assert settings.refresh_timeout == 2.5
    assert settings.debug is False


def test_invalid_number(monkeypatch) -> None:
    monkeypatch.setenv("TOKENPIPE_TIMEOUT", "soon")

    with pytest.raises(RuntimeError, match="TOKENPIPE_TIMEOUT must be a number"):
        load_settings()


def test_non_positive_timeout(monkeypatch) -> None:
    monkeypatch.setenv("TOKENPIPE_REFRESH_TIMEOUT", "0")

    with pytest.raises(RuntimeError, match="greater than zero"):
        load_settings()


def test_invalid_base_url() -> None:
    with pytest.raises(RuntimeError, match="TOKENPIPE_BASE_URL"):
        validate_settings(Settings(base_url="not a url"))


def test_empty_refresh_url() -> None:
    with pytest.raises(RuntimeError, match="TOKENPIPE_REFRESH_URL"):
        validate_settings(Settings(refresh_url=""))


def test_is_truthy() -> None:
    assert is_truthy(" YES ") is True
    assert is_truthy("0") is False
    assert is_truthy(None) is False


@pytest.mark.asyncio
async def test_create_client_from_settings(tmp_path) -> None:
    settings = Settings(
        base_url="https://api.example.com",
        token_store_path=str(tmp_path / "tokens.json"),
        login_url="/sign-in",
        refresh_timeout=3.0,
        debug=False,
    )

    async with create_client(settings) as client:
        assert isinstance(client.store, FileTokenStore)
        assert client.http.base_url.scheme == "https"
        assert client.http.base_url.host == "api.example.com"
        assert client.refresh_url == "/refresh_token"
        assert isinstance(client.teardown.navigate, LoginRedirect)
        assert client.teardown.navigate.login_url == "/sign-in"
