from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from pydantic import AnyHttpUrl, ValidationError

from auth.refresh import DEFAULT_REFRESH_URL
from auth.session import DEFAULT_LOGIN_URL

from .constants import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS, LOGGER


@dataclass
class Settings:
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    refresh_url: str = DEFAULT_REFRESH_URL
    login_url: str = DEFAULT_LOGIN_URL
    token_store_path: str = ".tokens.json"
    refresh_timeout: float | None = None
    debug: bool = True


def is_truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_env_float(key: str, default: float | None) -> float | None:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be a number.")
    if value <= 0:
        raise RuntimeError(f"{key} must be greater than zero.")
    return value


def load_env() -> None:
    env_path = Path(__file__).resolve().parent.parent / ".env"
    if not env_path.exists():
        return
    try:
        from dotenv import load_dotenv
    except ImportError:
        return
    load_dotenv(env_path, override=True)


def load_settings() -> Settings:
    return Settings(
        base_url=os.getenv("TOKENPIPE_BASE_URL", DEFAULT_BASE_URL).strip(),
        timeout=_get_env_float("TOKENPIPE_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
        refresh_url=os.getenv("TOKENPIPE_REFRESH_URL", DEFAULT_REFRESH_URL).strip(),
        login_url=os.getenv("TOKENPIPE_LOGIN_URL", DEFAULT_LOGIN_URL).strip(),
        token_store_path=os.getenv("TOKENPIPE_TOKEN_STORE_PATH", ".tokens.json"),
        refresh_timeout=_get_env_float("TOKENPIPE_REFRESH_TIMEOUT", None),
        debug=is_truthy(os.getenv("TOKENPIPE_DEBUG", "1")),
    )


def validate_settings(settings: Settings) -> None:
    try:
        AnyHttpUrl(settings.base_url)
    except ValidationError as error:
        raise RuntimeError(
            "TOKENPIPE_BASE_URL must be a valid http(s) URL (for example: "
            "https://api.example.com)."
        ) from error

    if not settings.refresh_url:
        raise RuntimeError("TOKENPIPE_REFRESH_URL must not be empty.")
    if not settings.login_url:
        LOGGER.warning("TOKENPIPE_LOGIN_URL is empty; expired sessions will not redirect anywhere.")


def setup_logging(settings: Settings) -> bool:
    if settings.debug:
        logging.basicConfig(level=logging.INFO)
        LOGGER.setLevel(logging.INFO)
    return settings.debug
