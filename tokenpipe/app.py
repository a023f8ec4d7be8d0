from __future__ import annotations

import httpx

from auth.session import LoginRedirect
from auth.token_store import FileTokenStore

from .client import AuthenticatedClient
from .env import Settings, load_env, load_settings, setup_logging, validate_settings


def create_client(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AuthenticatedClient:
    if settings is None:
        load_env()
        settings = load_settings()
    debug_enabled = setup_logging(settings)
    validate_settings(settings)

    return AuthenticatedClient(
        store=FileTokenStore(settings.token_store_path),
        navigate=LoginRedirect(settings.login_url),
        base_url=settings.base_url,
        timeout=settings.timeout,
        refresh_url=settings.refresh_url,
        refresh_timeout=settings.refresh_timeout,
        transport=transport,
        debug_enabled=debug_enabled,
    )
