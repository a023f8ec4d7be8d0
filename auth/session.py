from __future__ import annotations

import logging
from typing import Callable

from auth.models import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY
from auth.token_store import TokenStore

LOGGER = logging.getLogger("tokenpipe.session")

DEFAULT_LOGIN_URL = "/login"


class LoginRedirect:
    """Navigation target used when no valid session can be established."""

    def __init__(
        self,
        login_url: str = DEFAULT_LOGIN_URL,
        *,
        on_redirect: Callable[[str], None] | None = None,
    ) -> None:
        self.login_url = login_url
        self._on_redirect = on_redirect

    def __call__(self) -> None:
        LOGGER.warning("Session is no longer valid; sign in again at %s", self.login_url)
        if self._on_redirect is not None:
            self._on_redirect(self.login_url)


class SessionTeardown:
    def __init__(self, store: TokenStore, navigate: Callable[[], None]) -> None:
        self.store = store
        self.navigate = navigate

    def __call__(self) -> None:
        self.store.delete(ACCESS_TOKEN_KEY)
        self.store.delete(REFRESH_TOKEN_KEY)
        LOGGER.info("Cleared stored credentials")
        self.navigate()
