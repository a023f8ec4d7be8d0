from __future__ import annotations

import time
from typing import Any, Callable

import httpx

from auth.decoder import decode_expiry
from auth.models import CredentialPair
from auth.refresh import DEFAULT_REFRESH_URL, request_new_credentials
from auth.session import SessionTeardown
from auth.token_store import TokenStore

from .constants import DEFAULT_BASE_URL, DEFAULT_HEADERS, DEFAULT_TIMEOUT_SECONDS
from .coordinator import RefreshCoordinator
from .http import RequestContext, RequestFailure, build_logging_hooks, dispatch
from .interceptors import attach_bearer_credential, intercept_failure


class AuthenticatedClient:
    def __init__(
        self,
        *,
        store: TokenStore,
        navigate: Callable[[], None],
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        refresh_url: str = DEFAULT_REFRESH_URL,
        refresh_timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        debug_enabled: bool = False,
        decoder: Callable[[str], float] = decode_expiry,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.refresh_url = refresh_url
        self._decoder = decoder
        self._clock = clock

        log_request, log_response = build_logging_hooks(debug_enabled)

        async def sign_request(request: httpx.Request) -> None:
            await attach_bearer_credential(request, store)

        self.http = httpx.AsyncClient(
            base_url=base_url,
            headers=DEFAULT_HEADERS,
            timeout=timeout,
            transport=transport,
            event_hooks={
                "request": [sign_request, log_request],
                "response": [log_response],
            },
        )
        self.teardown = SessionTeardown(store, navigate)
        self.coordinator = RefreshCoordinator(
            refresh=self._refresh,
            replay=self._replay,
            store=store,
            teardown=self.teardown,
            timeout=refresh_timeout,
        )

    async def send(self, context: RequestContext) -> httpx.Response:
        try:
            return await dispatch(self.http, context)
        except RequestFailure as failure:
            return await intercept_failure(
                failure,
                context,
                store=self.store,
                coordinator=self.coordinator,
                decoder=self._decoder,
                clock=self._clock,
            )

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        return await self.send(RequestContext(method=method.upper(), url=url, **kwargs))

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def _refresh(self, refresh_token: str) -> CredentialPair:
        return await request_new_credentials(
            self.http, refresh_token, refresh_url=self.refresh_url
        )

    async def _replay(self, context: RequestContext, access_token: str) -> httpx.Response:
        return await dispatch(self.http, context.with_bearer(access_token))

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "AuthenticatedClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
