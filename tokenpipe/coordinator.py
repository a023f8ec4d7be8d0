from __future__ import annotations

import asyncio
import enum
from collections import deque
from dataclasses import dataclass
from typing import Awaitable, Callable

import httpx

from auth.models import REFRESH_TOKEN_KEY, CredentialPair
from auth.refresh import RefreshError
from auth.token_store import TokenStore, save_credentials

from .constants import LOGGER
from .http import RequestContext, RequestFailure

RefreshFn = Callable[[str], Awaitable[CredentialPair]]
ReplayFn = Callable[[RequestContext, str], Awaitable[httpx.Response]]


class RefreshState(enum.Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"


@dataclass
class PendingReplay:
    context: RequestContext
    future: asyncio.Future

    def resume(self, access_token: str) -> None:
        if not self.future.done():
            self.future.set_result(access_token)

    def reject(self, error: BaseException) -> None:
        if not self.future.done():
            self.future.set_exception(error)


class RefreshCoordinator:
    """Single-flight credential refresh shared by every call of one client.

    The first caller to report an expired access token while idle drives the
    refresh. Callers arriving while it is in flight are queued and resumed in
    arrival order with the same new access token, or all rejected with the
    same ``RefreshError`` if the refresh fails.
    """

    def __init__(
        self,
        *,
        refresh: RefreshFn,
        replay: ReplayFn,
        store: TokenStore,
        teardown: Callable[[], None],
        timeout: float | None = None,
    ) -> None:
        self._refresh = refresh
        self._replay = replay
        self._store = store
        self._teardown = teardown
        self._timeout = timeout
        self._state = RefreshState.IDLE
        self._queue: deque[PendingReplay] = deque()

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def pending(self) -> int:
        return len(self._queue)

    async def recover(self, failure: RequestFailure, context: RequestContext) -> httpx.Response:
        if self._state is RefreshState.REFRESHING:
            return await self._wait_for_refresh(context)

        refresh_token = self._store.get(REFRESH_TOKEN_KEY)
        if not refresh_token:
            LOGGER.warning("No refresh token stored; ending session")
            self._end_session()
            raise failure

        # No await between the check above and this assignment.
        self._state = RefreshState.REFRESHING
        LOGGER.info("Refreshing access token")
        try:
            pair = await self._run_refresh(refresh_token)
            save_credentials(self._store, pair)
        except Exception as error:
            refresh_error = _as_refresh_error(error)
            LOGGER.warning(
                "Token refresh failed, rejecting %d queued request(s): %s",
                len(self._queue),
                refresh_error,
            )
            self._end_session()
            self._reject_pending(refresh_error)
            raise refresh_error
        else:
            LOGGER.info("Token refreshed, replaying %d queued request(s)", len(self._queue))
            self._resume_pending(pair.access)
        finally:
            if self._queue:
                self._reject_pending(RefreshError("Token refresh was interrupted."))
            self._state = RefreshState.IDLE

        return await self._replay(context, pair.access)

    async def _run_refresh(self, refresh_token: str) -> CredentialPair:
        if self._timeout is None:
            return await self._refresh(refresh_token)
        try:
            return await asyncio.wait_for(self._refresh(refresh_token), self._timeout)
        except asyncio.TimeoutError as error:
            raise RefreshError(f"Token refresh timed out after {self._timeout}s.") from error

    async def _wait_for_refresh(self, context: RequestContext) -> httpx.Response:
        entry = PendingReplay(context, asyncio.get_running_loop().create_future())
        self._queue.append(entry)
        LOGGER.debug(
            "Refresh in flight; queued %s %s (%d waiting)",
            context.method,
            context.url,
            len(self._queue),
        )
        access_token = await entry.future
        return await self._replay(context, access_token)

    def _end_session(self) -> None:
        try:
            self._teardown()
        except Exception:
            LOGGER.exception("Session teardown failed")

    def _resume_pending(self, access_token: str) -> None:
        while self._queue:
            self._queue.popleft().resume(access_token)

    def _reject_pending(self, error: RefreshError) -> None:
        # One instance per waiter; tracebacks are not shared.
        while self._queue:
            waiter_error = RefreshError(str(error))
            waiter_error.__cause__ = error
            self._queue.popleft().reject(waiter_error)


def _as_refresh_error(error: Exception) -> RefreshError:
    if isinstance(error, RefreshError):
        return error
    refresh_error = RefreshError(f"Token refresh failed: {error}")
    refresh_error.__cause__ = error
    return refresh_error
