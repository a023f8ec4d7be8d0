from __future__ import annotations

import time
from typing import TYPE_CHECKING, Callable

import httpx

from auth.decoder import CredentialDecodeError, decode_expiry
from auth.models import ACCESS_TOKEN_KEY
from auth.token_store import TokenStore

from .constants import LOGGER
from .http import RequestContext, RequestFailure, ResponseError

if TYPE_CHECKING:
    from .coordinator import RefreshCoordinator


async def attach_bearer_credential(request: httpx.Request, store: TokenStore) -> None:
    access_token = store.get(ACCESS_TOKEN_KEY)
    if access_token:
        request.headers["Authorization"] = f"Bearer {access_token}"


def is_expired_credential_failure(
    failure: RequestFailure,
    store: TokenStore,
    *,
    decoder: Callable[[str], float] = decode_expiry,
    clock: Callable[[], float] = time.time,
) -> bool:
    if not isinstance(failure, ResponseError):
        return False
    if failure.status_code != 401:
        return False

    access_token = store.get(ACCESS_TOKEN_KEY)
    if not access_token:
        return False

    try:
        expires_at = decoder(access_token)
    except CredentialDecodeError as error:
        LOGGER.debug("Could not decode stored access token: %s", error)
        return False

    return expires_at <= clock()


async def intercept_failure(
    failure: RequestFailure,
    context: RequestContext,
    *,
    store: TokenStore,
    coordinator: "RefreshCoordinator",
    decoder: Callable[[str], float] = decode_expiry,
    clock: Callable[[], float] = time.time,
) -> httpx.Response:
    # A replay that is rejected again reports its own failure.
    if context.replayed:
        raise failure
    if not is_expired_credential_failure(failure, store, decoder=decoder, clock=clock):
        raise failure

    LOGGER.info("Access token expired for %s %s", context.method, context.url)
    return await coordinator.recover(failure, context)
