from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

import httpx

from .constants import HTTP_METHODS, JSON_HEADERS, LOGGER
from .http import (
    NoResponseError,
    RequestContext,
    RequestFailure,
    RequestSetupError,
    ResponseError,
    friendly_error_message,
)

FILE_METHOD = "FILE"
DOWNLOAD_METHOD = "DOWNLOAD"

Hook = Callable[[], Awaitable[None] | None]
ResponseCallback = Callable[[httpx.Response], Awaitable[None] | None]


@dataclass
class RequestConfig:
    url: str = "/"
    method: str = "GET"
    data: Any = None
    params: dict[str, Any] | None = None
    files: dict[str, Any] | None = None
    headers: dict[str, str] = field(default_factory=dict)
    before_send: Hook | None = None
    complete_send: Hook | None = None
    success: ResponseCallback | None = None
    error: ResponseCallback | None = None
    next: bool = False

    def to_context(self) -> RequestContext:
        method = (self.method or "GET").upper()

        if method == "GET":
            return RequestContext(
                method="GET",
                url=self.url,
                params=self.data if self.data else self.params,
                headers=dict(self.headers),
            )
        if method == FILE_METHOD:
            return RequestContext(
                method="POST",
                url=self.url,
                params=self.params,
                headers=dict(self.headers),
                data=self.data,
                files=self.files,
            )
        if method == DOWNLOAD_METHOD:
            return RequestContext(
                method="GET",
                url=self.url,
                params=self.params,
                headers=dict(self.headers),
            )
        if method.lower() not in HTTP_METHODS:
            raise ValueError(f"Unsupported request method: {self.method}")
        return RequestContext(
            method=method,
            url=self.url,
            params=self.params,
            headers=_with_defaults(self.headers, JSON_HEADERS),
            json=self.data,
        )


def _with_defaults(headers: dict[str, str], defaults: dict[str, str]) -> dict[str, str]:
    merged = dict(headers)
    present = {name.lower() for name in merged}
    for name, value in defaults.items():
        if name.lower() not in present:
            merged[name] = value
    return merged


async def _call(callback: Callable[..., Any] | None, *args: Any) -> None:
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


async def log_error_response(response: httpx.Response) -> None:
    LOGGER.warning(
        "%s (%s %s -> %s)",
        friendly_error_message(response.status_code),
        response.request.method,
        response.request.url,
        response.status_code,
    )


class RequestDispatcher:
    """Builds calls from a ``RequestConfig`` and reports through its callbacks.

    ``send`` is any coroutine taking a ``RequestContext``; normally
    ``AuthenticatedClient.send`` so calls go through the refresh pipeline.
    """

    def __init__(
        self,
        send: Callable[[RequestContext], Awaitable[httpx.Response]],
        *,
        default_error: ResponseCallback | None = log_error_response,
    ) -> None:
        self._send = send
        self._default_error = default_error

    async def handle(self, config: RequestConfig) -> httpx.Response | None:
        try:
            await _call(config.before_send)
            try:
                context = config.to_context()
            except ValueError as error:
                raise RequestSetupError(
                    RequestContext(method=str(config.method), url=config.url), str(error)
                ) from error

            response = await self._send(context)
            await _call(config.success, response)
            return response
        except RequestFailure as failure:
            await self._report(failure, config)
            if config.next:
                raise
            return None
        finally:
            await _call(config.complete_send)

    async def _report(self, failure: RequestFailure, config: RequestConfig) -> None:
        if isinstance(failure, ResponseError):
            await _call(config.error or self._default_error, failure.response)
        elif isinstance(failure, NoResponseError):
            LOGGER.warning("No response received: %s", failure)
        else:
            LOGGER.error("Request setup failed: %s", failure)
