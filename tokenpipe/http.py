from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

import httpx

from .constants import LOGGER


@dataclass(frozen=True)
class RequestContext:
    """Everything needed to send a call again after the credential changes.

    File payloads are replayed as given, so pass them as bytes rather than
    open file handles when the call may need to be replayed.
    """

    method: str
    url: str
    params: dict[str, Any] | None = None
    headers: dict[str, str] = field(default_factory=dict)
    json: Any = None
    data: dict[str, Any] | None = None
    files: dict[str, Any] | None = None
    content: bytes | None = None
    replayed: bool = False

    def with_bearer(self, token: str) -> "RequestContext":
        headers = {
            key: value for key, value in self.headers.items() if key.lower() != "authorization"
        }
        headers["Authorization"] = f"Bearer {token}"
        return replace(self, headers=headers, replayed=True)

    def build_request(self, client: httpx.AsyncClient) -> httpx.Request:
        return client.build_request(
            self.method,
            self.url,
            params=self.params,
            headers=self.headers,
            json=self.json,
            data=self.data,
            files=self.files,
            content=self.content,
        )


class RequestFailure(RuntimeError):
    def __init__(self, context: RequestContext, message: str) -> None:
        super().__init__(message)
        self.context = context


class ResponseError(RequestFailure):
    """A response arrived with an error status."""

    def __init__(self, context: RequestContext, response: httpx.Response) -> None:
        super().__init__(context, friendly_error_message(response.status_code))
        self.response = response
        self.status_code = response.status_code


class NoResponseError(RequestFailure):
    """The request went out and nothing came back."""


class RequestSetupError(RequestFailure):
    """The request could not be built or handed to the transport."""


def friendly_error_message(status_code: int) -> str:
    if status_code == 401:
        return "Authentication failed. Your access token may have expired."
    if status_code == 403:
        return "You don't have permission to perform this action."
    if status_code == 404:
        return "The requested resource was not found."
    if status_code == 422:
        return "The request data did not pass validation."
    if status_code >= 500:
        return "The API is experiencing issues. Please try again later."
    return f"API request failed with status {status_code}."


async def dispatch(client: httpx.AsyncClient, context: RequestContext) -> httpx.Response:
    try:
        request = context.build_request(client)
    except (httpx.InvalidURL, TypeError, ValueError) as error:
        raise RequestSetupError(context, f"Could not build request: {error}") from error

    try:
        response = await client.send(request)
    except httpx.UnsupportedProtocol as error:
        raise RequestSetupError(context, f"Could not send request: {error}") from error
    except httpx.TransportError as error:
        raise NoResponseError(
            context, f"No response for {context.method} {context.url}: {error}"
        ) from error

    if response.is_error:
        raise ResponseError(context, response)
    return response


def build_logging_hooks(debug_enabled: bool):
    async def log_request(request: httpx.Request) -> None:
        if not debug_enabled:
            return
        LOGGER.info("API request %s %s", request.method, request.url)

    async def log_response(response: httpx.Response) -> None:
        if not debug_enabled:
            return
        LOGGER.info(
            "API response %s %s -> %s",
            response.request.method,
            response.request.url,
            response.status_code,
        )
        if response.status_code >= 400:
            body = await response.aread()
            text = body.decode("utf-8", errors="replace")
            if len(text) > 1000:
                text = text[:1000] + "...<truncated>"
            LOGGER.warning("API error body: %s", text)

    return log_request, log_response
