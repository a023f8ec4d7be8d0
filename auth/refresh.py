from __future__ import annotations

import httpx

from auth.models import CredentialPair

DEFAULT_REFRESH_URL = "/refresh_token"
REFRESH_QUERY_PARAM = "refreshToken"


class RefreshError(RuntimeError):
    def __init__(self, message: str = "Could not refresh credentials.") -> None:
        super().__init__(message)
        self.status_code = 401


async def request_new_credentials(
    client: httpx.AsyncClient,
    refresh_token: str,
    *,
    refresh_url: str = DEFAULT_REFRESH_URL,
) -> CredentialPair:
    try:
        response = await client.get(refresh_url, params={REFRESH_QUERY_PARAM: refresh_token})
        response.raise_for_status()
    except httpx.HTTPStatusError as error:
        detail = error.response.text
        raise RefreshError(
            f"Refresh request failed with status {error.response.status_code}: {detail}"
        ) from error
    except httpx.HTTPError as error:
        raise RefreshError(f"Refresh request failed: {error}") from error

    try:
        payload = response.json()
    except ValueError as error:
        raise RefreshError("Refresh response is not valid JSON.") from error

    try:
        return CredentialPair.from_payload(payload)
    except RuntimeError as error:
        raise RefreshError(str(error)) from error
