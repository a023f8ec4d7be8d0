import httpx
import pytest

from auth.models import CredentialPair
from auth.refresh import RefreshError, request_new_credentials
from tests.api_helpers import BASE_URL

REFRESH_URL = f"{BASE_URL}/refresh_token?refreshToken=r1"


@pytest.mark.asyncio
async def test_refresh_success(httpx_mock) -> None:
    httpx_mock.add_response(
        url=REFRESH_URL,
        method="GET",
        json={"access_token": "a2", "refresh_token": "r2"},
    )

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        pair = await request_new_credentials(client, "r1")

    assert pair == CredentialPair(access="a2", refresh="r2")


@pytest.mark.asyncio
async def test_refresh_custom_url(httpx_mock) -> None:
    httpx_mock.add_response(
        url=f"{BASE_URL}/auth/renew?refreshToken=r1",
        method="GET",
        json={"access_token": "a2", "refresh_token": "r2"},
    )

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        pair = await request_new_credentials(client, "r1", refresh_url="/auth/renew")

    assert pair.access == "a2"


@pytest.mark.asyncio
async def test_refresh_rejected(httpx_mock) -> None:
    httpx_mock.add_response(url=REFRESH_URL, method="GET", status_code=401, text="invalid")

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        with pytest.raises(RefreshError, match="Refresh request failed with status 401"):
            await request_new_credentials(client, "r1")


@pytest.mark.asyncio
async def test_refresh_missing_field(httpx_mock) -> None:
    httpx_mock.add_response(url=REFRESH_URL, method="GET", json={"access_token": "a2"})

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        with pytest.raises(RefreshError, match="missing refresh_token"):
            await request_new_credentials(client, "r1")


@pytest.mark.asyncio
async def test_refresh_invalid_json(httpx_mock) -> None:
    httpx_mock.add_response(url=REFRESH_URL, method="GET", text="<html>oops</html>")

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        with pytest.raises(RefreshError, match="not valid JSON"):
            await request_new_credentials(client, "r1")


@pytest.mark.asyncio
async def test_refresh_no_response(httpx_mock) -> None:
    httpx_mock.add_exception(httpx.ConnectError("connection refused"), url=REFRESH_URL)

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        with pytest.raises(RefreshError, match="connection refused"):
            await request_new_credentials(client, "r1")
