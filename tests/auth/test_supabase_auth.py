# tests/auth/test_supabase_auth.py
import pytest
import httpx
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from unittest.mock import AsyncMock, MagicMock

from config.settings import AuthSettings
from src.auth.schemas import AuthenticatedUser
from src.auth.supabase import AuthenticationError, get_current_user, resolve_user

SETTINGS = AuthSettings(url="https://project.supabase.example/", anon_key="anon-key", timeout_seconds=5.0)


def patch_async_client(mocker, get):
    mock_client = MagicMock(spec=httpx.AsyncClient)
    mock_client.get = get
    mock_client.__aenter__.return_value = mock_client
    mock_client.__aexit__.return_value = False
    mocker.patch('httpx.AsyncClient', return_value=mock_client)


@pytest.mark.asyncio
async def test_resolve_user_success(mocker):
    mock_get = AsyncMock(return_value=httpx.Response(200, json={"id": "user-123", "email": "a@example.com"}))
    patch_async_client(mocker, mock_get)

    user = await resolve_user("good-token", SETTINGS)

    assert user == AuthenticatedUser(id="user-123", email="a@example.com")
    mock_get.assert_awaited_once_with(
        "https://project.supabase.example/auth/v1/user",
        headers={'Authorization': 'Bearer good-token', 'apikey': 'anon-key'},
        timeout=5.0,
    )

@pytest.mark.asyncio
async def test_resolve_user_rejected_token(mocker):
    patch_async_client(mocker, AsyncMock(return_value=httpx.Response(401, json={"msg": "bad jwt"})))

    with pytest.raises(AuthenticationError) as exc_info:
        await resolve_user("bad-token", SETTINGS)
    assert exc_info.value.code == "AUTH_002"

@pytest.mark.asyncio
async def test_resolve_user_without_id(mocker):
    patch_async_client(mocker, AsyncMock(return_value=httpx.Response(200, json={"email": "a@example.com"})))

    with pytest.raises(AuthenticationError, match="user ID"):
        await resolve_user("token", SETTINGS)

@pytest.mark.asyncio
async def test_resolve_user_provider_unreachable(mocker):
    patch_async_client(mocker, AsyncMock(side_effect=httpx.ConnectError("refused")))

    with pytest.raises(AuthenticationError, match="unavailable"):
        await resolve_user("token", SETTINGS)


# --- Dependency ---

@pytest.mark.asyncio
async def test_get_current_user_missing_credentials():
    with pytest.raises(HTTPException) as exc_info:
        await get_current_user(credentials=None, settings=SETTINGS)
    assert exc_info.value.status_code == 401
    assert exc_info.value.detail["code"] == "AUTH_001"

@pytest.mark.asyncio
async def test_get_current_user_invalid_token(mocker):
    mocker.patch('src.auth.supabase.resolve_user', AsyncMock(side_effect=AuthenticationError()))
    credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="bad")

    with pytest.raises(HTTPException) as exc_info:
        await get_current_user(credentials=credentials, settings=SETTINGS)
    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == {"code": "AUTH_002", "message": "Invalid authentication token"}

@pytest.mark.asyncio
async def test_get_current_user_valid_token(mocker):
    user = AuthenticatedUser(id="user-123")
    resolve = mocker.patch('src.auth.supabase.resolve_user', AsyncMock(return_value=user))
    credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="good")

    assert await get_current_user(credentials=credentials, settings=SETTINGS) == user
    resolve.assert_awaited_once_with("good", SETTINGS)
