# src/auth/supabase.py
# Resolves bearer tokens to users through the Supabase auth endpoint.
import logging
from typing import Optional

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config.settings import AuthSettings, get_auth_settings
from src.auth.schemas import AuthenticatedUser, ErrorDetail

_log = logging.getLogger(__name__)

AUTH_ERROR_DETAIL_MISSING = ErrorDetail(code="AUTH_001", message="Unauthorized: Missing bearer token")
AUTH_ERROR_DETAIL_INVALID = ErrorDetail(code="AUTH_002", message="Invalid authentication token")

# auto_error=False means it returns None if no header, instead of raising HTTPException
bearer_scheme = HTTPBearer(auto_error=False, description="Supabase access token.")


class AuthenticationError(Exception):
    def __init__(self, message="Invalid authentication token", code="AUTH_002"):
        self.message = message
        self.code = code
        super().__init__(self.message)


async def resolve_user(token: str, settings: AuthSettings) -> AuthenticatedUser:
    """
    Looks the token up against {url}/auth/v1/user.

    Raises:
        AuthenticationError: if the provider rejects the token, is unreachable,
            or returns no user id.
    """
    url = f"{settings.url.rstrip('/')}/auth/v1/user"
    headers = {
        'Authorization': f'Bearer {token}',
        'apikey': settings.anon_key,
    }
    async with httpx.AsyncClient() as client:
        try:
            response = await client.get(url, headers=headers, timeout=settings.timeout_seconds)
        except httpx.RequestError as e:
            _log.error(f"Auth provider unreachable: {e}")
            raise AuthenticationError("Authentication service unavailable") from e

    if not response.is_success:
        _log.warning(f"Auth failed: {response.status_code}")
        raise AuthenticationError()

    user = response.json() or {}
    user_id = user.get("id")
    if not user_id:
        raise AuthenticationError("Could not extract user ID")
    return AuthenticatedUser(id=str(user_id), email=user.get("email"))


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: AuthSettings = Depends(get_auth_settings),
) -> AuthenticatedUser:
    """FastAPI dependency returning the caller, or raising 401."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=AUTH_ERROR_DETAIL_MISSING.model_dump(),
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return await resolve_user(credentials.credentials, settings)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ErrorDetail(code=e.code, message=e.message).model_dump(),
            headers={"WWW-Authenticate": "Bearer"},
        )
