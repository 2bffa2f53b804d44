"""
Core dependencies for route protection
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from hootai.database.supabase_client import get_auth_session_client, get_supabase
from hootai.modules.auth.cookies import ACCESS_TOKEN_COOKIE
from hootai.modules.auth.service import AuthService
from supabase import Client
from typing import Callable, Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_session_client_factory() -> Callable[[], Client]:
    """Builds a throwaway client per sign-in call"""
    return get_auth_session_client


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    session_client_factory: Callable[[], Client] = Depends(get_session_client_factory),
) -> AuthService:
    return AuthService(supabase, session_client_factory)


def get_access_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
) -> Optional[str]:
    """Bearer header first, then the session cookie set by the auth callback."""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(ACCESS_TOKEN_COOKIE)


def get_current_user(
    token: Optional[str] = Depends(get_access_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Resolve the signed-in user from the access token"""
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return auth_service.get_current_user(token)


def get_current_user_id(user_data: dict = Depends(get_current_user)) -> str:
    return user_data["id"]
