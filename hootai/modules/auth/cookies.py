from fastapi import Response

from hootai.config import settings
from hootai.modules.auth.schemas import SessionResponse

ACCESS_TOKEN_COOKIE = "sb-access-token"
REFRESH_TOKEN_COOKIE = "sb-refresh-token"
AUTH_SUCCESS_COOKIE = "auth_success"
USER_ID_COOKIE = "user_id"


def set_session_cookies(response: Response, session: SessionResponse) -> None:
    """Tokens are HttpOnly; auth_success and user_id stay readable by the web client."""
    common = {
        "max_age": settings.auth_cookie_max_age,
        "path": "/",
        "secure": settings.is_production,
        "samesite": "lax",
    }
    response.set_cookie(ACCESS_TOKEN_COOKIE, session.access_token, httponly=True, **common)
    if session.refresh_token:
        response.set_cookie(REFRESH_TOKEN_COOKIE, session.refresh_token, httponly=True, **common)
    response.set_cookie(AUTH_SUCCESS_COOKIE, "true", httponly=False, **common)
    response.set_cookie(USER_ID_COOKIE, session.user_id, httponly=False, **common)


def clear_session_cookies(response: Response) -> None:
    for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, AUTH_SUCCESS_COOKIE, USER_ID_COOKIE):
        response.delete_cookie(name, path="/")
