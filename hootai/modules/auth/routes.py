from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import HTMLResponse, RedirectResponse
from hootai.config import settings
from hootai.core.dependencies import get_access_token, get_auth_service, get_current_user
from hootai.core.rate_limit import limiter
from hootai.modules.auth.cookies import clear_session_cookies, set_session_cookies
from hootai.modules.auth.schemas import (
    MagicLinkRequest, MessageResponse, OAuthRequest, OAuthResponse, PasswordResetRequest,
    SessionResponse, SignInRequest, SignUpRequest, SignUpResponse
)
from hootai.modules.auth.service import AuthService, safe_next_path
from hootai.modules.profiles.routes import get_profile_service
from hootai.modules.profiles.service import ProfileService
from typing import Dict, Optional
from urllib.parse import quote, urlencode
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

# /auth/callback and /auth/capture are provider redirect targets, served outside /api
redirect_router = APIRouter(prefix="/auth", tags=["auth-redirects"])

# The fragment (#access_token=...) never reaches the server; this page moves it
# into the query string so the capture handler can read it.
CAPTURE_PAGE_HTML = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Signing you in...</title></head>
<body>
<p>Processing authentication response...</p>
<script>
  (function () {
    var hash = window.location.hash.substring(1);
    if (!hash) {
      window.location.replace("/auth/sign-in?error=" + encodeURIComponent("No authentication data found"));
      return;
    }
    var params = new URLSearchParams(window.location.search);
    new URLSearchParams(hash).forEach(function (value, key) { params.set(key, value); });
    window.location.replace(window.location.pathname + "?" + params.toString());
  })();
</script>
</body>
</html>
"""


def sign_in_error_redirect(message: str) -> RedirectResponse:
    return RedirectResponse(
        f"{settings.public_site_url}/auth/sign-in?error={quote(message)}"
    )


def complete_sign_in(
    session: SessionResponse,
    next_path: Optional[str],
    profile_service: ProfileService,
) -> RedirectResponse:
    """Set session cookies and make sure the profile row exists; profile errors never block sign-in"""
    try:
        profile_service.ensure_profile(session.user_id)
        profile_service.update_last_sign_in(session.user_id)
    except HTTPException as e:
        logger.error(f"Profile setup failed for {session.user_id}: {e.detail}")
    response = RedirectResponse(f"{settings.public_site_url}{safe_next_path(next_path)}")
    set_session_cookies(response, session)
    logger.info(f"Session established for user {session.user_id}")
    return response


@router.post("/magic-link", response_model=MessageResponse)
@limiter.limit("5/minute")
async def send_magic_link(
    request: Request,
    body: MagicLinkRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Email a passwordless sign-in link"""
    service.send_magic_link(body)
    return MessageResponse(message="Check your email for the sign-in link")


@router.post("/oauth", response_model=OAuthResponse)
async def start_oauth(
    body: OAuthRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Provider URL the browser should navigate to"""
    return service.oauth_url(body)


@router.post("/sign-up", response_model=SignUpResponse, status_code=201)
async def sign_up(
    body: SignUpRequest,
    service: AuthService = Depends(get_auth_service)
):
    return service.register(body)


@router.post("/sign-in", response_model=SessionResponse)
async def sign_in(
    body: SignInRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
    profile_service: ProfileService = Depends(get_profile_service)
):
    """Password sign-in; also sets the session cookies"""
    session = service.login(body)
    try:
        profile_service.ensure_profile(session.user_id)
        profile_service.update_last_sign_in(session.user_id)
    except HTTPException as e:
        logger.error(f"Profile setup failed for {session.user_id}: {e.detail}")
    set_session_cookies(response, session)
    return session


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: PasswordResetRequest,
    service: AuthService = Depends(get_auth_service)
):
    service.reset_password(body.email)
    return MessageResponse(message="Check your email for the password reset link")


@router.post("/sign-out", response_model=MessageResponse)
async def sign_out(
    response: Response,
    token: Optional[str] = Depends(get_access_token),
    service: AuthService = Depends(get_auth_service)
):
    service.logout(token)
    clear_session_cookies(response)
    return MessageResponse(message="Signed out")


@router.get("/me")
async def me(current_user: Dict = Depends(get_current_user)):
    """Get current authenticated user"""
    return current_user


@redirect_router.get("/callback")
async def auth_callback(
    request: Request,
    service: AuthService = Depends(get_auth_service),
    profile_service: ProfileService = Depends(get_profile_service)
):
    """OAuth / magic-link landing page"""
    params = request.query_params
    next_path = params.get("next")

    error = params.get("error")
    if error:
        description = params.get("error_description") or error
        logger.warning(f"OAuth error on callback: {error}")
        return sign_in_error_redirect(description)

    try:
        if params.get("code"):
            session = service.exchange_code(params["code"])
        elif params.get("token_hash") and params.get("type"):
            session = service.verify_token_hash(params["token_hash"], params["type"])
        else:
            # Implicit flow: tokens are in the fragment, let the capture page pick them up
            target = settings.auth_capture_url
            if params:
                target = f"{target}?{urlencode(list(params.multi_items()))}"
            return RedirectResponse(target)
    except HTTPException as e:
        logger.error(f"Auth callback failed: {e.detail}")
        return sign_in_error_redirect(str(e.detail))

    return complete_sign_in(session, next_path, profile_service)


@redirect_router.get("/capture")
async def auth_capture(
    request: Request,
    service: AuthService = Depends(get_auth_service),
    profile_service: ProfileService = Depends(get_profile_service)
):
    """Turns fragment tokens into a cookie session"""
    params = request.query_params

    error = params.get("error")
    if error:
        return sign_in_error_redirect(params.get("error_description") or error)

    access_token = params.get("access_token")
    if not access_token:
        return HTMLResponse(CAPTURE_PAGE_HTML)

    try:
        session = service.session_from_tokens(access_token, params.get("refresh_token"))
    except HTTPException as e:
        logger.error(f"Auth capture failed: {e.detail}")
        return sign_in_error_redirect(str(e.detail))

    return complete_sign_in(session, params.get("next"), profile_service)
