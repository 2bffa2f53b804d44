import hashlib
import logging
import time
from supabase import Client
from hootai.modules.auth.schemas import (
    MagicLinkRequest, OAuthRequest, OAuthResponse, SignInRequest, SignUpRequest,
    SignUpResponse, SessionResponse
)
from hootai.config.settings import settings
from hootai.database.supabase_client import get_auth_session_client
from fastapi import HTTPException
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def clear_user_cache() -> None:
    _AUTH_USER_CACHE.clear()


def safe_next_path(next_path: Optional[str]) -> str:
    """Only same-site absolute paths are allowed as post-login targets."""
    if next_path and next_path.startswith("/") and not next_path.startswith("//"):
        return next_path
    return "/"


def redirect_url_with_next(base_url: str, next_path: Optional[str]) -> str:
    target = safe_next_path(next_path)
    if target == "/":
        return base_url
    return f"{base_url}?{urlencode({'next': target})}"


def session_from_auth_response(auth_response) -> SessionResponse:
    session = auth_response.session
    user = auth_response.user or session.user
    return SessionResponse(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_in=session.expires_in,
        user_id=user.id,
        email=user.email,
    )


class AuthService:
    def __init__(self, supabase: Client, session_client_factory: Optional[Callable[[], Client]] = None):
        self.supabase = supabase
        # Calls that establish a user session get their own client, never the shared one
        self.session_client_factory = session_client_factory or get_auth_session_client

    def send_magic_link(self, request: MagicLinkRequest) -> None:
        """Email a passwordless sign-in link that lands on /auth/callback"""
        try:
            self.supabase.auth.sign_in_with_otp({
                "email": request.email,
                "options": {
                    "email_redirect_to": redirect_url_with_next(settings.auth_callback_url, request.next),
                    "should_create_user": True,
                },
            })
            logger.info("Magic link requested")
        except Exception as e:
            error_message = str(e)
            if "rate limit" in error_message.lower():
                raise HTTPException(status_code=429, detail="Too many sign-in emails, try again later")
            raise HTTPException(status_code=500, detail=f"Failed to send magic link: {error_message}")

    def oauth_url(self, request: OAuthRequest) -> OAuthResponse:
        """Provider authorization URL for the browser to follow"""
        try:
            response = self.supabase.auth.sign_in_with_oauth({
                "provider": request.provider,
                "options": {
                    "redirect_to": redirect_url_with_next(settings.auth_callback_url, request.next),
                },
            })
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"OAuth sign-in failed: {str(e)}")
        if not response or not response.url:
            raise HTTPException(status_code=500, detail="OAuth provider did not return a redirect URL")
        return OAuthResponse(provider=request.provider, url=response.url)

    def exchange_code(self, code: str) -> SessionResponse:
        """Finish an authorization-code redirect"""
        try:
            auth_response = self.session_client_factory().auth.exchange_code_for_session({
                "auth_code": code,
                "redirect_to": settings.auth_callback_url,
            })
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))
        if not auth_response or not auth_response.session:
            raise HTTPException(status_code=400, detail="No session returned for code")
        return session_from_auth_response(auth_response)

    def verify_token_hash(self, token_hash: str, otp_type: str) -> SessionResponse:
        """Finish a magic-link redirect that carries token_hash/type"""
        try:
            auth_response = self.session_client_factory().auth.verify_otp({
                "token_hash": token_hash,
                "type": otp_type,
            })
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))
        if not auth_response or not auth_response.session:
            raise HTTPException(status_code=400, detail="Sign-in link is invalid or has expired")
        return session_from_auth_response(auth_response)

    def session_from_tokens(self, access_token: str, refresh_token: Optional[str]) -> SessionResponse:
        """Validate tokens recovered from the URL fragment"""
        user_data = self.get_current_user(access_token)
        return SessionResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            user_id=user_data["id"],
            email=user_data.get("email"),
        )

    def register(self, register_data: SignUpRequest) -> SignUpResponse:
        """Register a new user using Supabase Auth"""
        try:
            auth_response = self.session_client_factory().auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "email_redirect_to": settings.auth_callback_url
                }
            })

            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to register user")

            return SignUpResponse(
                user_id=auth_response.user.id,
                email=auth_response.user.email or register_data.email,
                message="Check your email to confirm your account"
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            raise HTTPException(status_code=500, detail=f"Registration failed: {error_message}")

    def login(self, login_data: SignInRequest) -> SessionResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self.session_client_factory().auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid credentials")

            return session_from_auth_response(auth_response)
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

    def reset_password(self, email: str) -> None:
        try:
            self.supabase.auth.reset_password_for_email(
                email, {"redirect_to": f"{settings.public_site_url}/auth/reset-password"}
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Password reset failed: {str(e)}")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "app_metadata": user.app_metadata or {},
                "created_at": user.created_at,
                "last_sign_in_at": user.last_sign_in_at,
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def logout(self, token: Optional[str]) -> bool:
        """Revoke the session behind token; the caller clears cookies either way"""
        if not token:
            return False
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
        try:
            self.supabase.auth.admin.sign_out(token)
            return True
        except Exception as e:
            logger.warning(f"Sign-out failed: {e}")
            return False
