from pydantic import BaseModel, EmailStr, Field
from typing import Literal, Optional

OAuthProvider = Literal["google", "github"]


class MagicLinkRequest(BaseModel):
    email: EmailStr
    next: Optional[str] = None


class OAuthRequest(BaseModel):
    provider: OAuthProvider
    next: Optional[str] = None


class OAuthResponse(BaseModel):
    provider: str
    url: str


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class SignInRequest(BaseModel):
    email: EmailStr
    password: str


class PasswordResetRequest(BaseModel):
    email: EmailStr


class SessionResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    user_id: str
    email: Optional[str] = None


class SignUpResponse(BaseModel):
    user_id: str
    email: str
    message: str


class MessageResponse(BaseModel):
    message: str
