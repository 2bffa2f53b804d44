from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = Field(None, max_length=1000)
    avatar_url: Optional[str] = None


class PreferenceUpdate(BaseModel):
    value: Any = None


class ProfileResponse(BaseModel):
    id: str
    display_name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    preferences: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_sign_in: Optional[datetime] = None

    class Config:
        from_attributes = True


class AvatarResponse(BaseModel):
    avatar_url: str


class ProfileRepairResponse(BaseModel):
    success: bool
    profile: Optional[ProfileResponse] = None
    log: List[str]
