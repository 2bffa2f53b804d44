from fastapi import APIRouter, Depends, File, UploadFile
from hootai.database.supabase_client import get_supabase_admin
from hootai.modules.profiles.schemas import (
    ProfileUpdate, ProfileResponse, PreferenceUpdate, AvatarResponse, ProfileRepairResponse
)
from hootai.modules.profiles.service import MAX_AVATAR_BYTES, ProfileService
from hootai.core.dependencies import get_current_user_id
from supabase import Client

router = APIRouter(prefix="/profile", tags=["profile"])


def get_profile_service(supabase: Client = Depends(get_supabase_admin)) -> ProfileService:
    return ProfileService(supabase)


@router.get("", response_model=ProfileResponse)
async def get_my_profile(
    user_id: str = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    """Current user's profile, created on first access"""
    return service.ensure_profile(user_id)


@router.put("", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    user_id: str = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    return service.update_profile(user_id, profile_data)


@router.put("/preferences/{key}", response_model=ProfileResponse)
async def set_my_preference(
    key: str,
    preference: PreferenceUpdate,
    user_id: str = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    return service.set_preference(user_id, key, preference.value)


@router.post("/avatar", response_model=AvatarResponse)
async def upload_my_avatar(
    file: UploadFile = File(...),
    user_id: str = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    content = await file.read(MAX_AVATAR_BYTES + 1)
    avatar_url = service.upload_avatar(user_id, content, file.content_type)
    return AvatarResponse(avatar_url=avatar_url)


@router.post("/repair", response_model=ProfileRepairResponse)
async def repair_my_profile(
    user_id: str = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    """Recreate a missing profile row and report each step"""
    return service.repair_profile(user_id)
