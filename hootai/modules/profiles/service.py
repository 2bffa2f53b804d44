from supabase import Client
from hootai.modules.profiles.models import PROFILES_TABLE, AVATARS_BUCKET
from hootai.modules.profiles.schemas import ProfileUpdate, ProfileResponse, ProfileRepairResponse
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
from fastapi import HTTPException
import logging
import time
import uuid

logger = logging.getLogger(__name__)

MAX_AVATAR_BYTES = 2 * 1024 * 1024


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def profile_exists(self, user_id: str) -> bool:
        """Check whether a user_profiles row exists"""
        try:
            result = self.supabase.table(PROFILES_TABLE)\
                .select("id", count="exact")\
                .eq("id", user_id)\
                .execute()
            return (result.count or 0) > 0
        except Exception as e:
            logger.error(f"Error checking if profile exists: {e}")
            return False

    def _fetch(self, user_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table(PROFILES_TABLE)\
            .select("*")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            return None
        return result.data

    def get_profile(self, user_id: str) -> ProfileResponse:
        """Get user profile by ID"""
        try:
            data = self._fetch(user_id)
            if not data:
                raise HTTPException(status_code=404, detail="Profile not found")
            return ProfileResponse(**data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _create_by_insert(self, user_id: str) -> None:
        self.supabase.table(PROFILES_TABLE).insert({
            "id": user_id,
            "display_name": None,
            "bio": None,
            "avatar_url": None,
            "updated_at": _now(),
        }).execute()

    def _create_by_rpc(self, user_id: str) -> None:
        self.supabase.rpc("create_user_profile", {
            "user_id": user_id,
            "profile_created_at": _now(),
        }).execute()

    def _create_by_sql(self, user_id: str) -> None:
        # user_id is interpolated, so it must be a real UUID
        profile_id = str(uuid.UUID(user_id))
        query = (
            f"insert into public.{PROFILES_TABLE} (id, created_at, updated_at) "
            f"values ('{profile_id}', now(), now()) on conflict (id) do nothing"
        )
        self.supabase.rpc("exec_sql", {"query": query}).execute()

    def ensure_profile(self, user_id: str, log: Optional[List[str]] = None) -> ProfileResponse:
        """Return the profile, creating it via insert, then RPC, then raw SQL"""
        log = log if log is not None else []
        if self.profile_exists(user_id):
            log.append("Existing profile found")
            return self.get_profile(user_id)

        strategies = [
            ("insert", self._create_by_insert),
            ("rpc", self._create_by_rpc),
            ("sql", self._create_by_sql),
        ]
        for name, create in strategies:
            try:
                create(user_id)
                created = self._fetch(user_id)
            except Exception as e:
                logger.warning(f"Profile creation via {name} failed for {user_id}: {e}")
                log.append(f"Creation via {name} failed: {e}")
                continue
            if created:
                logger.info(f"Profile created via {name} for {user_id}")
                log.append(f"Profile created via {name}")
                return ProfileResponse(**created)
            log.append(f"Creation via {name} returned no readable row")

        raise HTTPException(status_code=500, detail="Failed to create user profile")

    def repair_profile(self, user_id: str) -> ProfileRepairResponse:
        """Create the profile if needed and verify it can be read back"""
        log: List[str] = ["Starting profile repair"]
        try:
            self.ensure_profile(user_id, log)
        except HTTPException as e:
            log.append(f"Failed to create profile: {e.detail}")
            return ProfileRepairResponse(success=False, log=log)

        try:
            profile = self._fetch(user_id)
        except Exception as e:
            log.append(f"Verification read failed: {e}")
            return ProfileRepairResponse(success=False, log=log)
        if not profile:
            log.append("Profile was created but is not readable")
            return ProfileRepairResponse(success=False, log=log)
        log.append("Profile is readable")
        return ProfileRepairResponse(success=True, profile=ProfileResponse(**profile), log=log)

    def update_profile(self, user_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Update user profile, creating it first when missing"""
        self.ensure_profile(user_id)
        try:
            update_data = profile_data.model_dump(exclude_unset=True)
            update_data["updated_at"] = _now()

            result = self.supabase.table(PROFILES_TABLE)\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")

            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_last_sign_in(self, user_id: str) -> bool:
        try:
            self.supabase.table(PROFILES_TABLE)\
                .update({"last_sign_in": _now()})\
                .eq("id", user_id)\
                .execute()
            return True
        except Exception as e:
            logger.error(f"Error updating last sign in time: {e}")
            return False

    def set_preference(self, user_id: str, key: str, value: Any) -> ProfileResponse:
        """Merge a single key into the preferences bag"""
        current = self.ensure_profile(user_id)
        try:
            preferences = dict(current.preferences or {})
            preferences[key] = value
            result = self.supabase.table(PROFILES_TABLE)\
                .update({"preferences": preferences, "updated_at": _now()})\
                .eq("id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")
            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def upload_avatar(self, user_id: str, content: bytes, content_type: Optional[str]) -> str:
        """Store an avatar image and point the profile at its public URL"""
        if not content_type or not content_type.startswith("image/"):
            raise HTTPException(status_code=400, detail="Avatar must be an image")
        if not content:
            raise HTTPException(status_code=400, detail="Avatar file is empty")
        if len(content) > MAX_AVATAR_BYTES:
            raise HTTPException(status_code=400, detail="Avatar must be 2 MB or smaller")

        self.ensure_profile(user_id)
        file_name = f"{user_id}-{int(time.time() * 1000)}"
        try:
            bucket = self.supabase.storage.from_(AVATARS_BUCKET)
            bucket.upload(file_name, content, {
                "content-type": content_type,
                "cache-control": "3600",
                "upsert": "true",
            })
            avatar_url = bucket.get_public_url(file_name)
            self.supabase.table(PROFILES_TABLE)\
                .update({"avatar_url": avatar_url, "updated_at": _now()})\
                .eq("id", user_id)\
                .execute()
            return avatar_url
        except Exception as e:
            logger.error(f"Error uploading avatar: {e}")
            raise HTTPException(status_code=500, detail=f"Avatar upload failed: {str(e)}")
