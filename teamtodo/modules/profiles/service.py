import re
from datetime import datetime, timezone
from supabase import Client
from teamtodo.core.errors import ErrorCode, ServiceError, is_no_rows, translate_store_error
from teamtodo.modules.profiles.schemas import ProfileUpdate, ProfileResponse
from typing import Optional
import logging

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_profile(self, user_id: str) -> ProfileResponse:
        """Get the profile owned by user_id"""
        try:
            result = self.supabase.table("user_profiles")\
                .select("*")\
                .eq("user_id", user_id)\
                .single()\
                .execute()
        except Exception as e:
            if is_no_rows(e):
                raise ServiceError(ErrorCode.PROFILE_NOT_FOUND)
            raise translate_store_error(e, "loading profile")

        if not result.data:
            raise ServiceError(ErrorCode.PROFILE_NOT_FOUND)
        return ProfileResponse(**result.data)

    def _profile_exists(self, user_id: str) -> bool:
        try:
            result = self.supabase.table("user_profiles")\
                .select("id")\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise translate_store_error(e, "loading profile")
        return bool(result.data)

    def _ensure_username_available(self, username: str, user_id: str) -> None:
        try:
            result = self.supabase.table("user_profiles")\
                .select("user_id")\
                .eq("username", username)\
                .neq("user_id", user_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise translate_store_error(e, "checking username")
        if result.data:
            raise ServiceError(ErrorCode.USERNAME_TAKEN)

    def upsert_profile(self, user_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Create or update the caller's profile; blank fields are stored as null"""
        username = _blank_to_none(profile_data.username)
        if username is not None:
            if not USERNAME_PATTERN.match(username):
                raise ServiceError(
                    ErrorCode.INVALID_INPUT,
                    "Username may only contain letters, digits and underscores"
                )
            self._ensure_username_available(username, user_id)

        now = datetime.now(timezone.utc).isoformat()
        update_data = {
            "username": username,
            "display_name": _blank_to_none(profile_data.display_name),
            "avatar_url": _blank_to_none(profile_data.avatar_url),
            "bio": _blank_to_none(profile_data.bio),
            "updated_at": now,
        }

        try:
            if self._profile_exists(user_id):
                result = self.supabase.table("user_profiles")\
                    .update(update_data)\
                    .eq("user_id", user_id)\
                    .execute()
            else:
                result = self.supabase.table("user_profiles").insert({
                    "user_id": user_id,
                    "created_at": now,
                    **update_data
                }).execute()
        except ServiceError:
            raise
        except Exception as e:
            raise translate_store_error(e, "saving profile", conflict_code=ErrorCode.USERNAME_TAKEN)

        if not result.data:
            raise ServiceError(ErrorCode.DATABASE_ERROR, "Failed to save profile")
        logger.info(f"User {user_id} updated their profile")
        return ProfileResponse(**result.data[0])


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None
