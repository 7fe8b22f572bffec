"""
Profile service for JobPortal
"""

import logging
from typing import List, Optional, Dict, Any
from jobportal.models.profile import ProfileUpdate
from jobportal.services.supabase_service import SupabaseService

logger = logging.getLogger(__name__)


def parse_skills(text: str) -> List[str]:
    """'python, django ,, sql' -> ['python', 'django', 'sql']"""
    return [skill.strip() for skill in (text or "").split(",") if skill.strip()]


class ProfileService:
    """Service for user profile operations"""

    def __init__(self, supabase_service: Optional[SupabaseService] = None):
        self.supabase_service = supabase_service or SupabaseService()

    async def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        return await self.supabase_service.get_profile(user_id)

    async def get_public_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        profile = await self.get_profile(user_id)
        if profile and profile.get("is_public"):
            return profile
        return None

    async def upsert_profile(self, user_id: str, profile_update: ProfileUpdate) -> Optional[Dict[str, Any]]:
        """Update the owner's profile, creating it on first save"""
        data = profile_update.model_dump(exclude_none=True)
        existing = await self.supabase_service.get_profile(user_id)
        if existing:
            profile = await self.supabase_service.update_profile(user_id, data)
        else:
            data["user_id"] = user_id
            profile = await self.supabase_service.insert_profile(data)
        if profile:
            logger.info(f"Saved profile for user {user_id}")
        return profile

    async def search_profiles(self, skills: Optional[List[str]] = None, location: Optional[str] = None) -> List[Dict[str, Any]]:
        return await self.supabase_service.search_profiles(skills or None, (location or "").strip() or None)
