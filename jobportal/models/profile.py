"""
Profile models for JobPortal
"""

from typing import Optional
from pydantic import BaseModel, Field
from datetime import datetime


class ProfileUpdate(BaseModel):
    """Fields a user may edit on their own profile"""
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    skills: Optional[list[str]] = None
    experience: Optional[str] = None
    job_title: Optional[str] = None
    resume_url: Optional[str] = None
    avatar_url: Optional[str] = None
    is_public: Optional[bool] = None


class UserProfile(ProfileUpdate):
    """Stored profile row"""
    user_id: str = Field(..., description="Owner of this profile")
    is_public: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
