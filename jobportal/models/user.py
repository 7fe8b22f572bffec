"""
User and session models for JobPortal
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class UserRole(str, Enum):
    """Fixed at registration"""
    JOBSEEKER = "jobseeker"
    EMPLOYER = "employer"


class User(BaseModel):
    """Identity derived from the session; display only, never authorization"""
    id: str
    email: str
    name: Optional[str] = None
    role: UserRole = UserRole.JOBSEEKER


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class RegisterRequest(LoginRequest):
    name: str = Field(..., min_length=1)
    role: UserRole


class SessionResponse(BaseModel):
    token: Optional[str] = Field(None, description="Bearer credential issued by the backend")
    user: Optional[User] = None
