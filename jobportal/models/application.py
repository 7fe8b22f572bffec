"""
Application models for JobPortal
Defines data structures for job applications and employer review
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator
from datetime import datetime


class ApplicationStatus(str, Enum):
    """Application lifecycle: pending until the employer decides"""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ReviewDecision(str, Enum):
    """Statuses an employer may move a pending application to"""
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ApplicationCreate(BaseModel):
    """Submitted by a job seeker from the apply dialog"""
    applicant_id: str = Field(..., description="Job seeker applying")
    cover_letter: str = Field(..., description="Cover letter text")
    resume_url: Optional[str] = Field(None, description="Link to the applicant's resume")

    @field_validator("cover_letter")
    @classmethod
    def cover_letter_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Please write a cover letter for your application")
        return value

    @field_validator("resume_url")
    @classmethod
    def empty_resume_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None


class ApplicationReview(BaseModel):
    """Employer decision on an application"""
    decision: ReviewDecision
    message: Optional[str] = Field(None, description="Optional note shown to the applicant")


class JobApplication(BaseModel):
    """Complete application model"""
    id: str
    job_id: str
    applicant_id: str
    resume_url: Optional[str] = None
    cover_letter: Optional[str] = None
    status: ApplicationStatus = ApplicationStatus.PENDING
    applied_at: datetime
    reviewed_at: Optional[datetime] = None
    employer_message: Optional[str] = None
