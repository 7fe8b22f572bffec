"""
Job models for JobPortal
Defines data structures for job postings
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator
from datetime import datetime

ALL_JOB_TYPES = "all"
REQUIRED_TEXT_FIELDS = ("title", "company", "location", "description", "requirements")


def _not_blank(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class JobType(str, Enum):
    """Employment types a posting can advertise"""
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    FREELANCE = "freelance"


class JobBase(BaseModel):
    """Base job model with common fields"""
    title: str = Field(..., min_length=1, description="Job title/role")
    company: str = Field(..., min_length=1, description="Company name")
    location: str = Field(..., min_length=1, description="Where the job is based")
    description: str = Field(..., min_length=1, description="Job description")
    requirements: str = Field(..., min_length=1, description="Required qualifications")
    salary_range: Optional[str] = Field(None, description="Free-text salary range, e.g. '$80k - $120k'")
    job_type: JobType = Field(..., description="Employment type")
    required_skills: Optional[list[str]] = Field(None, description="Skills matched by skill search")
    experience_level: Optional[str] = Field(None, description="Expected seniority")


class JobCreate(JobBase):
    """Model for posting a new job"""

    @field_validator(*REQUIRED_TEXT_FIELDS)
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _not_blank(value)


class JobUpdate(BaseModel):
    """Model for editing a posting; only provided fields change"""
    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    salary_range: Optional[str] = None
    job_type: Optional[JobType] = None
    required_skills: Optional[list[str]] = None
    experience_level: Optional[str] = None

    @field_validator(*REQUIRED_TEXT_FIELDS)
    @classmethod
    def not_blank(cls, value: Optional[str]) -> Optional[str]:
        return value if value is None else _not_blank(value)


class Job(JobBase):
    """Complete job model"""
    id: str = Field(..., description="Unique job identifier")
    employer_id: str = Field(..., description="Employer who owns this posting")
    is_active: bool = Field(True, description="Visible to job seekers while true")
    created_at: datetime = Field(..., description="When the job was posted")
    updated_at: datetime = Field(..., description="Last edit")

    class Config:
        from_attributes = True


class JobFilter(BaseModel):
    """Seeker-side search box state"""
    search_term: str = ""
    location: str = ""
    job_type: str = ALL_JOB_TYPES


class JobStats(BaseModel):
    """Employer dashboard counters"""
    total_jobs: int = 0
    active_jobs: int = 0
    total_applications: int = 0
    pending_applications: int = 0
