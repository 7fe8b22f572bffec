"""
Assistant models for JobPortal
Request/response shapes for the career assistant endpoints
"""

from pydantic import BaseModel, Field
from jobportal.models.user import UserRole


class ChatRequest(BaseModel):
    """Free-form career question"""
    message: str = Field(..., min_length=1, description="User's question")
    role: UserRole = Field(UserRole.JOBSEEKER, description="Selects job seeker or employer advice")


class JobDescriptionRequest(BaseModel):
    job_title: str = Field(..., min_length=1)
    company: str = Field(..., min_length=1)


class RecommendationRequest(BaseModel):
    profile: str = Field(..., description="Short description of the user's background")
    skills: list[str] = Field(default_factory=list)


class InterviewQuestionsRequest(BaseModel):
    job_title: str = Field(..., min_length=1)
    experience: str = Field("mid", description="Experience level, e.g. entry, mid, senior")


class ResumeReviewRequest(BaseModel):
    resume: str = Field(..., min_length=1, description="Plain text resume")
    target_job: str = Field(..., min_length=1)


class AssistantResponse(BaseModel):
    """Assistant output; always text, even when the model call failed"""
    response: str = Field(..., description="Model text or a fixed apology")
