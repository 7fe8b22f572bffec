"""
Notification models for JobPortal
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel
from datetime import datetime


class NotificationType(str, Enum):
    NEW_JOB_APPLICATION = "new_job_application"
    JOB_APPLICATION_ACCEPTED = "job_application_accepted"
    JOB_APPLICATION_REJECTED = "job_application_rejected"


class Notification(BaseModel):
    id: str
    user_id: str
    type: str
    title: str
    message: str
    job_id: Optional[str] = None
    application_id: Optional[str] = None
    is_read: bool = False
    created_at: datetime
