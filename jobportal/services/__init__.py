"""
Business logic services for JobPortal
"""

from jobportal.services.supabase_service import SupabaseService
from jobportal.services.session_service import SessionStore
from jobportal.services.job_service import JobService
from jobportal.services.application_service import ApplicationService
from jobportal.services.notification_service import NotificationService
from jobportal.services.profile_service import ProfileService
from jobportal.services.assistant_service import AssistantService

__all__ = [
    "SupabaseService",
    "SessionStore",
    "JobService",
    "ApplicationService",
    "NotificationService",
    "ProfileService",
    "AssistantService"
]
