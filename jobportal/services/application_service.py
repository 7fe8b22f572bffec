"""
Application service for JobPortal
Submitting applications, employer review, and the notifications they trigger
"""

import logging
from typing import List, Optional, Dict, Any
from jobportal.models.application import ApplicationStatus, ReviewDecision
from jobportal.models.notification import NotificationType
from jobportal.services.supabase_service import SupabaseService, utc_now_iso

logger = logging.getLogger(__name__)


class JobNotFoundError(LookupError):
    """Raised when applying to a job that does not exist"""


class ApplicationService:
    """Service for the apply / review workflow"""

    def __init__(self, supabase_service: Optional[SupabaseService] = None):
        self.supabase_service = supabase_service or SupabaseService()

    async def apply(
        self,
        job_id: str,
        applicant_id: str,
        cover_letter: Optional[str] = None,
        resume_url: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Submit an application and notify the job's employer.

        The notification is a second, independent write: if it fails the
        application still stands. Repeat applications are not deduplicated.
        Returns None if the application itself could not be stored.
        """
        job = await self.supabase_service.get_job_by_id(job_id)
        if not job:
            raise JobNotFoundError(job_id)

        application = await self.supabase_service.create_application({
            "job_id": job_id,
            "applicant_id": applicant_id,
            "cover_letter": cover_letter,
            "resume_url": resume_url or None,
            "status": ApplicationStatus.PENDING.value,
        })
        if not application:
            return None

        await self._notify(
            user_id=job["employer_id"],
            notice_type=NotificationType.NEW_JOB_APPLICATION,
            title="New Job Application",
            message=f"You have a new application for {job.get('title', 'your job posting')}",
            job_id=job_id,
            application_id=application["id"],
        )
        return application

    async def review(
        self,
        application_id: str,
        decision: ReviewDecision,
        message: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """Accept or reject an application and let the applicant know."""
        decision = ReviewDecision(decision)
        update: Dict[str, Any] = {
            "status": decision.value,
            "reviewed_at": utc_now_iso(),
        }
        if message:
            update["employer_message"] = message

        application = await self.supabase_service.update_application(application_id, update)
        if not application:
            return None

        job = await self.supabase_service.get_job_by_id(application["job_id"])
        job_title = job.get("title") if job else None
        if decision == ReviewDecision.ACCEPTED:
            notice_type = NotificationType.JOB_APPLICATION_ACCEPTED
            title = "Application Accepted"
            text = f"Your application for {job_title or 'a job'} was accepted"
        else:
            notice_type = NotificationType.JOB_APPLICATION_REJECTED
            title = "Application Update"
            text = f"Your application for {job_title or 'a job'} was not successful"
        if message:
            text = f"{text}: {message}"

        await self._notify(
            user_id=application["applicant_id"],
            notice_type=notice_type,
            title=title,
            message=text,
            job_id=application["job_id"],
            application_id=application_id,
        )
        return application

    async def get_job_applications(self, job_id: str) -> List[Dict[str, Any]]:
        return await self.supabase_service.get_job_applications(job_id)

    async def get_applicant_applications(self, applicant_id: str) -> List[Dict[str, Any]]:
        return await self.supabase_service.get_applicant_applications(applicant_id)

    async def _notify(self, *, user_id: str, notice_type: NotificationType, title: str, message: str,
                      job_id: Optional[str], application_id: Optional[str]) -> Optional[Dict[str, Any]]:
        """Best-effort notification write; failures are logged only"""
        try:
            notification = await self.supabase_service.create_notification({
                "user_id": user_id,
                "type": notice_type.value,
                "title": title,
                "message": message,
                "job_id": job_id,
                "application_id": application_id,
                "is_read": False,
            })
        except Exception as e:
            logger.error(f"Error sending {notice_type.value} notification to {user_id}: {str(e)}")
            return None
        if not notification:
            logger.warning(f"{notice_type.value} notification to {user_id} was not stored")
        return notification
