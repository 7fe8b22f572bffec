"""
Job service for JobPortal
Job listing, seeker-side filtering and employer job management
"""

import logging
from typing import List, Optional, Dict, Any
from jobportal.models.job import ALL_JOB_TYPES, JobCreate, JobUpdate, JobStats
from jobportal.models.application import ApplicationStatus
from jobportal.services.supabase_service import SupabaseService

logger = logging.getLogger(__name__)


def filter_jobs(
    jobs: List[Dict[str, Any]],
    search_term: str = "",
    location: str = "",
    job_type: Optional[str] = ALL_JOB_TYPES,
) -> List[Dict[str, Any]]:
    """
    Narrow a fetched job list the way the seeker search bar does.

    Blank term/location and the "all" job type impose no constraint.
    Non-blank text is matched as typed, surrounding spaces included.
    Order of the input list is preserved.
    """
    filtered = jobs

    term = (search_term or "").lower()
    if term.strip():
        filtered = [
            job for job in filtered
            if (term in (job.get("title") or "").lower() or
                term in (job.get("company") or "").lower() or
                term in (job.get("description") or "").lower())
        ]

    place = (location or "").lower()
    if place.strip():
        filtered = [job for job in filtered if place in (job.get("location") or "").lower()]

    if job_type and job_type != ALL_JOB_TYPES:
        filtered = [job for job in filtered if job.get("job_type") == job_type]

    return filtered


class JobService:
    """Service for job-related operations"""

    def __init__(self, supabase_service: Optional[SupabaseService] = None):
        self.supabase_service = supabase_service or SupabaseService()

    async def load(self) -> List[Dict[str, Any]]:
        """Currently active jobs, newest first"""
        return await self.supabase_service.get_active_jobs()

    async def list_jobs(self, search_term: str = "", location: str = "", job_type: str = ALL_JOB_TYPES) -> List[Dict[str, Any]]:
        jobs = await self.load()
        filtered = filter_jobs(jobs, search_term, location, job_type)
        logger.info(f"Filtered {len(jobs)} active jobs down to {len(filtered)}")
        return filtered

    async def search_jobs(self, skills: Optional[List[str]] = None, location: Optional[str] = None) -> List[Dict[str, Any]]:
        """Skill/location search evaluated by the backend instead of in memory"""
        skills = [s.strip() for s in (skills or []) if s and s.strip()]
        return await self.supabase_service.search_jobs(skills, (location or "").strip() or None)

    async def get_job(self, job_id: str) -> Optional[Dict[str, Any]]:
        return await self.supabase_service.get_job_by_id(job_id)

    async def post_job(self, job_data: JobCreate, employer_id: str) -> Optional[Dict[str, Any]]:
        return await self.supabase_service.create_job(job_data, employer_id)

    async def get_employer_jobs(self, employer_id: str) -> List[Dict[str, Any]]:
        return await self.supabase_service.get_employer_jobs(employer_id)

    async def update_job(self, job_id: str, job_update: JobUpdate, employer_id: str) -> Optional[Dict[str, Any]]:
        updates = job_update.model_dump(mode="json", exclude_none=True)
        if not updates:
            logger.warning(f"Empty update for job {job_id}")
            return await self._owned_job(job_id, employer_id)
        return await self.supabase_service.update_job(job_id, updates, employer_id)

    async def set_job_active(self, job_id: str, is_active: bool, employer_id: str) -> Optional[Dict[str, Any]]:
        job = await self.supabase_service.update_job(job_id, {"is_active": is_active}, employer_id)
        if job:
            logger.info(f"Job {job_id} is now {'visible' if is_active else 'hidden from applicants'}")
        return job

    async def toggle_job(self, job_id: str, employer_id: str) -> Optional[Dict[str, Any]]:
        """Flip is_active on a job the employer owns"""
        job = await self._owned_job(job_id, employer_id)
        if not job:
            return None
        return await self.set_job_active(job_id, not job.get("is_active", False), employer_id)

    async def delete_job(self, job_id: str, employer_id: str) -> bool:
        return await self.supabase_service.delete_job(job_id, employer_id)

    async def get_employer_stats(self, employer_id: str) -> JobStats:
        jobs = await self.get_employer_jobs(employer_id)
        applications = await self.supabase_service.get_applications_for_jobs([job["id"] for job in jobs])
        return JobStats(
            total_jobs=len(jobs),
            active_jobs=sum(1 for job in jobs if job.get("is_active")),
            total_applications=len(applications),
            pending_applications=sum(
                1 for app in applications if app.get("status") == ApplicationStatus.PENDING.value
            ),
        )

    async def _owned_job(self, job_id: str, employer_id: str) -> Optional[Dict[str, Any]]:
        job = await self.get_job(job_id)
        if not job or job.get("employer_id") != employer_id:
            logger.warning(f"Job {job_id} not found for employer {employer_id}")
            return None
        return job
