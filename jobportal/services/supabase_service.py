"""
Supabase service for JobPortal
Handles database operations and connection management
"""

import logging
from typing import List, Optional, Dict, Any
from datetime import datetime, timezone
from supabase import create_client, Client
import psycopg2
from psycopg2 import sql
from psycopg2.extras import RealDictCursor
from jobportal.config import settings
from jobportal.models.job import JobCreate

logger = logging.getLogger(__name__)

JOB_COLUMNS = (
    "id, title, company, location, description, requirements, salary_range, job_type, "
    "required_skills, experience_level, employer_id, is_active, created_at, updated_at"
)
APPLICATION_COLUMNS = (
    "id, job_id, applicant_id, resume_url, cover_letter, status, applied_at, reviewed_at, employer_message"
)
NOTIFICATION_COLUMNS = "id, user_id, type, title, message, job_id, application_id, is_read, created_at"
PROFILE_COLUMNS = (
    "id, user_id, name, email, phone, location, bio, skills, experience, job_title, "
    "resume_url, avatar_url, is_public, created_at, updated_at"
)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SupabaseService:
    """Service for Supabase database operations"""

    def __init__(self, client: Optional[Client] = None, database_url: Optional[str] = None):
        self.supabase_url = settings.SUPABASE_URL
        self.supabase_anon_key = settings.SUPABASE_ANON_KEY
        self.database_url = database_url or settings.DATABASE_URL
        self.use_direct_connection = False

        if client is not None:
            self.client = client
        elif self.supabase_url and self.supabase_anon_key:
            # Try Supabase client first, fallback to direct PostgreSQL
            try:
                self.client: Client = create_client(self.supabase_url, self.supabase_anon_key)
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                logger.warning(f"Supabase client failed, falling back to direct connection: {e}")
                self.use_direct_connection = True
        else:
            self.use_direct_connection = True

        if self.use_direct_connection and not self.database_url:
            raise ValueError("Either SUPABASE_URL/ANON_KEY or DATABASE_URL must be set in environment variables")

        if self.use_direct_connection:
            logger.info("Using direct PostgreSQL connection")
        else:
            logger.info("Using Supabase client")

    def _switch_to_direct(self, error: Exception) -> bool:
        """Fall back to direct DB once if the REST key is rejected."""
        if not self.use_direct_connection and self.database_url and "Invalid API key" in str(error):
            logger.warning("Supabase rejected the API key, switching to direct PostgreSQL connection")
            self.use_direct_connection = True
            return True
        return False

    def _execute(self, query, params: tuple = (), fetch: str = "all"):
        """Run a statement over the direct connection.

        fetch is one of "all" (list of dicts), "one" (dict or None) or "rowcount".
        """
        with psycopg2.connect(self.database_url) as conn:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(query, params)
                if fetch == "rowcount":
                    return cur.rowcount
                if fetch == "one":
                    row = cur.fetchone()
                    return dict(row) if row else None
                rows = cur.fetchall()
                return [dict(r) for r in rows] if rows else []

    def _update_sql(self, table: str, data: Dict[str, Any], where: Dict[str, Any], returning: str):
        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(k)) for k in data
        )
        conditions = sql.SQL(" AND ").join(
            sql.SQL("{} = %s").format(sql.Identifier(k)) for k in where
        )
        query = sql.SQL("UPDATE {} SET {} WHERE {} RETURNING " + returning).format(
            sql.Identifier(table), assignments, conditions
        )
        return query, tuple(data.values()) + tuple(where.values())

    def _insert_sql(self, table: str, data: Dict[str, Any], returning: str):
        query = sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING " + returning).format(
            sql.Identifier(table),
            sql.SQL(", ").join(sql.Identifier(k) for k in data),
            sql.SQL(", ").join(sql.Placeholder() for _ in data),
        )
        return query, tuple(data.values())

    # =====================
    # Jobs
    # =====================
    async def create_job(self, job_data: JobCreate, employer_id: str) -> Optional[Dict[str, Any]]:
        """Create a new job posting, active by default"""
        data = job_data.model_dump(mode="json")
        data.update({"employer_id": employer_id, "is_active": True})
        try:
            if not self.use_direct_connection:
                result = self.client.table("jobs").insert(data).execute()
                if result.data:
                    logger.info(f"Created job: {job_data.title} at {job_data.company}")
                    return result.data[0]
                logger.error("No data returned from job creation")
                return None
            query, params = self._insert_sql("jobs", data, JOB_COLUMNS)
            return self._execute(query, params, fetch="one")
        except Exception as e:
            logger.error(f"Error creating job: {str(e)}")
            if self._switch_to_direct(e):
                return await self.create_job(job_data, employer_id)
            return None

    async def get_active_jobs(self) -> List[Dict[str, Any]]:
        """All active jobs, newest first"""
        try:
            if not self.use_direct_connection:
                result = (
                    self.client
                    .table("jobs")
                    .select("*")
                    .eq("is_active", True)
                    .order("created_at", desc=True)
                    .execute()
                )
                data = result.data or []
            else:
                data = self._execute(
                    f"SELECT {JOB_COLUMNS} FROM jobs WHERE is_active = TRUE ORDER BY created_at DESC"
                )
            logger.info(f"Retrieved {len(data)} active jobs")
            return data
        except Exception as e:
            logger.error(f"Error retrieving active jobs: {str(e)}")
            if self._switch_to_direct(e):
                return await self.get_active_jobs()
            return []

    async def get_employer_jobs(self, employer_id: str) -> List[Dict[str, Any]]:
        """Every job owned by an employer, active or not, newest first"""
        try:
            if not self.use_direct_connection:
                result = (
                    self.client
                    .table("jobs")
                    .select("*")
                    .eq("employer_id", employer_id)
                    .order("created_at", desc=True)
                    .execute()
                )
                data = result.data or []
            else:
                data = self._execute(
                    f"SELECT {JOB_COLUMNS} FROM jobs WHERE employer_id = %s::uuid ORDER BY created_at DESC",
                    (employer_id,)
                )
            logger.info(f"Retrieved {len(data)} jobs for employer {employer_id}")
            return data
        except Exception as e:
            logger.error(f"Error retrieving employer jobs: {str(e)}")
            if self._switch_to_direct(e):
                return await self.get_employer_jobs(employer_id)
            return []

    async def get_job_by_id(self, job_id: str) -> Optional[Dict[str, Any]]:
        """Get a specific job by ID"""
        try:
            if not self.use_direct_connection:
                result = self.client.table("jobs").select("*").eq("id", job_id).limit(1).execute()
                if result.data:
                    return result.data[0]
                logger.info(f"No job found with id {job_id}")
                return None
            return self._execute(
                f"SELECT {JOB_COLUMNS} FROM jobs WHERE id = %s::uuid LIMIT 1", (job_id,), fetch="one"
            )
        except Exception as e:
            logger.error(f"Error retrieving job: {str(e)}")
            if self._switch_to_direct(e):
                return await self.get_job_by_id(job_id)
            return None

    async def update_job(self, job_id: str, updates: Dict[str, Any], employer_id: str) -> Optional[Dict[str, Any]]:
        """Update columns of a job owned by employer_id"""
        data = dict(updates)
        data["updated_at"] = utc_now_iso()
        try:
            if not self.use_direct_connection:
                result = (
                    self.client
                    .table("jobs")
                    .update(data)
                    .eq("id", job_id)
                    .eq("employer_id", employer_id)
                    .execute()
                )
                if result.data:
                    logger.info(f"Updated job {job_id}: {sorted(updates)}")
                    return result.data[0]
                logger.error(f"No job found with id {job_id} for employer {employer_id}")
                return None
            query, params = self._update_sql(
                "jobs", data, {"id": job_id, "employer_id": employer_id}, JOB_COLUMNS
            )
            return self._execute(query, params, fetch="one")
        except Exception as e:
            logger.error(f"Error updating job {job_id}: {str(e)}")
            if self._switch_to_direct(e):
                return await self.update_job(job_id, updates, employer_id)
            return None

    async def delete_job(self, job_id: str, employer_id: str) -> bool:
        """Delete a job owned by employer_id"""
        try:
            if not self.use_direct_connection:
                result = (
                    self.client
                    .table("jobs")
                    .delete()
                    .eq("id", job_id)
                    .eq("employer_id", employer_id)
                    .execute()
                )
                deleted = bool(result.data)
            else:
                deleted = self._execute(
                    "DELETE FROM jobs WHERE id = %s::uuid AND employer_id = %s::uuid",
                    (job_id, employer_id),
                    fetch="rowcount"
                ) > 0
            if deleted:
                logger.info(f"Deleted job {job_id}")
            else:
                logger.error(f"No job found with id {job_id} for employer {employer_id}")
            return deleted
        except Exception as e:
            logger.error(f"Error deleting job {job_id}: {str(e)}")
            if self._switch_to_direct(e):
                return await self.delete_job(job_id, employer_id)
            return False

    async def search_jobs(self, skills: Optional[List[str]] = None, location: Optional[str] = None) -> List[Dict[str, Any]]:
        """Active jobs sharing any of the skills and/or located in a matching place."""
        try:
            if not self.use_direct_connection:
                query = self.client.table("jobs").select("*").eq("is_active", True)
                if skills:
                    query = query.ov("required_skills", skills)
                if location:
                    query = query.ilike("location", f"%{location}%")
                result = query.order("created_at", desc=True).execute()
                data = result.data or []
            else:
                params: list = []
                where_clauses = ["is_active = TRUE"]
                if skills:
                    where_clauses.append("required_skills && %s::text[]")
                    params.append(list(skills))
                if location:
                    where_clauses.append("location ILIKE %s")
                    params.append(f"%{location}%")
                data = self._execute(
                    f"SELECT {JOB_COLUMNS} FROM jobs WHERE " + " AND ".join(where_clauses)
                    + " ORDER BY created_at DESC",
                    tuple(params)
                )
            logger.info(f"Found {len(data)} jobs matching search criteria")
            return data
        except Exception as e:
            logger.error(f"Error searching jobs: {str(e)}")
            if self._switch_to_direct(e):
                return await self.search_jobs(skills, location)
            return []

    # =====================
    # Job applications
    # =====================
    async def create_application(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Insert a job_applications row"""
        try:
            if not self.use_direct_connection:
                result = self.client.table("job_applications").insert(data).execute()
                if result.data:
                    logger.info(f"Created application for job {data.get('job_id')} by {data.get('applicant_id')}")
                    return result.data[0]
                logger.error("No data returned from application creation")
                return None
            query, params = self._insert_sql("job_applications", data, APPLICATION_COLUMNS)
            return self._execute(query, params, fetch="one")
        except Exception as e:
            logger.error(f"Error creating application: {str(e)}")
            if self._switch_to_direct(e):
                return await self.create_application(data)
            return None

    async def get_application_by_id(self, application_id: str) -> Optional[Dict[str, Any]]:
        try:
            if not self.use_direct_connection:
                result = (
                    self.client
                    .table("job_applications")
                    .select("*")
                    .eq("id", application_id)
                    .limit(1)
                    .execute()
                )
                return result.data[0] if result.data else None
            return self._execute(
                f"SELECT {APPLICATION_COLUMNS} FROM job_applications WHERE id = %s::uuid LIMIT 1",
                (application_id,),
                fetch="one"
            )
        except Exception as e:
            logger.error(f"Error retrieving application: {str(e)}")
            if self._switch_to_direct(e):
                return await self.get_application_by_id(application_id)
            return None

    async def update_application(self, application_id: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update an application row (status, review timestamp, employer message)"""
        try:
            if not self.use_direct_connection:
                result = (
                    self.client
                    .table("job_applications")
                    .update(data)
                    .eq("id", application_id)
                    .execute()
                )
                if result.data:
                    logger.info(f"Updated application {application_id}: {data.get('status')}")
                    return result.data[0]
                logger.error(f"No application found with id {application_id}")
                return None
            query, params = self._update_sql(
                "job_applications", data, {"id": application_id}, APPLICATION_COLUMNS
            )
            return self._execute(query, params, fetch="one")
        except Exception as e:
            logger.error(f"Error updating application {application_id}: {str(e)}")
            if self._switch_to_direct(e):
                return await self.update_application(application_id, data)
            return None

    async def get_job_applications(self, job_id: str) -> List[Dict[str, Any]]:
        return await self._get_applications_by("job_id", job_id)

    async def get_applicant_applications(self, applicant_id: str) -> List[Dict[str, Any]]:
        return await self._get_applications_by("applicant_id", applicant_id)

    async def _get_applications_by(self, column: str, value: str) -> List[Dict[str, Any]]:
        try:
            if not self.use_direct_connection:
                result = (
                    self.client
                    .table("job_applications")
                    .select("*")
                    .eq(column, value)
                    .order("applied_at", desc=True)
                    .execute()
                )
                return result.data or []
            query = sql.SQL(
                "SELECT " + APPLICATION_COLUMNS + " FROM job_applications WHERE {} = %s::uuid ORDER BY applied_at DESC"
            ).format(sql.Identifier(column))
            return self._execute(query, (value,))
        except Exception as e:
            logger.error(f"Error retrieving applications by {column}: {str(e)}")
            if self._switch_to_direct(e):
                return await self._get_applications_by(column, value)
            return []

    async def get_applications_for_jobs(self, job_ids: List[str]) -> List[Dict[str, Any]]:
        """Applications across several jobs; used for employer dashboard counts"""
        if not job_ids:
            return []
        try:
            if not self.use_direct_connection:
                result = (
                    self.client
                    .table("job_applications")
                    .select("id, job_id, status")
                    .in_("job_id", job_ids)
                    .execute()
                )
                return result.data or []
            return self._execute(
                "SELECT id, job_id, status FROM job_applications WHERE job_id = ANY(%s::uuid[])",
                (list(job_ids),)
            )
        except Exception as e:
            logger.error(f"Error retrieving applications for jobs: {str(e)}")
            if self._switch_to_direct(e):
                return await self.get_applications_for_jobs(job_ids)
            return []

    # =====================
    # Notifications
    # =====================
    async def create_notification(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            if not self.use_direct_connection:
                result = self.client.table("notifications").insert(data).execute()
                if result.data:
                    logger.info(f"Created {data.get('type')} notification for user {data.get('user_id')}")
                    return result.data[0]
                logger.error("No data returned from notification creation")
                return None
            query, params = self._insert_sql("notifications", data, NOTIFICATION_COLUMNS)
            return self._execute(query, params, fetch="one")
        except Exception as e:
            logger.error(f"Error creating notification: {str(e)}")
            if self._switch_to_direct(e):
                return await self.create_notification(data)
            return None

    async def get_user_notifications(self, user_id: str) -> List[Dict[str, Any]]:
        """Notifications for a user, newest first"""
        try:
            if not self.use_direct_connection:
                result = (
                    self.client
                    .table("notifications")
                    .select("*")
                    .eq("user_id", user_id)
                    .order("created_at", desc=True)
                    .execute()
                )
                return result.data or []
            return self._execute(
                f"SELECT {NOTIFICATION_COLUMNS} FROM notifications WHERE user_id = %s::uuid ORDER BY created_at DESC",
                (user_id,)
            )
        except Exception as e:
            logger.error(f"Error retrieving notifications: {str(e)}")
            if self._switch_to_direct(e):
                return await self.get_user_notifications(user_id)
            return []

    async def mark_notification_read(self, notification_id: str) -> bool:
        """Returns False only when the notification does not exist or the write failed"""
        try:
            if not self.use_direct_connection:
                result = (
                    self.client
                    .table("notifications")
                    .update({"is_read": True})
                    .eq("id", notification_id)
                    .execute()
                )
                return bool(result.data)
            return self._execute(
                "UPDATE notifications SET is_read = TRUE WHERE id = %s::uuid",
                (notification_id,),
                fetch="rowcount"
            ) > 0
        except Exception as e:
            logger.error(f"Error marking notification {notification_id} read: {str(e)}")
            if self._switch_to_direct(e):
                return await self.mark_notification_read(notification_id)
            return False

    async def mark_all_notifications_read(self, user_id: str) -> bool:
        try:
            if not self.use_direct_connection:
                (
                    self.client
                    .table("notifications")
                    .update({"is_read": True})
                    .eq("user_id", user_id)
                    .eq("is_read", False)
                    .execute()
                )
            else:
                self._execute(
                    "UPDATE notifications SET is_read = TRUE WHERE user_id = %s::uuid AND is_read = FALSE",
                    (user_id,),
                    fetch="rowcount"
                )
            return True
        except Exception as e:
            logger.error(f"Error marking notifications read for user {user_id}: {str(e)}")
            if self._switch_to_direct(e):
                return await self.mark_all_notifications_read(user_id)
            return False

    # =====================
    # User profiles
    # =====================
    async def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            if not self.use_direct_connection:
                result = (
                    self.client
                    .table("user_profiles")
                    .select("*")
                    .eq("user_id", user_id)
                    .limit(1)
                    .execute()
                )
                return result.data[0] if result.data else None
            return self._execute(
                f"SELECT {PROFILE_COLUMNS} FROM user_profiles WHERE user_id = %s::uuid LIMIT 1",
                (user_id,),
                fetch="one"
            )
        except Exception as e:
            logger.error(f"Error retrieving profile for {user_id}: {str(e)}")
            if self._switch_to_direct(e):
                return await self.get_profile(user_id)
            return None

    async def insert_profile(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            if not self.use_direct_connection:
                result = self.client.table("user_profiles").insert(data).execute()
                return result.data[0] if result.data else None
            query, params = self._insert_sql("user_profiles", data, PROFILE_COLUMNS)
            return self._execute(query, params, fetch="one")
        except Exception as e:
            logger.error(f"Error creating profile: {str(e)}")
            if self._switch_to_direct(e):
                return await self.insert_profile(data)
            return None

    async def update_profile(self, user_id: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        data = dict(data)
        data["updated_at"] = utc_now_iso()
        try:
            if not self.use_direct_connection:
                result = self.client.table("user_profiles").update(data).eq("user_id", user_id).execute()
                return result.data[0] if result.data else None
            query, params = self._update_sql("user_profiles", data, {"user_id": user_id}, PROFILE_COLUMNS)
            return self._execute(query, params, fetch="one")
        except Exception as e:
            logger.error(f"Error updating profile for {user_id}: {str(e)}")
            if self._switch_to_direct(e):
                return await self.update_profile(user_id, data)
            return None

    async def search_profiles(self, skills: Optional[List[str]] = None, location: Optional[str] = None) -> List[Dict[str, Any]]:
        """Public profiles only"""
        try:
            if not self.use_direct_connection:
                query = self.client.table("user_profiles").select("*").eq("is_public", True)
                if skills:
                    query = query.ov("skills", skills)
                if location:
                    query = query.ilike("location", f"%{location}%")
                result = query.order("created_at", desc=True).execute()
                return result.data or []
            params: list = []
            where_clauses = ["is_public = TRUE"]
            if skills:
                where_clauses.append("skills && %s::text[]")
                params.append(list(skills))
            if location:
                where_clauses.append("location ILIKE %s")
                params.append(f"%{location}%")
            return self._execute(
                f"SELECT {PROFILE_COLUMNS} FROM user_profiles WHERE " + " AND ".join(where_clauses)
                + " ORDER BY created_at DESC",
                tuple(params)
            )
        except Exception as e:
            logger.error(f"Error searching profiles: {str(e)}")
            if self._switch_to_direct(e):
                return await self.search_profiles(skills, location)
            return []
