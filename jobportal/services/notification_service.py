"""
Notification service for JobPortal
Pull-based notification feed
"""

import logging
from typing import List, Optional, Dict, Any
from jobportal.services.supabase_service import SupabaseService

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for listing and acknowledging notifications"""

    def __init__(self, supabase_service: Optional[SupabaseService] = None):
        self.supabase_service = supabase_service or SupabaseService()

    async def list(self, user_id: str) -> List[Dict[str, Any]]:
        """Newest first"""
        return await self.supabase_service.get_user_notifications(user_id)

    async def unread_count(self, user_id: str) -> int:
        notifications = await self.list(user_id)
        return sum(1 for n in notifications if not n.get("is_read"))

    async def mark_read(self, notification_id: str) -> bool:
        # Re-marking an already read notification is a no-op write
        return await self.supabase_service.mark_notification_read(notification_id)

    async def mark_all_read(self, user_id: str) -> bool:
        success = await self.supabase_service.mark_all_notifications_read(user_id)
        if success:
            logger.info(f"Marked all notifications read for user {user_id}")
        return success
