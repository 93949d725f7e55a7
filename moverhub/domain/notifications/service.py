"""
Notification service - in-app notifications for providers.

Dispatch is fire-and-forget: failures are logged and never reach the caller.
"""

import logging
from datetime import date
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import MoversProvider, Notification, ScheduledJob, User
from ...utils.sanitization import sanitize_string
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


def format_reservation_message(
    full_name: Optional[str], move_date: date, time_slot: str, total_cents: Optional[int]
) -> str:
    name = (full_name or "").strip() or "A customer"
    total = (total_cents or 0) / 100
    return (
        f"{name} has booked a move on {move_date.strftime('%m/%d/%Y')} ({time_slot}). "
        f"Total: ${total:.2f}"
    )


class NotificationService:
    """Service layer for notifications"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = NotificationRepository()

    def notify_provider_of_reservation(
        self,
        provider: MoversProvider,
        job: ScheduledJob,
        full_name: Optional[str],
        total_cents: Optional[int],
    ) -> Optional[int]:
        """Tell the provider's owner about a new reservation. Returns the notification id or None."""
        if not provider or not provider.owner_user_id:
            logger.debug(f"⚠️ No owner to notify for scheduled job {job.id}")
            return None

        try:
            message = format_reservation_message(
                full_name, job.scheduled_date, job.time_slot, total_cents
            )
            notification = self.repo.create(
                self.db,
                Notification(
                    user_id=provider.owner_user_id,
                    title="New Reservation",
                    message=sanitize_string(message),
                    type="reservation",
                    related_id=job.id,
                    is_read=False,
                ),
            )
            logger.info(f"🔔 Notified user {provider.owner_user_id} of reservation {job.id}")
            return notification.id
        except Exception as e:
            logger.error(f"❌ Failed to create reservation notification for job {job.id}: {e}")
            return None

    def list_notifications(self, user: User, unread_only: bool = False) -> list[Notification]:
        return self.repo.list_for_user(self.db, user.id, unread_only=unread_only)

    def unread_count(self, user: User) -> int:
        return self.repo.count_unread(self.db, user.id)

    def mark_read(self, notification_id: int, user: User) -> Notification:
        notification = self.repo.get_for_user(self.db, notification_id, user.id)
        if not notification:
            raise HTTPException(status_code=404, detail="Notification not found")
        return self.repo.mark_read(self.db, notification)

    def mark_all_read(self, user: User) -> int:
        updated = self.repo.mark_all_read(self.db, user.id)
        logger.info(f"✅ Marked {updated} notifications read for user {user.id}")
        return updated
