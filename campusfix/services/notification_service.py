"""
Per-user notifications.

Stored in the database so a user's notification center survives restarts.
"""
import logging
from typing import Optional
from sqlalchemy import select, delete

from campusfix.errors import NotificationNotFoundError
from campusfix.models.database import Notification, get_session_factory

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = ("info", "success", "warning")


class NotificationService:
    """Create, list and acknowledge notifications."""

    def __init__(self, session_factory=None):
        self.session_factory = session_factory or get_session_factory()

    def notify(self, recipient_id: str, message: str, type: str = "info", session=None) -> Notification:
        """
        Queue a notification for a user.

        Pass an open session to add the notification to the caller's
        transaction instead of committing on its own.
        """
        if type not in NOTIFICATION_TYPES:
            raise ValueError(f"Unknown notification type: {type}")

        notification = Notification(recipient_id=recipient_id, message=message, type=type)
        if session is not None:
            session.add(notification)
            return notification

        with self.session_factory() as own_session:
            own_session.add(notification)
            own_session.commit()
        logger.debug(f"Notified {recipient_id}: {message}")
        return notification

    def list_for_user(self, user_id: str, unread_only: bool = False) -> list[Notification]:
        """Notifications for a user, newest first."""
        with self.session_factory() as session:
            query = select(Notification).where(Notification.recipient_id == user_id)
            if unread_only:
                query = query.where(Notification.read == False)  # noqa: E712
            query = query.order_by(Notification.timestamp.desc(), Notification.seq.desc())
            return list(session.execute(query).scalars().all())

    def unread_count(self, user_id: str) -> int:
        return len(self.list_for_user(user_id, unread_only=True))

    def mark_read(self, notification_id: str, user_id: Optional[str] = None) -> Notification:
        """Mark one notification as read. With user_id, only that user's own."""
        with self.session_factory() as session:
            query = select(Notification).where(Notification.id == notification_id)
            if user_id is not None:
                query = query.where(Notification.recipient_id == user_id)
            notification = session.execute(query).scalar_one_or_none()
            if notification is None:
                raise NotificationNotFoundError(notification_id)

            notification.read = True
            session.commit()
            return notification

    def clear_for_user(self, user_id: str) -> int:
        """Delete all of a user's notifications. Returns how many were removed."""
        with self.session_factory() as session:
            result = session.execute(
                delete(Notification).where(Notification.recipient_id == user_id)
            )
            session.commit()
            return result.rowcount
