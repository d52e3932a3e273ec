"""Announcement board."""
import logging
from typing import Optional
from sqlalchemy import select

from campusfix.errors import PermissionDeniedError, UserNotFoundError
from campusfix.models.database import Announcement, User, get_session_factory
from campusfix.models.ticket import UserRole
from campusfix.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

SCOPES = ("UNIVERSITY", "DEPARTMENT", "BATCH", "SUBJECT")
CATEGORIES = ("GENERAL", "ACADEMIC", "EVENTS", "EXAMS")
PRIORITIES = ("NORMAL", "URGENT")


class AnnouncementService:
    def __init__(self, session_factory=None, notifications: Optional[NotificationService] = None):
        self.session_factory = session_factory or get_session_factory()
        self.notifications = notifications or NotificationService(self.session_factory)

    def list_announcements(self, scope: Optional[str] = None, category: Optional[str] = None) -> list[Announcement]:
        """Announcements, newest first."""
        with self.session_factory() as session:
            query = select(Announcement)
            if scope:
                query = query.where(Announcement.scope == scope)
            if category:
                query = query.where(Announcement.category == category)
            query = query.order_by(Announcement.date.desc(), Announcement.seq.desc())
            return list(session.execute(query).scalars().all())

    def post_announcement(
        self,
        author_id: str,
        title: str,
        content: str,
        priority: str = "NORMAL",
        scope: str = "UNIVERSITY",
        category: str = "GENERAL",
    ) -> Announcement:
        """Post an announcement and notify everyone except the author."""
        if priority not in PRIORITIES:
            raise ValueError(f"Unknown priority: {priority}")
        if scope not in SCOPES:
            raise ValueError(f"Unknown scope: {scope}")
        if category not in CATEGORIES:
            raise ValueError(f"Unknown category: {category}")

        with self.session_factory() as session:
            author = session.get(User, author_id)
            if author is None:
                raise UserNotFoundError(author_id)
            if author.role not in (UserRole.ADMIN.value, UserRole.STAFF.value):
                raise PermissionDeniedError("Only staff can post announcements")

            announcement = Announcement(
                title=title,
                content=content,
                author_name=author.name,
                author_role=author.role,
                priority=priority,
                scope=scope,
                category=category,
            )
            session.add(announcement)

            notify_type = "warning" if priority == "URGENT" else "info"
            others = session.execute(select(User).where(User.id != author.id)).scalars().all()
            for user in others:
                self.notifications.notify(
                    user.id, f"New Announcement: {title}", notify_type, session=session
                )

            session.commit()
            logger.info(f"Announcement {announcement.id} posted by {author.id} ({scope}/{category})")
            return announcement
