"""Service dependencies shared by the routers."""
from functools import lru_cache
from fastapi import Depends

from campusfix.api.auth import get_db_session_factory
from campusfix.config import settings
from campusfix.models.campus_graph import CampusGraph, build_campus_graph
from campusfix.services.academic_service import AcademicService
from campusfix.services.announcement_service import AnnouncementService
from campusfix.services.notification_service import NotificationService
from campusfix.services.ticket_service import TicketService


@lru_cache
def get_campus_graph() -> CampusGraph:
    """The campus map is static, so it is built once per process."""
    return build_campus_graph(symmetric=settings.symmetric_graph)


def get_notification_service(session_factory=Depends(get_db_session_factory)) -> NotificationService:
    return NotificationService(session_factory)


def get_ticket_service(
    session_factory=Depends(get_db_session_factory),
    notifications: NotificationService = Depends(get_notification_service),
) -> TicketService:
    return TicketService(session_factory, notifications)


def get_academic_service(
    session_factory=Depends(get_db_session_factory),
    notifications: NotificationService = Depends(get_notification_service),
) -> AcademicService:
    return AcademicService(session_factory, notifications)


def get_announcement_service(
    session_factory=Depends(get_db_session_factory),
    notifications: NotificationService = Depends(get_notification_service),
) -> AnnouncementService:
    return AnnouncementService(session_factory, notifications)
