"""
Notification and announcement endpoints.
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from campusfix.api.auth import get_current_user, require_roles
from campusfix.api.deps import get_announcement_service, get_notification_service
from campusfix.api.rate_limit import write_limit
from campusfix.api.schemas import (
    AnnouncementCreate,
    AnnouncementResponse,
    NotificationResponse,
    NotificationsResponse,
)
from campusfix.errors import NotificationNotFoundError
from campusfix.models.database import User
from campusfix.services.announcement_service import AnnouncementService
from campusfix.services.notification_service import NotificationService

router = APIRouter(tags=["Notifications"])


@router.get("/notifications", response_model=NotificationsResponse)
async def get_notifications(
    unread_only: bool = Query(False),
    user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    """The caller's notifications, newest first."""
    notifications = service.list_for_user(user.id, unread_only=unread_only)
    return NotificationsResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        total=len(notifications),
        unread_count=sum(1 for n in notifications if not n.read),
    )


@router.post("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: str,
    user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    try:
        notification = service.mark_read(notification_id, user_id=user.id)
    except NotificationNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return NotificationResponse.model_validate(notification)


@router.delete("/notifications")
async def clear_notifications(
    user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    removed = service.clear_for_user(user.id)
    return {"removed": removed}


@router.get("/announcements", response_model=list[AnnouncementResponse])
async def list_announcements(
    scope: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    service: AnnouncementService = Depends(get_announcement_service),
):
    return [AnnouncementResponse.model_validate(a) for a in service.list_announcements(scope, category)]


@router.post("/announcements", response_model=AnnouncementResponse, status_code=201)
@write_limit
async def post_announcement(
    request: Request,
    body: AnnouncementCreate,
    user: User = Depends(require_roles("ADMIN", "STAFF")),
    service: AnnouncementService = Depends(get_announcement_service),
):
    """Post an announcement; everyone else is notified."""
    announcement = service.post_announcement(
        user.id,
        title=body.title,
        content=body.content,
        priority=body.priority,
        scope=body.scope,
        category=body.category,
    )
    return AnnouncementResponse.model_validate(announcement)
