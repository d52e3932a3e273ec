"""
Pydantic schemas for API request/response models.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from campusfix.models.ticket import TicketPriority, TicketStatus


# =============================================================================
# Tickets
# =============================================================================

class HistoryEntryResponse(BaseModel):
    """One audit entry on a ticket."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    timestamp: datetime
    action: str
    actor_name: str
    details: str


class TicketResponse(BaseModel):
    """API response for a ticket."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    location: str
    status: TicketStatus
    priority: TicketPriority
    category: str
    created_by: str
    created_by_name: str
    assigned_to: Optional[str] = None
    assigned_to_name: Optional[str] = None
    created_at: datetime
    ai_analysis: Optional[str] = None
    image_url: Optional[str] = None
    building_id: Optional[str] = None  # Building the location maps to, if any
    floor: Optional[int] = None  # Estimated floor within that building
    history: list[HistoryEntryResponse] = []


class TicketEnvelope(BaseModel):
    data: TicketResponse


class TicketListEnvelope(BaseModel):
    data: list[TicketResponse]


class TicketCreate(BaseModel):
    """Request to report an issue."""
    title: Optional[str] = Field(None, max_length=300)
    description: str = ""
    location: str = Field("", max_length=300)
    priority: Optional[TicketPriority] = Field(
        None, description="Leave empty to let keyword triage decide"
    )
    category: Optional[str] = None
    image_url: Optional[str] = None


class AssignRequest(BaseModel):
    staff_id: str


class StatusUpdateRequest(BaseModel):
    status: TicketStatus


class CommentRequest(BaseModel):
    text: str = Field(..., min_length=1)


class AnalyzeRequest(BaseModel):
    description: str
    location: str = ""
    issue_type: str = "Infrastructure"


class AnalyzeResponse(BaseModel):
    priority: TicketPriority
    category: str
    summary: str
    suggested_action: str


# =============================================================================
# Campus map
# =============================================================================

class BuildingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    floor_count: int
    description: str
    facilities: list[str]
    map_x: float
    map_y: float
    width: float
    height: float


class WaypointResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    building_id: str
    floor: int
    kind: str
    x: float
    y: float
    neighbor_ids: list[str]


class NavigationStepResponse(BaseModel):
    description: str
    point_id: str


class RouteResponse(BaseModel):
    """Route between two waypoints; empty path when there is none."""
    start: Optional[str] = None
    end: Optional[str] = None
    path: list[str]
    hops: int
    distance: float
    found: bool
    steps: list[NavigationStepResponse] = []


class BuildingIssueResponse(BaseModel):
    building_id: str
    building_name: str
    count: int
    max_priority: TicketPriority
    color: str


# =============================================================================
# Notifications & announcements
# =============================================================================

class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    recipient_id: str
    message: str
    type: str
    read: bool
    timestamp: datetime


class NotificationsResponse(BaseModel):
    notifications: list[NotificationResponse]
    total: int
    unread_count: int


class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    content: str = Field(..., min_length=1)
    priority: str = Field("NORMAL", pattern="^(NORMAL|URGENT)$")
    scope: str = Field("UNIVERSITY", pattern="^(UNIVERSITY|DEPARTMENT|BATCH|SUBJECT)$")
    category: str = Field("GENERAL", pattern="^(GENERAL|ACADEMIC|EVENTS|EXAMS)$")


class AnnouncementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: str
    date: datetime
    author_name: str
    author_role: str
    priority: str
    scope: str
    category: str


# =============================================================================
# Academics
# =============================================================================

class ClassSessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    subject: str
    teacher_name: str
    location: str
    day_of_week: str
    start_time: str
    end_time: str
    is_extra_class: bool


class ExtraClassCreate(BaseModel):
    subject: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    day_of_week: str = Field(..., pattern="^(Monday|Tuesday|Wednesday|Thursday|Friday)$")
    start_time: str = Field(..., pattern=r"^\d{2}:\d{2}$")
    end_time: str = Field(..., pattern=r"^\d{2}:\d{2}$")
    teacher_name: Optional[str] = None


class MarkRow(BaseModel):
    student_id: str = Field(..., min_length=1)
    marks_obtained: int = Field(..., ge=0)
    total_marks: int = Field(100, gt=0)


class MarksUpload(BaseModel):
    subject: str = Field(..., min_length=1)
    exam_type: str = Field(..., pattern="^(MID_TERM|FINAL|QUIZ)$")
    rows: list[MarkRow] = Field(..., min_length=1)


class MarksUploadResponse(BaseModel):
    batch_id: str
    subject: str
    exam_type: str
    uploaded: int
