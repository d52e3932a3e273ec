"""
Ticket API endpoints.

Allows users to:
- Report campus issues
- List tickets, optionally by building or status
- Assign tickets and move them through their statuses (staff/admin)
- Comment on tickets
- Preview keyword triage for a description

Responses are wrapped in a ``{"data": ...}`` envelope.
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from campusfix.api.auth import get_current_user
from campusfix.api.deps import get_campus_graph, get_ticket_service
from campusfix.api.rate_limit import write_limit
from campusfix.api.schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    AssignRequest,
    CommentRequest,
    StatusUpdateRequest,
    TicketCreate,
    TicketEnvelope,
    TicketListEnvelope,
    TicketResponse,
)
from campusfix.errors import PermissionDeniedError, TicketNotFoundError, UserNotFoundError
from campusfix.models.database import Issue, User
from campusfix.models.ticket import TicketStatus
from campusfix.services.issue_correlator import estimate_floor, match_building
from campusfix.services.ticket_service import TicketService
from campusfix.services.triage import analyze_ticket

router = APIRouter(prefix="/tickets", tags=["Tickets"])


def to_response(issue: Issue) -> TicketResponse:
    """Ticket response with the building and floor its location points at."""
    response = TicketResponse.model_validate(issue)
    response.building_id = match_building(issue.location)
    building = get_campus_graph().buildings.get(response.building_id)
    if building is not None:
        response.floor = estimate_floor(issue.location, building.floor_count)
    return response


ERROR_STATUS = {
    TicketNotFoundError: 404,
    UserNotFoundError: 404,
    PermissionDeniedError: 403,
}


def _translate(exc: Exception) -> HTTPException:
    """Map a service error to the HTTP error returned to the client."""
    return HTTPException(status_code=ERROR_STATUS[type(exc)], detail=str(exc))


# =============================================================================
# Endpoints
# =============================================================================

@router.post("", response_model=TicketEnvelope, status_code=201)
@write_limit
async def create_ticket(
    request: Request,
    body: TicketCreate,
    user: User = Depends(get_current_user),
    service: TicketService = Depends(get_ticket_service),
):
    """Submit a new issue."""
    issue = service.create_ticket(
        user.id,
        title=body.title,
        description=body.description,
        location=body.location,
        priority=body.priority,
        category=body.category,
        image_url=body.image_url,
    )
    return TicketEnvelope(data=to_response(issue))


@router.get("", response_model=TicketListEnvelope)
async def list_tickets(
    building_id: Optional[str] = Query(None, alias="buildingId", description="Building the location maps to"),
    status: Optional[TicketStatus] = Query(None, description="Ticket status"),
    service: TicketService = Depends(get_ticket_service),
):
    """Fetch all tickets, newest first."""
    issues = service.list_tickets(building_id=building_id, status=status)
    return TicketListEnvelope(data=[to_response(i) for i in issues])


@router.get("/building/{building_id}", response_model=TicketListEnvelope)
async def get_building_issues(
    building_id: str,
    service: TicketService = Depends(get_ticket_service),
):
    """Tickets for one building's map pin."""
    issues = service.tickets_for_building(building_id)
    return TicketListEnvelope(data=[to_response(i) for i in issues])


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(body: AnalyzeRequest):
    """Preview the priority and category triage would pick."""
    result = analyze_ticket(body.description, body.location, body.issue_type)
    return AnalyzeResponse(
        priority=result.priority,
        category=result.category,
        summary=result.summary,
        suggested_action=result.suggested_action,
    )


@router.get("/{ticket_id}", response_model=TicketEnvelope)
async def get_ticket(ticket_id: str, service: TicketService = Depends(get_ticket_service)):
    try:
        issue = service.get_ticket(ticket_id)
    except TicketNotFoundError as e:
        raise _translate(e)
    return TicketEnvelope(data=to_response(issue))


@router.post("/{ticket_id}/assign", response_model=TicketEnvelope)
@write_limit
async def assign_ticket(
    request: Request,
    ticket_id: str,
    body: AssignRequest,
    user: User = Depends(get_current_user),
    service: TicketService = Depends(get_ticket_service),
):
    """Assign a ticket to a staff member."""
    try:
        issue = service.assign_ticket(ticket_id, body.staff_id, user.id)
    except (TicketNotFoundError, UserNotFoundError, PermissionDeniedError) as e:
        raise _translate(e)
    return TicketEnvelope(data=to_response(issue))


@router.post("/{ticket_id}/status", response_model=TicketEnvelope)
@write_limit
async def update_status(
    request: Request,
    ticket_id: str,
    body: StatusUpdateRequest,
    user: User = Depends(get_current_user),
    service: TicketService = Depends(get_ticket_service),
):
    """Move a ticket to a new status."""
    try:
        issue = service.update_status(ticket_id, body.status, user.id)
    except (TicketNotFoundError, UserNotFoundError, PermissionDeniedError) as e:
        raise _translate(e)
    return TicketEnvelope(data=to_response(issue))


@router.post("/{ticket_id}/comments", response_model=TicketEnvelope)
@write_limit
async def add_comment(
    request: Request,
    ticket_id: str,
    body: CommentRequest,
    user: User = Depends(get_current_user),
    service: TicketService = Depends(get_ticket_service),
):
    try:
        issue = service.add_comment(ticket_id, user.id, body.text)
    except (TicketNotFoundError, UserNotFoundError) as e:
        raise _translate(e)
    return TicketEnvelope(data=to_response(issue))
