"""
Academic API endpoints.

Student routes use the caller from the mock headers; batch and analytics
routes are for staff and admins.
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from campusfix.api.auth import get_current_user, require_roles
from campusfix.api.deps import get_academic_service, get_ticket_service
from campusfix.api.rate_limit import write_limit
from campusfix.api.schemas import ClassSessionResponse, ExtraClassCreate, MarksUpload, MarksUploadResponse
from campusfix.errors import BatchNotFoundError, PermissionDeniedError
from campusfix.models.database import User
from campusfix.services.academic_service import AcademicService
from campusfix.services.ticket_service import TicketService

router = APIRouter(prefix="/academics", tags=["Academics"])

staff_only = require_roles("ADMIN", "STAFF")


@router.get("/student/overview")
async def get_student_overview(
    user: User = Depends(get_current_user),
    service: AcademicService = Depends(get_academic_service),
):
    """Attendance, risks, pending assignments and CGPA for the caller."""
    return service.student_overview(user.id)


@router.get("/student/subject/{subject}")
async def get_subject_performance(
    subject: str,
    user: User = Depends(get_current_user),
    service: AcademicService = Depends(get_academic_service),
):
    return service.subject_performance(user.id, subject)


@router.get("/batch/{batch_id}/attendance")
async def get_batch_attendance(
    batch_id: str,
    user: User = Depends(staff_only),
    service: AcademicService = Depends(get_academic_service),
):
    try:
        return service.batch_attendance(batch_id)
    except BatchNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/performance")
async def get_subject_averages(
    batch_id: Optional[str] = Query(None, description="Limit to one batch"),
    user: User = Depends(staff_only),
    service: AcademicService = Depends(get_academic_service),
):
    """Average marks per subject."""
    try:
        return service.subject_averages(batch_id)
    except BatchNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/admin/analytics")
async def get_admin_analytics(
    user: User = Depends(require_roles("ADMIN")),
    service: AcademicService = Depends(get_academic_service),
    tickets: TicketService = Depends(get_ticket_service),
):
    open_issues = sum(s.count for s in tickets.building_issue_summary().values())
    return service.university_analytics(open_issues=open_issues)


@router.get("/schedule", response_model=list[ClassSessionResponse])
async def get_schedule(
    day: Optional[str] = Query(None, description="Weekday, e.g. Monday"),
    service: AcademicService = Depends(get_academic_service),
):
    return [ClassSessionResponse.model_validate(s) for s in service.schedule_for_day(day)]


@router.post("/classes", response_model=ClassSessionResponse, status_code=201)
@write_limit
async def add_extra_class(
    request: Request,
    body: ExtraClassCreate,
    user: User = Depends(staff_only),
    service: AcademicService = Depends(get_academic_service),
):
    """Schedule an extra class; every student is notified."""
    try:
        session = service.add_extra_class(
            user.id,
            subject=body.subject,
            location=body.location,
            day_of_week=body.day_of_week,
            start_time=body.start_time,
            end_time=body.end_time,
            teacher_name=body.teacher_name,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PermissionDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return ClassSessionResponse.model_validate(session)


@router.post("/batch/{batch_id}/marks", response_model=MarksUploadResponse, status_code=201)
@write_limit
async def upload_marks(
    request: Request,
    batch_id: str,
    body: MarksUpload,
    user: User = Depends(staff_only),
    service: AcademicService = Depends(get_academic_service),
):
    """Upload exam marks for a batch; the batch teacher is notified."""
    try:
        results = service.record_results(
            user.id,
            batch_id,
            subject=body.subject,
            exam_type=body.exam_type,
            rows=[row.model_dump() for row in body.rows],
        )
    except BatchNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PermissionDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return MarksUploadResponse(
        batch_id=batch_id, subject=body.subject, exam_type=body.exam_type, uploaded=len(results),
    )
