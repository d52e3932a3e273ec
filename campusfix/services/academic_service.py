"""
Academic summaries for the student and admin dashboards.

Attendance, exam results, batches and assignments come from the demo
records at the bottom of this module. Class sessions and uploaded marks
live in the database so staff can add them at runtime.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy import select

from campusfix.errors import BatchNotFoundError, PermissionDeniedError, UserNotFoundError
from campusfix.models.database import ClassSession, UploadedResult, User, get_session_factory
from campusfix.models.ticket import UserRole
from campusfix.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")
EXAM_TYPES = ("MID_TERM", "FINAL", "QUIZ")

# Attendance bands, in percent
ATTENDANCE_GOOD = 85
ATTENDANCE_MINIMUM = 75


@dataclass
class AttendanceRecord:
    student_id: str
    subject: str
    present: int
    total: int

    @property
    def percentage(self) -> int:
        if self.total == 0:
            return 0
        return round(self.present / self.total * 100)

    @property
    def status(self) -> str:
        return attendance_status(self.percentage)


@dataclass
class ExamResult:
    id: str
    batch_id: str
    student_id: str
    subject: str
    teacher_id: str
    teacher_name: str
    marks_obtained: int
    total_marks: int
    exam_type: str  # MID_TERM, FINAL, QUIZ
    date: datetime

    @property
    def percentage(self) -> int:
        return round(self.marks_obtained / self.total_marks * 100) if self.total_marks else 0


@dataclass
class Batch:
    id: str
    name: str  # e.g. "CS-2024-A"
    course: str
    year: int
    total_students: int
    teacher_id: str = "staff1"  # Staff member who receives mark uploads


@dataclass
class Assignment:
    id: str
    course_id: str
    title: str
    due_date: datetime
    status: str  # PENDING, SUBMITTED, GRADED
    total_points: int


def _as_exam_result(row: UploadedResult) -> ExamResult:
    return ExamResult(
        row.id, row.batch_id, row.student_id, row.subject, row.teacher_id, row.teacher_name,
        row.marks_obtained, row.total_marks, row.exam_type, row.date,
    )


def attendance_status(percentage: float) -> str:
    """GOOD at 85% and above, WARNING from 75%, CRITICAL below that."""
    if percentage >= ATTENDANCE_GOOD:
        return "GOOD"
    if percentage >= ATTENDANCE_MINIMUM:
        return "WARNING"
    return "CRITICAL"


class AcademicService:
    """Attendance, marks and timetable queries."""

    def __init__(
        self,
        session_factory=None,
        notifications: Optional[NotificationService] = None,
        attendance: Optional[list[AttendanceRecord]] = None,
        results: Optional[list[ExamResult]] = None,
        batches: Optional[list[Batch]] = None,
        assignments: Optional[list[Assignment]] = None,
        cgpa: Optional[dict[str, float]] = None,
    ):
        self.session_factory = session_factory or get_session_factory()
        self.notifications = notifications or NotificationService(self.session_factory)
        self.attendance = attendance if attendance is not None else list(DEMO_ATTENDANCE)
        self.results = results if results is not None else list(DEMO_EXAM_RESULTS)
        self.batches = {b.id: b for b in (batches if batches is not None else DEMO_BATCHES)}
        self.assignments = assignments if assignments is not None else list(DEMO_ASSIGNMENTS)
        self.cgpa = cgpa if cgpa is not None else dict(DEMO_CGPA)

    def student_overview(self, student_id: str) -> dict:
        """Attendance per subject, attendance risks, pending work and CGPA."""
        records = [r for r in self.attendance if r.student_id == student_id]
        subjects = [
            {"subject": r.subject, "percentage": r.percentage, "status": r.status}
            for r in records
        ]
        return {
            "student_id": student_id,
            "attendance": subjects,
            "attendance_risk": [s for s in subjects if s["status"] != "GOOD"],
            "upcoming_assignments": sum(1 for a in self.assignments if a.status == "PENDING"),
            "cgpa": self.cgpa.get(student_id),
        }

    def subject_performance(self, student_id: str, subject: str) -> dict:
        """One student's results in a subject, newest first."""
        results = sorted(
            (r for r in self.all_results()
             if r.student_id == student_id and r.subject.lower() == subject.lower()),
            key=lambda r: r.date,
            reverse=True,
        )
        obtained = sum(r.marks_obtained for r in results)
        total = sum(r.total_marks for r in results)
        return {
            "subject": subject,
            "assessments": [
                {
                    "title": r.exam_type.replace("_", " ").title(),
                    "type": r.exam_type,
                    "obtained": r.marks_obtained,
                    "total": r.total_marks,
                    "percentage": r.percentage,
                    "date": r.date.date().isoformat(),
                }
                for r in results
            ],
            "average": round(obtained / total * 100) if total else None,
        }

    def batch_attendance(self, batch_id: str) -> dict:
        """Students in a batch whose overall attendance is under 75%."""
        batch = self.batches.get(batch_id)
        if batch is None:
            raise BatchNotFoundError(batch_id)

        students = {r.student_id for r in self.all_results() if r.batch_id == batch_id}
        present: dict[str, int] = defaultdict(int)
        total: dict[str, int] = defaultdict(int)
        for record in self.attendance:
            if record.student_id in students:
                present[record.student_id] += record.present
                total[record.student_id] += record.total

        low = []
        for student_id in sorted(total):
            pct = round(present[student_id] / total[student_id] * 100) if total[student_id] else 0
            if pct < ATTENDANCE_MINIMUM:
                low.append({"student_id": student_id, "attendance_pct": pct})

        return {
            "batch_id": batch_id,
            "batch_name": batch.name,
            "total_students": batch.total_students,
            "low_attendance_students": low,
        }

    def subject_averages(self, batch_id: Optional[str] = None) -> list[dict]:
        """Average percentage per subject, optionally for one batch."""
        if batch_id is not None and batch_id not in self.batches:
            raise BatchNotFoundError(batch_id)

        sums: dict[str, list[int]] = defaultdict(lambda: [0, 0])
        for r in self.all_results():
            if batch_id is None or r.batch_id == batch_id:
                sums[r.subject][0] += r.percentage
                sums[r.subject][1] += 1

        return [
            {"subject": subject, "average": round(total / count), "count": count}
            for subject, (total, count) in sorted(sums.items())
        ]

    def university_analytics(self, open_issues: int = 0) -> dict:
        """Campus-wide averages for the admin dashboard."""
        total_present = sum(r.present for r in self.attendance)
        total_classes = sum(r.total for r in self.attendance)
        cgpas = list(self.cgpa.values())
        return {
            "avg_attendance": round(total_present / total_classes * 100, 1) if total_classes else 0.0,
            "avg_cgpa": round(sum(cgpas) / len(cgpas), 2) if cgpas else 0.0,
            "open_issues": open_issues,
            "active_batches": len(self.batches),
        }

    # -------------------------------------------------------------------------
    # Marks
    # -------------------------------------------------------------------------

    def all_results(self) -> list[ExamResult]:
        """Demo results followed by every uploaded result."""
        with self.session_factory() as session:
            rows = session.execute(select(UploadedResult).order_by(UploadedResult.seq)).scalars().all()
            uploaded = [_as_exam_result(r) for r in rows]
        return self.results + uploaded

    def record_results(
        self,
        actor_id: str,
        batch_id: str,
        subject: str,
        exam_type: str,
        rows: list[dict],
    ) -> list[ExamResult]:
        """
        Store uploaded marks for a batch and notify the batch's teacher.

        Args:
            actor_id: Staff member or admin doing the upload
            batch_id: Batch the marks belong to
            subject: Subject name, e.g. "Applied Physics"
            exam_type: One of MID_TERM, FINAL, QUIZ
            rows: Dicts with ``student_id``, ``marks_obtained`` and
                optionally ``total_marks`` (default 100)
        """
        if exam_type not in EXAM_TYPES:
            raise ValueError(f"Unknown exam type: {exam_type}")
        if not rows:
            raise ValueError("No marks to upload")
        for row in rows:
            total = row.get("total_marks", 100)
            if total <= 0 or not 0 <= row["marks_obtained"] <= total:
                raise ValueError(f"Invalid marks for {row['student_id']}: {row['marks_obtained']}/{total}")

        with self.session_factory() as session:
            actor = session.get(User, actor_id)
            if actor is None:
                raise UserNotFoundError(actor_id)
            if actor.role not in (UserRole.ADMIN.value, UserRole.STAFF.value):
                raise PermissionDeniedError("Only staff can upload marks")

            batch = self.batches.get(batch_id)
            if batch is None:
                raise BatchNotFoundError(batch_id)
            teacher = session.get(User, batch.teacher_id)
            teacher_name = teacher.name if teacher else batch.teacher_id

            uploaded = [
                UploadedResult(
                    batch_id=batch_id,
                    student_id=row["student_id"],
                    subject=subject,
                    teacher_id=batch.teacher_id,
                    teacher_name=teacher_name,
                    marks_obtained=row["marks_obtained"],
                    total_marks=row.get("total_marks", 100),
                    exam_type=exam_type,
                )
                for row in rows
            ]
            session.add_all(uploaded)

            if teacher is not None:
                self.notifications.notify(
                    teacher.id,
                    f"New Marks Uploaded for your batch {batch.name} ({subject})",
                    "info",
                    session=session,
                )

            session.commit()
            logger.info(f"{len(uploaded)} {exam_type} marks for {batch_id}/{subject} uploaded by {actor.id}")
            return [_as_exam_result(r) for r in uploaded]

    # -------------------------------------------------------------------------
    # Timetable
    # -------------------------------------------------------------------------

    def schedule_for_day(self, day: Optional[str] = None) -> list[ClassSession]:
        """Class sessions in weekday and start time order."""
        with self.session_factory() as session:
            query = select(ClassSession)
            if day:
                query = query.where(ClassSession.day_of_week == day.title())
            sessions = list(session.execute(query).scalars().all())
        return sorted(sessions, key=lambda s: (WEEKDAYS.index(s.day_of_week), s.start_time))

    def add_extra_class(
        self,
        actor_id: str,
        subject: str,
        location: str,
        day_of_week: str,
        start_time: str,
        end_time: str,
        teacher_name: Optional[str] = None,
    ) -> ClassSession:
        """Schedule an extra class and notify every student."""
        day = day_of_week.title()
        if day not in WEEKDAYS:
            raise ValueError(f"Classes run Monday to Friday, got {day_of_week}")
        if start_time >= end_time:
            raise ValueError("Class must end after it starts")

        with self.session_factory() as session:
            actor = session.get(User, actor_id)
            if actor is None:
                raise UserNotFoundError(actor_id)
            if actor.role not in (UserRole.ADMIN.value, UserRole.STAFF.value):
                raise PermissionDeniedError("Only staff can schedule classes")

            extra = ClassSession(
                subject=subject,
                teacher_name=teacher_name or actor.name,
                location=location,
                day_of_week=day,
                start_time=start_time,
                end_time=end_time,
                is_extra_class=True,
            )
            session.add(extra)

            students = session.execute(
                select(User).where(User.role == UserRole.STUDENT.value)
            ).scalars().all()
            for student in students:
                self.notifications.notify(
                    student.id, f"Extra Class Added: {subject} on {day}", "info", session=session
                )

            session.commit()
            logger.info(f"Extra class {extra.id} ({subject}, {day} {start_time}) by {actor.id}")
            return extra


# =============================================================================
# Demo records
# =============================================================================

_NOW = datetime.utcnow()

DEMO_BATCHES = [
    Batch("b-1", "CS-2024-A", "Computer Science", 2024, 45),
    Batch("b-2", "CS-2024-B", "Computer Science", 2024, 42, teacher_id="staff2"),
    Batch("b-3", "ME-2023-A", "Mechanical Eng", 2023, 38),
]

DEMO_ATTENDANCE = [
    AttendanceRecord("student1", "Advanced Calculus", 28, 30),
    AttendanceRecord("student1", "Applied Physics", 22, 30),
    AttendanceRecord("student1", "Data Structures", 30, 30),
    AttendanceRecord("student1", "World History", 20, 30),
    AttendanceRecord("s-2", "Applied Physics", 19, 30),
    AttendanceRecord("s-3", "Applied Physics", 29, 30),
    AttendanceRecord("s-5", "Advanced Calculus", 27, 30),
]

DEMO_EXAM_RESULTS = [
    ExamResult("r-1", "b-1", "student1", "Applied Physics", "staff1", "Prof. Robert Langdon",
               85, 100, "MID_TERM", _NOW - timedelta(seconds=2000)),
    ExamResult("r-1-old", "b-1", "student1", "Applied Physics", "staff1", "Prof. Robert Langdon",
               70, 100, "QUIZ", _NOW - timedelta(seconds=10000)),
    ExamResult("r-2", "b-1", "s-2", "Applied Physics", "staff1", "Prof. Robert Langdon",
               72, 100, "MID_TERM", _NOW - timedelta(seconds=2000)),
    ExamResult("r-3", "b-1", "s-3", "Applied Physics", "staff1", "Prof. Robert Langdon",
               90, 100, "MID_TERM", _NOW - timedelta(seconds=2000)),
    ExamResult("r-5", "b-2", "s-5", "Advanced Calculus", "staff2", "Dr. Katherine Johnson",
               78, 100, "MID_TERM", _NOW - timedelta(seconds=2000)),
    ExamResult("r-10", "b-1", "student1", "Advanced Calculus", "staff2", "Dr. Katherine Johnson",
               65, 100, "QUIZ", _NOW - timedelta(seconds=15000)),
    ExamResult("r-11", "b-1", "student1", "Advanced Calculus", "staff2", "Dr. Katherine Johnson",
               82, 100, "MID_TERM", _NOW - timedelta(seconds=2000)),
]

DEMO_ASSIGNMENTS = [
    Assignment("as-1", "c-1", "Calculus Problem Set 3: Limits", _NOW + timedelta(days=2), "PENDING", 20),
    Assignment("as-2", "c-2", "Lab Report: Optical Physics", _NOW + timedelta(days=1), "SUBMITTED", 50),
    Assignment("as-3", "c-3", "BST Implementation Project", _NOW - timedelta(days=1), "GRADED", 100),
]

DEMO_CGPA = {
    "student1": 8.4,
    "s-2": 7.1,
    "s-3": 8.9,
    "s-5": 7.6,
}

DEMO_CLASSES = [
    ("c-1", "Advanced Calculus", "Dr. Katherine Johnson", "Room 101, Block A", "Monday", "09:00", "10:30"),
    ("c-2", "Applied Physics", "Prof. Robert Langdon", "Physics Lab, Block B", "Monday", "11:00", "12:30"),
    ("c-3", "Data Structures", "Prof. Alan Turing", "CS Lab 1, Block A", "Tuesday", "10:00", "11:30"),
    ("c-4", "World History", "Ms. Davis", "Room 204, Block C", "Wednesday", "14:00", "15:30"),
]
