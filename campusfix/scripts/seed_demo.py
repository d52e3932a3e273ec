"""
Seed the demo portal data.

Seeds:
1. Demo users (admin, two staff, a student, a guest)
2. Two open tickets with their history
3. The weekly class timetable
4. Announcement board posts

Existing rows are left alone, so seeding twice is harmless.

Run with: python -m campusfix.scripts.seed_demo
"""
from datetime import datetime, timedelta

from sqlalchemy import select

from campusfix.models.database import (
    get_engine, get_session_factory, init_db,
    User, Issue, IssueHistory, ClassSession, Announcement,
)
from campusfix.services.academic_service import DEMO_CLASSES

DEMO_USERS = [
    ("admin1", "Admin Alice", "admin@sapthagiri.edu", "ADMIN"),
    ("staff1", "Prof. Robert Langdon", "robert@sapthagiri.edu", "STAFF"),
    ("staff2", "Dr. Katherine Johnson", "katherine@sapthagiri.edu", "STAFF"),
    ("student1", "Sam Porter", "sam@sapthagiri.edu", "STUDENT"),
    ("guest", "Campus Guest", "guest@sapthagiri.edu", "GUEST"),
]


def seed_users(session_factory) -> int:
    created = 0
    with session_factory() as session:
        for user_id, name, email, role in DEMO_USERS:
            if session.get(User, user_id) is not None:
                continue
            session.add(User(
                id=user_id,
                name=name,
                email=email,
                role=role,
                avatar=f"https://picsum.photos/seed/{user_id}/100/100",
            ))
            created += 1
        session.commit()
    print(f"Users: {created} created")
    return created


def seed_tickets(session_factory) -> int:
    now = datetime.utcnow()
    created = 0
    with session_factory() as session:
        if session.get(Issue, "t-101") is None:
            issue = Issue(
                id="t-101",
                title="HVAC Malfunction - Central Library",
                description=(
                    "The air conditioning in the main reading room (2nd Floor) is emitting a loud "
                    "rattling noise and failing to cool the area. Students are unable to study."
                ),
                location="Central Library, 2nd Floor",
                status="PENDING",
                priority="HIGH",
                category="Infrastructure",
                created_by="student1",
                created_by_name="Sam Porter",
                created_at=now - timedelta(days=1),
                ai_analysis="Infrastructure - High priority HVAC failure indicating potential motor bearing issue.",
                image_url="https://picsum.photos/seed/ac/400/300",
            )
            issue.history.append(IssueHistory(
                timestamp=now - timedelta(days=1),
                action="CREATED",
                actor_name="Sam Porter",
                details="Ticket submitted via Student Portal",
            ))
            session.add(issue)
            created += 1

        if session.get(Issue, "t-102") is None:
            issue = Issue(
                id="t-102",
                title="Attendance Discrepancy - Physics Lab",
                description=(
                    "My attendance for the Applied Physics lab on Feb 14th is not reflecting in the "
                    "portal despite my physical presence and signature in the logbook."
                ),
                location="Physics Department",
                status="IN_PROGRESS",
                priority="MEDIUM",
                category="Academic",
                created_by="student1",
                created_by_name="Sam Porter",
                assigned_to="staff1",
                assigned_to_name="Prof. Robert Langdon",
                created_at=now - timedelta(days=2),
                ai_analysis="Academic Record - Cross-verification with physical attendance register required.",
            )
            issue.history.extend([
                IssueHistory(timestamp=now - timedelta(days=2), action="CREATED",
                             actor_name="Sam Porter", details="Ticket submitted"),
                IssueHistory(timestamp=now - timedelta(days=1), action="ASSIGNMENT",
                             actor_name="Admin Alice", details="Assigned to Prof. Robert Langdon"),
                IssueHistory(timestamp=now - timedelta(hours=22), action="STATUS_CHANGE",
                             actor_name="Prof. Robert Langdon", details="Status changed to In Review"),
            ])
            session.add(issue)
            created += 1

        session.commit()
    print(f"Tickets: {created} created")
    return created


def seed_classes(session_factory) -> int:
    created = 0
    with session_factory() as session:
        for class_id, subject, teacher, location, day, start, end in DEMO_CLASSES:
            if session.get(ClassSession, class_id) is not None:
                continue
            session.add(ClassSession(
                id=class_id, subject=subject, teacher_name=teacher, location=location,
                day_of_week=day, start_time=start, end_time=end, is_extra_class=False,
            ))
            created += 1
        session.commit()
    print(f"Classes: {created} created")
    return created


def seed_announcements(session_factory) -> int:
    now = datetime.utcnow()
    posts = [
        ("a-1", "Mid-Semester Assessment Schedule",
         "The detailed schedule for the upcoming Mid-Semester Assessments (MSA) has been published. "
         "Please review your batch-specific timings attached.",
         now - timedelta(seconds=10000), "Admin Alice", "ADMIN", "URGENT", "UNIVERSITY", "EXAMS"),
        ("a-2", "Annual Science Symposium Registration",
         "Registration for the Annual Science Symposium is now open. Interested students should "
         "submit project abstracts to the Faculty Coordinator by Friday.",
         now - timedelta(seconds=50000), "Dr. Katherine Johnson", "STAFF", "NORMAL", "DEPARTMENT", "EVENTS"),
        ("a-3", "CS-2024-A Lecture Rescheduled",
         "The Data Structures lecture scheduled for tomorrow at 10:00 AM is rescheduled to "
         "Thursday 2:00 PM due to faculty availability.",
         now - timedelta(seconds=5000), "Prof. Alan Turing", "STAFF", "NORMAL", "BATCH", "ACADEMIC"),
        ("a-4", "Library Maintenance - Reading Room Closed",
         "The main reading room will be closed for HVAC maintenance this Saturday from 9 AM to 2 PM. "
         "Digital access remains available.",
         now - timedelta(seconds=200000), "Admin Alice", "ADMIN", "NORMAL", "UNIVERSITY", "GENERAL"),
    ]

    created = 0
    with session_factory() as session:
        existing = set(session.execute(select(Announcement.id)).scalars().all())
        for ann_id, title, content, date, author, role, priority, scope, category in posts:
            if ann_id in existing:
                continue
            session.add(Announcement(
                id=ann_id, title=title, content=content, date=date, author_name=author,
                author_role=role, priority=priority, scope=scope, category=category,
            ))
            created += 1
        session.commit()
    print(f"Announcements: {created} created")
    return created


def seed_all(session_factory=None) -> dict:
    """Seed everything. Returns created counts per table."""
    if session_factory is None:
        engine = get_engine()
        init_db(engine)
        session_factory = get_session_factory(engine)

    return {
        "users": seed_users(session_factory),
        "tickets": seed_tickets(session_factory),
        "classes": seed_classes(session_factory),
        "announcements": seed_announcements(session_factory),
    }


if __name__ == "__main__":
    seed_all()
