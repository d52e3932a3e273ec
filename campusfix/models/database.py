"""
SQLAlchemy database models for CampusFix.

Tables for:
- Portal users (admins, staff, students, guests)
- Issue tickets and their audit history
- Per-user notifications
- Announcements, class sessions and uploaded exam results
"""
import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import (
    create_engine,
    Integer,
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    relationship,
    sessionmaker,
    Mapped,
    mapped_column,
)

from campusfix.config import settings
from campusfix.models.ticket import TicketPriority, TicketStatus


def new_id(prefix: str) -> str:
    """Short prefixed identifier, e.g. "t-3f9a1c2b7d"."""
    return f"{prefix}-{uuid.uuid4().hex[:10]}"


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class User(Base):
    """A portal user. Authentication is mocked via request headers."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, index=True)  # ADMIN, STAFF, STUDENT, GUEST
    avatar: Mapped[Optional[str]] = mapped_column(String(500))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<User(id='{self.id}', role='{self.role}')>"


class Issue(Base):
    """
    A reported campus issue (ticket).

    Location is free text; the map correlates it to a building by keyword
    matching rather than storing a building reference.
    """
    __tablename__ = "issues"

    id: Mapped[str] = mapped_column(String(50), primary_key=True, default=lambda: new_id("t"))
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    location: Mapped[str] = mapped_column(String(300), default="")
    status: Mapped[str] = mapped_column(String(20), default=TicketStatus.PENDING.value, index=True)
    priority: Mapped[str] = mapped_column(String(20), default=TicketPriority.LOW.value)
    category: Mapped[str] = mapped_column(String(100), default="General")

    created_by: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)
    created_by_name: Mapped[str] = mapped_column(String(200), default="")
    assigned_to: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id"), nullable=True)
    assigned_to_name: Mapped[Optional[str]] = mapped_column(String(200))

    ai_analysis: Mapped[Optional[str]] = mapped_column(Text)
    image_url: Mapped[Optional[str]] = mapped_column(String(500))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    history: Mapped[list["IssueHistory"]] = relationship(
        "IssueHistory",
        back_populates="issue",
        cascade="all, delete-orphan",
        order_by="IssueHistory.seq",
    )

    __table_args__ = (
        Index("ix_issues_status_created", "status", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Issue(id='{self.id}', status='{self.status}', title='{self.title[:30]}')>"


class IssueHistory(Base):
    """Audit trail entry for an issue."""
    __tablename__ = "issue_history"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(50), unique=True, default=lambda: new_id("h"))
    issue_id: Mapped[str] = mapped_column(ForeignKey("issues.id", ondelete="CASCADE"), index=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    action: Mapped[str] = mapped_column(String(20), nullable=False)  # CREATED, ASSIGNMENT, ...
    actor_name: Mapped[str] = mapped_column(String(200), nullable=False)
    details: Mapped[str] = mapped_column(Text, default="")

    issue: Mapped["Issue"] = relationship("Issue", back_populates="history")


class Notification(Base):
    """A message shown in a user's notification center."""
    __tablename__ = "notifications"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(50), unique=True, default=lambda: new_id("n"))
    recipient_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(20), default="info")  # info, success, warning
    read: Mapped[bool] = mapped_column(Boolean, default=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_notifications_recipient_read", "recipient_id", "read"),
    )


class Announcement(Base):
    """A notice posted to the announcement board."""
    __tablename__ = "announcements"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(50), unique=True, default=lambda: new_id("a"))
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    author_name: Mapped[str] = mapped_column(String(200), nullable=False)
    author_role: Mapped[str] = mapped_column(String(20), nullable=False)
    priority: Mapped[str] = mapped_column(String(20), default="NORMAL")  # NORMAL, URGENT
    scope: Mapped[str] = mapped_column(String(20), default="UNIVERSITY")  # UNIVERSITY, DEPARTMENT, BATCH, SUBJECT
    category: Mapped[str] = mapped_column(String(20), default="GENERAL")  # GENERAL, ACADEMIC, EVENTS, EXAMS


class ClassSession(Base):
    """A scheduled class, regular or extra."""
    __tablename__ = "class_sessions"

    id: Mapped[str] = mapped_column(String(50), primary_key=True, default=lambda: new_id("c"))
    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    teacher_name: Mapped[str] = mapped_column(String(200), nullable=False)
    location: Mapped[str] = mapped_column(String(300), nullable=False)
    day_of_week: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM
    is_extra_class: Mapped[bool] = mapped_column(Boolean, default=False)


class UploadedResult(Base):
    """An exam mark uploaded by staff for one student of a batch."""
    __tablename__ = "exam_results"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(50), unique=True, default=lambda: new_id("r"))
    batch_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    student_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    teacher_id: Mapped[str] = mapped_column(String(50), nullable=False)
    teacher_name: Mapped[str] = mapped_column(String(200), nullable=False)
    marks_obtained: Mapped[int] = mapped_column(Integer, nullable=False)
    total_marks: Mapped[int] = mapped_column(Integer, default=100)
    exam_type: Mapped[str] = mapped_column(String(20), nullable=False)  # MID_TERM, FINAL, QUIZ
    date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


# =============================================================================
# Database Engine and Session Management
# =============================================================================

_engine = None
_session_factory = None


def get_engine(url: Optional[str] = None):
    """Get or create synchronous database engine."""
    global _engine
    if _engine is None:
        url = url or settings.database_url
        if url.startswith("sqlite"):
            _engine = create_engine(
                url,
                connect_args={"check_same_thread": False},
                echo=settings.debug,
            )
        else:
            _engine = create_engine(
                url,
                pool_size=settings.database_pool_size,
                max_overflow=settings.database_max_overflow,
                echo=settings.debug,
            )
    return _engine


def get_session_factory(engine=None):
    """Get or create synchronous session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=engine or get_engine(),
            expire_on_commit=False,
        )
    return _session_factory


def init_db(engine=None):
    """Initialize database, creating all tables."""
    if engine is None:
        engine = get_engine()
    Base.metadata.create_all(engine)
