"""
Service layer for issue tickets.

Handles the ticket lifecycle (report, assign, status changes, comments),
keeps the audit history on each ticket, notifies the people involved,
and feeds the campus map with per-building issue summaries.
"""
import logging
from typing import Optional
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from campusfix.config import settings
from campusfix.errors import PermissionDeniedError, TicketNotFoundError, UserNotFoundError
from campusfix.models.database import Issue, IssueHistory, User, get_session_factory
from campusfix.models.ticket import HistoryAction, TicketPriority, TicketStatus, UserRole
from campusfix.services.issue_correlator import (
    BuildingIssueSummary, correlate_issues, match_building,
)
from campusfix.services.notification_service import NotificationService
from campusfix.services.triage import analyze_ticket

logger = logging.getLogger(__name__)

TRIAGE_ROLES = {UserRole.ADMIN.value, UserRole.STAFF.value}


class TicketService:
    """Service for reporting and working on campus issue tickets."""

    def __init__(self, session_factory=None, notifications: Optional[NotificationService] = None):
        self.session_factory = session_factory or get_session_factory()
        self.notifications = notifications or NotificationService(self.session_factory)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def _load(self, session: Session, ticket_id: str) -> Issue:
        issue = session.execute(
            select(Issue).options(selectinload(Issue.history)).where(Issue.id == ticket_id)
        ).scalar_one_or_none()
        if issue is None:
            raise TicketNotFoundError(ticket_id)
        return issue

    def get_ticket(self, ticket_id: str) -> Issue:
        with self.session_factory() as session:
            return self._load(session, ticket_id)

    def list_tickets(
        self,
        building_id: Optional[str] = None,
        status: Optional[TicketStatus] = None,
        created_by: Optional[str] = None,
    ) -> list[Issue]:
        """
        List tickets, newest first.

        Args:
            building_id: Only tickets whose location maps to this building
            status: Only tickets in this status
            created_by: Only tickets reported by this user
        """
        with self.session_factory() as session:
            query = select(Issue).options(selectinload(Issue.history))
            if status is not None:
                query = query.where(Issue.status == TicketStatus(status).value)
            if created_by:
                query = query.where(Issue.created_by == created_by)
            query = query.order_by(Issue.created_at.desc())
            issues = list(session.execute(query).scalars().all())

        if building_id:
            issues = [i for i in issues if match_building(i.location) == building_id]
        return issues

    def tickets_for_building(self, building_id: str) -> list[Issue]:
        """Tickets shown as pins on one building of the map."""
        return self.list_tickets(building_id=building_id)

    def building_issue_summary(self) -> dict[str, BuildingIssueSummary]:
        """Open issue count and worst severity per building."""
        return correlate_issues(self.list_tickets())

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def create_ticket(
        self,
        user_id: str,
        title: Optional[str],
        description: str = "",
        location: str = "",
        priority: Optional[TicketPriority] = None,
        category: Optional[str] = None,
        image_url: Optional[str] = None,
        ai_analysis: Optional[str] = None,
    ) -> Issue:
        """
        Report a new issue.

        The ticket starts PENDING with a CREATED history entry and every
        admin is notified. Without a priority, keyword triage picks one
        (or LOW when triage is turned off).
        """
        with self.session_factory() as session:
            reporter = session.get(User, user_id)
            if reporter is None:
                raise UserNotFoundError(user_id)

            if priority is None and settings.auto_triage:
                triage = analyze_ticket(description, location, category or "General")
                priority = triage.priority
                category = category or triage.category
                ai_analysis = ai_analysis or triage.as_analysis()

            issue = Issue(
                title=title or "Untitled",
                description=description or "",
                location=location or "",
                status=TicketStatus.PENDING.value,
                priority=TicketPriority(priority or TicketPriority.LOW).value,
                category=category or "General",
                created_by=reporter.id,
                created_by_name=reporter.name,
                ai_analysis=ai_analysis,
                image_url=image_url,
            )
            issue.history.append(IssueHistory(
                action=HistoryAction.CREATED.value,
                actor_name=reporter.name,
                details="Ticket created",
            ))
            session.add(issue)

            admins = session.execute(
                select(User).where(User.role == UserRole.ADMIN.value)
            ).scalars().all()
            for admin in admins:
                self.notifications.notify(
                    admin.id, f'New Ticket: "{issue.title}" by {reporter.name}', "info", session=session
                )

            session.commit()
            logger.info(f"Ticket {issue.id} created by {reporter.id} at '{issue.location}'")
            return self._load(session, issue.id)

    def assign_ticket(self, ticket_id: str, staff_id: str, actor_id: str) -> Issue:
        """Assign a ticket to a staff member and tell them about it."""
        with self.session_factory() as session:
            actor = self._require_actor(session, actor_id)
            staff = session.get(User, staff_id)
            if staff is None:
                raise UserNotFoundError(staff_id)
            if staff.role not in TRIAGE_ROLES:
                raise PermissionDeniedError(f"{staff.name} cannot be assigned tickets")

            issue = self._load(session, ticket_id)
            issue.assigned_to = staff.id
            issue.assigned_to_name = staff.name
            issue.history.append(IssueHistory(
                action=HistoryAction.ASSIGNMENT.value,
                actor_name=actor.name,
                details=f"Assigned to {staff.name}",
            ))

            if staff.id != actor.id:
                self.notifications.notify(
                    staff.id, f'You have been assigned to ticket "{issue.title}"', "info", session=session
                )

            session.commit()
            logger.info(f"Ticket {ticket_id} assigned to {staff.id} by {actor.id}")
            return self._load(session, ticket_id)

    def update_status(self, ticket_id: str, status: TicketStatus, actor_id: str) -> Issue:
        """
        Move a ticket to a new status.

        A staff member who starts work on an unassigned ticket takes it.
        The reporter is notified unless they made the change themselves.
        """
        status = TicketStatus(status)
        with self.session_factory() as session:
            actor = self._require_actor(session, actor_id)
            issue = self._load(session, ticket_id)
            previous = TicketStatus(issue.status)

            action = HistoryAction.REJECTION if status == TicketStatus.REJECTED else HistoryAction.STATUS_CHANGE
            issue.history.append(IssueHistory(
                action=action.value,
                actor_name=actor.name,
                details=f"Status changed from {previous.label} to {status.label}",
            ))

            if (status == TicketStatus.IN_PROGRESS and not issue.assigned_to
                    and actor.role == UserRole.STAFF.value):
                issue.assigned_to = actor.id
                issue.assigned_to_name = actor.name

            issue.status = status.value

            if issue.created_by != actor.id:
                self.notifications.notify(
                    issue.created_by,
                    f'Your ticket "{issue.title}" is now {status.label}',
                    "success" if status == TicketStatus.RESOLVED else "info",
                    session=session,
                )

            session.commit()
            logger.info(f"Ticket {ticket_id}: {previous.value} -> {status.value} by {actor.id}")
            return self._load(session, ticket_id)

    def add_comment(self, ticket_id: str, actor_id: str, text: str) -> Issue:
        """Append a comment to a ticket's history."""
        with self.session_factory() as session:
            actor = session.get(User, actor_id)
            if actor is None:
                raise UserNotFoundError(actor_id)
            issue = self._load(session, ticket_id)
            issue.history.append(IssueHistory(
                action=HistoryAction.COMMENT.value,
                actor_name=actor.name,
                details=text,
            ))
            session.commit()
            return self._load(session, ticket_id)

    def _require_actor(self, session: Session, actor_id: str) -> User:
        """Look up a user allowed to triage tickets."""
        actor = session.get(User, actor_id)
        if actor is None:
            raise UserNotFoundError(actor_id)
        if actor.role not in TRIAGE_ROLES:
            raise PermissionDeniedError(f"{actor.role} users cannot manage tickets")
        return actor


def create_service() -> TicketService:
    """Create a TicketService instance with default configuration."""
    return TicketService()
