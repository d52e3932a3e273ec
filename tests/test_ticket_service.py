"""
Tests for services/ticket_service.py against an in-memory database.

Tests cover:
  - create_ticket: initial status, history, triage, admin notification
  - assign_ticket / update_status / add_comment: history and notifications
  - list_tickets / building_issue_summary: filtering and map correlation
"""
import pytest

from campusfix.config import settings
from campusfix.errors import PermissionDeniedError, TicketNotFoundError, UserNotFoundError
from campusfix.models.ticket import TicketPriority, TicketStatus
from campusfix.scripts.seed_demo import seed_tickets
from campusfix.services.notification_service import NotificationService
from campusfix.services.ticket_service import TicketService


@pytest.fixture
def service(session_factory):
    return TicketService(session_factory)


@pytest.fixture
def notifications(session_factory):
    return NotificationService(session_factory)


def report(service, **kwargs):
    fields = dict(title="Broken fan", description="Ceiling fan stopped", location="Library, 1st Floor")
    fields.update(kwargs)
    return service.create_ticket("student1", **fields)


# ── create ─────────────────────────────────────────────────────────────────────

class TestCreateTicket:
    def test_starts_pending_with_history(self, service):
        issue = report(service, priority=TicketPriority.MEDIUM)
        assert issue.id.startswith("t-")
        assert issue.status == "PENDING"
        assert issue.created_by_name == "Sam Porter"
        assert [(h.action, h.actor_name, h.details) for h in issue.history] == [
            ("CREATED", "Sam Porter", "Ticket created"),
        ]

    def test_explicit_priority_kept(self, service):
        issue = report(service, description="urgent leak", priority=TicketPriority.LOW)
        assert issue.priority == "LOW"
        assert issue.category == "General"

    def test_triage_picks_priority(self, service):
        issue = report(service, description="Water leak near the stairs")
        assert issue.priority == "HIGH"
        assert issue.ai_analysis.startswith("General - High priority.")

    def test_triage_category(self, service):
        issue = report(service, description="wifi is down in the reading room")
        assert issue.category == "Network"

    def test_without_auto_triage(self, service, monkeypatch):
        monkeypatch.setattr(settings, "auto_triage", False)
        issue = report(service, description="Water leak near the stairs")
        assert issue.priority == "LOW"
        assert issue.ai_analysis is None

    def test_admins_notified(self, service, notifications):
        report(service)
        [notification] = notifications.list_for_user("admin1")
        assert notification.message == 'New Ticket: "Broken fan" by Sam Porter'
        assert notification.type == "info"
        assert notifications.list_for_user("staff1") == []

    def test_unknown_reporter(self, service):
        with pytest.raises(UserNotFoundError):
            service.create_ticket("nobody", title="x")


# ── assign ─────────────────────────────────────────────────────────────────────

class TestAssignTicket:
    def test_assign(self, service, notifications):
        issue = report(service)
        updated = service.assign_ticket(issue.id, "staff1", "admin1")
        assert updated.assigned_to == "staff1"
        assert updated.assigned_to_name == "Prof. Robert Langdon"
        assert updated.history[-1].action == "ASSIGNMENT"
        assert updated.history[-1].actor_name == "Admin Alice"
        assert updated.history[-1].details == "Assigned to Prof. Robert Langdon"

        [notification] = notifications.list_for_user("staff1")
        assert notification.message == 'You have been assigned to ticket "Broken fan"'

    def test_self_assign_not_notified(self, service, notifications):
        issue = report(service)
        service.assign_ticket(issue.id, "staff1", "staff1")
        assert notifications.list_for_user("staff1") == []

    def test_assignee_must_be_staff(self, service):
        issue = report(service)
        with pytest.raises(PermissionDeniedError):
            service.assign_ticket(issue.id, "student1", "admin1")

    def test_students_cannot_assign(self, service):
        issue = report(service)
        with pytest.raises(PermissionDeniedError):
            service.assign_ticket(issue.id, "staff1", "student1")

    def test_unknown_ticket(self, service):
        with pytest.raises(TicketNotFoundError):
            service.assign_ticket("t-missing", "staff1", "admin1")


# ── status ─────────────────────────────────────────────────────────────────────

class TestUpdateStatus:
    def test_status_change_history(self, service):
        issue = report(service)
        updated = service.update_status(issue.id, TicketStatus.IN_PROGRESS, "admin1")
        assert updated.status == "IN_PROGRESS"
        assert updated.history[-1].action == "STATUS_CHANGE"
        assert updated.history[-1].details == "Status changed from PENDING to IN PROGRESS"

    def test_staff_takes_unassigned_ticket(self, service):
        issue = report(service)
        updated = service.update_status(issue.id, "IN_PROGRESS", "staff2")
        assert updated.assigned_to == "staff2"
        assert updated.assigned_to_name == "Dr. Katherine Johnson"

    def test_admin_does_not_take_ticket(self, service):
        issue = report(service)
        updated = service.update_status(issue.id, "IN_PROGRESS", "admin1")
        assert updated.assigned_to is None

    def test_existing_assignee_kept(self, service):
        issue = report(service)
        service.assign_ticket(issue.id, "staff1", "admin1")
        updated = service.update_status(issue.id, "IN_PROGRESS", "staff2")
        assert updated.assigned_to == "staff1"

    def test_rejection(self, service):
        issue = report(service)
        updated = service.update_status(issue.id, TicketStatus.REJECTED, "admin1")
        assert updated.history[-1].action == "REJECTION"

    def test_reporter_notified(self, service, notifications):
        issue = report(service)
        service.update_status(issue.id, TicketStatus.IN_PROGRESS, "staff1")
        service.update_status(issue.id, TicketStatus.RESOLVED, "staff1")
        messages = [(n.message, n.type) for n in notifications.list_for_user("student1")]
        assert ('Your ticket "Broken fan" is now RESOLVED', "success") in messages
        assert ('Your ticket "Broken fan" is now IN PROGRESS', "info") in messages

    def test_students_cannot_change_status(self, service):
        issue = report(service)
        with pytest.raises(PermissionDeniedError):
            service.update_status(issue.id, TicketStatus.RESOLVED, "student1")

    def test_history_is_ordered(self, service):
        issue = report(service)
        service.assign_ticket(issue.id, "staff1", "admin1")
        service.update_status(issue.id, "IN_PROGRESS", "staff1")
        updated = service.add_comment(issue.id, "student1", "Thanks!")
        assert [h.action for h in updated.history] == [
            "CREATED", "ASSIGNMENT", "STATUS_CHANGE", "COMMENT",
        ]
        assert updated.history[-1].details == "Thanks!"


# ── listing ────────────────────────────────────────────────────────────────────

class TestListTickets:
    @pytest.fixture(autouse=True)
    def demo_tickets(self, session_factory):
        seed_tickets(session_factory)

    def test_newest_first(self, service):
        assert [i.id for i in service.list_tickets()] == ["t-101", "t-102"]

    def test_by_building(self, service):
        assert [i.id for i in service.tickets_for_building("b-library")] == ["t-101"]
        assert service.tickets_for_building("b-cafe") == []

    def test_by_status(self, service):
        assert [i.id for i in service.list_tickets(status=TicketStatus.IN_PROGRESS)] == ["t-102"]

    def test_issue_summary(self, service):
        summary = {bid: s.to_dict() for bid, s in service.building_issue_summary().items()}
        assert summary == {
            "b-library": {"count": 1, "max_priority": "HIGH"},
            "b-academic-a": {"count": 1, "max_priority": "MEDIUM"},
        }

    def test_resolved_leaves_summary(self, service):
        service.update_status("t-101", TicketStatus.RESOLVED, "staff1")
        assert "b-library" not in service.building_issue_summary()

    def test_get_ticket(self, service):
        issue = service.get_ticket("t-102")
        assert len(issue.history) == 3
        with pytest.raises(TicketNotFoundError):
            service.get_ticket("t-999")
