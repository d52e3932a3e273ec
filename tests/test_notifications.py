"""Tests for the notification and announcement services."""
import pytest

from campusfix.errors import NotificationNotFoundError, PermissionDeniedError
from campusfix.scripts.seed_demo import seed_announcements
from campusfix.services.announcement_service import AnnouncementService
from campusfix.services.notification_service import NotificationService


@pytest.fixture
def notifications(session_factory):
    return NotificationService(session_factory)


@pytest.fixture
def announcements(session_factory, notifications):
    return AnnouncementService(session_factory, notifications)


class TestNotificationService:
    def test_newest_first(self, notifications):
        notifications.notify("student1", "first")
        notifications.notify("student1", "second")
        assert [n.message for n in notifications.list_for_user("student1")] == ["second", "first"]

    def test_mark_read(self, notifications):
        n = notifications.notify("student1", "hello")
        assert notifications.unread_count("student1") == 1
        assert notifications.mark_read(n.id).read is True
        assert notifications.unread_count("student1") == 0
        assert notifications.list_for_user("student1", unread_only=True) == []

    def test_mark_read_other_users_notification(self, notifications):
        n = notifications.notify("student1", "hello")
        with pytest.raises(NotificationNotFoundError):
            notifications.mark_read(n.id, user_id="staff1")

    def test_clear(self, notifications):
        notifications.notify("student1", "a")
        notifications.notify("student1", "b")
        notifications.notify("staff1", "c")
        assert notifications.clear_for_user("student1") == 2
        assert notifications.list_for_user("student1") == []
        assert len(notifications.list_for_user("staff1")) == 1

    def test_unknown_type(self, notifications):
        with pytest.raises(ValueError):
            notifications.notify("student1", "hello", type="error")


class TestAnnouncementService:
    def test_newest_first(self, session_factory, announcements):
        seed_announcements(session_factory)
        assert [a.id for a in announcements.list_announcements()] == ["a-3", "a-1", "a-2", "a-4"]

    def test_filters(self, session_factory, announcements):
        seed_announcements(session_factory)
        assert [a.id for a in announcements.list_announcements(scope="UNIVERSITY")] == ["a-1", "a-4"]
        assert [a.id for a in announcements.list_announcements(category="EVENTS")] == ["a-2"]

    def test_post_notifies_everyone_else(self, announcements, notifications):
        posted = announcements.post_announcement("staff1", "Lab closed", "Closed on Friday")
        assert posted.author_name == "Prof. Robert Langdon"
        assert posted.author_role == "STAFF"
        assert notifications.list_for_user("staff1") == []
        [n] = notifications.list_for_user("student1")
        assert (n.message, n.type) == ("New Announcement: Lab closed", "info")

    def test_urgent_is_warning(self, announcements, notifications):
        announcements.post_announcement("admin1", "Exam moved", "See schedule", priority="URGENT")
        [n] = notifications.list_for_user("guest")
        assert n.type == "warning"

    def test_students_cannot_post(self, announcements):
        with pytest.raises(PermissionDeniedError):
            announcements.post_announcement("student1", "Party", "Tonight")

    def test_bad_scope(self, announcements):
        with pytest.raises(ValueError):
            announcements.post_announcement("admin1", "t", "c", scope="GALAXY")
