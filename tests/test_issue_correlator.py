"""
Unit tests for services/issue_correlator.py: pure functions, no DB.

Tests cover:
  - match_building: keyword rules, first rule wins
  - correlate_issues: counting, max severity, RESOLVED and unmatched tickets
  - estimate_floor / priority_color
"""
from dataclasses import dataclass
from datetime import datetime

import pytest

from campusfix.models.ticket import (
    HistoryAction, Ticket, TicketHistoryEntry, TicketPriority, TicketStatus,
)
from campusfix.services.issue_correlator import (
    correlate_issues,
    estimate_floor,
    match_building,
    priority_color,
)


# ── helpers ────────────────────────────────────────────────────────────────────

@dataclass
class Loc:
    location: str
    status: str = "PENDING"
    priority: str = "LOW"


def make_ticket(location, status=TicketStatus.PENDING, priority=TicketPriority.LOW):
    return Ticket(
        id="t-1", title="Issue", description="", location=location,
        status=status, priority=priority, category="General", created_by="student1",
    )


def flatten(result):
    return {bid: s.to_dict() for bid, s in result.items()}


# ── match_building ─────────────────────────────────────────────────────────────

class TestMatchBuilding:
    @pytest.mark.parametrize("location,expected", [
        ("Admin Office", "b-admin"),
        ("HR desk", "b-admin"),
        ("Academic Block A, Room 101", "b-academic-a"),
        ("CS Lab 2", "b-academic-a"),
        ("Block B workshop", "b-academic-b"),
        ("Mechanical Lab", "b-academic-b"),
        ("Central Library, 2nd Floor", "b-library"),
        ("Auditorium stage", "b-audit"),
        ("Cafeteria", "b-cafe"),
        ("near the canteen", "b-cafe"),
    ])
    def test_rules(self, location, expected):
        assert match_building(location) == expected

    def test_case_insensitive(self):
        assert match_building("LIBRARY") == "b-library"

    def test_first_rule_wins(self):
        # Mentions both the library and the admin office
        assert match_building("Library admin office") == "b-admin"

    def test_substring_match(self):
        # "physics" contains "cs"
        assert match_building("Physics Department") == "b-academic-a"

    def test_no_match(self):
        assert match_building("Parking lot") is None

    @pytest.mark.parametrize("location", ["", None])
    def test_empty_location(self, location):
        assert match_building(location) is None


# ── correlate_issues ───────────────────────────────────────────────────────────

class TestCorrelateIssues:
    def test_empty(self):
        assert correlate_issues([]) == {}

    def test_resolved_excluded(self):
        tickets = [make_ticket("Library", status=TicketStatus.RESOLVED)]
        assert correlate_issues(tickets) == {}

    def test_count_and_max_priority(self):
        tickets = [
            make_ticket("Admin Office", priority=TicketPriority.MEDIUM),
            make_ticket("Admin Office", priority=TicketPriority.CRITICAL),
        ]
        assert flatten(correlate_issues(tickets)) == {
            "b-admin": {"count": 2, "max_priority": "CRITICAL"},
        }

    def test_max_priority_independent_of_order(self):
        a = [make_ticket("Library", priority=p) for p in
             (TicketPriority.HIGH, TicketPriority.LOW, TicketPriority.MEDIUM)]
        assert correlate_issues(a)["b-library"].max_priority == TicketPriority.HIGH
        assert correlate_issues(list(reversed(a)))["b-library"].max_priority == TicketPriority.HIGH

    def test_unmatched_dropped(self):
        tickets = [make_ticket("Parking lot"), make_ticket("Cafeteria")]
        assert flatten(correlate_issues(tickets)) == {
            "b-cafe": {"count": 1, "max_priority": "LOW"},
        }

    def test_in_progress_and_rejected_count_as_open(self):
        tickets = [
            make_ticket("Library", status=TicketStatus.IN_PROGRESS),
            make_ticket("Library", status=TicketStatus.REJECTED),
        ]
        assert correlate_issues(tickets)["b-library"].count == 2

    def test_counts_add_up(self):
        tickets = [
            make_ticket("Library"),
            make_ticket("Cafeteria", priority=TicketPriority.HIGH),
            make_ticket("Cafeteria"),
            make_ticket("Parking lot"),
            make_ticket("Auditorium", status=TicketStatus.RESOLVED),
        ]
        result = correlate_issues(tickets)
        assert sum(s.count for s in result.values()) == 3

    def test_accepts_plain_strings(self):
        tickets = [Loc("Block B", "IN_PROGRESS", "HIGH"), Loc("Block B", "RESOLVED", "CRITICAL")]
        assert flatten(correlate_issues(tickets)) == {
            "b-academic-b": {"count": 1, "max_priority": "HIGH"},
        }

    def test_idempotent(self):
        tickets = [make_ticket("Library"), make_ticket("Admin Office")]
        assert flatten(correlate_issues(tickets)) == flatten(correlate_issues(tickets))


# ── estimate_floor / priority_color ────────────────────────────────────────────

class TestEstimateFloor:
    def test_ordinal(self):
        assert estimate_floor("Room 204, 2nd Floor", 4) == 2

    def test_word(self):
        assert estimate_floor("third floor corridor", 4) == 3

    def test_clamped_to_top_floor(self):
        assert estimate_floor("4th floor", 2) == 1

    def test_defaults_to_ground(self):
        assert estimate_floor("Reception", 3) == 0
        assert estimate_floor(None, 3) == 0


class TestPriorityColor:
    def test_known_levels(self):
        assert priority_color(TicketPriority.CRITICAL) == "#ef4444"
        assert priority_color("LOW") == "#3b82f6"

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            priority_color("SEVERE")


# ── ticket model ───────────────────────────────────────────────────────────────

class TestTicketModel:
    def test_history_kept_in_order(self):
        ticket = make_ticket("Library")
        ticket.history.append(TicketHistoryEntry(
            "h-1", datetime(2024, 2, 14), HistoryAction.CREATED, "Sam Porter", "Ticket created",
        ))
        ticket.history.append(TicketHistoryEntry(
            "h-2", datetime(2024, 2, 15), HistoryAction.COMMENT, "Sam Porter", "Any update?",
        ))
        assert [h.action for h in ticket.history] == [HistoryAction.CREATED, HistoryAction.COMMENT]

    def test_status_label(self):
        assert TicketStatus.IN_PROGRESS.label == "IN PROGRESS"

    def test_severity_order(self):
        assert TicketPriority.max_priority(TicketPriority.HIGH, TicketPriority.CRITICAL) == TicketPriority.CRITICAL
        assert TicketPriority.LOW.severity < TicketPriority.MEDIUM.severity
