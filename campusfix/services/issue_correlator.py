"""
Building/issue correlation for the campus map.

Maps free-text ticket locations to building ids with an ordered list of
keyword rules and aggregates open tickets per building, so the map can
show an issue pin with a count and a severity colour on each building.

Matching is first-rule-wins: a location mentioning both "library" and
"admin" goes to the administrative building because that rule comes first.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

from campusfix.models.ticket import TicketPriority, TicketStatus

logger = logging.getLogger(__name__)


class LocatedTicket(Protocol):
    """Anything with the three fields the correlation reads."""
    location: str
    status: str
    priority: str


# (building_id, keywords) checked in order against the lower-cased location
LOCATION_RULES: list[tuple[str, tuple[str, ...]]] = [
    ("b-admin", ("admin", "hr", "office")),
    ("b-academic-a", ("academic block a", "block a", "cs")),
    ("b-academic-b", ("academic block b", "block b", "mechanical")),
    ("b-library", ("library",)),
    ("b-audit", ("audit",)),
    ("b-cafe", ("cafeteria", "canteen")),
]

# Floor words checked in order; the first hit wins
FLOOR_KEYWORDS: list[tuple[int, tuple[str, ...]]] = [
    (1, ("1st", "first")),
    (2, ("2nd", "second")),
    (3, ("3rd", "third")),
    (4, ("4th", "fourth")),
]

PRIORITY_COLORS = {
    TicketPriority.CRITICAL: "#ef4444",
    TicketPriority.HIGH: "#f97316",
    TicketPriority.MEDIUM: "#eab308",
    TicketPriority.LOW: "#3b82f6",
}


@dataclass
class BuildingIssueSummary:
    """Open issues at one building."""
    count: int
    max_priority: TicketPriority

    def to_dict(self) -> dict:
        return {"count": self.count, "max_priority": self.max_priority.value}


def match_building(location: Optional[str]) -> Optional[str]:
    """Return the building id for a location string, or None if no rule matches."""
    if not location:
        return None
    loc = location.lower()
    for building_id, keywords in LOCATION_RULES:
        if any(keyword in loc for keyword in keywords):
            return building_id
    return None


def correlate_issues(tickets: Iterable[LocatedTicket]) -> dict[str, BuildingIssueSummary]:
    """
    Group open tickets by building.

    RESOLVED tickets are skipped, and so are tickets whose location
    matches no building. Buildings without open tickets are absent from
    the result.

    Returns:
        Mapping of building id to BuildingIssueSummary
    """
    issues: dict[str, BuildingIssueSummary] = {}
    unmatched = 0

    for ticket in tickets:
        if TicketStatus(ticket.status) == TicketStatus.RESOLVED:
            continue

        building_id = match_building(ticket.location)
        if building_id is None:
            unmatched += 1
            continue

        priority = TicketPriority(ticket.priority)
        summary = issues.get(building_id)
        if summary is None:
            issues[building_id] = BuildingIssueSummary(count=1, max_priority=priority)
        else:
            summary.count += 1
            summary.max_priority = TicketPriority.max_priority(summary.max_priority, priority)

    if unmatched:
        logger.debug(f"{unmatched} open tickets did not match any building")

    return issues


def estimate_floor(location: Optional[str], floor_count: int) -> int:
    """
    Guess which floor a ticket refers to from its location text.

    Ordinal words ("2nd", "third") pick the floor; the result is clamped to
    the building's top floor and defaults to the ground floor (0).
    """
    floor = 0
    loc = (location or "").lower()
    for number, words in FLOOR_KEYWORDS:
        if any(word in loc for word in words):
            floor = number
            break
    return max(0, min(floor, floor_count - 1))


def priority_color(priority) -> str:
    """Pin colour for a severity level."""
    return PRIORITY_COLORS[TicketPriority(priority)]
