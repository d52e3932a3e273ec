"""Data models for campus issue tickets."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    STAFF = "STAFF"
    STUDENT = "STUDENT"
    GUEST = "GUEST"


class TicketStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    REJECTED = "REJECTED"

    @property
    def label(self) -> str:
        """Status as shown to people, e.g. "IN PROGRESS"."""
        return self.value.replace("_", " ")


class TicketPriority(str, Enum):
    """Ticket severity, ordered LOW < MEDIUM < HIGH < CRITICAL."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    @classmethod
    def max_priority(cls, a: "TicketPriority", b: "TicketPriority") -> "TicketPriority":
        return a if a.severity >= b.severity else b


_SEVERITY = {
    TicketPriority.LOW: 0,
    TicketPriority.MEDIUM: 1,
    TicketPriority.HIGH: 2,
    TicketPriority.CRITICAL: 3,
}


class HistoryAction(str, Enum):
    CREATED = "CREATED"
    ASSIGNMENT = "ASSIGNMENT"
    STATUS_CHANGE = "STATUS_CHANGE"
    COMMENT = "COMMENT"
    REJECTION = "REJECTION"


@dataclass
class TicketHistoryEntry:
    """One audit entry on a ticket."""
    id: str
    timestamp: datetime
    action: HistoryAction
    actor_name: str
    details: str


@dataclass
class Ticket:
    """
    A reported campus issue.

    The map correlation only looks at location, status and priority; the
    rest is carried for the ticket views.
    """
    id: str
    title: str
    description: str
    location: str  # Free text, e.g. "Central Library, 2nd Floor"
    status: TicketStatus
    priority: TicketPriority
    category: str
    created_by: str
    created_by_name: str = ""
    assigned_to: Optional[str] = None
    assigned_to_name: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    ai_analysis: Optional[str] = None
    image_url: Optional[str] = None
    history: list[TicketHistoryEntry] = field(default_factory=list)
