"""
Keyword triage for new tickets.

A lightweight local heuristic that suggests a priority, category and
one-line summary from the ticket description. Used when a reporter does
not pick a priority themselves.
"""
import re
from dataclasses import dataclass

from campusfix.models.ticket import TicketPriority

# Applied in order; a later match overrides an earlier one
PRIORITY_PATTERNS = [
    (re.compile(r"(urgent|immediately|asap|emergency|critical)"), TicketPriority.HIGH),
    (re.compile(r"(broken|leak|fire|danger|collapse)"), TicketPriority.HIGH),
    (re.compile(r"(slow|low|minor|cosmetic)"), TicketPriority.LOW),
]

CATEGORY_PATTERNS = [
    (re.compile(r"(wifi|internet|network|connectivity)"), "Network"),
    (re.compile(r"(marks|grades|exam|submission)"), "Academic Records"),
    (re.compile(r"(fee|payment|billing)"), "Billing"),
]

SUMMARY_MAX_CHARS = 200


@dataclass
class TriageResult:
    priority: TicketPriority
    category: str
    summary: str
    suggested_action: str = "Review and triage manually."

    def as_analysis(self) -> str:
        """Text stored on the ticket's ai_analysis field."""
        return f"{self.category} - {self.priority.value.title()} priority. {self.summary}"


def analyze_ticket(description: str, location: str = "", issue_type: str = "Infrastructure") -> TriageResult:
    """
    Suggest priority and category for a ticket.

    Args:
        description: Free-text description from the reporter
        location: Where the issue is (currently unused by the rules)
        issue_type: Category to fall back on when no keyword matches
    """
    text = (description or "").lower()

    priority = TicketPriority.MEDIUM
    for pattern, level in PRIORITY_PATTERNS:
        if pattern.search(text):
            priority = level

    category = issue_type
    for pattern, name in CATEGORY_PATTERNS:
        if pattern.search(text):
            category = name

    if text:
        summary = description.strip().split("\n")[0][:SUMMARY_MAX_CHARS]
    else:
        summary = "No description provided."

    return TriageResult(priority=priority, category=category, summary=summary)
