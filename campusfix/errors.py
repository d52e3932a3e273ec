"""Domain exceptions raised by the CampusFix service layer."""


class CampusFixError(Exception):
    """Base class for CampusFix errors."""


class TicketNotFoundError(CampusFixError):
    def __init__(self, ticket_id: str):
        super().__init__(f"Ticket not found: {ticket_id}")
        self.ticket_id = ticket_id


class UserNotFoundError(CampusFixError):
    def __init__(self, user_id: str):
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class NotificationNotFoundError(CampusFixError):
    def __init__(self, notification_id: str):
        super().__init__(f"Notification not found: {notification_id}")
        self.notification_id = notification_id


class BatchNotFoundError(CampusFixError):
    def __init__(self, batch_id: str):
        super().__init__(f"Batch not found: {batch_id}")
        self.batch_id = batch_id


class PermissionDeniedError(CampusFixError):
    """Raised when a user's role does not allow an action."""
