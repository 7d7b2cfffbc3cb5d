"""
Domain errors raised by the service layer.

Routers translate these into HTTP responses: not-found errors become 404,
everything else here becomes 400.
"""


class DomainError(Exception):
    """Base class for expected, user-facing failures."""


class NotFoundError(DomainError):
    """Record missing or owned by someone else. Both cases look the same to the caller."""


class TaskNotFoundError(NotFoundError):
    def __init__(self, message: str = "Task not found or access denied"):
        super().__init__(message)


class ReminderNotFoundError(NotFoundError):
    def __init__(self, message: str = "Reminder not found or access denied"):
        super().__init__(message)


class SessionNotFoundError(NotFoundError):
    def __init__(self, message: str = "Session not found"):
        super().__init__(message)


class ReminderInPastError(DomainError):
    def __init__(self, message: str = "Reminder time cannot be in the past"):
        super().__init__(message)


class ReminderValidationError(DomainError):
    pass


class ReminderStateError(DomainError):
    pass


class SessionAlreadyCompletedError(DomainError):
    def __init__(self, message: str = "Session already completed"):
        super().__init__(message)
