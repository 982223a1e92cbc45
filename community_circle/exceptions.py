"""
Service-level errors

Each error carries the HTTP status it maps to; the handlers in main.py turn
them into JSON responses. Messages are shown to the caller as-is.
"""


class ServiceError(Exception):
    """Base class for expected, named failures"""

    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(ServiceError):
    status_code = 400
    default_message = "Invalid input"


class AuthenticationRequired(ServiceError):
    status_code = 401
    default_message = "Authentication required"


class AuthorizationDenied(ServiceError):
    status_code = 403
    default_message = "You do not have permission to perform this action"


class NotFound(ServiceError):
    status_code = 404
    default_message = "Not found"


class Conflict(ServiceError):
    status_code = 409
    default_message = "Conflicting state"


class CapacityExceeded(ServiceError):
    status_code = 409
    default_message = "This event is at full capacity"


class RateLimited(ServiceError):
    status_code = 429
    default_message = "Rate limit exceeded"


class ModerationBlocked(ServiceError):
    status_code = 400
    default_message = "Content contains prohibited language"
