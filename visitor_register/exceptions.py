# visitor_register/exceptions.py
"""
Domain exceptions. Services raise these; main.py turns them into JSON
responses using each class's status_code.
"""

from typing import Optional


class AppError(Exception):
    """Base class for errors that are safe to show to the client."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input. Carries every failing field, not just the first."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, message: Optional[str] = None, errors: Optional[list[dict]] = None):
        super().__init__(message)
        self.errors = errors or []


class AlreadyCheckedOutError(AppError):
    status_code = 400
    default_message = "Visitor has already checked out."


class MissingCredentialsError(AppError):
    status_code = 401
    default_message = "Authentication required"


class InvalidCredentialsError(AppError):
    status_code = 401
    default_message = "Invalid username or password"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Forbidden: insufficient role"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Conflict"


class InternalError(AppError):
    status_code = 500


class ConfigurationError(Exception):
    """Raised at startup when configuration is unsafe to run with."""
