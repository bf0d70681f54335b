"""
Domain Errors

Services raise these exceptions; the application maps each class to its
HTTP status and renders the standard error envelope:

    {"success": false, "error": "<message>"}
"""


class DomainError(Exception):
    """Base class for all expected, caller-visible failures."""

    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Missing or malformed input, or a reference that does not resolve."""
    status_code = 400


class ConflictError(DomainError):
    """Duplicate unique key or a double-booked reservation slot."""
    status_code = 409


class UnauthorizedError(DomainError):
    """Missing, invalid or expired session, or bad credentials."""
    status_code = 401


class ForbiddenError(DomainError):
    """Authenticated, but not allowed to perform the operation."""
    status_code = 403


class NotFoundError(DomainError):
    """The requested id does not resolve to a record."""
    status_code = 404
