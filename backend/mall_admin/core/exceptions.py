"""Error hierarchy shared by services and routes.

Each error carries a ``kind`` and the HTTP status it maps to, so the
exception handlers in ``mall_admin.main`` can render the response envelope
without knowing where the error came from.
"""

from __future__ import annotations


class MallAdminError(Exception):
    """Base error for the mall admin API."""

    kind = "server"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(MallAdminError):
    """Bad input or a violated business rule."""

    kind = "validation"
    status_code = 400
    default_message = "Invalid request parameters"


class NotFound(MallAdminError):
    """Raised when an entity looked up by id does not exist."""

    kind = "not_found"
    status_code = 404
    default_message = "Resource not found"


class Forbidden(MallAdminError):
    """Raised when the operation is not allowed for the caller or the target."""

    kind = "forbidden"
    status_code = 403
    default_message = "Permission denied"


class Unauthorized(MallAdminError):
    """Raised when the bearer token is missing, invalid or expired."""

    kind = "unauthorized"
    status_code = 401
    default_message = "Unauthorized"


class CategoryHierarchyError(ValidationFailed):
    """Raised when a category operation would break the hierarchy invariants."""
