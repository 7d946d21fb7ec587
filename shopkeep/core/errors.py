"""
Error types shared by the access gates, the product store and the handlers.

Every error carries the HTTP status, a machine readable code, a message and
optional details; the exception handlers turn them into the error envelope.
"""
from typing import Any


class ApiError(Exception):
    """Base class for errors that map onto an HTTP error response"""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    message: str = "Internal Server Error"

    def __init__(self, message: str | None = None, details: list[dict[str, Any]] | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details or []

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class BadRequest(ApiError):
    status_code = 400
    code = "BAD_REQUEST"
    message = "Bad request"


class Unauthorized(ApiError):
    status_code = 401
    code = "UNAUTHORIZED"
    message = "Unauthorized"


class Forbidden(ApiError):
    status_code = 403
    code = "FORBIDDEN"
    message = "Forbidden"


class NotFound(ApiError):
    status_code = 404
    code = "NOT_FOUND"
    message = "Not found"


class Conflict(ApiError):
    status_code = 409
    code = "CONFLICT"
    message = "Conflict"


class ValidationError(ApiError):
    """Field-level violations; details lists every violated field"""

    status_code = 422
    code = "UNPROCESSABLE_ENTITY"
    message = "Invalid data"


class PersistenceError(ApiError):
    """The in-memory change was applied but could not be written to storage"""

    status_code = 500
    code = "PERSISTENCE_ERROR"
    message = "Failed to persist changes"
