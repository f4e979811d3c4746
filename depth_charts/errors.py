# errors.py
"""Domain error taxonomy shared by the store, the services and the HTTP layer."""
from typing import Any, Optional


class DepthChartError(Exception):
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DepthChartError):
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, message: Optional[str] = None, errors: Optional[list[dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])


class NotFound(DepthChartError, LookupError):
    """Absent, soft-deleted, or owned by another team. The three cases are never distinguished."""
    status_code = 404
    default_message = "Not found"


class Forbidden(DepthChartError):
    status_code = 403
    default_message = "Access denied"


class Conflict(DepthChartError):
    status_code = 400
    default_message = "Conflict"


class Unauthenticated(DepthChartError):
    status_code = 401
    default_message = "Not authorized"


class Internal(DepthChartError):
    status_code = 500


__all__ = [
    "DepthChartError",
    "ValidationError",
    "NotFound",
    "Forbidden",
    "Conflict",
    "Unauthenticated",
    "Internal",
]
