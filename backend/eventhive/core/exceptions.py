"""
Typed domain errors.

Services raise these directly; each one is an HTTPException so routes need no
translation layer. The handlers in eventhive.api.errors render them as
{"success": false, "error": ..., "code": ...}.
"""

from typing import Optional

from fastapi import HTTPException, status


class EventHiveError(HTTPException):
    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "error"
    default_message: str = "Request failed"

    def __init__(self, message: Optional[str] = None, headers: Optional[dict] = None):
        super().__init__(
            status_code=self.status_code,
            detail=message or self.default_message,
            headers=headers,
        )

    @property
    def message(self) -> str:
        return self.detail


class UnauthorizedError(EventHiveError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"
    default_message = "Authentication required"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(EventHiveError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_message = "Insufficient permissions"


class NotFoundError(EventHiveError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Not found"


class ConflictError(EventHiveError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
    default_message = "Conflicting request"


class UnavailableError(ConflictError):
    """Inventory exhausted or the item cannot currently be sold or booked."""

    code = "unavailable"
    default_message = "Not available"


class ValidationError(EventHiveError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation"
    default_message = "Invalid input"
