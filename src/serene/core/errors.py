"""Domain exceptions raised by the guard, the stores and the services.

Each exception carries the HTTP status it maps to at the API boundary; the
handlers in ``error_handlers`` turn them into ``{"message": ...}`` bodies.
"""
from fastapi import status


class ServiceError(Exception):
    """Base class for errors surfaced to API callers."""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class EntitlementRequired(Forbidden):
    default_message = "Premium subscription required"


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ValidationFailed(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class DomainConflict(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request conflicts with existing data"
