from typing import Any, List, Optional
from fastapi import status


class BookingError(Exception):
    """Base for errors the service reports to callers as a tagged failure"""
    status_code = status.HTTP_400_BAD_REQUEST
    error_type = "BookingError"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(BookingError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_type = "ValidationError"


class NotFoundError(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    error_type = "NotFoundError"


class ConflictError(BookingError):
    status_code = status.HTTP_409_CONFLICT
    error_type = "ConflictError"

    def __init__(self, message: str, alternatives: Optional[List[str]] = None):
        self.alternatives = list(alternatives or [])
        super().__init__(message, details={"alternatives": self.alternatives})


class InvalidTransitionError(BookingError):
    status_code = status.HTTP_409_CONFLICT
    error_type = "InvalidTransitionError"


class BackendError(BookingError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type = "BackendError"
