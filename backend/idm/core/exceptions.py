"""
Redbard IDM - Exceptions

Domain errors raised by the service and endpoint layers. Each carries the
HTTP status it is rendered with by the application exception handler.
"""

from fastapi import status


class IdmError(Exception):
    """Base exception for all application errors"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ResourceNotFoundError(IdmError):
    """Raised when a requested record does not exist"""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource_id: str):
        super().__init__(f"{resource_id} not found", {"id": resource_id})


class BadRequestError(IdmError):
    """Raised when a payload is missing data the service needs"""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, invalid_fields: list[str] | None = None):
        details = {"invalid_fields": invalid_fields} if invalid_fields else {}
        super().__init__(message, details)


class AccessDeniedError(IdmError):
    """Raised when credentials are rejected"""

    status_code = status.HTTP_403_FORBIDDEN


class UsernameInUseError(IdmError):
    """Raised when a username is already registered"""

    status_code = 422

    def __init__(self, username: str):
        super().__init__("Username is already in use", {"username": username})
