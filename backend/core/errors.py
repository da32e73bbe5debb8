"""Error kinds surfaced to API callers.

Every failure the service reports carries a stable ``kind`` and a
human-readable ``detail``; ``backend.main`` renders them as
``{"error": kind, "detail": detail}`` with the matching status code.
"""

from fastapi import status


class ServiceError(Exception):
    """Base class for failures with a stable error kind."""

    kind = 'InternalError'
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Internal server error.'

    def __init__(self, detail: str | None = None, *, status_code: int | None = None) -> None:
        self.detail = detail or self.default_detail
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.detail)


class Unauthorized(ServiceError):
    kind = 'Unauthorized'
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Not authenticated.'


class Forbidden(ServiceError):
    kind = 'Forbidden'
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Not allowed.'


class NotFound(ServiceError):
    kind = 'NotFound'
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'


class Conflict(ServiceError):
    kind = 'Conflict'
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflict.'


class InvalidCredentials(ServiceError):
    kind = 'InvalidCredentials'
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid credentials.'


class ValidationFailed(ServiceError):
    kind = 'ValidationError'
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid request.'


class InternalError(ServiceError):
    pass


class InvalidToken(Exception):
    """Raised by the token service when a token cannot be trusted."""
