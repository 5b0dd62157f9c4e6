from typing import Any

from shoreline_server.logging import logger


class ShorelineException(Exception):
    """Base class for all Shoreline server exceptions."""

    detail: str = "Error"
    status: int = 500
    extra: dict[str, Any]

    def __init__(
        self,
        detail: str | None = None,
        log: bool | str = False,
        code: str | None = None,
        **kwargs,
    ) -> None:
        self.code = code or self.detail.lower().replace(" ", "-")
        if detail is not None:
            self.detail = detail
        self.extra = kwargs
        if log is True:
            logger.error(f"EXCEPTION: {self.status} {self.detail}")
        elif isinstance(log, str):
            logger.error(f"EXCEPTION: {self.status} {log}")

        super().__init__(self.detail)


class BadRequestException(ShorelineException):
    """Raised when the request is malformed or missing required fields."""

    detail: str = "Bad request"
    status = 400


class UnauthorizedException(ShorelineException):
    """Raised when a user is not authorized.

    And tries to access a resource without the proper credentials.
    """

    detail: str = "Unauthorized"
    status: int = 401


class ForbiddenException(ShorelineException):
    """Raised when a user is not permitted access to the resource.

    despite providing authentication such as insufficient
    permissions of the authenticated account.
    """

    detail: str = "Forbidden"
    status: int = 403


class NotFoundException(ShorelineException):
    """Exception raised when a resource is not found."""

    detail: str = "Not found"
    status: int = 404


class ConflictException(ShorelineException):
    """Exception raised when a resource already exists."""

    detail: str = "Conflict"
    status: int = 409


class ServerMisconfiguredException(ShorelineException):
    """Exception raised when a required setting is missing."""

    detail: str = "Server misconfigured"
    status: int = 500


class DeleteFailedException(ShorelineException):
    """Raised when the media library refuses to delete an asset or folder."""

    detail: str = "Delete failed"
    status: int = 502


class ServiceUnavailableException(ShorelineException):
    """Exception raised when a service is unavailable.

    Request should be retried later.
    """

    detail: str = "Service unavailable"
    status: int = 503


class StoreUnavailableException(ServiceUnavailableException):
    """The database cannot be read."""

    detail: str = "Store unavailable"


class RemoteUnavailableException(ServiceUnavailableException):
    """The media library cannot be reached or returned an error."""

    detail: str = "Remote unavailable"
