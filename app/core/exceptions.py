"""Domain exceptions raised by services and mapped to HTTP responses."""

from fastapi import status


class ApplicationError(Exception):
    """Base class for errors that carry a client-facing status code."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Failed to apply to job"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(ApplicationError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class DuplicateApplication(ApplicationError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Already applied to this job"


class NotEligible(ApplicationError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You are not eligible for this job"


class NotFound(ApplicationError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InvalidStatusTransition(ApplicationError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid status transition"


class StorageError(ApplicationError):
    """Blob upload failed; fatal for a submission."""

    default_message = "File upload failed"


class PersistenceError(ApplicationError):
    """Saving the application failed; fatal for a submission."""

    default_message = "Failed to save application"


class PermissionDenied(ApplicationError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not allowed to access this resource"
