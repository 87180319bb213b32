"""Domain exception hierarchy for MyBook.

Services raise these instead of HTTPException so the same rules can be
exercised without a request. The application registers one handler that
renders any MyBookError as ``{"detail": message}`` with its status code.
"""

from fastapi import status


class MyBookError(Exception):
    """Base exception for all MyBook domain errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class DuplicateEntryError(MyBookError):
    """The record already exists for this user."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(MyBookError):
    """Resource not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(MyBookError):
    """The acting user may not touch this resource."""

    status_code = status.HTTP_403_FORBIDDEN


class InvalidPositionError(MyBookError):
    """A favorite position outside 1..MAX_FAVORITES was requested."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, position: int, max_position: int) -> None:
        self.position = position
        self.max_position = max_position
        super().__init__(
            f"Invalid position {position}: must be between 1 and {max_position}"
        )


class CapacityExceededError(MyBookError):
    """The user's favorites list is already full."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        super().__init__(f"You can only have {capacity} favorite books")


class CatalogUnavailableError(MyBookError):
    """The external book catalog could not be reached or answered badly."""

    status_code = status.HTTP_502_BAD_GATEWAY


class InvalidUploadError(MyBookError):
    """An uploaded file was rejected (wrong type, too large, not an image)."""

    status_code = status.HTTP_400_BAD_REQUEST


class SelfDeletionError(MyBookError):
    """An admin tried to delete their own account from the admin panel."""

    status_code = status.HTTP_400_BAD_REQUEST
