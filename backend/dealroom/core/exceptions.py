"""Custom exceptions for the deal room service.

Services raise these; the API layer renders them as HTTP errors with the
message passed through verbatim.
"""

from fastapi import status


class DealRoomError(Exception):
    """Base exception for deal room operations."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "DEAL_ROOM_ERROR"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class NotFoundError(DealRoomError):
    """Raised when a deal, clause, round, suggestion or proposal is missing."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class ForbiddenError(DealRoomError):
    """Raised when the actor is not a party to the deal or not entitled."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class BadRequestError(DealRoomError):
    """Raised when an operation's precondition is violated."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "BAD_REQUEST"


class ConflictError(DealRoomError):
    """Raised when a deal was modified by a concurrent request."""

    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
