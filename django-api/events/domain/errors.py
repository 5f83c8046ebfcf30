"""Domain error codes for the events module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    INVALID_EVENT_ID = "INVALID_EVENT_ID"
    EVENT_SOLD_OUT = "EVENT_SOLD_OUT"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: Enum
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        self.event_id = event_id


class InvalidEventIdError(DomainError):
    """Raised when an event ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_EVENT_ID,
            message="Invalid event ID format",
        )


class EventSoldOutError(DomainError):
    """Raised when a purchase asks for more tickets than remain."""

    def __init__(self, event_id: str, remaining: int) -> None:
        super().__init__(
            code=ErrorCode.EVENT_SOLD_OUT,
            message=(
                f"Only {remaining} tickets left for this event"
                if remaining
                else "Event is sold out"
            ),
        )
        self.event_id = event_id
        self.remaining = remaining


class StoreUnavailableError(DomainError):
    """Raised when the database cannot be reached and no fallback applies."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.STORE_UNAVAILABLE,
            message="Storage is temporarily unavailable",
        )
