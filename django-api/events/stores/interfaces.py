"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod

from events.domain import Event, EventId


class EventStore(ABC):
    """Interface for event persistence operations.

    Implementations raise StoreUnavailableError when the backing database
    cannot be reached.
    """

    @abstractmethod
    def list_events(self) -> list[Event]:
        """Return active events ordered by starts_at ascending."""
        ...

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def adjust_sold_count(self, event_id: EventId, delta: int) -> None:
        """Add delta to the event's sold count, never going below zero."""
        ...
