"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Ticket stores report
connectivity problems as an ``Unavailable`` result instead of raising, so
callers decide explicitly when to use the fallback store.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from tickets.domain import Ticket


@dataclass(frozen=True)
class Found:
    ticket: Ticket


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class Unavailable:
    reason: str


@dataclass(frozen=True)
class Saved:
    ticket: Ticket


@dataclass(frozen=True)
class Listed:
    tickets: tuple[Ticket, ...]


LookupResult = Found | NotFound | Unavailable
WriteResult = Saved | NotFound | Unavailable
ListResult = Listed | Unavailable


class TicketStore(ABC):
    """Interface for ticket persistence operations."""

    @abstractmethod
    def find_by_id(self, ticket_id: str) -> LookupResult:
        """Return the ticket with this id."""
        ...

    @abstractmethod
    def find_by_token(self, token: str) -> LookupResult:
        """Return the ticket currently holding this admission token."""
        ...

    @abstractmethod
    def list_tickets(self, event_id: str | None = None) -> ListResult:
        """Return tickets, newest first, optionally for one event."""
        ...

    @abstractmethod
    def add(self, ticket: Ticket) -> WriteResult:
        """Insert a new ticket."""
        ...

    @abstractmethod
    def save(self, ticket: Ticket) -> WriteResult:
        """Overwrite the mutable fields of an existing ticket."""
        ...
