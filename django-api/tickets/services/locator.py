"""Primary/fallback ticket lookup.

The database is the source of truth. When it cannot be reached, or does not
know a ticket, the in-memory fallback store is consulted. Writes go back to
the store a ticket was read from.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from events.domain.errors import StoreUnavailableError
from tickets.domain import Ticket
from tickets.domain.errors import TicketNotFoundError
from tickets.stores.interfaces import (
    Found,
    Listed,
    LookupResult,
    NotFound,
    Saved,
    TicketStore,
    Unavailable,
)
from tickets.stores.memory_store import InMemoryTicketStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Located:
    """A ticket together with the store that holds it."""

    ticket: Ticket
    store: TicketStore


class TicketLocator:
    """Reads and writes tickets across the primary and fallback stores."""

    def __init__(self, primary: TicketStore, fallback: InMemoryTicketStore) -> None:
        self._primary = primary
        self._fallback = fallback

    @property
    def fallback(self) -> InMemoryTicketStore:
        return self._fallback

    def find(self, ticket_id: str) -> Located:
        """Return the ticket and its store.

        Raises:
            TicketNotFoundError: If neither store has the ticket.
            StoreUnavailableError: If neither store could be queried.
        """
        return self._resolve(
            ticket_id,
            self._primary.find_by_id(ticket_id),
            lambda: self._fallback.find_by_id(ticket_id),
        )

    def find_by_token(self, token: str) -> Located:
        return self._resolve(
            "token",
            self._primary.find_by_token(token),
            lambda: self._fallback.find_by_token(token),
        )

    def _resolve(
        self,
        ticket_ref: str,
        primary: LookupResult,
        fallback_lookup: Callable[[], LookupResult],
    ) -> Located:
        match primary:
            case Found(ticket):
                return Located(ticket, self._primary)
            case Unavailable(reason):
                logger.warning("Primary store unavailable (%s), trying fallback store", reason)

        fallback = fallback_lookup()
        match fallback:
            case Found(ticket):
                return Located(ticket, self._fallback)
            case Unavailable() if isinstance(primary, Unavailable):
                raise StoreUnavailableError()
        raise TicketNotFoundError(ticket_ref)

    def persist(self, located: Located, ticket: Ticket) -> Ticket:
        """Write ``ticket`` back to the store it was read from."""
        result = located.store.save(ticket)
        match result:
            case Saved(saved):
                return saved
            case NotFound():
                raise TicketNotFoundError(ticket.id)
            case Unavailable(reason) if located.store is not self._fallback:
                logger.warning(
                    "Could not write ticket %s to primary store (%s); keeping it in fallback store",
                    ticket.id,
                    reason,
                )
                self._fallback.set(ticket)
                return ticket
        raise StoreUnavailableError()

    def add(self, ticket: Ticket) -> Located:
        """Store a new ticket, in the fallback store if the database is down."""
        match self._primary.add(ticket):
            case Saved(saved):
                return Located(saved, self._primary)
            case Unavailable(reason):
                logger.warning(
                    "Primary store unavailable (%s), creating ticket %s in fallback store",
                    reason,
                    ticket.id,
                )
        self._fallback.add(ticket)
        return Located(ticket, self._fallback)

    def list_tickets(self, event_id: str | None = None) -> tuple[Ticket, ...]:
        match self._primary.list_tickets(event_id):
            case Listed(tickets):
                return tickets
            case Unavailable(reason):
                logger.warning("Primary store unavailable (%s), listing fallback store", reason)
        result = self._fallback.list_tickets(event_id)
        if isinstance(result, Listed):
            return result.tickets
        raise StoreUnavailableError()
