"""Process-local ticket store used when the database is unreachable.

One instance is created per process by TicketsConfig.ready() and handed to
the services. It is not durable, not shared between processes and not
synchronised: a degraded mode for a single-instance deployment.
"""

from dataclasses import replace

from django.utils import timezone

from tickets.domain import Ticket
from tickets.stores.interfaces import (
    Found,
    Listed,
    ListResult,
    LookupResult,
    NotFound,
    Saved,
    TicketStore,
    WriteResult,
)


class InMemoryTicketStore(TicketStore):
    """Dict-backed ticket store."""

    def __init__(self) -> None:
        self._tickets: dict[str, Ticket] = {}

    def get(self, ticket_id: str) -> Ticket | None:
        return self._tickets.get(ticket_id)

    def set(self, ticket: Ticket) -> None:
        self._tickets[ticket.id] = ticket

    def update(self, ticket_id: str, **changes) -> Ticket | None:
        existing = self._tickets.get(ticket_id)
        if existing is None:
            return None
        updated = replace(existing, **{**changes, "updated_at": timezone.now()})
        self._tickets[ticket_id] = updated
        return updated

    def delete(self, ticket_id: str) -> bool:
        return self._tickets.pop(ticket_id, None) is not None

    def clear(self) -> None:
        self._tickets.clear()

    def __len__(self) -> int:
        return len(self._tickets)

    def __contains__(self, ticket_id: object) -> bool:
        return ticket_id in self._tickets

    def find_by_id(self, ticket_id: str) -> LookupResult:
        ticket = self.get(ticket_id)
        return Found(ticket) if ticket else NotFound()

    def find_by_token(self, token: str) -> LookupResult:
        for ticket in self._tickets.values():
            if ticket.token is not None and ticket.token == token:
                return Found(ticket)
        return NotFound()

    def list_tickets(self, event_id: str | None = None) -> ListResult:
        tickets = [
            ticket
            for ticket in self._tickets.values()
            if event_id is None or ticket.event_id == event_id
        ]
        tickets.sort(key=lambda ticket: ticket.created_at, reverse=True)
        return Listed(tuple(tickets))

    def add(self, ticket: Ticket) -> WriteResult:
        self.set(ticket)
        return Saved(ticket)

    def save(self, ticket: Ticket) -> WriteResult:
        if ticket.id not in self._tickets:
            return NotFound()
        updated = replace(ticket, updated_at=timezone.now())
        self.set(updated)
        return Saved(updated)
