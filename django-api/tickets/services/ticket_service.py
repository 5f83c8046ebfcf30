"""Ticket service - purchase and staff operations on tickets."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from django.utils import timezone

from events.domain import Event, EventId, Money
from events.domain.errors import EventNotFoundError, EventSoldOutError, StoreUnavailableError
from events.services.event_service import parse_event_id
from events.stores.interfaces import EventStore
from tickets.domain import Holder, Ticket, TicketStatus, TokenSigner, new_ticket_id
from tickets.domain import lifecycle
from tickets.domain.errors import (
    InvalidRefundAmountError,
    InvalidRequestError,
    NotificationFailedError,
    TicketTransitionError,
)
from tickets.domain.lifecycle import Transition
from tickets.notifications import Notifier, notify_safely
from tickets.services.locator import Located, TicketLocator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Purchase:
    """Tickets created for one checkout."""

    tickets: tuple[Ticket, ...]
    event: Event

    @property
    def unit_price(self) -> Money:
        return self.event.price

    @property
    def total_price(self) -> Money:
        return self.event.price * len(self.tickets)


@dataclass(frozen=True)
class TicketDetails:
    ticket: Ticket
    event: Event | None


@dataclass(frozen=True)
class Refund:
    ticket: Ticket
    amount: int


class TicketService:
    """Service for ticket purchase and staff-side ticket management."""

    def __init__(
        self,
        locator: TicketLocator,
        signer: TokenSigner,
        events: EventStore,
        notifier: Notifier,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._locator = locator
        self._signer = signer
        self._events = events
        self._notifier = notifier
        self._clock = clock

    def purchase(
        self,
        event_id: str,
        attendees: Sequence[Holder],
        email: str | None = None,
        phone: str | None = None,
    ) -> Purchase:
        """Create one ticket per attendee.

        Tickets start pending; for free events they are paid straight away.
        Attendees without their own contact details get the buyer's.

        Raises:
            InvalidEventIdError: If the event_id is malformed.
            EventNotFoundError: If the event does not exist or is inactive.
            EventSoldOutError: If fewer tickets remain than requested.
        """
        parsed = parse_event_id(event_id)
        event = self._events.get_event(parsed)
        if event is None or not event.is_active:
            raise EventNotFoundError(event_id)
        if not event.can_sell(len(attendees)):
            raise EventSoldOutError(event_id, event.remaining)

        created = []
        for attendee in attendees:
            ticket = Ticket(
                id=new_ticket_id(),
                event_id=event.id.value,
                name=attendee.name,
                email=attendee.email or email,
                phone=attendee.phone or phone,
                status=TicketStatus.PENDING,
                created_at=self._clock(),
            )
            if event.price.is_free:
                ticket = lifecycle.confirm_payment(ticket, self._signer).ticket
            created.append(self._locator.add(ticket).ticket)

        if event.price.is_free:
            self._events.adjust_sold_count(parsed, len(created))
            for ticket in created:
                notify_safely(self._notifier.ticket_confirmed, ticket, event)
        logger.info("Created %d ticket(s) for event %s", len(created), event.id)
        return Purchase(tickets=tuple(created), event=event)

    def get_ticket(self, ticket_id: str) -> TicketDetails:
        ticket = self._locator.find(ticket_id).ticket
        return TicketDetails(ticket=ticket, event=self._event(ticket.event_id))

    def list_tickets(self, event_id: str | None = None) -> tuple[Ticket, ...]:
        return self._locator.list_tickets(event_id)

    def refund(self, ticket_id: str, amount: int | None = None) -> Refund:
        """Refund a paid ticket that has not been used for entry.

        The amount defaults to the event price and may not exceed it, so the
        event must be readable.

        Raises:
            EventNotFoundError: If the ticket's event no longer exists.
            StoreUnavailableError: If the event price cannot be loaded.
            InvalidRefundAmountError: If the amount exceeds the price.
            TicketTransitionError: If the ticket cannot be refunded.
        """
        located = self._locator.find(ticket_id)
        event = self._events.get_event(EventId(located.ticket.event_id))
        if event is None:
            raise EventNotFoundError(located.ticket.event_id)
        price = event.price.amount
        if amount is not None and amount > price:
            raise InvalidRefundAmountError(price)

        ticket = self._apply(located, lifecycle.refund(located.ticket))
        try:
            self._events.adjust_sold_count(EventId(ticket.event_id), -1)
        except StoreUnavailableError:
            logger.warning("Could not release seat for refunded ticket %s", ticket.id)
        logger.info("Ticket %s refunded", ticket.id)
        return Refund(ticket=ticket, amount=price if amount is None else amount)

    def transfer(self, ticket_id: str, holder: Holder) -> Ticket:
        """Give a paid ticket to a new holder; the old QR code stops working."""
        located = self._locator.find(ticket_id)
        previous_email = located.ticket.email
        ticket = self._apply(located, lifecycle.transfer(located.ticket, holder, self._signer))
        logger.info("Ticket %s transferred", ticket.id)
        notify_safely(
            self._notifier.ticket_transferred,
            ticket,
            self._event(ticket.event_id),
            previous_email,
        )
        return ticket

    def resend(self, ticket_id: str) -> Ticket:
        """Send a paid ticket's confirmation email again.

        A failed send is raised, not just logged.

        Raises:
            TicketNotFoundError: If neither store has the ticket.
            InvalidRequestError: If the ticket is not paid or has no email.
            NotificationFailedError: If the mail backend cannot send it.
        """
        ticket = self._locator.find(ticket_id).ticket
        if ticket.status is not TicketStatus.PAID:
            raise InvalidRequestError("Only paid tickets can be resent")
        if not ticket.email:
            raise InvalidRequestError("No email address on this ticket")
        try:
            self._notifier.ticket_confirmed(ticket, self._event(ticket.event_id))
        except OSError as exc:
            raise NotificationFailedError() from exc
        logger.info("Ticket %s resent to holder", ticket.id)
        return ticket

    def cancel(self, ticket_id: str) -> Ticket:
        """Cancel a ticket whose checkout was abandoned."""
        located = self._locator.find(ticket_id)
        return self._apply(located, lifecycle.cancel(located.ticket))

    def _apply(self, located: Located, transition: Transition) -> Ticket:
        if not transition.ok:
            raise TicketTransitionError(transition.rejection)
        return self._locator.persist(located, transition.ticket)

    def _event(self, event_id: str) -> Event | None:
        try:
            return self._events.get_event(EventId(event_id))
        except StoreUnavailableError:
            logger.warning("Event store unavailable while loading event %s", event_id)
            return None
