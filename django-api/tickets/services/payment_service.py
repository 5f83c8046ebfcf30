"""Gateway orders and payment confirmation.

Pending tickets are first attached to a gateway order. The gateway then
signs ``order_id|payment_id`` with the merchant key secret. Once that
signature checks out, each ticket attached to that order moves to paid and
gets its admission token. Gateways redeliver callbacks, so confirming an
already paid ticket is a successful no-op.
"""

import hashlib
import hmac
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from django.core.exceptions import ImproperlyConfigured

from events.domain import Event, EventId
from events.domain.errors import EventNotFoundError, StoreUnavailableError
from events.stores.interfaces import EventStore
from tickets.domain import Ticket, TokenSigner
from tickets.domain import lifecycle
from tickets.domain.errors import (
    InvalidPaymentSignatureError,
    InvalidRequestError,
    TicketTransitionError,
)
from tickets.gateway import GatewayOrder, PaymentGateway
from tickets.notifications import Notifier, notify_safely
from tickets.services.locator import TicketLocator

logger = logging.getLogger(__name__)


def payment_signature(order_id: str, payment_id: str, key_secret: str) -> str:
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(key_secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


@dataclass(frozen=True)
class PaymentConfirmation:
    """Tickets confirmed by one gateway callback."""

    tickets: tuple[Ticket, ...]
    newly_paid: tuple[str, ...]


@dataclass(frozen=True)
class PaymentOrder:
    """A gateway order opened for a set of pending tickets."""

    order: GatewayOrder
    tickets: tuple[Ticket, ...]


class PaymentService:
    """Service for gateway orders and payment confirmation."""

    def __init__(
        self,
        locator: TicketLocator,
        signer: TokenSigner,
        events: EventStore,
        notifier: Notifier,
        gateway: PaymentGateway,
        key_secret: str | None,
    ) -> None:
        if not key_secret:
            raise ImproperlyConfigured("RAZORPAY_KEY_SECRET is not configured")
        self._locator = locator
        self._signer = signer
        self._events = events
        self._notifier = notifier
        self._gateway = gateway
        self._key_secret = key_secret

    def create_order(self, ticket_ids: Sequence[str]) -> PaymentOrder:
        """Open one gateway order for pending tickets of a single event.

        The amount is the event price times the number of tickets; each
        ticket records the order id so only this order can pay for it.

        Raises:
            TicketNotFoundError: If a ticket is unknown to both stores.
            TicketTransitionError: If a ticket is not pending.
            InvalidRequestError: If the tickets belong to different events.
            EventNotFoundError: If the event no longer exists.
            StoreUnavailableError: If the event price cannot be loaded.
            PaymentGatewayError: If the gateway does not open the order.
        """
        located = [self._locator.find(ticket_id) for ticket_id in dict.fromkeys(ticket_ids)]
        for item in located:
            rejection = lifecycle.order_rejection(item.ticket)
            if rejection is not None:
                raise TicketTransitionError(rejection)
        event_ids = {item.ticket.event_id for item in located}
        if len(event_ids) != 1:
            raise InvalidRequestError("All tickets in an order must be for the same event")
        (event_id,) = event_ids
        event = self._events.get_event(EventId(event_id))
        if event is None:
            raise EventNotFoundError(event_id)

        ids = [item.ticket.id for item in located]
        order = self._gateway.create_order(
            amount=(event.price * len(ids)).amount,
            receipt=ids[0],
            notes={"eventId": event_id, "ticketIds": ",".join(ids)},
        )
        tickets = tuple(
            self._locator.persist(item, lifecycle.attach_order(item.ticket, order.id).ticket)
            for item in located
        )
        logger.info("Order %s opened for %d ticket(s)", order.id, len(tickets))
        return PaymentOrder(order=order, tickets=tickets)

    def confirm(
        self,
        ticket_ids: Sequence[str],
        order_id: str,
        payment_id: str,
        signature: str,
    ) -> PaymentConfirmation:
        """Mark every ticket of a verified order as paid.

        Every ticket is checked before any is written, so a refused ticket
        leaves the whole order unconfirmed.

        Raises:
            InvalidPaymentSignatureError: If the signature does not match.
            TicketNotFoundError: If a ticket is unknown to both stores.
            TicketTransitionError: If a ticket is not attached to this order,
                or was refunded or cancelled.
        """
        expected = payment_signature(order_id, payment_id, self._key_secret)
        if not signature.isascii() or not hmac.compare_digest(expected, signature):
            logger.warning("Invalid payment signature for order %s", order_id)
            raise InvalidPaymentSignatureError()

        transitions = []
        for ticket_id in dict.fromkeys(ticket_ids):
            located = self._locator.find(ticket_id)
            transition = lifecycle.confirm_payment(
                located.ticket, self._signer, order_id=order_id, payment_id=payment_id
            )
            if not transition.ok:
                logger.warning(
                    "Payment %s refused for ticket %s: %s",
                    payment_id,
                    ticket_id,
                    transition.rejection.message,
                )
                raise TicketTransitionError(transition.rejection)
            transitions.append((located, transition))

        confirmed, newly_paid = [], []
        for located, transition in transitions:
            if not transition.changed:
                logger.info(
                    "Ticket %s already paid, ignoring repeat confirmation", located.ticket.id
                )
                confirmed.append(located.ticket)
                continue
            ticket = self._locator.persist(located, transition.ticket)
            logger.info("Payment %s confirmed for ticket %s", payment_id, ticket.id)
            event = self._record_sale(ticket)
            notify_safely(self._notifier.ticket_confirmed, ticket, event)
            confirmed.append(ticket)
            newly_paid.append(ticket.id)
        return PaymentConfirmation(tickets=tuple(confirmed), newly_paid=tuple(newly_paid))

    def _record_sale(self, ticket: Ticket) -> Event | None:
        event_id = EventId(ticket.event_id)
        try:
            self._events.adjust_sold_count(event_id, 1)
            return self._events.get_event(event_id)
        except StoreUnavailableError:
            logger.warning("Could not record sale of ticket %s, event store unavailable", ticket.id)
            return None
