"""Outbound messages to ticket holders.

Delivery is fire-and-forget: a failed send is logged and never changes the
outcome of the ticket operation that triggered it.
"""

import logging
from abc import ABC, abstractmethod

from django.conf import settings
from django.core.mail import send_mail

from events.domain import Event
from tickets.domain import Ticket
from tickets.qr import verification_url

logger = logging.getLogger(__name__)


class Notifier(ABC):
    """Interface for ticket holder notifications."""

    @abstractmethod
    def ticket_confirmed(self, ticket: Ticket, event: Event | None) -> None:
        ...

    @abstractmethod
    def ticket_transferred(
        self, ticket: Ticket, event: Event | None, previous_email: str | None
    ) -> None:
        ...


class EmailNotifier(Notifier):
    """Sends notifications through Django's configured email backend."""

    def __init__(self, base_url: str | None = None, from_email: str | None = None) -> None:
        self._base_url = base_url or settings.PUBLIC_BASE_URL
        self._from_email = from_email or settings.DEFAULT_FROM_EMAIL

    def ticket_confirmed(self, ticket: Ticket, event: Event | None) -> None:
        if not ticket.email:
            logger.info("No email for ticket %s, skipping confirmation", ticket.id)
            return
        event_name = event.name if event else "your event"
        lines = [
            f"Hi {ticket.name},",
            "",
            f"Your ticket for {event_name} is confirmed.",
        ]
        if event is not None:
            lines += [
                f"When: {event.starts_at:%d %b %Y, %H:%M}",
                f"Where: {event.venue}",
                f"Amount paid: Rs. {event.price}",
            ]
        if ticket.razorpay_payment_id:
            lines.append(f"Transaction: {ticket.razorpay_payment_id}")
        lines += [
            "",
            "Show this ticket at the entrance:",
            verification_url(ticket, self._base_url),
        ]
        send_mail(
            subject=f"Your ticket for {event_name}",
            message="\n".join(lines),
            from_email=self._from_email,
            recipient_list=[ticket.email],
        )

    def ticket_transferred(
        self, ticket: Ticket, event: Event | None, previous_email: str | None
    ) -> None:
        event_name = event.name if event else "your event"
        if ticket.email:
            send_mail(
                subject=f"A ticket for {event_name} was transferred to you",
                message="\n".join(
                    [
                        f"Hi {ticket.name},",
                        "",
                        f"A ticket for {event_name} has been transferred to you.",
                        verification_url(ticket, self._base_url),
                    ]
                ),
                from_email=self._from_email,
                recipient_list=[ticket.email],
            )
        if previous_email and previous_email != ticket.email:
            send_mail(
                subject=f"Your ticket for {event_name} was transferred",
                message=(
                    f"Your ticket {ticket.id} now belongs to {ticket.name}. "
                    "Your previous QR code is no longer valid."
                ),
                from_email=self._from_email,
                recipient_list=[previous_email],
            )


def notify_safely(send, *args) -> None:
    """Run a notifier call, logging instead of raising on failure."""
    try:
        send(*args)
    except Exception:
        logger.exception("Notification %s failed", getattr(send, "__name__", send))
