"""Ticket lifecycle: the only place ticket state changes.

Every function is total. It returns a Transition holding either the new
ticket, or the unchanged ticket plus the reason the change was refused.
Nothing here touches storage.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from tickets.domain.models import Holder, Ticket, TicketStatus
from tickets.domain.tokens import TokenSigner


class RejectionCode(Enum):
    """Why a transition was refused."""

    NOT_PAID = "NOT_PAID"
    REFUNDED = "REFUNDED"
    CANCELLED = "CANCELLED"
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"
    NOT_CHECKED_IN = "NOT_CHECKED_IN"
    WRONG_EVENT = "WRONG_EVENT"
    ALREADY_REFUNDED = "ALREADY_REFUNDED"
    CHECKED_IN = "CHECKED_IN"
    NOT_PENDING = "NOT_PENDING"
    ORDER_MISMATCH = "ORDER_MISMATCH"


@dataclass(frozen=True)
class Rejection:
    """A refused transition with a message staff can act on."""

    code: RejectionCode
    message: str
    checked_in_at: datetime | None = None


@dataclass(frozen=True)
class Transition:
    """Outcome of a lifecycle operation."""

    ticket: Ticket
    rejection: Rejection | None = None
    changed: bool = True

    @property
    def ok(self) -> bool:
        return self.rejection is None


def _reject(ticket: Ticket, code: RejectionCode, message: str, **extra) -> Transition:
    return Transition(ticket=ticket, rejection=Rejection(code, message, **extra), changed=False)


def _apply(ticket: Ticket, **changes) -> Transition:
    return Transition(ticket=replace(ticket, **changes))


def admission_rejection(ticket: Ticket) -> Rejection | None:
    """Return why the ticket's payment status bars entry, if it does."""
    match ticket.status:
        case TicketStatus.PAID:
            return None
        case TicketStatus.PENDING:
            return Rejection(RejectionCode.NOT_PAID, "Ticket not paid")
        case TicketStatus.REFUNDED:
            return Rejection(RejectionCode.REFUNDED, "Ticket has been refunded")
        case TicketStatus.CANCELLED:
            return Rejection(RejectionCode.CANCELLED, "Ticket has been cancelled")


def confirm_payment(
    ticket: Ticket,
    signer: TokenSigner,
    order_id: str | None = None,
    payment_id: str | None = None,
) -> Transition:
    """pending -> paid, issuing the admission token.

    A gateway payment (``order_id`` given) only confirms tickets attached to
    that order; free tickets are confirmed without one. A repeat confirmation
    of a paid ticket succeeds without changing it, so redelivered gateway
    callbacks are harmless.
    """
    if order_id is not None and ticket.razorpay_order_id != order_id:
        return _reject(ticket, RejectionCode.ORDER_MISMATCH, "Payment is for a different order")
    if ticket.status is TicketStatus.PAID:
        return Transition(ticket=ticket, changed=False)
    if ticket.status is not TicketStatus.PENDING:
        code = (
            RejectionCode.REFUNDED
            if ticket.status is TicketStatus.REFUNDED
            else RejectionCode.CANCELLED
        )
        return _reject(
            ticket,
            code,
            f"Cannot confirm payment for a {ticket.status.value} ticket",
        )
    return _apply(
        ticket,
        status=TicketStatus.PAID,
        token=signer.derive(ticket.id, ticket.token_version),
        razorpay_payment_id=payment_id or ticket.razorpay_payment_id,
    )


def check_in(ticket: Ticket, now: datetime, event_id: str | None = None) -> Transition:
    """paid, not checked in -> paid, checked in at ``now``."""
    rejection = admission_rejection(ticket)
    if rejection is not None:
        return Transition(ticket=ticket, rejection=rejection, changed=False)
    if ticket.checked_in:
        return _reject(
            ticket,
            RejectionCode.ALREADY_CHECKED_IN,
            f"Already checked in at {ticket.checked_in_at.isoformat()}",
            checked_in_at=ticket.checked_in_at,
        )
    if event_id is not None and event_id != ticket.event_id:
        return _reject(ticket, RejectionCode.WRONG_EVENT, "Ticket is for a different event")
    return _apply(ticket, checked_in=True, checked_in_at=now)


def undo_check_in(ticket: Ticket) -> Transition:
    """Reverse a mistaken scan."""
    if not ticket.checked_in:
        return _reject(ticket, RejectionCode.NOT_CHECKED_IN, "Ticket is not checked in")
    return _apply(ticket, checked_in=False, checked_in_at=None)


def refund(ticket: Ticket) -> Transition:
    """paid, not checked in -> refunded."""
    if ticket.status is TicketStatus.REFUNDED:
        return _reject(ticket, RejectionCode.ALREADY_REFUNDED, "Ticket already refunded")
    if ticket.status is not TicketStatus.PAID:
        return _reject(ticket, RejectionCode.NOT_PAID, "Only paid tickets can be refunded")
    if ticket.checked_in:
        return _reject(ticket, RejectionCode.CHECKED_IN, "Cannot refund a checked-in ticket")
    return _apply(ticket, status=TicketStatus.REFUNDED)


def transfer(ticket: Ticket, holder: Holder, signer: TokenSigner) -> Transition:
    """Hand a paid ticket to someone else and reissue its token."""
    if ticket.status is not TicketStatus.PAID:
        return _reject(ticket, RejectionCode.NOT_PAID, "Only paid tickets can be transferred")
    if ticket.checked_in:
        return _reject(ticket, RejectionCode.CHECKED_IN, "Cannot transfer a checked-in ticket")
    version = ticket.token_version + 1
    return _apply(
        ticket,
        name=holder.name,
        email=holder.email,
        phone=holder.phone,
        token_version=version,
        token=signer.derive(ticket.id, version),
    )


def cancel(ticket: Ticket) -> Transition:
    """pending -> cancelled, for abandoned checkouts."""
    if ticket.status is not TicketStatus.PENDING:
        return _reject(ticket, RejectionCode.NOT_PENDING, "Only pending tickets can be cancelled")
    return _apply(ticket, status=TicketStatus.CANCELLED)


def order_rejection(ticket: Ticket) -> Rejection | None:
    """Return why the ticket cannot be put on a gateway order, if it cannot."""
    if ticket.status is not TicketStatus.PENDING:
        return Rejection(RejectionCode.NOT_PENDING, "Only pending tickets can be paid for")
    return None


def attach_order(ticket: Ticket, order_id: str) -> Transition:
    """Record the gateway order a pending ticket will be paid through.

    A retried checkout opens a new order, which replaces the previous one.
    """
    rejection = order_rejection(ticket)
    if rejection is not None:
        return Transition(ticket=ticket, rejection=rejection, changed=False)
    return _apply(ticket, razorpay_order_id=order_id)
