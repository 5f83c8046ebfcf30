"""Domain models for tickets.

Tickets are immutable values; every state change goes through
tickets.domain.lifecycle, which returns a new Ticket.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from tickets.domain.value_objects import TicketId


class TicketStatus(Enum):
    """Payment status of a ticket."""

    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Holder:
    """The person a ticket is issued to."""

    name: str
    email: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class Ticket:
    """Domain representation of a Ticket."""

    id: str
    event_id: str
    name: str
    email: str | None
    phone: str | None
    status: TicketStatus
    created_at: datetime
    checked_in: bool = False
    checked_in_at: datetime | None = None
    token: str | None = None
    token_version: int = 0
    razorpay_order_id: str | None = None
    razorpay_payment_id: str | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        TicketId(self.id)
        if self.checked_in != (self.checked_in_at is not None):
            raise ValueError("checked_in_at must be set exactly when checked_in is true")
        if self.checked_in and self.status is not TicketStatus.PAID:
            raise ValueError("Only paid tickets can be checked in")
        if self.token_version < 0:
            raise ValueError("token_version cannot be negative")

    @property
    def holder(self) -> Holder:
        return Holder(name=self.name, email=self.email, phone=self.phone)
