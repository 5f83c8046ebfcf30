"""Django ORM implementation of the TicketStore."""

import logging
from dataclasses import replace

from django.db import InterfaceError, OperationalError
from django.utils import timezone

from tickets import models
from tickets.domain import Ticket, TicketStatus
from tickets.stores.interfaces import (
    Found,
    Listed,
    ListResult,
    LookupResult,
    NotFound,
    Saved,
    TicketStore,
    Unavailable,
    WriteResult,
)

logger = logging.getLogger(__name__)

UNREACHABLE = (OperationalError, InterfaceError)

MUTABLE_FIELDS = (
    "name",
    "email",
    "phone",
    "checked_in",
    "checked_in_at",
    "token",
    "token_version",
    "razorpay_order_id",
    "razorpay_payment_id",
)


def to_domain(row: models.Ticket) -> Ticket:
    return Ticket(
        id=row.id,
        event_id=row.event_id,
        name=row.name,
        email=row.email or None,
        phone=row.phone or None,
        status=TicketStatus(row.status),
        checked_in=row.checked_in,
        checked_in_at=row.checked_in_at,
        token=row.token or None,
        token_version=row.token_version,
        razorpay_order_id=row.razorpay_order_id or None,
        razorpay_payment_id=row.razorpay_payment_id or None,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _unavailable(exc: Exception) -> Unavailable:
    logger.warning("Ticket database unreachable: %s", exc)
    return Unavailable(reason=type(exc).__name__)


class DjangoTicketStore(TicketStore):
    """PostgreSQL-backed ticket store using Django ORM."""

    def find_by_id(self, ticket_id: str) -> LookupResult:
        try:
            row = models.Ticket.objects.filter(pk=ticket_id).first()
        except UNREACHABLE as exc:
            return _unavailable(exc)
        return Found(to_domain(row)) if row else NotFound()

    def find_by_token(self, token: str) -> LookupResult:
        try:
            row = models.Ticket.objects.filter(token=token).first()
        except UNREACHABLE as exc:
            return _unavailable(exc)
        return Found(to_domain(row)) if row else NotFound()

    def list_tickets(self, event_id: str | None = None) -> ListResult:
        queryset = models.Ticket.objects.order_by("-created_at")
        if event_id is not None:
            queryset = queryset.filter(event_id=event_id)
        try:
            rows = list(queryset)
        except UNREACHABLE as exc:
            return _unavailable(exc)
        return Listed(tuple(to_domain(row) for row in rows))

    def add(self, ticket: Ticket) -> WriteResult:
        fields = {name: getattr(ticket, name) for name in MUTABLE_FIELDS}
        try:
            row = models.Ticket.objects.create(
                id=ticket.id,
                event_id=ticket.event_id,
                status=ticket.status.value,
                **fields,
            )
        except UNREACHABLE as exc:
            return _unavailable(exc)
        return Saved(to_domain(row))

    def save(self, ticket: Ticket) -> WriteResult:
        fields = {name: getattr(ticket, name) for name in MUTABLE_FIELDS}
        updated_at = timezone.now()
        try:
            count = models.Ticket.objects.filter(pk=ticket.id).update(
                status=ticket.status.value, updated_at=updated_at, **fields
            )
        except UNREACHABLE as exc:
            return _unavailable(exc)
        if count == 0:
            return NotFound()
        return Saved(replace(ticket, updated_at=updated_at))
