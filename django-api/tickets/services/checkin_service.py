"""Check-in service - turns scans into lifecycle decisions.

A scan is looked up (database first, then fallback store), its token is
verified, and the lifecycle decides whether entry is allowed. Refusals are
returned as unsuccessful outcomes, not raised: they are normal answers for
the operator at the gate.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime

from django.utils import timezone

from events.domain import EventId
from events.domain.errors import StoreUnavailableError
from events.stores.interfaces import EventStore
from tickets.domain import ScanPayload, Ticket, TokenSigner
from tickets.domain import lifecycle
from tickets.domain.errors import InvalidRequestError, InvalidTokenError, TicketNotFoundError
from tickets.domain.lifecycle import Rejection, RejectionCode
from tickets.services.locator import Located, TicketLocator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckInOutcome:
    """Result of a check-in or undo request."""

    success: bool
    message: str
    ticket: Ticket
    event_name: str | None = None
    rejection: Rejection | None = None


@dataclass(frozen=True)
class TicketPreview:
    """What a pre-scan lookup shows staff before committing a check-in."""

    ticket: Ticket
    event_name: str | None


@dataclass(frozen=True)
class BulkResult:
    """Per-ticket result of a bulk check-in."""

    ticket_id: str
    success: bool
    name: str | None = None
    error: str | None = None


class CheckInService:
    """Service for gate check-in operations."""

    def __init__(
        self,
        locator: TicketLocator,
        signer: TokenSigner,
        events: EventStore,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._locator = locator
        self._signer = signer
        self._events = events
        self._clock = clock

    def check_in(self, scan: ScanPayload) -> CheckInOutcome:
        """Admit the holder of a scanned ticket.

        Raises:
            TicketNotFoundError: If no store has the ticket.
            InvalidTokenError: If the scanned token does not verify.
            StoreUnavailableError: If no store could be queried.
        """
        located = self._locator.find(scan.ticket_id)
        ticket = located.ticket
        event_name = self._event_name(ticket.event_id)

        # Unpaid and terminal tickets are refused before the token check so
        # staff see the status; nothing can be mutated on that path.
        rejection = lifecycle.admission_rejection(ticket)
        if rejection is not None:
            return self._refused(ticket, rejection, event_name)

        self._verify(ticket, scan.token)

        transition = lifecycle.check_in(ticket, self._clock(), event_id=scan.event_id)
        if not transition.ok:
            if transition.rejection.code is RejectionCode.ALREADY_CHECKED_IN:
                logger.warning("Duplicate scan for ticket %s", ticket.id)
            return self._refused(ticket, transition.rejection, event_name)

        saved = self._locator.persist(located, transition.ticket)
        logger.info("Ticket %s checked in", saved.id)
        return CheckInOutcome(
            success=True,
            message=f"{saved.name} checked in successfully!",
            ticket=saved,
            event_name=event_name,
        )

    def preview(self, ticket_id: str | None = None, token: str | None = None) -> TicketPreview:
        """Look a ticket up and verify its token without changing it."""
        if not token:
            raise InvalidRequestError("Token is required")
        located = self._locator.find(ticket_id) if ticket_id else self._locator.find_by_token(token)
        self._verify(located.ticket, token)
        return TicketPreview(
            ticket=located.ticket,
            event_name=self._event_name(located.ticket.event_id),
        )

    def undo(self, ticket_id: str) -> CheckInOutcome:
        """Reverse a check-in made by mistake."""
        located = self._locator.find(ticket_id)
        event_name = self._event_name(located.ticket.event_id)
        transition = lifecycle.undo_check_in(located.ticket)
        if not transition.ok:
            return self._refused(located.ticket, transition.rejection, event_name)
        saved = self._locator.persist(located, transition.ticket)
        logger.info("Check-in undone for ticket %s", saved.id)
        return CheckInOutcome(
            success=True,
            message=f"Check-in undone for {saved.name}",
            ticket=saved,
            event_name=event_name,
        )

    def bulk_check_in(
        self, ticket_ids: Iterable[str], event_id: str | None = None
    ) -> list[BulkResult]:
        """Check in several tickets by id, as staff do from the attendee list.

        No token is involved; each ticket still has to pass the lifecycle.
        """
        now = self._clock()
        results = []
        for ticket_id in ticket_ids:
            try:
                located = self._locator.find(ticket_id)
            except TicketNotFoundError:
                results.append(BulkResult(ticket_id, success=False, error="Ticket not found"))
                continue
            results.append(self._bulk_one(located, now, event_id))
        return results

    def _bulk_one(self, located: Located, now: datetime, event_id: str | None) -> BulkResult:
        ticket = located.ticket
        transition = lifecycle.check_in(ticket, now, event_id=event_id)
        if not transition.ok:
            return BulkResult(
                ticket.id, success=False, name=ticket.name, error=transition.rejection.message
            )
        self._locator.persist(located, transition.ticket)
        return BulkResult(ticket.id, success=True, name=ticket.name)

    def _verify(self, ticket: Ticket, token: str) -> None:
        if not self._signer.verify(ticket.id, token, ticket.token_version):
            logger.warning("Token verification failed for ticket %s", ticket.id)
            raise InvalidTokenError(ticket.id)

    def _event_name(self, event_id: str) -> str | None:
        try:
            event = self._events.get_event(EventId(event_id))
        except StoreUnavailableError:
            logger.warning("Event store unavailable, showing ticket without event name")
            return None
        return event.name if event else None

    @staticmethod
    def _refused(ticket: Ticket, rejection: Rejection, event_name: str | None) -> CheckInOutcome:
        return CheckInOutcome(
            success=False,
            message=rejection.message,
            ticket=ticket,
            event_name=event_name,
            rejection=rejection,
        )
