"""Unit tests for CheckInService.

Service tests use in-memory stores; no database is needed.
Run with: pytest tests/test_checkin_service.py -v
"""

from datetime import timedelta

import pytest

from events.domain.errors import StoreUnavailableError
from tickets.domain import ScanPayload, TicketStatus
from tickets.domain.errors import InvalidRequestError, InvalidTokenError, TicketNotFoundError
from tickets.domain.lifecycle import RejectionCode
from tickets.services.checkin_service import CheckInService
from tickets.services.locator import TicketLocator


@pytest.fixture
def service(locator, signer, event_store, now):
    return CheckInService(locator, signer, event_store, clock=lambda: now)


@pytest.fixture
def seeded(primary_store, make_ticket, signer):
    """T1 and T3 paid, T2 pending, as at the gate on event day."""
    primary_store.add(make_ticket(id="T1", status=TicketStatus.PAID, token=signer.derive("T1")))
    primary_store.add(make_ticket(id="T2", name="Vikram Shah"))
    primary_store.add(
        make_ticket(id="T3", name="Meera Iyer", status=TicketStatus.PAID, token=signer.derive("T3"))
    )
    return primary_store


class TestCheckIn:
    """Tests for CheckInService.check_in()."""

    def test_valid_scan_checks_in(self, service, seeded, signer, now):
        outcome = service.check_in(ScanPayload("T1", signer.derive("T1")))

        assert outcome.success
        assert outcome.message == "Asha Rao checked in successfully!"
        assert outcome.event_name == "Tech Conference 2025"
        assert outcome.ticket.checked_in_at == now
        assert seeded.get("T1").checked_in

    def test_repeat_scan_reports_original_time(self, service, seeded, signer, now):
        scan = ScanPayload("T1", signer.derive("T1"))
        service.check_in(scan)
        service._clock = lambda: now + timedelta(minutes=10)

        outcome = service.check_in(scan)

        assert not outcome.success
        assert outcome.rejection.code is RejectionCode.ALREADY_CHECKED_IN
        assert outcome.rejection.checked_in_at == now
        assert "Already checked in" in outcome.message
        assert seeded.get("T1").checked_in_at == now

    def test_pending_ticket_is_refused(self, service, seeded):
        outcome = service.check_in(ScanPayload("T2", "anything"))

        assert not outcome.success
        assert outcome.message == "Ticket not paid"
        assert not seeded.get("T2").checked_in

    def test_wrong_token_is_rejected(self, service, seeded):
        before = seeded.get("T3")

        with pytest.raises(InvalidTokenError):
            service.check_in(ScanPayload("T3", "f" * 64))

        assert seeded.get("T3") == before

    def test_unknown_ticket(self, service, seeded):
        with pytest.raises(TicketNotFoundError) as exc_info:
            service.check_in(ScanPayload("does-not-exist", "f" * 64))

        assert exc_info.value.message == "Ticket not found"

    def test_other_ticket_token_is_rejected(self, service, seeded, signer):
        with pytest.raises(InvalidTokenError):
            service.check_in(ScanPayload("T3", signer.derive("T1")))

    def test_duplicate_is_not_revealed_without_valid_token(self, service, seeded, signer):
        service.check_in(ScanPayload("T1", signer.derive("T1")))

        with pytest.raises(InvalidTokenError):
            service.check_in(ScanPayload("T1", "0" * 64))

    def test_refunded_ticket_is_refused(self, service, primary_store, make_ticket, signer):
        primary_store.add(make_ticket(status=TicketStatus.REFUNDED, token=signer.derive("T1")))

        outcome = service.check_in(ScanPayload("T1", signer.derive("T1")))

        assert outcome.rejection.code is RejectionCode.REFUNDED

    def test_wrong_event_is_refused(self, service, seeded, signer):
        outcome = service.check_in(ScanPayload("T1", signer.derive("T1"), event_id="event-2"))

        assert outcome.rejection.code is RejectionCode.WRONG_EVENT
        assert not seeded.get("T1").checked_in

    def test_event_store_outage_does_not_block_entry(self, service, seeded, signer, event_store):
        event_store.unavailable = True

        outcome = service.check_in(ScanPayload("T1", signer.derive("T1")))

        assert outcome.success
        assert outcome.event_name is None


class TestFallback:
    """Check-in while the database is unreachable."""

    def test_fallback_ticket_checks_in(
        self, offline_locator, local_fallback, paid_ticket, signer, event_store, now
    ):
        local_fallback.add(paid_ticket)
        service = CheckInService(offline_locator, signer, event_store, clock=lambda: now)

        outcome = service.check_in(ScanPayload("T1", paid_ticket.token))

        assert outcome.success
        assert local_fallback.get("T1").checked_in_at == now

    def test_fallback_serves_tickets_unknown_to_database(
        self, service, local_fallback, paid_ticket
    ):
        local_fallback.add(paid_ticket)

        assert service.check_in(ScanPayload("T1", paid_ticket.token)).success

    def test_both_stores_unavailable(self, unavailable_store, signer, event_store):
        locator = TicketLocator(unavailable_store, unavailable_store)
        service = CheckInService(locator, signer, event_store)

        with pytest.raises(StoreUnavailableError):
            service.check_in(ScanPayload("T1", "f" * 64))


class TestUndo:
    """Tests for CheckInService.undo()."""

    def test_undo_then_check_in_again(self, service, seeded, signer):
        scan = ScanPayload("T1", signer.derive("T1"))
        service.check_in(scan)

        outcome = service.undo("T1")

        assert outcome.success
        assert outcome.message == "Check-in undone for Asha Rao"
        assert not seeded.get("T1").checked_in
        assert seeded.get("T1").checked_in_at is None
        assert service.check_in(scan).success

    def test_undo_without_check_in_is_refused(self, service, seeded):
        outcome = service.undo("T1")

        assert not outcome.success
        assert outcome.rejection.code is RejectionCode.NOT_CHECKED_IN


class TestPreview:
    """Tests for CheckInService.preview()."""

    def test_preview_does_not_check_in(self, service, seeded, signer):
        preview = service.preview(ticket_id="T1", token=signer.derive("T1"))

        assert preview.ticket.id == "T1"
        assert preview.event_name == "Tech Conference 2025"
        assert not seeded.get("T1").checked_in

    def test_preview_by_token_only(self, service, seeded, signer):
        assert service.preview(token=signer.derive("T3")).ticket.id == "T3"

    def test_preview_requires_token(self, service, seeded):
        with pytest.raises(InvalidRequestError):
            service.preview(ticket_id="T1")

    def test_preview_rejects_bad_token(self, service, seeded):
        with pytest.raises(InvalidTokenError):
            service.preview(ticket_id="T1", token="f" * 64)


class TestBulkCheckIn:
    """Tests for CheckInService.bulk_check_in()."""

    def test_mixed_results(self, service, seeded):
        results = service.bulk_check_in(["T1", "T2", "missing"])

        assert [(result.ticket_id, result.success) for result in results] == [
            ("T1", True),
            ("T2", False),
            ("missing", False),
        ]
        assert results[1].error == "Ticket not paid"
        assert results[2].error == "Ticket not found"
        assert seeded.get("T1").checked_in

    def test_already_checked_in_is_reported(self, service, seeded):
        service.bulk_check_in(["T1"])

        [result] = service.bulk_check_in(["T1"])

        assert not result.success
        assert result.error.startswith("Already checked in")
