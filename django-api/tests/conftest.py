"""Pytest configuration and shared fixtures."""

from dataclasses import replace
from datetime import UTC, datetime, timedelta

import pytest
from django.apps import apps
from django.conf import settings
from rest_framework.test import APIClient

from events.domain import Capacity, Event, EventId, Money
from events.domain.errors import StoreUnavailableError
from events.stores.interfaces import EventStore
from tickets.domain import Ticket, TicketStatus, TokenSigner
from tickets.domain.errors import PaymentGatewayError
from tickets.gateway import GatewayOrder, PaymentGateway
from tickets.notifications import Notifier
from tickets.services.locator import TicketLocator
from tickets.stores.interfaces import TicketStore, Unavailable
from tickets.stores.memory_store import InMemoryTicketStore

NOW = datetime(2025, 2, 15, 9, 0, tzinfo=UTC)


class FakeEventStore(EventStore):
    """Dict-backed event store for service tests."""

    def __init__(self, *events: Event) -> None:
        self.events = {event.id.value: event for event in events}
        self.unavailable = False

    def _check(self) -> None:
        if self.unavailable:
            raise StoreUnavailableError()

    def list_events(self) -> list[Event]:
        self._check()
        return sorted(
            (event for event in self.events.values() if event.is_active),
            key=lambda event: event.starts_at,
        )

    def get_event(self, event_id: EventId) -> Event | None:
        self._check()
        return self.events.get(event_id.value)

    def adjust_sold_count(self, event_id: EventId, delta: int) -> None:
        self._check()
        event = self.events[event_id.value]
        self.events[event_id.value] = replace(event, sold_count=max(event.sold_count + delta, 0))


class UnavailableTicketStore(TicketStore):
    """Ticket store whose database is down."""

    def find_by_id(self, ticket_id):
        return Unavailable("OperationalError")

    def find_by_token(self, token):
        return Unavailable("OperationalError")

    def list_tickets(self, event_id=None):
        return Unavailable("OperationalError")

    def add(self, ticket):
        return Unavailable("OperationalError")

    def save(self, ticket):
        return Unavailable("OperationalError")


class RecordingNotifier(Notifier):
    """Notifier that records calls and can be told to fail."""

    def __init__(self) -> None:
        self.confirmed: list[Ticket] = []
        self.transferred: list[tuple[Ticket, str | None]] = []
        self.fail = False

    def ticket_confirmed(self, ticket, event):
        if self.fail:
            raise ConnectionError("mail server down")
        self.confirmed.append(ticket)

    def ticket_transferred(self, ticket, event, previous_email):
        if self.fail:
            raise ConnectionError("mail server down")
        self.transferred.append((ticket, previous_email))


class FakeGateway(PaymentGateway):
    """Gateway that numbers its orders and records what it was asked for."""

    key_id = "rzp_test_key"

    def __init__(self) -> None:
        self.orders: list[dict] = []
        self.fail = False

    def create_order(self, amount, receipt, notes):
        if self.fail:
            raise PaymentGatewayError()
        self.orders.append({"amount": amount, "receipt": receipt, "notes": notes})
        return GatewayOrder(id=f"order_{len(self.orders)}", amount=amount, currency="INR")


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def fallback_store() -> InMemoryTicketStore:
    """The process-wide fallback store, emptied around every test."""
    store = apps.get_app_config("tickets").fallback_store
    store.clear()
    yield store
    store.clear()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def signer() -> TokenSigner:
    return TokenSigner(settings.TICKET_SECRET_KEY)


@pytest.fixture
def make_event():
    def _make(**overrides) -> Event:
        values = dict(
            id=EventId("event-1"),
            name="Tech Conference 2025",
            description="Annual technology conference",
            venue="Convention Center, Bangalore",
            starts_at=NOW + timedelta(days=30),
            price=Money(50000),
            capacity=Capacity(100),
            sold_count=0,
            is_active=True,
            image_url=None,
            created_at=NOW,
            updated_at=NOW,
        )
        values.update(overrides)
        return Event(**values)

    return _make


@pytest.fixture
def make_ticket():
    def _make(**overrides) -> Ticket:
        values = dict(
            id="T1",
            event_id="event-1",
            name="Asha Rao",
            email="asha@example.com",
            phone=None,
            status=TicketStatus.PENDING,
            created_at=NOW,
        )
        values.update(overrides)
        return Ticket(**values)

    return _make


@pytest.fixture
def paid_ticket(make_ticket, signer) -> Ticket:
    return make_ticket(status=TicketStatus.PAID, token=signer.derive("T1"))


@pytest.fixture
def event_store(make_event) -> FakeEventStore:
    return FakeEventStore(make_event())


@pytest.fixture
def primary_store() -> InMemoryTicketStore:
    """Stands in for the database in service tests."""
    return InMemoryTicketStore()


@pytest.fixture
def local_fallback() -> InMemoryTicketStore:
    """An isolated fallback store for service tests."""
    return InMemoryTicketStore()


@pytest.fixture
def locator(primary_store, local_fallback) -> TicketLocator:
    return TicketLocator(primary_store, local_fallback)


@pytest.fixture
def unavailable_store() -> UnavailableTicketStore:
    return UnavailableTicketStore()


@pytest.fixture
def offline_locator(unavailable_store, local_fallback) -> TicketLocator:
    return TicketLocator(unavailable_store, local_fallback)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def event_row(db):
    from events.models import Event as EventModel

    return EventModel.objects.create(
        id="event-1",
        name="Tech Conference 2025",
        description="Annual technology conference",
        venue="Convention Center, Bangalore",
        starts_at=NOW + timedelta(days=30),
        price=50000,
        capacity=100,
    )


@pytest.fixture
def ticket_row(event_row, signer):
    from tickets.models import Ticket as TicketModel

    def _make(ticket_id: str = "T1", status: str = "paid", **fields):
        if status == "paid":
            fields.setdefault("token", signer.derive(ticket_id))
        return TicketModel.objects.create(
            id=ticket_id,
            event=event_row,
            name=fields.pop("name", "Asha Rao"),
            email=fields.pop("email", "asha@example.com"),
            status=status,
            **fields,
        )

    return _make
