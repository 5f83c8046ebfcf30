"""Django ORM implementation of the EventStore."""

from django.db import InterfaceError, OperationalError
from django.db.models import F

from events import models
from events.domain import Capacity, Event, EventId, Money
from events.domain.errors import StoreUnavailableError
from events.stores.interfaces import EventStore

UNREACHABLE = (OperationalError, InterfaceError)


def to_domain(row: models.Event) -> Event:
    return Event(
        id=EventId(row.id),
        name=row.name,
        description=row.description,
        venue=row.venue,
        starts_at=row.starts_at,
        price=Money(row.price),
        capacity=Capacity(row.capacity),
        sold_count=row.sold_count,
        is_active=row.is_active,
        image_url=row.image_url or None,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class DjangoEventStore(EventStore):
    """PostgreSQL-backed event store using Django ORM."""

    def list_events(self) -> list[Event]:
        try:
            rows = list(models.Event.objects.filter(is_active=True).order_by("starts_at"))
        except UNREACHABLE as exc:
            raise StoreUnavailableError() from exc
        return [to_domain(row) for row in rows]

    def get_event(self, event_id: EventId) -> Event | None:
        try:
            row = models.Event.objects.filter(pk=event_id.value).first()
        except UNREACHABLE as exc:
            raise StoreUnavailableError() from exc
        return to_domain(row) if row else None

    def adjust_sold_count(self, event_id: EventId, delta: int) -> None:
        # save() rather than queryset.update() so post_save clears the catalog cache.
        try:
            row = models.Event.objects.filter(pk=event_id.value).first()
            if row is None:
                return
            if delta < 0 and row.sold_count < -delta:
                delta = -row.sold_count
            row.sold_count = F("sold_count") + delta
            row.save(update_fields=["sold_count", "updated_at"])
        except UNREACHABLE as exc:
            raise StoreUnavailableError() from exc
