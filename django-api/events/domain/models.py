"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in events/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import datetime

from events.domain.value_objects import Capacity, EventId, Money


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    name: str
    description: str
    venue: str
    starts_at: datetime
    price: Money
    capacity: Capacity
    sold_count: int
    is_active: bool
    image_url: str | None
    created_at: datetime
    updated_at: datetime

    @property
    def remaining(self) -> int:
        return max(self.capacity.value - self.sold_count, 0)

    def can_sell(self, quantity: int) -> bool:
        return self.is_active and quantity <= self.remaining
