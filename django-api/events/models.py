"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.db import models


def new_event_id() -> str:
    return str(uuid.uuid4())


class Event(models.Model):
    """Persistence model for events."""

    id = models.CharField(primary_key=True, max_length=64, default=new_event_id, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    venue = models.CharField(max_length=255)
    starts_at = models.DateTimeField()
    price = models.PositiveIntegerField(help_text="Price in paise")
    capacity = models.PositiveIntegerField()
    sold_count = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    image_url = models.URLField(max_length=500, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["starts_at"]
        indexes = [
            models.Index(fields=["is_active", "starts_at"], name="event_active_start_idx"),
        ]

    def __str__(self) -> str:
        return self.name
