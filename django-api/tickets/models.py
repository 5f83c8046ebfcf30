"""Django ORM models (persistence layer).

These models handle database concerns. Ticket rules live in
tickets/domain/lifecycle.py.
"""

from django.db import models


class Ticket(models.Model):
    """Persistence model for tickets."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        PAID = "paid", "Paid"
        REFUNDED = "refunded", "Refunded"
        CANCELLED = "cancelled", "Cancelled"

    id = models.CharField(primary_key=True, max_length=64, editable=False)
    event = models.ForeignKey(
        "events.Event", on_delete=models.PROTECT, related_name="tickets"
    )
    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, null=True)
    phone = models.CharField(max_length=32, blank=True, null=True)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    checked_in = models.BooleanField(default=False)
    checked_in_at = models.DateTimeField(blank=True, null=True)
    token = models.CharField(max_length=64, blank=True, null=True, db_index=True)
    token_version = models.PositiveIntegerField(default=0)
    razorpay_order_id = models.CharField(max_length=64, blank=True, null=True, db_index=True)
    razorpay_payment_id = models.CharField(max_length=64, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["event", "status"], name="ticket_event_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.status})"
