from django.contrib import admin

from tickets.models import Ticket


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "event", "status", "checked_in", "checked_in_at", "created_at"]
    list_filter = ["status", "checked_in", "event"]
    search_fields = ["id", "name", "email", "phone", "razorpay_order_id"]
    # State changes go through the API so the lifecycle rules apply.
    readonly_fields = [
        "status",
        "checked_in",
        "checked_in_at",
        "token",
        "token_version",
        "razorpay_order_id",
        "razorpay_payment_id",
        "created_at",
        "updated_at",
    ]

    def has_add_permission(self, request) -> bool:
        return False
