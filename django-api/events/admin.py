from django.contrib import admin

from events.models import Event


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["name", "venue", "starts_at", "price", "capacity", "sold_count", "is_active"]
    list_filter = ["is_active"]
    search_fields = ["name", "venue"]
    readonly_fields = ["sold_count", "created_at", "updated_at"]
