from events.handlers.views import EventDetailView, EventListView

__all__ = ["EventDetailView", "EventListView"]
