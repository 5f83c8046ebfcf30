"""Cache keys shared by the catalog views and the invalidation signals."""

EVENT_LIST_KEY = "events:list"


def event_detail_key(event_id: str) -> str:
    return f"events:{event_id}"
