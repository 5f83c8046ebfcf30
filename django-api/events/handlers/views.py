"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

from django.conf import settings
from django.core.cache import cache
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from events.cache_keys import EVENT_LIST_KEY, event_detail_key
from events.domain.errors import (
    DomainError,
    EventNotFoundError,
    InvalidEventIdError,
    StoreUnavailableError,
)
from events.handlers.serializers import EventSerializer
from events.services.event_service import EventService
from events.stores.django_store import DjangoEventStore

ERROR_STATUS = {
    InvalidEventIdError: status.HTTP_400_BAD_REQUEST,
    EventNotFoundError: status.HTTP_404_NOT_FOUND,
    StoreUnavailableError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_event_service() -> EventService:
    return EventService(DjangoEventStore())


def error_response(error: DomainError) -> Response:
    return Response(
        {"error": error.message, "code": error.code.value},
        status=ERROR_STATUS.get(type(error), status.HTTP_400_BAD_REQUEST),
    )


class EventListView(APIView):
    """Handler for GET /api/events"""

    def get(self, request: Request) -> Response:
        data = cache.get(EVENT_LIST_KEY)
        if data is None:
            try:
                events = get_event_service().list_events()
            except DomainError as error:
                return error_response(error)
            data = list(EventSerializer(events, many=True).data)
            cache.set(EVENT_LIST_KEY, data, settings.EVENT_CACHE_TIMEOUT)
        return Response(data)


class EventDetailView(APIView):
    """Handler for GET /api/events/{event_id}"""

    def get(self, request: Request, event_id: str) -> Response:
        key = event_detail_key(event_id)
        data = cache.get(key)
        if data is None:
            try:
                event = get_event_service().get_event(event_id)
            except DomainError as error:
                return error_response(error)
            data = dict(EventSerializer(event).data)
            cache.set(key, data, settings.EVENT_CACHE_TIMEOUT)
        return Response(data)
