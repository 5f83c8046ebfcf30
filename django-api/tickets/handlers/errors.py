"""Maps domain errors to HTTP responses for the tickets API."""

import logging

from rest_framework import status
from rest_framework.response import Response

from events.domain.errors import (
    DomainError,
    EventNotFoundError,
    EventSoldOutError,
    InvalidEventIdError,
    StoreUnavailableError,
)
from tickets.domain.errors import (
    InvalidPaymentSignatureError,
    InvalidRefundAmountError,
    InvalidRequestError,
    InvalidTokenError,
    NotificationFailedError,
    PaymentGatewayError,
    TicketNotFoundError,
    TicketTransitionError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    InvalidRequestError: status.HTTP_400_BAD_REQUEST,
    InvalidEventIdError: status.HTTP_400_BAD_REQUEST,
    InvalidPaymentSignatureError: status.HTTP_400_BAD_REQUEST,
    InvalidRefundAmountError: status.HTTP_400_BAD_REQUEST,
    TicketTransitionError: status.HTTP_400_BAD_REQUEST,
    InvalidTokenError: status.HTTP_403_FORBIDDEN,
    TicketNotFoundError: status.HTTP_404_NOT_FOUND,
    EventNotFoundError: status.HTTP_404_NOT_FOUND,
    EventSoldOutError: status.HTTP_409_CONFLICT,
    StoreUnavailableError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    PaymentGatewayError: status.HTTP_502_BAD_GATEWAY,
    NotificationFailedError: status.HTTP_502_BAD_GATEWAY,
}


def error_response(error: DomainError) -> Response:
    code = ERROR_STATUS.get(type(error), status.HTTP_400_BAD_REQUEST)
    if code >= 500:
        logger.error("Request failed: %s", error)
    return Response(
        {"success": False, "message": error.message, "code": error.code.value},
        status=code,
    )


def first_error(errors) -> str:
    """Pull one readable message out of DRF's nested serializer errors."""
    if isinstance(errors, dict):
        for field, value in errors.items():
            if value:
                message = first_error(value)
                return message if field == "non_field_errors" else f"{field}: {message}"
    elif isinstance(errors, list):
        for item in errors:
            if item:
                return first_error(item)
    return str(errors)
