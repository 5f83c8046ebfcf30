"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details

A refused check-in is still a decision, so it is answered with 200 and
``success: false``; only protocol problems use other status codes.
"""

from django.conf import settings
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from events.domain.errors import DomainError
from events.handlers.serializers import EventSerializer
from tickets import dependencies
from tickets.domain import TicketStatus
from tickets.domain.errors import InvalidRequestError
from tickets.handlers.errors import error_response, first_error
from tickets.handlers.serializers import (
    BulkCheckInRequestSerializer,
    CheckInRequestSerializer,
    PaymentVerifyRequestSerializer,
    PreviewQuerySerializer,
    PurchaseRequestSerializer,
    RefundRequestSerializer,
    TicketIdsSerializer,
    TicketSerializer,
    TicketSummarySerializer,
    TransferRequestSerializer,
)
from tickets.qr import qr_data_url, qr_payload, verification_url
from tickets.services.checkin_service import CheckInOutcome


def validate(serializer_class, data) -> dict:
    serializer = serializer_class(data=data)
    if not serializer.is_valid():
        raise InvalidRequestError(first_error(serializer.errors))
    return serializer.validated_data


def checkin_body(outcome: CheckInOutcome) -> dict:
    ticket = outcome.ticket
    body = {
        "success": outcome.success,
        "message": outcome.message,
        "ticket": TicketSummarySerializer(ticket).data,
        "attendeeName": ticket.name,
        "eventName": outcome.event_name,
        "checkedInAt": ticket.checked_in_at,
    }
    if outcome.rejection is not None:
        body["code"] = outcome.rejection.code.value
        body["checkedInAt"] = outcome.rejection.checked_in_at or ticket.checked_in_at
    return body


class CheckInView(APIView):
    """Handler for POST /api/checkin and GET /api/checkin"""

    def post(self, request: Request) -> Response:
        data = request.data
        if isinstance(data, str):
            data = {"payload": data}
        try:
            params = validate(CheckInRequestSerializer, data)
            service = dependencies.get_checkin_service()
            if params["action"] == "undo":
                outcome = service.undo(params["ticket_id"])
            else:
                outcome = service.check_in(params["scan"])
        except DomainError as error:
            return error_response(error)
        return Response(checkin_body(outcome))

    def get(self, request: Request) -> Response:
        try:
            params = validate(PreviewQuerySerializer, request.query_params)
            preview = dependencies.get_checkin_service().preview(
                ticket_id=params.get("ticket_id"), token=params["token"]
            )
        except DomainError as error:
            return error_response(error)
        ticket = preview.ticket
        return Response(
            {
                "valid": True,
                "ticketId": ticket.id,
                "attendeeName": ticket.name,
                "email": ticket.email,
                "eventName": preview.event_name,
                "eventId": ticket.event_id,
                "status": ticket.status.value,
                "checkedIn": ticket.checked_in,
                "checkedInAt": ticket.checked_in_at,
            }
        )


class BulkCheckInView(APIView):
    """Handler for POST /api/checkin/bulk"""

    def post(self, request: Request) -> Response:
        try:
            params = validate(BulkCheckInRequestSerializer, request.data)
            results = dependencies.get_checkin_service().bulk_check_in(
                params["ticket_ids"], event_id=params.get("event_id")
            )
        except DomainError as error:
            return error_response(error)
        successful = sum(1 for result in results if result.success)
        return Response(
            {
                "success": True,
                "totalProcessed": len(results),
                "successful": successful,
                "failed": len(results) - successful,
                "results": [
                    {
                        key: value
                        for key, value in (
                            ("ticketId", result.ticket_id),
                            ("success", result.success),
                            ("name", result.name),
                            ("error", result.error),
                        )
                        if value is not None
                    }
                    for result in results
                ],
            }
        )


class TicketListView(APIView):
    """Handler for POST /api/tickets and GET /api/tickets"""

    def post(self, request: Request) -> Response:
        try:
            params = validate(PurchaseRequestSerializer, request.data)
            purchase = dependencies.get_ticket_service().purchase(
                params["event_id"],
                params["holders"],
                email=params["email"],
                phone=params["phone"],
            )
        except DomainError as error:
            return error_response(error)
        ticket_ids = [ticket.id for ticket in purchase.tickets]
        return Response(
            {
                "ticketId": ticket_ids[0],
                "ticketIds": ticket_ids,
                "quantity": len(ticket_ids),
                "eventName": purchase.event.name,
                "price": purchase.unit_price.amount,
                "totalPrice": purchase.total_price.amount,
                "status": purchase.tickets[0].status.value,
            }
        )

    def get(self, request: Request) -> Response:
        try:
            tickets = dependencies.get_ticket_service().list_tickets(
                request.query_params.get("eventId") or None
            )
        except DomainError as error:
            return error_response(error)
        return Response(TicketSerializer(tickets, many=True).data)


class TicketDetailView(APIView):
    """Handler for GET /api/tickets/{ticket_id}"""

    def get(self, request: Request, ticket_id: str) -> Response:
        try:
            details = dependencies.get_ticket_service().get_ticket(ticket_id)
        except DomainError as error:
            return error_response(error)
        ticket = details.ticket
        body = dict(TicketSerializer(ticket).data)
        body["event"] = EventSerializer(details.event).data if details.event else None
        if ticket.status is TicketStatus.PAID and ticket.token:
            body["token"] = ticket.token
            body["verificationUrl"] = verification_url(ticket, settings.PUBLIC_BASE_URL)
            body["qrCode"] = qr_data_url(qr_payload(ticket))
        return Response({"ticket": body})


class TicketCancelView(APIView):
    """Handler for POST /api/tickets/{ticket_id}/cancel"""

    def post(self, request: Request, ticket_id: str) -> Response:
        try:
            ticket = dependencies.get_ticket_service().cancel(ticket_id)
        except DomainError as error:
            return error_response(error)
        return Response(
            {
                "success": True,
                "ticketId": ticket.id,
                "status": ticket.status.value,
                "message": "Ticket cancelled",
            }
        )


class RefundView(APIView):
    """Handler for POST /api/tickets/refund"""

    def post(self, request: Request) -> Response:
        try:
            params = validate(RefundRequestSerializer, request.data)
            refund = dependencies.get_ticket_service().refund(
                params["ticket_id"], amount=params.get("amount")
            )
        except DomainError as error:
            return error_response(error)
        return Response(
            {
                "success": True,
                "ticketId": refund.ticket.id,
                "refundAmount": refund.amount,
                "message": "Ticket refunded successfully",
            }
        )


class TransferView(APIView):
    """Handler for POST /api/tickets/transfer"""

    def post(self, request: Request) -> Response:
        try:
            params = validate(TransferRequestSerializer, request.data)
            ticket = dependencies.get_ticket_service().transfer(
                params["ticket_id"], params["holder"]
            )
        except DomainError as error:
            return error_response(error)
        return Response(
            {
                "success": True,
                "ticketId": ticket.id,
                "newOwner": {"name": ticket.name, "email": ticket.email},
                "message": "Ticket transferred successfully",
            }
        )


class PaymentVerifyView(APIView):
    """Handler for POST /api/payments/razorpay/verify"""

    def post(self, request: Request) -> Response:
        try:
            params = validate(PaymentVerifyRequestSerializer, request.data)
            confirmation = dependencies.get_payment_service().confirm(
                params["ticket_ids"],
                order_id=params["razorpay_order_id"],
                payment_id=params["razorpay_payment_id"],
                signature=params["razorpay_signature"],
            )
        except DomainError as error:
            return error_response(error)
        ticket_ids = [ticket.id for ticket in confirmation.tickets]
        return Response(
            {
                "success": True,
                "ticketId": ticket_ids[0],
                "ticketIds": ticket_ids,
                "message": "Payment verified successfully",
            }
        )


class PaymentOrderView(APIView):
    """Handler for POST /api/payments/razorpay/order"""

    def post(self, request: Request) -> Response:
        try:
            params = validate(TicketIdsSerializer, request.data)
            payment_order = dependencies.get_payment_service().create_order(params["ticket_ids"])
        except DomainError as error:
            return error_response(error)
        ticket_ids = [ticket.id for ticket in payment_order.tickets]
        return Response(
            {
                "orderId": payment_order.order.id,
                "amount": payment_order.order.amount,
                "currency": payment_order.order.currency,
                "keyId": settings.RAZORPAY_KEY_ID,
                "quantity": len(ticket_ids),
                "ticketIds": ticket_ids,
            }
        )


class TicketResendView(APIView):
    """Handler for POST /api/tickets/{ticket_id}/resend"""

    def post(self, request: Request, ticket_id: str) -> Response:
        try:
            ticket = dependencies.get_ticket_service().resend(ticket_id)
        except DomainError as error:
            return error_response(error)
        return Response({"success": True, "message": f"Ticket resent to {ticket.email}"})
