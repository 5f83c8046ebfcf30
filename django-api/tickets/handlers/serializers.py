"""Request validation and response serializers for the tickets API.

Request serializers turn loosely shaped JSON into domain inputs before any
service is called. Response serializers read domain models directly.
"""

from rest_framework import serializers

from tickets.domain import Holder, ScanPayload, TicketId, parse_scan

MAX_TICKETS_PER_ORDER = 10
MAX_BULK_CHECKIN = 500


class TicketIdField(serializers.CharField):
    """A ticket id, normalised through TicketId."""

    default_error_messages = {"invalid_id": "Invalid ticket ID"}

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        try:
            return TicketId.from_string(value).value
        except ValueError:
            self.fail("invalid_id")


class CheckInRequestSerializer(serializers.Serializer):
    """Body of POST /api/checkin.

    Accepts ``{ticketId, token}``, or ``{payload}`` holding the raw QR text
    (JSON or legacy ``ticketId:token``). ``action: "undo"`` needs only
    ``ticketId``.
    """

    ticketId = TicketIdField(source="ticket_id", required=False, max_length=64)
    token = serializers.CharField(required=False, max_length=128)
    payload = serializers.CharField(required=False, max_length=1024)
    eventId = serializers.CharField(source="event_id", required=False, max_length=64)
    action = serializers.ChoiceField(choices=["checkin", "undo"], default="checkin")

    def validate(self, attrs):
        if attrs["action"] == "undo":
            if not attrs.get("ticket_id"):
                raise serializers.ValidationError("Ticket ID is required to undo a check-in")
            return attrs

        event_id = attrs.get("event_id")
        if attrs.get("payload"):
            try:
                attrs["scan"] = parse_scan(attrs["payload"], event_id=event_id)
            except ValueError as exc:
                raise serializers.ValidationError(str(exc)) from exc
        elif attrs.get("ticket_id") and attrs.get("token"):
            attrs["scan"] = ScanPayload(attrs["ticket_id"], attrs["token"], event_id)
        else:
            raise serializers.ValidationError("Ticket ID and token are required")
        return attrs


class PreviewQuerySerializer(serializers.Serializer):
    """Query string of GET /api/checkin."""

    ticketId = TicketIdField(source="ticket_id", required=False, max_length=64)
    token = serializers.CharField(max_length=128)


class BulkCheckInRequestSerializer(serializers.Serializer):
    ticketIds = serializers.ListField(
        source="ticket_ids",
        child=TicketIdField(max_length=64),
        min_length=1,
        max_length=MAX_BULK_CHECKIN,
    )
    eventId = serializers.CharField(source="event_id", required=False, max_length=64)


class AttendeeSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField(required=False, allow_null=True, allow_blank=True)
    phone = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=32)


class PurchaseRequestSerializer(serializers.Serializer):
    """Body of POST /api/tickets.

    Either ``attendees`` lists every ticket holder, or ``name`` (with
    optional ``quantity``) buys that many tickets for one person.
    """

    eventId = serializers.CharField(source="event_id", max_length=64)
    name = serializers.CharField(required=False, max_length=255)
    email = serializers.EmailField(required=False, allow_null=True, allow_blank=True)
    phone = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=32)
    quantity = serializers.IntegerField(
        required=False, min_value=1, max_value=MAX_TICKETS_PER_ORDER
    )
    attendees = AttendeeSerializer(many=True, required=False)

    def validate(self, attrs):
        attendees = attrs.get("attendees") or []
        if not attendees:
            if not attrs.get("name"):
                raise serializers.ValidationError("Name and event are required")
            attendees = [{"name": attrs["name"]}] * attrs.get("quantity", 1)
        if len(attendees) > MAX_TICKETS_PER_ORDER:
            raise serializers.ValidationError(
                f"At most {MAX_TICKETS_PER_ORDER} tickets can be bought at once"
            )
        attrs["holders"] = [
            Holder(
                name=attendee["name"],
                email=attendee.get("email") or None,
                phone=attendee.get("phone") or None,
            )
            for attendee in attendees
        ]
        attrs["email"] = attrs.get("email") or None
        attrs["phone"] = attrs.get("phone") or None
        return attrs


class RefundRequestSerializer(serializers.Serializer):
    ticketId = TicketIdField(source="ticket_id", max_length=64)
    reason = serializers.CharField(required=False, allow_blank=True, max_length=500)
    refundAmount = serializers.IntegerField(source="amount", required=False, min_value=0)


class TransferRequestSerializer(serializers.Serializer):
    ticketId = TicketIdField(source="ticket_id", max_length=64)
    newOwnerName = serializers.CharField(source="name", max_length=255)
    newOwnerEmail = serializers.EmailField(source="email")
    newOwnerPhone = serializers.CharField(
        source="phone", required=False, allow_null=True, allow_blank=True, max_length=32
    )

    def validate(self, attrs):
        attrs["holder"] = Holder(
            name=attrs["name"], email=attrs["email"], phone=attrs.get("phone") or None
        )
        return attrs


class TicketIdsSerializer(serializers.Serializer):
    """Accepts a single ``ticketId``, a ``ticketIds`` list, or both."""

    ticketId = TicketIdField(source="ticket_id", required=False, max_length=64)
    ticketIds = serializers.ListField(
        source="ticket_ids",
        child=TicketIdField(max_length=64),
        required=False,
        max_length=MAX_TICKETS_PER_ORDER,
    )

    def validate(self, attrs):
        ticket_ids = list(attrs.get("ticket_ids") or [])
        if attrs.get("ticket_id") and attrs["ticket_id"] not in ticket_ids:
            ticket_ids.insert(0, attrs["ticket_id"])
        if not ticket_ids:
            raise serializers.ValidationError("Ticket ID is required")
        attrs["ticket_ids"] = ticket_ids
        return attrs


class PaymentVerifyRequestSerializer(TicketIdsSerializer):
    """Body posted after Razorpay checkout completes."""

    razorpay_order_id = serializers.CharField(max_length=64)
    razorpay_payment_id = serializers.CharField(max_length=64)
    razorpay_signature = serializers.CharField(max_length=128)


class TicketSummarySerializer(serializers.Serializer):
    """Ticket fields echoed back to the scanner."""

    id = serializers.CharField()
    name = serializers.CharField()
    email = serializers.CharField(allow_null=True)
    eventId = serializers.CharField(source="event_id")
    checkedIn = serializers.BooleanField(source="checked_in")


class TicketSerializer(TicketSummarySerializer):
    """Ticket fields shown to staff and on the ticket page. Never includes the token."""

    phone = serializers.CharField(allow_null=True)
    status = serializers.CharField(source="status.value")
    checkedInAt = serializers.DateTimeField(source="checked_in_at", allow_null=True)
    createdAt = serializers.DateTimeField(source="created_at")
