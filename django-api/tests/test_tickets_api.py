"""Integration tests for ticket purchase, payment and staff endpoints.

Run with: pytest tests/test_tickets_api.py -v
"""

import pytest
from django.conf import settings
from django.core import mail
from rest_framework.test import APIClient

from events.models import Event
from tickets.models import Ticket
from tickets.services.payment_service import payment_signature


def verify_body(ticket_ids, order_id="order_1", payment_id="pay_1"):
    return {
        "ticketIds": ticket_ids,
        "razorpay_order_id": order_id,
        "razorpay_payment_id": payment_id,
        "razorpay_signature": payment_signature(
            order_id, payment_id, settings.RAZORPAY_KEY_SECRET
        ),
    }


@pytest.mark.django_db
class TestPurchase:
    """Tests for POST /api/tickets"""

    def test_purchase_creates_pending_tickets(self, api_client: APIClient, event_row):
        response = api_client.post(
            "/api/tickets",
            {"eventId": "event-1", "name": "Asha Rao", "email": "asha@example.com", "quantity": 2},
            format="json",
        )

        assert response.status_code == 200
        body = response.json()
        assert body["quantity"] == 2
        assert body["status"] == "pending"
        assert body["price"] == 50000
        assert body["totalPrice"] == 100000
        assert body["eventName"] == "Tech Conference 2025"
        assert Ticket.objects.filter(pk__in=body["ticketIds"], status="pending").count() == 2
        assert mail.outbox == []

    def test_purchase_with_attendees(self, api_client: APIClient, event_row):
        response = api_client.post(
            "/api/tickets",
            {
                "eventId": "event-1",
                "email": "buyer@example.com",
                "attendees": [
                    {"name": "Asha Rao"},
                    {"name": "Ravi Kumar", "email": "ravi@example.com"},
                ],
            },
            format="json",
        )

        emails = sorted(Ticket.objects.values_list("email", flat=True))
        assert response.json()["quantity"] == 2
        assert emails == ["buyer@example.com", "ravi@example.com"]

    def test_purchase_requires_name(self, api_client: APIClient, event_row):
        response = api_client.post("/api/tickets", {"eventId": "event-1"}, format="json")

        assert response.status_code == 400
        assert response.json()["message"] == "Name and event are required"

    def test_purchase_unknown_event(self, api_client: APIClient, event_row):
        response = api_client.post(
            "/api/tickets", {"eventId": "event-9", "name": "Asha Rao"}, format="json"
        )

        assert response.status_code == 404

    def test_purchase_sold_out(self, api_client: APIClient, event_row):
        Event.objects.filter(pk="event-1").update(sold_count=95)

        response = api_client.post(
            "/api/tickets",
            {"eventId": "event-1", "name": "Asha Rao", "quantity": 10},
            format="json",
        )

        assert response.status_code == 409
        assert response.json()["message"] == "Only 5 tickets left for this event"

    def test_free_event_is_confirmed_immediately(self, api_client: APIClient, event_row):
        Event.objects.filter(pk="event-1").update(price=0)

        response = api_client.post(
            "/api/tickets",
            {"eventId": "event-1", "name": "Asha Rao", "email": "asha@example.com"},
            format="json",
        )

        assert response.json()["status"] == "paid"
        assert Event.objects.get(pk="event-1").sold_count == 1
        assert len(mail.outbox) == 1


@pytest.mark.django_db
class TestPaymentVerify:
    """Tests for POST /api/payments/razorpay/verify"""

    def test_verified_payment_marks_ticket_paid(self, api_client: APIClient, ticket_row, signer):
        ticket_row("T1", status="pending", razorpay_order_id="order_1")

        response = api_client.post(
            "/api/payments/razorpay/verify", verify_body(["T1"]), format="json"
        )

        assert response.status_code == 200
        assert response.json()["ticketIds"] == ["T1"]
        row = Ticket.objects.get(pk="T1")
        assert row.status == "paid"
        assert row.token == signer.derive("T1")
        assert row.razorpay_payment_id == "pay_1"
        assert Event.objects.get(pk="event-1").sold_count == 1
        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == ["asha@example.com"]
        assert "https://tickets.example.com/ticket/T1?token=" in mail.outbox[0].body

    def test_bad_signature(self, api_client: APIClient, ticket_row):
        ticket_row("T1", status="pending", razorpay_order_id="order_1")
        body = verify_body(["T1"])
        body["razorpay_signature"] = "0" * 64

        response = api_client.post("/api/payments/razorpay/verify", body, format="json")

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_PAYMENT_SIGNATURE"
        assert Ticket.objects.get(pk="T1").status == "pending"

    def test_repeat_callback_is_accepted(self, api_client: APIClient, ticket_row):
        ticket_row("T1", status="pending", razorpay_order_id="order_1")
        api_client.post("/api/payments/razorpay/verify", verify_body(["T1"]), format="json")

        response = api_client.post(
            "/api/payments/razorpay/verify", verify_body(["T1"]), format="json"
        )

        assert response.status_code == 200
        assert Event.objects.get(pk="event-1").sold_count == 1
        assert len(mail.outbox) == 1

    def test_single_ticket_id_field(self, api_client: APIClient, ticket_row):
        ticket_row("T1", status="pending", razorpay_order_id="order_1")
        body = verify_body([])
        del body["ticketIds"]
        body["ticketId"] = "T1"

        response = api_client.post("/api/payments/razorpay/verify", body, format="json")

        assert response.json()["ticketId"] == "T1"

    def test_payment_for_another_order_is_refused(self, api_client: APIClient, ticket_row):
        ticket_row("T9", status="pending", razorpay_order_id="order_for_T9")

        response = api_client.post(
            "/api/payments/razorpay/verify",
            verify_body(["T9"], order_id="order_cheap"),
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["code"] == "TRANSITION_REJECTED"
        row = Ticket.objects.get(pk="T9")
        assert row.status == "pending"
        assert row.token is None
        assert row.razorpay_order_id == "order_for_T9"
        assert mail.outbox == []


@pytest.mark.django_db
class TestPaymentOrder:
    """Tests for POST /api/payments/razorpay/order"""

    @pytest.fixture(autouse=True)
    def fake_gateway(self, monkeypatch, gateway):
        monkeypatch.setattr("tickets.dependencies.get_payment_gateway", lambda: gateway)
        return gateway

    def test_order_is_opened_for_pending_tickets(
        self, api_client: APIClient, ticket_row, gateway
    ):
        ticket_row("T1", status="pending")
        ticket_row("T2", status="pending")

        response = api_client.post(
            "/api/payments/razorpay/order", {"ticketIds": ["T1", "T2"]}, format="json"
        )

        assert response.status_code == 200
        assert response.json() == {
            "orderId": "order_1",
            "amount": 100000,
            "currency": "INR",
            "keyId": "rzp_test_key",
            "quantity": 2,
            "ticketIds": ["T1", "T2"],
        }
        assert set(
            Ticket.objects.filter(pk__in=["T1", "T2"]).values_list("razorpay_order_id", flat=True)
        ) == {"order_1"}

    def test_paid_ticket_is_refused(self, api_client: APIClient, ticket_row, gateway):
        ticket_row("T1")

        response = api_client.post(
            "/api/payments/razorpay/order", {"ticketId": "T1"}, format="json"
        )

        assert response.status_code == 400
        assert gateway.orders == []

    def test_ticket_id_is_required(self, api_client: APIClient, event_row):
        response = api_client.post("/api/payments/razorpay/order", {}, format="json")

        assert response.status_code == 400
        assert response.json()["message"] == "Ticket ID is required"

    def test_gateway_failure_is_bad_gateway(self, api_client: APIClient, ticket_row, gateway):
        ticket_row("T1", status="pending")
        gateway.fail = True

        response = api_client.post(
            "/api/payments/razorpay/order", {"ticketId": "T1"}, format="json"
        )

        assert response.status_code == 502
        assert response.json()["code"] == "PAYMENT_GATEWAY_ERROR"
        assert Ticket.objects.get(pk="T1").razorpay_order_id is None


@pytest.mark.django_db
class TestTicketDetail:
    """Tests for GET /api/tickets/{id}"""

    def test_paid_ticket_includes_qr_code(self, api_client: APIClient, ticket_row, signer):
        ticket_row("T1")

        response = api_client.get("/api/tickets/T1")

        assert response.status_code == 200
        ticket = response.json()["ticket"]
        assert ticket["status"] == "paid"
        assert ticket["event"]["name"] == "Tech Conference 2025"
        assert ticket["token"] == signer.derive("T1")
        assert ticket["verificationUrl"] == (
            f"https://tickets.example.com/ticket/T1?token={signer.derive('T1')}"
        )
        assert ticket["qrCode"].startswith("data:image/png;base64,")

    def test_pending_ticket_has_no_token(self, api_client: APIClient, ticket_row):
        ticket_row("T1", status="pending")

        ticket = api_client.get("/api/tickets/T1").json()["ticket"]

        assert "token" not in ticket
        assert "qrCode" not in ticket

    def test_unknown_ticket(self, api_client: APIClient, event_row):
        assert api_client.get("/api/tickets/missing").status_code == 404

    def test_list_tickets_for_event(self, api_client: APIClient, ticket_row):
        ticket_row("T1")
        ticket_row("T2", status="pending")

        response = api_client.get("/api/tickets", {"eventId": "event-1"})

        assert sorted(ticket["id"] for ticket in response.json()) == ["T1", "T2"]
        assert all("token" not in ticket for ticket in response.json())


@pytest.mark.django_db
class TestStaffOperations:
    """Tests for refund, transfer and cancel."""

    def test_refund(self, api_client: APIClient, ticket_row, signer):
        ticket_row("T1")

        response = api_client.post("/api/tickets/refund", {"ticketId": "T1"}, format="json")

        assert response.status_code == 200
        assert response.json()["refundAmount"] == 50000
        assert Ticket.objects.get(pk="T1").status == "refunded"
        checkin = api_client.post(
            "/api/checkin", {"ticketId": "T1", "token": signer.derive("T1")}, format="json"
        )
        assert checkin.json()["message"] == "Ticket has been refunded"

    def test_refund_over_price(self, api_client: APIClient, ticket_row):
        ticket_row("T1")

        response = api_client.post(
            "/api/tickets/refund", {"ticketId": "T1", "refundAmount": 60000}, format="json"
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_REFUND_AMOUNT"

    def test_refund_checked_in_ticket(self, api_client: APIClient, ticket_row, now):
        ticket_row("T1", checked_in=True, checked_in_at=now)

        response = api_client.post("/api/tickets/refund", {"ticketId": "T1"}, format="json")

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot refund a checked-in ticket"

    def test_transfer_invalidates_old_token(self, api_client: APIClient, ticket_row, signer):
        ticket_row("T1")
        old_token = signer.derive("T1")

        response = api_client.post(
            "/api/tickets/transfer",
            {"ticketId": "T1", "newOwnerName": "Ravi Kumar", "newOwnerEmail": "ravi@example.com"},
            format="json",
        )

        assert response.status_code == 200
        assert response.json()["newOwner"] == {"name": "Ravi Kumar", "email": "ravi@example.com"}
        row = Ticket.objects.get(pk="T1")
        assert row.token_version == 1
        assert row.token != old_token
        assert sorted(message.to[0] for message in mail.outbox) == [
            "asha@example.com",
            "ravi@example.com",
        ]

        stale = api_client.post(
            "/api/checkin", {"ticketId": "T1", "token": old_token}, format="json"
        )
        fresh = api_client.post(
            "/api/checkin", {"ticketId": "T1", "token": row.token}, format="json"
        )
        assert stale.status_code == 403
        assert fresh.json()["attendeeName"] == "Ravi Kumar"

    def test_transfer_requires_new_owner(self, api_client: APIClient, ticket_row):
        ticket_row("T1")

        response = api_client.post("/api/tickets/transfer", {"ticketId": "T1"}, format="json")

        assert response.status_code == 400

    def test_cancel_pending(self, api_client: APIClient, ticket_row):
        ticket_row("T1", status="pending")

        response = api_client.post("/api/tickets/T1/cancel")

        assert response.json()["status"] == "cancelled"
        assert Ticket.objects.get(pk="T1").status == "cancelled"

    def test_cancel_paid_is_refused(self, api_client: APIClient, ticket_row):
        ticket_row("T1")

        assert api_client.post("/api/tickets/T1/cancel").status_code == 400


@pytest.mark.django_db
class TestResend:
    """Tests for POST /api/tickets/{id}/resend"""

    def test_paid_ticket_is_emailed_again(self, api_client: APIClient, ticket_row):
        ticket_row("T1")

        response = api_client.post("/api/tickets/T1/resend")

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Ticket resent to asha@example.com"}
        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == ["asha@example.com"]

    def test_ticket_without_email(self, api_client: APIClient, ticket_row):
        ticket_row("T1", email=None)

        response = api_client.post("/api/tickets/T1/resend")

        assert response.status_code == 400
        assert response.json()["message"] == "No email address on this ticket"
        assert mail.outbox == []

    def test_pending_ticket(self, api_client: APIClient, ticket_row):
        ticket_row("T1", status="pending")

        assert api_client.post("/api/tickets/T1/resend").status_code == 400

    def test_unknown_ticket(self, api_client: APIClient, event_row):
        assert api_client.post("/api/tickets/missing/resend").status_code == 404
