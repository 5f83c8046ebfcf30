from django.urls import path

from tickets.handlers import (
    BulkCheckInView,
    CheckInView,
    PaymentOrderView,
    PaymentVerifyView,
    RefundView,
    TicketCancelView,
    TicketDetailView,
    TicketListView,
    TicketResendView,
    TransferView,
)

urlpatterns = [
    path("checkin", CheckInView.as_view(), name="checkin"),
    path("checkin/bulk", BulkCheckInView.as_view(), name="checkin-bulk"),
    path("tickets", TicketListView.as_view(), name="ticket-list"),
    path("tickets/refund", RefundView.as_view(), name="ticket-refund"),
    path("tickets/transfer", TransferView.as_view(), name="ticket-transfer"),
    path("tickets/<str:ticket_id>", TicketDetailView.as_view(), name="ticket-detail"),
    path("tickets/<str:ticket_id>/cancel", TicketCancelView.as_view(), name="ticket-cancel"),
    path("tickets/<str:ticket_id>/resend", TicketResendView.as_view(), name="ticket-resend"),
    path("payments/razorpay/order", PaymentOrderView.as_view(), name="payment-order"),
    path("payments/razorpay/verify", PaymentVerifyView.as_view(), name="payment-verify"),
]
