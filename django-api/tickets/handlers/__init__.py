from tickets.handlers.views import (
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

__all__ = [
    "BulkCheckInView",
    "CheckInView",
    "PaymentOrderView",
    "PaymentVerifyView",
    "RefundView",
    "TicketCancelView",
    "TicketDetailView",
    "TicketListView",
    "TicketResendView",
    "TransferView",
]
