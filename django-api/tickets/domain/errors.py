"""Domain error codes for the tickets module.

These are protocol-level failures: bad input, unknown tickets, forged
tokens. A refused state change during check-in is not an error; it is a
lifecycle Rejection returned as a normal outcome.
"""

from enum import Enum

from events.domain.errors import DomainError
from tickets.domain.lifecycle import Rejection


class TicketErrorCode(Enum):
    """Domain error codes."""

    INVALID_REQUEST = "INVALID_REQUEST"
    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"
    INVALID_TOKEN = "INVALID_TOKEN"
    INVALID_PAYMENT_SIGNATURE = "INVALID_PAYMENT_SIGNATURE"
    TRANSITION_REJECTED = "TRANSITION_REJECTED"
    INVALID_REFUND_AMOUNT = "INVALID_REFUND_AMOUNT"
    PAYMENT_GATEWAY_ERROR = "PAYMENT_GATEWAY_ERROR"
    NOTIFICATION_FAILED = "NOTIFICATION_FAILED"


class InvalidRequestError(DomainError):
    """Raised when required input is missing or malformed."""

    def __init__(self, message: str) -> None:
        super().__init__(code=TicketErrorCode.INVALID_REQUEST, message=message)


class TicketNotFoundError(DomainError):
    """Raised when neither store knows the ticket."""

    def __init__(self, ticket_id: str) -> None:
        super().__init__(code=TicketErrorCode.TICKET_NOT_FOUND, message="Ticket not found")
        self.ticket_id = ticket_id


class InvalidTokenError(DomainError):
    """Raised when a scanned token does not verify against the ticket."""

    def __init__(self, ticket_id: str) -> None:
        super().__init__(code=TicketErrorCode.INVALID_TOKEN, message="Invalid ticket token")
        self.ticket_id = ticket_id


class InvalidPaymentSignatureError(DomainError):
    """Raised when a gateway callback signature does not match."""

    def __init__(self) -> None:
        super().__init__(
            code=TicketErrorCode.INVALID_PAYMENT_SIGNATURE,
            message="Invalid payment signature",
        )


class TicketTransitionError(DomainError):
    """Raised by staff and payment operations when the lifecycle refuses."""

    def __init__(self, rejection: Rejection) -> None:
        super().__init__(code=TicketErrorCode.TRANSITION_REJECTED, message=rejection.message)
        self.rejection = rejection


class InvalidRefundAmountError(DomainError):
    """Raised when a refund asks for more than the ticket cost."""

    def __init__(self, maximum: int) -> None:
        super().__init__(
            code=TicketErrorCode.INVALID_REFUND_AMOUNT,
            message=f"Refund amount cannot exceed {maximum}",
        )
        self.maximum = maximum


class PaymentGatewayError(DomainError):
    """Raised when the payment gateway refuses or cannot be reached."""

    def __init__(self) -> None:
        super().__init__(
            code=TicketErrorCode.PAYMENT_GATEWAY_ERROR,
            message="Failed to create payment order",
        )


class NotificationFailedError(DomainError):
    """Raised when a message the caller asked for explicitly cannot be sent."""

    def __init__(self) -> None:
        super().__init__(
            code=TicketErrorCode.NOTIFICATION_FAILED,
            message="Failed to send email",
        )
