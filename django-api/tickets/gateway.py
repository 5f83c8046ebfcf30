"""Razorpay order creation.

Checkout happens in the gateway's hosted page; the server only opens the
order, so the amount comes from the event price and not from the browser.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

import razorpay
import requests
from django.core.exceptions import ImproperlyConfigured
from razorpay.errors import BadRequestError, GatewayError, ServerError

from tickets.domain.errors import PaymentGatewayError

logger = logging.getLogger(__name__)

CURRENCY = "INR"


@dataclass(frozen=True)
class GatewayOrder:
    """An order as the gateway reports it."""

    id: str
    amount: int
    currency: str


class PaymentGateway(ABC):
    """Interface for opening payment orders."""

    key_id: str

    @abstractmethod
    def create_order(self, amount: int, receipt: str, notes: dict[str, str]) -> GatewayOrder:
        """Open an order for ``amount`` paise.

        Raises:
            PaymentGatewayError: If the gateway rejects the order or is unreachable.
        """
        ...


class RazorpayGateway(PaymentGateway):
    """Opens orders through the Razorpay Orders API."""

    def __init__(self, key_id: str | None, key_secret: str | None, client=None) -> None:
        if not key_id or not key_secret:
            raise ImproperlyConfigured(
                "RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET must be configured"
            )
        self.key_id = key_id
        self._client = client or razorpay.Client(auth=(key_id, key_secret))

    def create_order(self, amount: int, receipt: str, notes: dict[str, str]) -> GatewayOrder:
        try:
            order = self._client.order.create(
                data={
                    "amount": amount,
                    "currency": CURRENCY,
                    "receipt": receipt,
                    "notes": notes,
                }
            )
        except (BadRequestError, GatewayError, ServerError, requests.RequestException) as exc:
            logger.error("Razorpay order creation failed for receipt %s: %s", receipt, exc)
            raise PaymentGatewayError() from exc
        logger.info("Opened Razorpay order %s for %d paise", order["id"], order["amount"])
        return GatewayOrder(id=order["id"], amount=order["amount"], currency=order["currency"])
