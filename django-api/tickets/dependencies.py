"""Builds services from the process-wide collaborators held by the app config."""

from django.apps import apps
from django.conf import settings

from events.stores.django_store import DjangoEventStore
from tickets.gateway import PaymentGateway, RazorpayGateway
from tickets.notifications import EmailNotifier
from tickets.services.checkin_service import CheckInService
from tickets.services.locator import TicketLocator
from tickets.services.payment_service import PaymentService
from tickets.services.ticket_service import TicketService
from tickets.stores.django_store import DjangoTicketStore


def _config():
    return apps.get_app_config("tickets")


def get_locator() -> TicketLocator:
    return TicketLocator(DjangoTicketStore(), _config().fallback_store)


def get_checkin_service() -> CheckInService:
    return CheckInService(get_locator(), _config().token_signer, DjangoEventStore())


def get_payment_gateway() -> PaymentGateway:
    return RazorpayGateway(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET)


def get_payment_service() -> PaymentService:
    return PaymentService(
        get_locator(),
        _config().token_signer,
        DjangoEventStore(),
        EmailNotifier(),
        get_payment_gateway(),
        settings.RAZORPAY_KEY_SECRET,
    )


def get_ticket_service() -> TicketService:
    return TicketService(
        get_locator(),
        _config().token_signer,
        DjangoEventStore(),
        EmailNotifier(),
    )
