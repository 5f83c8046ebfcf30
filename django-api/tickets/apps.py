from django.apps import AppConfig
from django.conf import settings


class TicketsConfig(AppConfig):
    name = "tickets"
    verbose_name = "Tickets"

    def ready(self) -> None:
        from tickets.domain import TokenSigner
        from tickets.stores.memory_store import InMemoryTicketStore

        # A missing TICKET_SECRET_KEY stops the process here, not on first scan.
        self.token_signer = TokenSigner(settings.TICKET_SECRET_KEY)
        self.fallback_store = InMemoryTicketStore()
