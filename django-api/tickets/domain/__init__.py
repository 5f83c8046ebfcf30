from tickets.domain.models import Holder, Ticket, TicketStatus
from tickets.domain.scan import ScanPayload, parse_scan
from tickets.domain.tokens import TokenSigner
from tickets.domain.value_objects import TicketId, new_ticket_id

__all__ = [
    "Holder",
    "Ticket",
    "TicketStatus",
    "ScanPayload",
    "parse_scan",
    "TokenSigner",
    "TicketId",
    "new_ticket_id",
]
