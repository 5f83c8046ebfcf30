"""QR codes for admission tickets."""

import base64
import io
import json
from urllib.parse import urlencode

import qrcode

from tickets.domain import Ticket


def qr_payload(ticket: Ticket) -> str:
    """Content encoded in the QR code, as read back by the scanner."""
    return json.dumps({"ticketId": ticket.id, "token": ticket.token}, separators=(",", ":"))


def verification_url(ticket: Ticket, base_url: str) -> str:
    query = urlencode({"token": ticket.token})
    return f"{base_url.rstrip('/')}/ticket/{ticket.id}?{query}"


def qr_data_url(data: str, box_size: int = 8, border: int = 2) -> str:
    """Render ``data`` as a PNG QR code and return it as a data URL."""
    qr = qrcode.QRCode(version=None, box_size=box_size, border=border)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buffered = io.BytesIO()
    img.save(buffered, format="PNG")
    encoded = base64.b64encode(buffered.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"
