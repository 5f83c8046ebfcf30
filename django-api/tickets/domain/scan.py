"""Scanned payloads.

QR codes carry ``{"ticketId": ..., "token": ...}`` as JSON. Codes printed
before that format carry ``ticketId:token`` and are still accepted.
"""

import json
from dataclasses import dataclass


@dataclass(frozen=True)
class ScanPayload:
    """What a scanner read, before it is checked against any store."""

    ticket_id: str
    token: str
    event_id: str | None = None


def parse_scan(raw: str, event_id: str | None = None) -> ScanPayload:
    """Parse QR content. Raises ValueError for anything unrecognisable."""
    raw = raw.strip()
    if raw.startswith("{"):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValueError("Malformed QR payload") from exc
        if not isinstance(data, dict):
            raise ValueError("Malformed QR payload")
        ticket_id, token = data.get("ticketId"), data.get("token")
    else:
        ticket_id, _, token = raw.rpartition(":")
    if not isinstance(ticket_id, str) or not isinstance(token, str):
        raise ValueError("Malformed QR payload")
    if not ticket_id.strip() or not token.strip():
        raise ValueError("QR payload must contain a ticket id and token")
    return ScanPayload(ticket_id=ticket_id.strip(), token=token.strip(), event_id=event_id)
