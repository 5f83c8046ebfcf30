"""Admission tokens.

A token is the hex HMAC-SHA256 of the ticket id under the server secret, so
it can be recomputed from the ticket instead of being trusted from storage.
Transfers bump the ticket's token version, which is mixed into the message
and makes previously printed codes stop verifying.
"""

import hashlib
import hmac
import re

from django.core.exceptions import ImproperlyConfigured

_HEX_DIGEST = re.compile(r"[0-9a-f]{64}")
VERSION_SEPARATOR = "#"


class TokenSigner:
    """Derives and verifies admission tokens with a process-wide secret."""

    def __init__(self, secret: str | None) -> None:
        if not secret:
            raise ImproperlyConfigured("TICKET_SECRET_KEY is not configured")
        self._key = secret.encode("utf-8")

    def derive(self, ticket_id: str, version: int = 0) -> str:
        """Raises ValueError for ids containing the version separator."""
        if VERSION_SEPARATOR in ticket_id:
            raise ValueError("Ticket id cannot contain '#'")
        message = ticket_id if version == 0 else f"{ticket_id}{VERSION_SEPARATOR}{version}"
        return hmac.new(self._key, message.encode("utf-8"), hashlib.sha256).hexdigest()

    def verify(self, ticket_id: str, candidate: object, version: int = 0) -> bool:
        """Constant-time check of a scanned token. Never raises."""
        if not isinstance(candidate, str):
            return False
        candidate = candidate.strip().lower()
        if not _HEX_DIGEST.fullmatch(candidate) or VERSION_SEPARATOR in ticket_id:
            return False
        return hmac.compare_digest(self.derive(ticket_id, version), candidate)
