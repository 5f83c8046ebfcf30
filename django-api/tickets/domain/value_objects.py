"""Domain primitives that enforce validity at creation time."""

import re
import uuid
from dataclasses import dataclass
from typing import Self

_IDENTIFIER = re.compile(r"[A-Za-z0-9][A-Za-z0-9_-]{0,63}")


def new_ticket_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class TicketId:
    """Opaque, globally unique identifier for a Ticket."""

    value: str

    def __post_init__(self) -> None:
        if not _IDENTIFIER.fullmatch(self.value):
            raise ValueError("Invalid ticket identifier")

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=value.strip())

    def __str__(self) -> str:
        return self.value
