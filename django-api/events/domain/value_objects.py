"""Domain primitives that enforce validity at creation time."""

import re
from dataclasses import dataclass
from typing import Self

_IDENTIFIER = re.compile(r"[A-Za-z0-9][A-Za-z0-9_-]{0,63}")


@dataclass(frozen=True)
class EventId:
    """Opaque identifier for an Event."""

    value: str

    def __post_init__(self) -> None:
        if not _IDENTIFIER.fullmatch(self.value):
            raise ValueError("Invalid event identifier")

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=value.strip())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Money:
    """Price in minor currency units (paise)."""

    amount: int

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def __mul__(self, quantity: int) -> "Money":
        return Money(amount=self.amount * quantity)

    @property
    def is_free(self) -> bool:
        return self.amount == 0

    def __str__(self) -> str:
        return f"{self.amount // 100}.{self.amount % 100:02d}"


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing capacity."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")
