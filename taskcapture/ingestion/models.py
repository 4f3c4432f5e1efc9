"""Data models for raw input delivered by the host and the spans cut from it."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class Origin(StrEnum):
    """Where a piece of raw text came from."""

    VOICE = "voice"
    CHAT = "chat"


@dataclass(frozen=True)
class RawInput:
    """Unstructured text handed over by the host, plus its provenance.

    ``received_at`` doubles as the reference clock for relative date
    expressions unless the caller supplies an explicit one.
    """

    text: str
    origin: Origin = Origin.CHAT
    received_at: datetime = field(default_factory=datetime.now)
    sender_info: str | None = None


@dataclass(frozen=True)
class Span:
    """A contiguous region of ``RawInput.text``.

    Offsets are half-open (``start_offset`` inclusive, ``end_offset``
    exclusive) and ``text`` is always ``raw[start_offset:end_offset]``.
    """

    text: str
    start_offset: int
    end_offset: int

    def __post_init__(self) -> None:
        if not 0 <= self.start_offset <= self.end_offset:
            msg = f"Invalid span offsets: [{self.start_offset}, {self.end_offset})"
            raise ValueError(msg)

    def overlaps(self, other: Span) -> bool:
        """True when the two spans share at least one character."""
        return self.start_offset < other.end_offset and other.start_offset < self.end_offset

    @classmethod
    def of(cls, raw: str, start: int, end: int) -> Span:
        """Build the span covering ``raw[start:end]``."""
        return cls(text=raw[start:end], start_offset=start, end_offset=end)
