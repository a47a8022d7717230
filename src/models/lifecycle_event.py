"""
LifecycleEvent model for note presence transitions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .banknote import Banknote, parse_label


class EventType(str, Enum):
    APPEARED = "appeared"
    STILL_PRESENT = "still_present"
    DISAPPEARED = "disappeared"


@dataclass(frozen=True)
class LifecycleEvent:
    """
    A transition emitted by the tracking state machine.

    Events are produced and handed to subscribers immediately; the core never
    stores them.

    Attributes:
        type: APPEARED, STILL_PRESENT or DISAPPEARED.
        label: Reference label for APPEARED/STILL_PRESENT, None for DISAPPEARED.
        timestamp: Time of the observation that produced the event, if known.
    """
    type: EventType
    label: Optional[str] = None
    timestamp: Optional[float] = None

    @classmethod
    def appeared(cls, label: str, timestamp: Optional[float] = None) -> "LifecycleEvent":
        return cls(EventType.APPEARED, label, timestamp)

    @classmethod
    def still_present(cls, label: str, timestamp: Optional[float] = None) -> "LifecycleEvent":
        return cls(EventType.STILL_PRESENT, label, timestamp)

    @classmethod
    def disappeared(cls, timestamp: Optional[float] = None) -> "LifecycleEvent":
        return cls(EventType.DISAPPEARED, None, timestamp)

    @property
    def is_present(self) -> bool:
        """True for APPEARED and STILL_PRESENT."""
        return self.type is not EventType.DISAPPEARED

    @property
    def banknote(self) -> Optional[Banknote]:
        return parse_label(self.label)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        note = self.banknote
        return {
            "type": self.type.value,
            "label": self.label,
            "timestamp": self.timestamp,
            "summary": note.summary if note else None,
        }
