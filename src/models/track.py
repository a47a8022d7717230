"""
Tracking state model for the note presence state machine.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TrackPhase(str, Enum):
    """Whether a note is currently considered present."""
    IDLE = "idle"
    TRACKING = "tracking"


@dataclass(frozen=True)
class TrackingState:
    """
    Immutable snapshot of the state machine.

    Attributes:
        phase: IDLE or TRACKING.
        label: Tracked reference label; None while IDLE.
    """
    phase: TrackPhase = TrackPhase.IDLE
    label: Optional[str] = None

    @classmethod
    def idle(cls) -> "TrackingState":
        return cls(TrackPhase.IDLE, None)

    @classmethod
    def tracking(cls, label: str) -> "TrackingState":
        if not label:
            raise ValueError("Tracking state requires a label")
        return cls(TrackPhase.TRACKING, label)

    @property
    def is_tracking(self) -> bool:
        return self.phase is TrackPhase.TRACKING

    def to_dict(self) -> dict:
        return {"phase": self.phase.value, "label": self.label}
