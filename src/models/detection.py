"""
Match and observation models produced by the detection strategies.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class MatchResult:
    """
    Outcome of matching one descriptor against the reference catalog.

    Attributes:
        label: Winning reference label, or None when nothing is within the
            acceptance threshold.
        distance: Smallest distance seen during the scan (inf for an empty
            catalog).
    """
    label: Optional[str]
    distance: float

    @property
    def is_match(self) -> bool:
        return self.label is not None


@dataclass(frozen=True)
class Observation:
    """
    Uniform per-tick output of every observation source.

    Attributes:
        label: Label of the note seen this tick, or None.
        confidence: 0..1 score; strategies without a natural score report 1.0
            for a tracked label.
        distance: Descriptor distance when the strategy has one.
        source: Name of the strategy that produced the observation.
    """
    label: Optional[str] = None
    confidence: float = 0.0
    distance: Optional[float] = None
    source: Optional[str] = None

    @classmethod
    def none(cls, source: Optional[str] = None) -> "Observation":
        return cls(label=None, confidence=0.0, source=source)

    @classmethod
    def from_match(
        cls,
        result: MatchResult,
        threshold: float,
        source: Optional[str] = None,
    ) -> "Observation":
        """Adapter: Convert a MatchResult, scoring confidence against the threshold."""
        confidence = 0.0
        if result.label is not None and threshold > 0:
            confidence = max(0.0, 1.0 - result.distance / threshold)
        return cls(
            label=result.label,
            confidence=confidence,
            distance=result.distance,
            source=source,
        )

    @property
    def is_present(self) -> bool:
        return self.label is not None
