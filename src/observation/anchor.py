"""
Anchor observation source.

Consumes tracked/untracked anchor updates, either pushed by an external AR
engine through on_anchor_update() or produced per frame by an AnchorTracker,
and reports the tracked anchor's name as the tick's label.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import numpy as np

from models.detection import Observation
from models.frame import FrameData
from .base import ObservationSource


@dataclass(frozen=True)
class AnchorUpdate:
    """Tracking status of one reference anchor."""
    name: str
    is_tracked: bool


class AnchorTracker(ABC):
    """Produces anchor updates from frames."""

    @abstractmethod
    def track(self, image: np.ndarray) -> Optional[AnchorUpdate]:
        """Return an update when the tracking status changed or was confirmed."""


class AnchorObservationSource(ObservationSource):
    """
    Maps anchor updates onto observations.

    Only one anchor is tracked at a time. An untracked update for an anchor
    other than the tracked one is ignored.
    """

    name = "anchor"

    def __init__(self, tracker: Optional[AnchorTracker] = None):
        super().__init__()
        self.tracker = tracker
        self._lock = threading.Lock()
        self._tracked: Optional[str] = None

    @property
    def tracked_anchor(self) -> Optional[str]:
        with self._lock:
            return self._tracked

    def on_anchor_update(self, name: str, is_tracked: bool) -> None:
        """Entry point for engines that report anchors from their own thread."""
        self._apply(AnchorUpdate(name, is_tracked))

    def observe(self, frame: FrameData) -> Observation:
        if self.tracker is not None:
            update = self.tracker.track(frame.frame)
            if update is not None:
                self._apply(update)

        label = self.tracked_anchor
        if label is None:
            return Observation.none(self.name)
        return Observation(label=label, confidence=1.0, source=self.name)

    def stop(self) -> None:
        with self._lock:
            self._tracked = None
        super().stop()

    def _apply(self, update: AnchorUpdate) -> None:
        with self._lock:
            if update.is_tracked:
                self._tracked = update.name or None
            elif self._tracked == update.name:
                self._tracked = None
            else:
                logging.debug(f"Ignoring untracked update for inactive anchor {update.name}")
