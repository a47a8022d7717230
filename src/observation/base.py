"""
ObservationSource interface for interchangeable detection strategies.

Every strategy (feature-print matching, anchor tracking, a native engine)
reduces one tick to the same Observation(label, confidence), so the tracking
state machine and everything downstream are strategy-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from models.detection import Observation
from models.frame import FrameData


class ObservationSource(ABC):
    """
    Abstract base class for detection strategies.

    Lifecycle:
        1. Create instance with its collaborators (catalog, tracker, engine)
        2. Call start() before the first frame
        3. Call observe() once per accepted frame
        4. Call stop() when the detection session ends

    Can also be used as a context manager.
    """

    name = "base"

    def __init__(self):
        self._started = False

    @property
    def is_started(self) -> bool:
        return self._started

    def start(self) -> None:
        """Prepare the strategy. Subclasses may block until ready."""
        self._started = True

    @abstractmethod
    def observe(self, frame: FrameData) -> Observation:
        """
        Decide what is visible in one frame.

        Must not raise for bad frames; a frame that cannot be used is
        reported as Observation(label=None).
        """

    def stop(self) -> None:
        """Release strategy resources. Safe to call multiple times."""
        self._started = False

    def __enter__(self) -> "ObservationSource":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
