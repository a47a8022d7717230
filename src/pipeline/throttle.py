"""
Frame sampling throttle.
"""

from __future__ import annotations

from typing import Optional


class FrameThrottle:
    """
    Accepts at most one frame per min_interval seconds.

    The first frame after construction or reset() is always accepted; there is
    no warm-up window after the camera opens, so a note already in view is
    sampled on the first frame instead of one interval later. Frames that
    arrive early are dropped, not queued.
    """

    def __init__(self, min_interval: float = 1.0):
        if min_interval < 0:
            raise ValueError(f"min_interval must be non-negative, got {min_interval}")
        self.min_interval = float(min_interval)
        self._last_accepted: Optional[float] = None

    @property
    def last_accepted_time(self) -> Optional[float]:
        return self._last_accepted

    def should_process(self, now: float) -> bool:
        if self._last_accepted is not None and now - self._last_accepted < self.min_interval:
            return False
        self._last_accepted = now
        return True

    def reset(self) -> None:
        self._last_accepted = None
