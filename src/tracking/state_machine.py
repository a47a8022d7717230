"""
Presence tracking state machine.

Turns a noisy per-tick "label or nothing" signal into lifecycle events:

    Idle         + label L  -> Tracking(L), Appeared(L)
    Idle         + nothing  -> Idle,        no event
    Tracking(L)  + label L  -> Tracking(L), StillPresent(L)
    Tracking(L)  + label M  -> Tracking(M), Appeared(M)
    Tracking(L)  + nothing  -> Idle,        Disappeared

Both the anchor tracker's tracked/untracked flag and the feature-print
matcher's label-or-none output feed the same observe() call.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

from models.lifecycle_event import LifecycleEvent
from models.track import TrackingState


class TrackingStateMachine:
    """
    Single-note presence tracker.

    One instance belongs to one detection session; it is not thread-safe and
    must not be shared.
    """

    def __init__(self):
        self._state = TrackingState.idle()

    @property
    def state(self) -> TrackingState:
        return self._state

    @property
    def current_label(self) -> Optional[str]:
        return self._state.label

    def observe(
        self,
        result: Any,
        timestamp: Optional[float] = None,
    ) -> Tuple[TrackingState, Optional[LifecycleEvent]]:
        """
        Advance the machine by one tick.

        Args:
            result: Anything with a `label` attribute (MatchResult,
                Observation), or None for "no observation this tick". An
                empty label counts as no observation.
            timestamp: Optional tick time stamped onto the emitted event.

        Returns:
            (new_state, event) where event is None when nothing changed
            while idle.
        """
        label = getattr(result, "label", None) if result is not None else None
        if not label:
            label = None
        previous = self._state

        if label is None:
            if not previous.is_tracking:
                return previous, None
            self._state = TrackingState.idle()
            logging.info(f"Note disappeared: {previous.label}")
            return self._state, LifecycleEvent.disappeared(timestamp)

        if previous.is_tracking and previous.label == label:
            return previous, LifecycleEvent.still_present(label, timestamp)

        self._state = TrackingState.tracking(label)
        if previous.is_tracking:
            logging.info(f"Note changed: {previous.label} -> {label}")
        else:
            logging.info(f"Note appeared: {label}")
        return self._state, LifecycleEvent.appeared(label, timestamp)

    def reset(self) -> None:
        """Return to Idle without emitting an event (e.g. session restart)."""
        self._state = TrackingState.idle()
