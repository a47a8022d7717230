"""
Detection session: one camera's worth of sampling, observation and tracking.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from models.detection import Observation
from models.frame import FrameData
from models.lifecycle_event import EventType, LifecycleEvent
from models.track import TrackingState
from observation.base import ObservationSource
from tracking.state_machine import TrackingStateMachine
from .dispatch import EventDispatcher
from .throttle import FrameThrottle


@dataclass
class SessionStats:
    """Runtime counters for a detection session."""
    frames_seen: int = 0
    frames_processed: int = 0
    events_emitted: int = 0
    events_by_type: Dict[str, int] = field(default_factory=dict)
    start_time: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, object]:
        return {
            "frames_seen": self.frames_seen,
            "frames_processed": self.frames_processed,
            "events_emitted": self.events_emitted,
            "events_by_type": dict(self.events_by_type),
            "start_time": self.start_time,
        }


class DetectionSession:
    """
    Frame -> throttle -> observation source -> state machine -> dispatcher.

    process() is called from the frame thread only. Events go to the
    dispatcher, which delivers them to subscribers on its own thread; the
    event is also returned to the caller.
    """

    def __init__(
        self,
        source: ObservationSource,
        throttle: Optional[FrameThrottle] = None,
        state_machine: Optional[TrackingStateMachine] = None,
        dispatcher: Optional[EventDispatcher] = None,
    ):
        self.source = source
        self.throttle = throttle or FrameThrottle()
        self.state_machine = state_machine or TrackingStateMachine()
        self.dispatcher = dispatcher
        self.stats = SessionStats()
        self._last_observation: Optional[Observation] = None

    @property
    def state(self) -> TrackingState:
        return self.state_machine.state

    @property
    def last_observation(self) -> Optional[Observation]:
        return self._last_observation

    def start(self) -> None:
        """Start the dispatcher and the observation source from Idle."""
        self.reset()
        if self.dispatcher is not None:
            self.dispatcher.start()
        self.source.start()
        self.stats = SessionStats()
        logging.info(f"Detection session started: method={self.source.name}")

    def stop(self) -> None:
        """
        Stop the source, then drain and stop the dispatcher.

        A note still being tracked gets a final Disappeared so subscribers
        clear it before the dispatcher stops.
        """
        self.source.stop()
        if self.state.is_tracking:
            _, event = self.state_machine.observe(None, timestamp=time.time())
            self._record(event)
            if self.dispatcher is not None:
                self.dispatcher.publish(event)
        self.reset()
        if self.dispatcher is not None:
            self.dispatcher.stop()
        logging.info(
            f"Detection session stopped: frames={self.stats.frames_seen}, "
            f"processed={self.stats.frames_processed}, events={self.stats.events_emitted}"
        )

    def reset(self) -> None:
        """Forget the tracked note and sampling history without emitting events."""
        self.throttle.reset()
        self.state_machine.reset()
        self._last_observation = None

    def process(self, frame: FrameData) -> Optional[LifecycleEvent]:
        """
        Run one frame through the session.

        Returns:
            The lifecycle event for this tick, or None when the frame was
            throttled or nothing changed while idle.
        """
        self.stats.frames_seen += 1
        if not self.throttle.should_process(frame.timestamp):
            return None

        self.stats.frames_processed += 1
        observation = self.source.observe(frame)
        self._last_observation = observation

        _, event = self.state_machine.observe(observation, timestamp=frame.timestamp)
        if event is None:
            return None

        self._record(event)
        if event.type is EventType.STILL_PRESENT:
            logging.debug(f"Note still present: {event.label}")

        if self.dispatcher is not None:
            self.dispatcher.publish(event)
        return event

    def _record(self, event: LifecycleEvent) -> None:
        self.stats.events_emitted += 1
        key = event.type.value
        self.stats.events_by_type[key] = self.stats.events_by_type.get(key, 0) + 1
