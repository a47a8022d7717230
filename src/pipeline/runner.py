"""
Main processing loop for the banknote reader.

Pulls frames from a FrameSource, feeds them to a DetectionSession, and keeps
the optional preview window and web status in sync.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import cv2

from capture import FrameSource, create_source_from_config
from models.frame import FrameData
from models.lifecycle_event import LifecycleEvent
from observation.base import ObservationSource
from .dispatch import EventDispatcher
from .session import DetectionSession
from .throttle import FrameThrottle


@dataclass
class PipelineConfig:
    """
    Configuration for the runner loop.

    Attributes:
        max_consecutive_failures: Max frame read failures before stopping.
        stats_log_interval: Seconds between status log messages.
        retry_delay: Seconds to wait after a failed frame read.
        display: Show a cv2 preview window with the amount overlay.
    """
    max_consecutive_failures: int = 10
    stats_log_interval: float = 60.0
    retry_delay: float = 0.5
    display: bool = False


@dataclass
class RunnerStats:
    """Loop-level statistics (session counters live on the session)."""
    start_time: float = field(default_factory=time.time)
    last_stats_log_time: float = field(default_factory=time.time)
    consecutive_failures: int = 0
    read_failures: int = 0


class PipelineRunner:
    """
    Drives a detection session from a frame source.

    Example:
        source = OpenCVSource(CameraConfig(device_id=0))
        session = DetectionSession(FeaturePrintSource(catalog))
        PipelineRunner(source, session, PipelineConfig()).run()
    """

    def __init__(
        self,
        frame_source: FrameSource,
        session: DetectionSession,
        config: Optional[PipelineConfig] = None,
        renderer: Optional[Callable[[Any], Any]] = None,
    ):
        self.frame_source = frame_source
        self.session = session
        self.config = config or PipelineConfig()
        self.renderer = renderer
        self.stats = RunnerStats()
        self._running = False
        self._callbacks: List[Callable[[FrameData, Optional[LifecycleEvent]], None]] = []

    @property
    def is_running(self) -> bool:
        return self._running

    def add_callback(self, callback: Callable[[FrameData, Optional[LifecycleEvent]], None]) -> None:
        """
        Add a callback invoked after each frame with (frame_data, event).

        Callbacks run on the frame thread; keep them short.
        """
        self._callbacks.append(callback)

    def run(self) -> None:
        """
        Run until stopped, interrupted, or the source keeps failing.

        Raises:
            SourceUnavailableError: If the frame source cannot be opened.
        """
        self._running = True
        self.stats = RunnerStats()

        self.frame_source.open()
        try:
            self.session.start()
            logging.info(f"Pipeline started: source={self.frame_source.source_id}")

            while self._running:
                frame_data = self.frame_source.read()

                if frame_data is None:
                    if not self._handle_read_failure():
                        break
                    continue

                self.stats.consecutive_failures = 0
                event = self.session.process(frame_data)

                for callback in self._callbacks:
                    try:
                        callback(frame_data, event)
                    except Exception as e:
                        logging.warning(f"Callback error: {e}")

                if self.config.display:
                    if not self._handle_display(frame_data):
                        break

                self._handle_periodic_tasks()

        except KeyboardInterrupt:
            logging.info("Pipeline interrupted by user")
        finally:
            self._cleanup()

    def stop(self) -> None:
        """Signal the loop to stop after the current frame."""
        self._running = False

    def _handle_read_failure(self) -> bool:
        """Count a failed read. Returns False once the failure budget is spent."""
        self.stats.consecutive_failures += 1
        self.stats.read_failures += 1
        if self.stats.consecutive_failures >= self.config.max_consecutive_failures:
            logging.error(
                f"Too many consecutive failures ({self.stats.consecutive_failures}), stopping"
            )
            return False
        logging.warning(
            f"Frame read failed ({self.stats.consecutive_failures}/"
            f"{self.config.max_consecutive_failures})"
        )
        time.sleep(self.config.retry_delay)
        return True

    def _handle_display(self, frame_data: FrameData) -> bool:
        """
        Show the preview window.

        Returns False if the user pressed 'q' to quit.
        """
        frame = frame_data.frame
        if self.renderer is not None:
            frame = self.renderer(frame)
        cv2.imshow("Banknote Reader", frame)
        key = cv2.waitKey(1) & 0xFF
        return key != ord('q')

    def _handle_periodic_tasks(self) -> None:
        now = time.time()
        if now - self.stats.last_stats_log_time >= self.config.stats_log_interval:
            s = self.session.stats
            logging.info(
                f"Pipeline stats: frames={s.frames_seen}, processed={s.frames_processed}, "
                f"events={s.events_emitted}, state={self.session.state.phase.value}"
            )
            self.stats.last_stats_log_time = now

    def _cleanup(self) -> None:
        self._running = False

        try:
            self.frame_source.close()
        except Exception as e:
            logging.warning(f"Error closing source: {e}")

        self.session.stop()

        if self.config.display:
            cv2.destroyAllWindows()

        logging.info("Pipeline stopped")


def create_session_from_config(
    config: Dict[str, Any],
    source: ObservationSource,
    dispatcher: Optional[EventDispatcher] = None,
) -> DetectionSession:
    """Build a DetectionSession using detection.min_sample_interval."""
    detection_cfg = config.get("detection", {}) or {}
    throttle = FrameThrottle(float(detection_cfg.get("min_sample_interval", 1.0)))
    return DetectionSession(source, throttle=throttle, dispatcher=dispatcher)


def create_runner_from_config(
    config: Dict[str, Any],
    session: DetectionSession,
    display: bool = False,
    renderer: Optional[Callable[[Any], Any]] = None,
) -> PipelineRunner:
    """
    Factory function to create a PipelineRunner from the config dict.

    Args:
        config: Full application config dict.
        session: Session that consumes the frames.
        display: Enable the preview window.
        renderer: Draws the overlay onto preview frames.
    """
    camera_cfg = config.get("camera", {}) or {}
    frame_source = create_source_from_config(camera_cfg, source_id="main-camera")
    return PipelineRunner(
        frame_source,
        session,
        PipelineConfig(display=display),
        renderer=renderer,
    )
