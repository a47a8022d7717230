"""
Adapter for a third-party native tracking engine.

Native engines initialise asynchronously and report completion or failure
through callbacks invoked on their own threads. This adapter turns that into
a blocking start() plus the ordinary per-tick observe() contract, so callback
interop never leaks past this module.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Protocol

from models.detection import Observation
from models.frame import FrameData
from .base import ObservationSource


class EngineInitError(RuntimeError):
    """The native engine failed to initialise or did not report in time."""


class NativeEngine(Protocol):
    """Callback-based engine interface the adapter drives."""

    def initialize(
        self,
        on_init_done: Callable[[], None],
        on_error: Callable[[str], None],
    ) -> None:
        """Begin initialisation; must return without waiting for completion."""

    def latest_result(self) -> Optional[str]:
        """Name of the currently tracked target, or None."""

    def shutdown(self) -> None:
        """Stop the engine and release its resources."""


class NativeEngineSource(ObservationSource):
    """
    Observation source backed by a native engine.

    The engine owns its own camera pipeline; frames handed to observe() only
    act as ticks.
    """

    name = "native"

    def __init__(self, engine: NativeEngine, init_timeout: float = 10.0):
        super().__init__()
        self.engine = engine
        self.init_timeout = init_timeout
        self._ready = threading.Event()
        self._lock = threading.Lock()
        self._error: Optional[str] = None

    @property
    def last_error(self) -> Optional[str]:
        with self._lock:
            return self._error

    def start(self) -> None:
        """
        Initialise the engine and wait for its init-done callback.

        Raises:
            EngineInitError: On an error callback or when init_timeout elapses.
        """
        if self.is_started:
            return
        self._ready.clear()
        with self._lock:
            self._error = None

        self.engine.initialize(self._on_init_done, self._on_error)
        if not self._ready.wait(self.init_timeout):
            raise EngineInitError(f"Native engine did not initialise within {self.init_timeout}s")

        error = self.last_error
        if error is not None:
            raise EngineInitError(f"Native engine failed to initialise: {error}")

        logging.info("Native engine initialised")
        super().start()

    def observe(self, frame: FrameData) -> Observation:
        if not self.is_started or self.last_error is not None:
            return Observation.none(self.name)
        label = self.engine.latest_result()
        if label is None:
            return Observation.none(self.name)
        return Observation(label=label, confidence=1.0, source=self.name)

    def stop(self) -> None:
        if self.is_started:
            self.engine.shutdown()
            logging.info("Native engine stopped")
        super().stop()

    def _on_init_done(self) -> None:
        self._ready.set()

    def _on_error(self, message: str) -> None:
        message = message or "unknown error"
        with self._lock:
            self._error = message
        logging.error(f"Native engine error: {message}")
        self._ready.set()
