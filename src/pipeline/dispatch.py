"""
Lifecycle event delivery.

Events are produced on the frame-processing thread and delivered to
subscribers (overlay, web state) on a single dispatcher thread, in the order
they were published.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, List, Optional

from models.lifecycle_event import LifecycleEvent

Subscriber = Callable[[LifecycleEvent], None]

_STOP = object()


class EventDispatcher:
    """
    FIFO event queue drained by a daemon thread.

    Example:
        dispatcher = EventDispatcher()
        dispatcher.subscribe(overlay.handle_event)
        dispatcher.start()
        dispatcher.publish(LifecycleEvent.appeared("USD_20"))
        dispatcher.stop()
    """

    def __init__(self, name: str = "event-dispatcher"):
        self.name = name
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._subscribers: List[Subscriber] = []
        self._subscribers_lock = threading.Lock()
        self._progress = threading.Condition()
        self._published = 0
        self._delivered = 0
        self._thread: Optional[threading.Thread] = None
        self._closed = False

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def subscribe(self, callback: Subscriber) -> None:
        with self._subscribers_lock:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        with self._subscribers_lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def start(self) -> None:
        if self.is_running:
            if self._closed:
                raise RuntimeError(f"Dispatcher {self.name} is still shutting down")
            return
        with self._progress:
            self._closed = False
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def publish(self, event: Optional[LifecycleEvent]) -> bool:
        """
        Queue an event for delivery. None is ignored.

        Events published after stop() are dropped until the next start().

        Returns:
            True if the event was queued.
        """
        if event is None:
            return False
        with self._progress:
            if self._closed:
                logging.warning(f"Dispatcher {self.name} is stopped, dropping {event.type.value} event")
                return False
            self._published += 1
            self._queue.put(event)
        return True

    def flush(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until every published event has been delivered.

        Returns:
            True if the queue drained, False on timeout.
        """
        with self._progress:
            return self._progress.wait_for(
                lambda: self._delivered >= self._published, timeout
            )

    def stop(self, timeout: float = 5.0) -> None:
        """Deliver what is queued, then stop the dispatcher thread."""
        with self._progress:
            if self._thread is None or self._closed:
                return
            self._closed = True
        self._queue.put(_STOP)
        self._thread.join(timeout)
        if self._thread.is_alive():
            # Keep the reference so start() cannot add a second consumer.
            logging.warning(f"Dispatcher {self.name} did not stop within {timeout}s")
            return
        self._thread = None

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                break
            self._deliver(item)

    def _deliver(self, event: LifecycleEvent) -> None:
        with self._subscribers_lock:
            subscribers = list(self._subscribers)
        try:
            for callback in subscribers:
                try:
                    callback(event)
                except Exception as e:
                    logging.warning(f"Event subscriber error ({event.type.value}): {e}")
        finally:
            with self._progress:
                self._delivered += 1
                self._progress.notify_all()
