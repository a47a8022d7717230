import threading
import time

from models.banknote import parse_label
from models.lifecycle_event import EventType


class SharedState:
    """
    Singleton class to share state between the detection loop
    and the FastAPI web server.
    """
    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(SharedState, cls).__new__(cls)
                    cls._instance.detection_lock = threading.Lock()
                    cls._instance._init_fields()
        return cls._instance

    def _init_fields(self):
        self.label = None
        self.since = None
        self.last_event = None
        self.last_event_ts = None
        self.config = None
        self.system_stats = {
            "start_time": 0,
            "last_frame_ts": None,
            "frames_seen": 0,
            "frames_processed": 0,
            "events_emitted": 0,
            "method": None,
        }

    def reset(self):
        """Clear all state (new run or tests)."""
        with self.detection_lock:
            self._init_fields()

    def apply_event(self, event):
        """Event subscriber: mirror the tracked note."""
        now = time.time()
        with self.detection_lock:
            if event.type is EventType.DISAPPEARED:
                self.label = None
                self.since = None
            elif event.type is EventType.APPEARED or self.label != event.label:
                self.label = event.label
                self.since = event.timestamp if event.timestamp is not None else now
            self.last_event = event.type.value
            self.last_event_ts = event.timestamp if event.timestamp is not None else now

    def get_detection_copy(self):
        with self.detection_lock:
            note = parse_label(self.label)
            return {
                "present": self.label is not None,
                "label": self.label,
                "currency": note.currency if note else None,
                "amount": note.amount if note else None,
                "summary": note.summary if note else None,
                "since": self.since,
                "last_event": self.last_event,
                "last_event_ts": self.last_event_ts,
            }

    def set_config(self, config):
        with self.detection_lock:
            self.config = config

    def record_frame(self, session_stats=None):
        """Note a frame arrival and copy the session counters."""
        with self.detection_lock:
            self.system_stats["last_frame_ts"] = time.time()
            if session_stats is not None:
                self.system_stats["frames_seen"] = session_stats.frames_seen
                self.system_stats["frames_processed"] = session_stats.frames_processed
                self.system_stats["events_emitted"] = session_stats.events_emitted

    def update_system_stats(self, stats):
        with self.detection_lock:
            self.system_stats.update(stats)

    def get_system_stats_copy(self):
        """Return a shallow copy of current system stats."""
        with self.detection_lock:
            return dict(self.system_stats)

# Global instance
state = SharedState()
