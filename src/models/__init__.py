"""
Typed models for the banknote reader.
"""

from .frame import FrameData
from .banknote import Banknote, parse_label, accessibility_summary
from .detection import MatchResult, Observation
from .track import TrackPhase, TrackingState
from .lifecycle_event import EventType, LifecycleEvent
from .config import (
    Config,
    CameraConfig,
    DetectionConfig,
    AnchorConfig,
    CatalogConfig,
    WebConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Labels
    "Banknote",
    "parse_label",
    "accessibility_summary",
    # Matching
    "MatchResult",
    "Observation",
    # Tracking
    "TrackPhase",
    "TrackingState",
    "EventType",
    "LifecycleEvent",
    # Config
    "Config",
    "CameraConfig",
    "DetectionConfig",
    "AnchorConfig",
    "CatalogConfig",
    "WebConfig",
]
