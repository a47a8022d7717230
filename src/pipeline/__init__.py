"""
Pipeline module for the banknote reader.

The pipeline orchestrates the full processing flow:
- Frame acquisition from capture sources
- Sampling throttle
- Observation and presence tracking (via DetectionSession)
- Event delivery to the overlay and web state
"""

from .throttle import FrameThrottle
from .dispatch import EventDispatcher, Subscriber
from .session import DetectionSession, SessionStats
from .runner import (
    PipelineConfig,
    PipelineRunner,
    RunnerStats,
    create_runner_from_config,
    create_session_from_config,
)

__all__ = [
    "FrameThrottle",
    "EventDispatcher",
    "Subscriber",
    "DetectionSession",
    "SessionStats",
    "PipelineConfig",
    "PipelineRunner",
    "RunnerStats",
    "create_runner_from_config",
    "create_session_from_config",
]
