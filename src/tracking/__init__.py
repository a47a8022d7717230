"""
Tracking module.

The presence state machine lives in tracking.state_machine.
"""

from .state_machine import TrackingStateMachine

__all__ = ["TrackingStateMachine"]
