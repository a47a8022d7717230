"""
Observation layer: interchangeable detection strategies.

Each strategy implements the ObservationSource interface and reduces a frame
to an Observation(label, confidence):
- feature_print: descriptor matching against the reference catalog
- anchor: tracked/untracked reference anchors
- native: a third-party engine behind a callback adapter
"""

from .base import ObservationSource
from .feature_print import FeaturePrintSource
from .anchor import AnchorObservationSource, AnchorTracker, AnchorUpdate
from .keypoints import KeypointAnchorTracker, KeypointTarget
from .native import EngineInitError, NativeEngine, NativeEngineSource
from .factory import create_observation_source

__all__ = [
    "ObservationSource",
    "FeaturePrintSource",
    "AnchorObservationSource",
    "AnchorTracker",
    "AnchorUpdate",
    "KeypointAnchorTracker",
    "KeypointTarget",
    "EngineInitError",
    "NativeEngine",
    "NativeEngineSource",
    "create_observation_source",
]
