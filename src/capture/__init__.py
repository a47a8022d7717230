"""
Capture layer: where frames come from.

Detection never talks to the camera directly; it only sees FrameData.
"""

from typing import Any, Dict

from models.config import CameraConfig
from .base import FrameSource, SourceUnavailableError
from .opencv_source import OpenCVSource, orient


def create_source_from_config(camera_cfg: Dict[str, Any], source_id: str = "camera") -> FrameSource:
    """Build the frame source selected by camera.backend."""
    camera = CameraConfig.from_dict(camera_cfg)
    if camera.backend != "opencv":
        raise ValueError(f"Unsupported camera backend: {camera.backend}")
    return OpenCVSource(camera, source_id=source_id)


__all__ = [
    "FrameSource",
    "SourceUnavailableError",
    "OpenCVSource",
    "orient",
    "create_source_from_config",
]
