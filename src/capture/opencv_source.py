"""
Camera or video-file capture through cv2.VideoCapture.

Frames leave this module upright and in BGR order so the feature print of a
held note matches the reference images.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import cv2
import numpy as np

from models.config import CameraConfig
from models.frame import FrameData
from .base import FrameSource, SourceUnavailableError

ROTATIONS = {
    0: None,
    90: cv2.ROTATE_90_CLOCKWISE,
    180: cv2.ROTATE_180,
    270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}


def orient(frame: np.ndarray, camera: CameraConfig) -> np.ndarray:
    """Apply the camera's mounting corrections: rotate, then flip, then fix channel order."""
    rotation = ROTATIONS[camera.rotate]
    if rotation is not None:
        frame = cv2.rotate(frame, rotation)

    if camera.flip_horizontal and camera.flip_vertical:
        frame = cv2.flip(frame, -1)
    elif camera.flip_horizontal:
        frame = cv2.flip(frame, 1)
    elif camera.flip_vertical:
        frame = cv2.flip(frame, 0)

    if camera.swap_rb:
        frame = cv2.cvtColor(frame, cv2.COLOR_RGB2BGR)
    return frame


class OpenCVSource(FrameSource):
    """
    Reads from a camera index or a video file path.

    Example:
        with OpenCVSource(CameraConfig(device_id=0)) as source:
            for frame_data in source.frames():
                session.process(frame_data)
    """

    def __init__(
        self,
        camera: CameraConfig,
        source_id: str = "camera",
        open_attempts: int = 3,
        retry_delay: float = 1.0,
    ):
        if camera.rotate not in ROTATIONS:
            raise ValueError(f"rotate must be one of {sorted(ROTATIONS)}, got {camera.rotate}")
        super().__init__(source_id)
        self.camera = camera
        self.open_attempts = max(1, open_attempts)
        self.retry_delay = retry_delay
        self._cap: Optional[cv2.VideoCapture] = None

    def open(self) -> None:
        if self._is_open:
            return

        device = self.camera.device_id
        for attempt in range(1, self.open_attempts + 1):
            cap = cv2.VideoCapture(device)
            if cap.isOpened():
                break
            cap.release()
            logging.warning(f"Camera {device} not available (attempt {attempt}/{self.open_attempts})")
            if attempt < self.open_attempts:
                time.sleep(self.retry_delay)
        else:
            raise SourceUnavailableError(f"Could not open camera {device}")

        # Size and rate requests only make sense for live cameras
        if isinstance(device, int):
            width, height = self.camera.resolution
            cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
            cap.set(cv2.CAP_PROP_FPS, self.camera.fps)

        self._cap = cap
        self._is_open = True
        self._frame_index = 0
        logging.info(f"Camera opened: source_id={self.source_id}, device={device}")

    def read(self) -> Optional[FrameData]:
        if self._cap is None:
            return None
        ok, frame = self._cap.read()
        if not ok or frame is None:
            return None

        self._frame_index += 1
        return FrameData.from_numpy(
            orient(frame, self.camera),
            timestamp=time.time(),
            frame_index=self._frame_index,
            source=self.source_id,
        )

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logging.info(f"Camera closed: source_id={self.source_id}")
        self._is_open = False
