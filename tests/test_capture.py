"""
Tests for the capture layer.
"""

import time
from typing import Optional
from unittest.mock import MagicMock, patch

import cv2
import numpy as np
import pytest

from capture import (
    FrameSource,
    OpenCVSource,
    SourceUnavailableError,
    create_source_from_config,
    orient,
)
from models.config import CameraConfig
from models.frame import FrameData


class ListSource(FrameSource):
    """Serves a fixed list of images, then reports a missed frame."""

    def __init__(self, images, source_id="camera"):
        super().__init__(source_id)
        self._images = list(images)
        self._pos = 0

    def open(self) -> None:
        self._is_open = True
        self._pos = 0
        self._frame_index = 0

    def read(self) -> Optional[FrameData]:
        if not self._is_open or self._pos >= len(self._images):
            return None
        image = self._images[self._pos]
        self._pos += 1
        self._frame_index += 1
        return FrameData.from_numpy(image, timestamp=time.time(), frame_index=self._frame_index, source=self.source_id)

    def close(self) -> None:
        self._is_open = False


class TestFrameSource:
    def test_frames_until_missed_read(self):
        images = [np.zeros((48, 64, 3), dtype=np.uint8) for _ in range(3)]
        source = ListSource(images, source_id="counter-cam")
        assert not source.is_open

        with source:
            assert source.is_open
            collected = list(source.frames())

        assert not source.is_open
        assert [f.frame_index for f in collected] == [1, 2, 3]
        assert collected[0].source == "counter-cam"
        assert collected[0].size == (64, 48)

    def test_frames_requires_open(self):
        with pytest.raises(RuntimeError):
            list(ListSource([]).frames())


class TestOrient:
    def test_rotate_and_swap(self):
        frame = np.zeros((2, 4, 3), dtype=np.uint8)
        frame[0, 0] = (255, 0, 0)
        out = orient(frame, CameraConfig(rotate=90, swap_rb=True))
        assert out.shape == (4, 2, 3)
        assert tuple(out[0, 1]) == (0, 0, 255)

    def test_flip_both(self):
        frame = np.zeros((2, 2, 3), dtype=np.uint8)
        frame[0, 0] = 255
        out = orient(frame, CameraConfig(flip_horizontal=True, flip_vertical=True))
        assert out[1, 1].tolist() == [255, 255, 255]
        assert out[0, 0].tolist() == [0, 0, 0]

    def test_default_leaves_frame_alone(self):
        frame = np.arange(24, dtype=np.uint8).reshape(2, 4, 3)
        assert np.array_equal(orient(frame, CameraConfig()), frame)


class TestOpenCVSource:
    def test_invalid_rotation(self):
        with pytest.raises(ValueError):
            OpenCVSource(CameraConfig(rotate=45))

    def test_missing_file_is_unavailable(self, tmp_path):
        source = OpenCVSource(CameraConfig(device_id=str(tmp_path / "missing.mp4")), open_attempts=1)
        with pytest.raises(SourceUnavailableError):
            source.open()
        assert not source.is_open

    def test_read_before_open(self):
        assert OpenCVSource(CameraConfig()).read() is None

    def test_retries_then_gives_up(self):
        cap = MagicMock()
        cap.isOpened.return_value = False
        with patch("capture.opencv_source.cv2.VideoCapture", return_value=cap) as video_capture:
            source = OpenCVSource(CameraConfig(device_id=0), open_attempts=3, retry_delay=0.0)
            with pytest.raises(SourceUnavailableError):
                source.open()
        assert video_capture.call_count == 3
        assert cap.release.call_count == 3

    def test_reads_oriented_frames(self):
        raw = np.zeros((2, 4, 3), dtype=np.uint8)
        cap = MagicMock()
        cap.isOpened.return_value = True
        cap.read.side_effect = [(True, raw), (False, None)]
        with patch("capture.opencv_source.cv2.VideoCapture", return_value=cap):
            with OpenCVSource(CameraConfig(device_id=0, rotate=90), source_id="till") as source:
                first = source.read()
                missed = source.read()

        assert first.size == (2, 4)
        assert first.frame_index == 1
        assert first.source == "till"
        assert missed is None
        cap.set.assert_any_call(cv2.CAP_PROP_FRAME_WIDTH, 1280)
        cap.release.assert_called_once()

    def test_file_skips_camera_settings(self):
        cap = MagicMock()
        cap.isOpened.return_value = True
        with patch("capture.opencv_source.cv2.VideoCapture", return_value=cap):
            OpenCVSource(CameraConfig(device_id="notes.mp4")).open()
        cap.set.assert_not_called()


class TestCreateSource:
    def test_opencv_backend(self):
        source = create_source_from_config({"device_id": 0, "rotate": 180}, source_id="main")
        assert isinstance(source, OpenCVSource)
        assert source.source_id == "main"
        assert source.camera.rotate == 180

    def test_unsupported_backend(self):
        with pytest.raises(ValueError):
            create_source_from_config({"backend": "picamera2"})
