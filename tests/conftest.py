"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import cv2
import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models.frame import FrameData  # noqa: E402


def make_note(seed, grid=(16, 8), size=(256, 128), offset=0):
    """
    Synthetic "banknote": a grid of random coloured blocks.

    Different seeds give structurally unrelated images; `offset` shifts the
    brightness of every pixel to simulate a lighting change.
    """
    rng = np.random.default_rng(seed)
    cols, rows = grid
    blocks = rng.integers(30, 220, size=(rows, cols, 3)).astype(np.int16)
    image = cv2.resize(
        (blocks + offset).clip(0, 255).astype(np.uint8),
        size,
        interpolation=cv2.INTER_NEAREST,
    )
    return image


def make_frame(image, timestamp=0.0, frame_index=0):
    return FrameData.from_numpy(image, timestamp=timestamp, frame_index=frame_index, source="test")


@pytest.fixture
def note_image():
    """Factory fixture: note_image(seed, offset=0) -> BGR uint8 array."""
    return make_note


@pytest.fixture
def blank_image():
    return np.full((128, 256, 3), 127, dtype=np.uint8)


@pytest.fixture
def reference_dir(tmp_path):
    """
    Directory of reference images:
    AUD_5, AUD_10, USD_20 (valid), EUR_50 (blank), logo (unrecognised label).
    """
    ref_dir = tmp_path / "references"
    ref_dir.mkdir()
    cv2.imwrite(str(ref_dir / "AUD_5.png"), make_note(1))
    cv2.imwrite(str(ref_dir / "AUD_10.png"), make_note(2))
    cv2.imwrite(str(ref_dir / "USD_20.png"), make_note(3))
    cv2.imwrite(str(ref_dir / "EUR_50.png"), np.full((128, 256, 3), 90, dtype=np.uint8))
    cv2.imwrite(str(ref_dir / "logo.png"), make_note(4))
    return ref_dir


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
camera:
  backend: "opencv"
  device_id: 0
  resolution: [640, 480]
  fps: 30

detection:
  method: "feature_print"
  min_sample_interval: 1.0
  match_distance_threshold: 30.0

catalog:
  reference_dir: "assets/references"

web:
  enabled: false
  port: 5000

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "camera": {
            "backend": "opencv",
            "device_id": 0,
            "resolution": [1280, 720],
            "fps": 30,
        },
        "detection": {
            "method": "feature_print",
            "min_sample_interval": 1.0,
            "match_distance_threshold": 30.0,
        },
        "catalog": {
            "reference_dir": "assets/references",
        },
        "web": {
            "enabled": False,
            "host": "0.0.0.0",
            "port": 5000,
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
