"""
Feature print extraction.

A descriptor combines two unit-normalised parts:
- structure: a small zero-mean grayscale thumbnail of the note
- colour: a hue/saturation histogram

The weighted parts are concatenated into one unit vector. Distances are
reported in units of 50 * L2, so they range from 0 (identical) to 100
(opposite). A threshold of 30.0 accepts matches whose cosine similarity is
above 0.82.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

from .errors import NoFeaturesError

DISTANCE_SCALE = 50.0


class Descriptor:
    """Immutable fixed-length feature vector."""

    __slots__ = ("_vector",)

    def __init__(self, vector):
        values = np.array(vector, dtype=np.float32).ravel()
        values.setflags(write=False)
        self._vector = values

    @property
    def vector(self) -> np.ndarray:
        """Read-only view of the values."""
        return self._vector

    def __len__(self) -> int:
        return self._vector.shape[0]

    def distance(self, other: "Descriptor") -> float:
        """Symmetric, non-negative distance; zero for identical descriptors."""
        if len(self) != len(other):
            raise ValueError(
                f"Descriptor length mismatch: {len(self)} != {len(other)}"
            )
        diff = self._vector.astype(np.float64) - other._vector.astype(np.float64)
        return DISTANCE_SCALE * float(np.linalg.norm(diff))

    def tobytes(self) -> bytes:
        return self._vector.tobytes()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Descriptor):
            return NotImplemented
        return np.array_equal(self._vector, other._vector)

    def __hash__(self) -> int:
        return hash(self.tobytes())

    def __repr__(self) -> str:
        return f"Descriptor(len={len(self)})"


@dataclass(frozen=True)
class ExtractorConfig:
    """
    Feature extractor settings.

    Attributes:
        thumbnail_size: Structure thumbnail as (width, height).
        hue_bins: Hue histogram bins.
        saturation_bins: Saturation histogram bins.
        structure_weight: Share of the descriptor energy given to structure
            (the colour histogram gets the rest).
        min_contrast: Minimum thumbnail standard deviation (0-255 scale)
            below which the image is treated as blank.
    """
    thumbnail_size: Tuple[int, int] = (32, 16)
    hue_bins: int = 16
    saturation_bins: int = 8
    structure_weight: float = 0.7
    min_contrast: float = 2.0


class FeatureExtractor:
    """Convert decoded images into descriptors. Stateless and deterministic."""

    def __init__(self, config: Optional[ExtractorConfig] = None):
        self.config = config or ExtractorConfig()
        if not 0.0 <= self.config.structure_weight <= 1.0:
            raise ValueError("structure_weight must be between 0 and 1")

    def __call__(self, image: Optional[np.ndarray]) -> Descriptor:
        return self.extract(image)

    def extract(self, image: Optional[np.ndarray]) -> Descriptor:
        """
        Compute the descriptor for a pixel grid.

        Args:
            image: Grayscale (HxW), BGR (HxWx3) or BGRA (HxWx4) array.

        Raises:
            NoFeaturesError: If the image is missing, malformed or blank.
        """
        bgr = to_bgr(image)
        cfg = self.config

        gray = cv2.cvtColor(bgr, cv2.COLOR_BGR2GRAY)
        thumb = cv2.resize(gray, cfg.thumbnail_size, interpolation=cv2.INTER_AREA)
        thumb = thumb.astype(np.float64)
        if thumb.std() < cfg.min_contrast:
            raise NoFeaturesError("image has no usable structure")
        structure = (thumb - thumb.mean()).ravel()
        structure /= np.linalg.norm(structure)

        hsv = cv2.cvtColor(bgr, cv2.COLOR_BGR2HSV)
        hist = cv2.calcHist(
            [hsv],
            [0, 1],
            None,
            [cfg.hue_bins, cfg.saturation_bins],
            [0, 180, 0, 256],
        ).ravel().astype(np.float64)
        hist_norm = np.linalg.norm(hist)
        if hist_norm > 0:
            hist /= hist_norm

        vector = np.concatenate([
            math.sqrt(cfg.structure_weight) * structure,
            math.sqrt(1.0 - cfg.structure_weight) * hist,
        ])
        vector /= np.linalg.norm(vector)
        return Descriptor(vector)


def to_bgr(image: Optional[np.ndarray]) -> np.ndarray:
    """
    Normalise a decoded pixel grid to contiguous 3-channel uint8 BGR.

    Raises:
        NoFeaturesError: If the image is missing or cannot be interpreted.
    """
    if image is None:
        raise NoFeaturesError("no image data")
    arr = np.asarray(image)
    if arr.size == 0 or arr.ndim not in (2, 3):
        raise NoFeaturesError(f"unsupported image shape {arr.shape}")

    if arr.dtype != np.uint8:
        if not np.issubdtype(arr.dtype, np.number):
            raise NoFeaturesError(f"unsupported image dtype {arr.dtype}")
        if not np.all(np.isfinite(arr)):
            raise NoFeaturesError("image contains non-finite values")
        arr = np.clip(arr, 0, 255).astype(np.uint8)

    if arr.ndim == 3 and arr.shape[2] == 1:
        arr = arr[:, :, 0]
    arr = np.ascontiguousarray(arr)

    if arr.ndim == 2:
        return cv2.cvtColor(arr, cv2.COLOR_GRAY2BGR)
    channels = arr.shape[2]
    if channels == 3:
        return arr
    if channels == 4:
        return cv2.cvtColor(arr, cv2.COLOR_BGRA2BGR)
    raise NoFeaturesError(f"unsupported channel count {channels}")


def distance(a: Descriptor, b: Descriptor) -> float:
    return a.distance(b)
