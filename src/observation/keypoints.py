"""
ORB keypoint anchor tracker.

Matches frame keypoints against each reference image and confirms a target
with a RANSAC homography, reporting the best-supported target as a tracked
anchor.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import cv2
import numpy as np

from features.catalog import DEFAULT_PATTERNS
from features.errors import NoFeaturesError
from features.extractor import to_bgr
from models.banknote import is_recognized_label
from .anchor import AnchorTracker, AnchorUpdate


@dataclass
class KeypointTarget:
    """Keypoints and descriptors of one reference image."""
    name: str
    keypoints: List[cv2.KeyPoint]
    descriptors: np.ndarray


class KeypointAnchorTracker(AnchorTracker):
    """Track at most one reference target per frame by ORB matching."""

    def __init__(
        self,
        targets: Sequence[KeypointTarget],
        n_features: int = 1000,
        ratio_test: float = 0.75,
        min_inliers: int = 15,
    ):
        self.targets = list(targets)
        self.ratio_test = ratio_test
        self.min_inliers = min_inliers
        self._orb = cv2.ORB_create(nfeatures=n_features)
        self._matcher = cv2.BFMatcher(cv2.NORM_HAMMING, crossCheck=False)
        self._current: Optional[str] = None

    @classmethod
    def from_images(
        cls,
        images: Iterable[Tuple[str, Optional[np.ndarray]]],
        n_features: int = 1000,
        ratio_test: float = 0.75,
        min_inliers: int = 15,
    ) -> "KeypointAnchorTracker":
        orb = cv2.ORB_create(nfeatures=n_features)
        targets: List[KeypointTarget] = []
        seen = set()
        for name, image in images:
            if not is_recognized_label(name):
                logging.warning(f"Anchor target '{name}' skipped: unrecognized label")
                continue
            if name in seen:
                logging.warning(f"Anchor target '{name}' skipped: duplicate label")
                continue
            keypoints, descriptors = _detect(orb, image)
            if descriptors is None or len(keypoints) < 4:
                logging.warning(f"Anchor target '{name}' skipped: not enough keypoints")
                continue
            targets.append(KeypointTarget(name, list(keypoints), descriptors))
            seen.add(name)
        logging.info(f"Keypoint anchor tracker ready with {len(targets)} target(s)")
        return cls(targets, n_features=n_features, ratio_test=ratio_test, min_inliers=min_inliers)

    @classmethod
    def from_directory(
        cls,
        directory: Union[str, Path],
        labels: Optional[Sequence[str]] = None,
        **kwargs,
    ) -> "KeypointAnchorTracker":
        directory = Path(directory)
        if not directory.is_dir():
            raise FileNotFoundError(f"Reference directory not found: {directory}")
        paths = {}
        for pattern in DEFAULT_PATTERNS:
            for path in sorted(directory.glob(pattern)):
                paths.setdefault(path.stem, path)
        wanted = list(labels) if labels is not None else sorted(paths)
        images = [
            (name, cv2.imread(str(paths[name])) if name in paths else None)
            for name in wanted
        ]
        return cls.from_images(images, **kwargs)

    def track(self, image: np.ndarray) -> Optional[AnchorUpdate]:
        keypoints, descriptors = _detect(self._orb, image)

        best_name = None
        best_inliers = 0
        if descriptors is not None and len(keypoints) >= 4:
            for target in self.targets:
                inliers = self._count_inliers(target, keypoints, descriptors)
                if inliers > best_inliers:
                    best_inliers = inliers
                    best_name = target.name

        if best_name is not None and best_inliers >= self.min_inliers:
            if best_name != self._current:
                logging.debug(f"Anchor {best_name} tracked with {best_inliers} inliers")
            self._current = best_name
            return AnchorUpdate(best_name, True)

        if self._current is not None:
            lost = self._current
            self._current = None
            return AnchorUpdate(lost, False)
        return None

    def _count_inliers(
        self,
        target: KeypointTarget,
        scene_keypoints: Sequence[cv2.KeyPoint],
        scene_descriptors: np.ndarray,
    ) -> int:
        raw_matches = self._matcher.knnMatch(target.descriptors, scene_descriptors, k=2)
        good = [
            pair[0]
            for pair in raw_matches
            if len(pair) == 2 and pair[0].distance < self.ratio_test * pair[1].distance
        ]
        if len(good) < 4:
            return 0

        src_pts = np.float32([target.keypoints[m.queryIdx].pt for m in good]).reshape(-1, 1, 2)
        dst_pts = np.float32([scene_keypoints[m.trainIdx].pt for m in good]).reshape(-1, 1, 2)
        homography, mask = cv2.findHomography(src_pts, dst_pts, cv2.RANSAC, 5.0)
        if homography is None or mask is None:
            return 0
        return int(mask.ravel().sum())


def _detect(orb, image: Optional[np.ndarray]):
    try:
        gray = cv2.cvtColor(to_bgr(image), cv2.COLOR_BGR2GRAY)
    except NoFeaturesError:
        return [], None
    return orb.detectAndCompute(gray, None)
