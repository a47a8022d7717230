"""
Feature-print observation source: extract a descriptor from the frame and
match it against the reference catalog.
"""

from __future__ import annotations

import logging
from typing import Optional

from features.catalog import ReferenceCatalog
from features.errors import ExtractionError
from features.extractor import FeatureExtractor
from features.matcher import Matcher
from models.detection import Observation
from models.frame import FrameData
from .base import ObservationSource


class FeaturePrintSource(ObservationSource):
    """Perceptual matching against a fixed reference catalog."""

    name = "feature_print"

    def __init__(
        self,
        catalog: ReferenceCatalog,
        extractor: Optional[FeatureExtractor] = None,
        matcher: Optional[Matcher] = None,
    ):
        super().__init__()
        self.catalog = catalog
        self.extractor = extractor or FeatureExtractor()
        self.matcher = matcher or Matcher()

    def start(self) -> None:
        if len(self.catalog) == 0:
            logging.warning("Reference catalog is empty; no note can be recognised")
        super().start()

    def observe(self, frame: FrameData) -> Observation:
        try:
            descriptor = self.extractor.extract(frame.frame)
        except ExtractionError as e:
            logging.debug(f"No observation for frame {frame.frame_index}: {e}")
            return Observation.none(self.name)

        result = self.matcher.match(descriptor, self.catalog)
        logging.debug(
            f"Frame {frame.frame_index}: best={result.label} distance={result.distance:.2f}"
        )
        return Observation.from_match(result, self.matcher.threshold, source=self.name)
