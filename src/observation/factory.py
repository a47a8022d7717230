"""
Strategy selection for detection sessions.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from features.catalog import ReferenceCatalog
from features.extractor import FeatureExtractor
from features.matcher import DEFAULT_MATCH_THRESHOLD, Matcher
from .anchor import AnchorObservationSource, AnchorTracker
from .base import ObservationSource
from .feature_print import FeaturePrintSource
from .native import NativeEngine, NativeEngineSource


def create_observation_source(
    detection_cfg: Dict[str, Any],
    catalog: Optional[ReferenceCatalog] = None,
    anchor_tracker: Optional[AnchorTracker] = None,
    engine: Optional[NativeEngine] = None,
    extractor: Optional[FeatureExtractor] = None,
) -> ObservationSource:
    """
    Build the strategy named by detection.method.

    Args:
        detection_cfg: The `detection` config section.
        catalog: Reference catalog (feature_print).
        anchor_tracker: Frame-driven anchor tracker (anchor); without one the
            source only reflects pushed anchor updates.
        engine: Native engine binding (native).
        extractor: Optional extractor override (feature_print).
    """
    method = detection_cfg.get("method", "feature_print")

    if method == "feature_print":
        if catalog is None:
            raise ValueError("feature_print detection requires a reference catalog")
        threshold = detection_cfg.get("match_distance_threshold", DEFAULT_MATCH_THRESHOLD)
        return FeaturePrintSource(catalog, extractor=extractor, matcher=Matcher(threshold))

    if method == "anchor":
        return AnchorObservationSource(tracker=anchor_tracker)

    if method == "native":
        if engine is None:
            raise ValueError("native detection requires an engine binding")
        return NativeEngineSource(engine, init_timeout=float(detection_cfg.get("native_init_timeout", 10.0)))

    raise ValueError(f"Unknown detection method: {method}")
