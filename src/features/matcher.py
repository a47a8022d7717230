"""
Nearest-reference matching with an acceptance threshold.
"""

from __future__ import annotations

import math
from typing import List, Tuple

from models.detection import MatchResult
from .catalog import ReferenceCatalog
from .extractor import Descriptor

DEFAULT_MATCH_THRESHOLD = 30.0


def match(
    descriptor: Descriptor,
    catalog: ReferenceCatalog,
    threshold: float = DEFAULT_MATCH_THRESHOLD,
) -> MatchResult:
    """
    Find the closest catalog entry.

    Linear scan keeping the smallest distance; on exact ties the entry seen
    first (catalog order) wins. The label is reported only when the distance
    is strictly below the threshold.
    """
    best_label = None
    best_distance = math.inf
    for entry in catalog:
        dist = descriptor.distance(entry.descriptor)
        if dist < best_distance:
            best_distance = dist
            best_label = entry.label

    if best_label is not None and best_distance < threshold:
        return MatchResult(label=best_label, distance=best_distance)
    return MatchResult(label=None, distance=best_distance)


class Matcher:
    """Matcher bound to a configured acceptance threshold."""

    def __init__(self, threshold: float = DEFAULT_MATCH_THRESHOLD):
        if threshold <= 0:
            raise ValueError("Match threshold must be positive")
        self.threshold = float(threshold)

    def match(self, descriptor: Descriptor, catalog: ReferenceCatalog) -> MatchResult:
        return match(descriptor, catalog, self.threshold)

    def rank(self, descriptor: Descriptor, catalog: ReferenceCatalog) -> List[Tuple[str, float]]:
        """All (label, distance) pairs, closest first; ties keep catalog order."""
        scored = [(entry.label, descriptor.distance(entry.descriptor)) for entry in catalog]
        return sorted(scored, key=lambda item: item[1])
