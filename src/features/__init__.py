"""
Feature prints, the reference catalog and the matcher.
"""

from .errors import ExtractionError, NoFeaturesError, CatalogBuildError, EntrySkipped
from .extractor import Descriptor, ExtractorConfig, FeatureExtractor
from .catalog import ReferenceCatalog, ReferenceEntry
from .matcher import DEFAULT_MATCH_THRESHOLD, Matcher, match

__all__ = [
    "ExtractionError",
    "NoFeaturesError",
    "CatalogBuildError",
    "EntrySkipped",
    "Descriptor",
    "ExtractorConfig",
    "FeatureExtractor",
    "ReferenceCatalog",
    "ReferenceEntry",
    "DEFAULT_MATCH_THRESHOLD",
    "Matcher",
    "match",
]
