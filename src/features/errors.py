"""
Error taxonomy for feature extraction and catalog construction.
"""

from __future__ import annotations


class ExtractionError(Exception):
    """Base class for descriptor extraction failures."""


class NoFeaturesError(ExtractionError):
    """The image has no usable structure (blank, corrupt or missing)."""


class CatalogBuildError(Exception):
    """Base class for problems found while building the reference catalog."""


class EntrySkipped(CatalogBuildError):
    """
    A reference entry was left out of the catalog.

    Instances are recorded on the catalog rather than raised, so one bad
    reference image only degrades recognition of that note.
    """

    def __init__(self, label: str, reason: str):
        super().__init__(f"Reference '{label}' skipped: {reason}")
        self.label = label
        self.reason = reason
