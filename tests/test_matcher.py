"""
Tests for nearest-reference matching.
"""

import math

import pytest

from features.catalog import ReferenceCatalog, ReferenceEntry
from features.extractor import Descriptor, FeatureExtractor
from features.matcher import DEFAULT_MATCH_THRESHOLD, Matcher, match


def _catalog(*pairs):
    return ReferenceCatalog([ReferenceEntry(label, Descriptor(vec)) for label, vec in pairs])


QUERY = Descriptor([0.0, 0.0])


class TestMatch:
    def test_picks_closest_within_threshold(self):
        catalog = _catalog(("AUD_5", [0.1, 0.0]), ("AUD_10", [0.8, 0.0]))
        result = match(QUERY, catalog, threshold=30.0)
        assert result.label == "AUD_5"
        assert result.distance == pytest.approx(5.0)

    def test_closest_above_threshold_is_no_match(self):
        catalog = _catalog(("AUD_10", [0.8, 0.0]))
        result = match(QUERY, catalog, threshold=30.0)
        assert result.label is None
        assert result.distance == pytest.approx(40.0)

    def test_threshold_is_exclusive(self):
        catalog = _catalog(("AUD_5", [0.6, 0.0]))
        assert match(QUERY, catalog, threshold=30.0).label is None

    def test_tie_goes_to_first_entry(self):
        catalog = _catalog(("AUD_5", [0.7, 0.0]), ("AUD_10", [0.0, 0.7]))
        result = match(QUERY, catalog, threshold=40.0)
        assert result.label == "AUD_5"
        assert result.distance == pytest.approx(35.0)

    def test_tie_above_threshold(self):
        catalog = _catalog(("AUD_5", [0.7, 0.0]), ("AUD_10", [0.0, 0.7]))
        result = match(QUERY, catalog, threshold=30.0)
        assert result.label is None
        assert result.distance == pytest.approx(35.0)

    def test_empty_catalog(self):
        result = match(QUERY, ReferenceCatalog([]))
        assert result.label is None
        assert result.distance == math.inf

    def test_default_threshold(self):
        assert DEFAULT_MATCH_THRESHOLD == 30.0


class TestMatcher:
    def test_rejects_non_positive_threshold(self):
        with pytest.raises(ValueError):
            Matcher(0)

    def test_uses_configured_threshold(self):
        catalog = _catalog(("AUD_10", [0.8, 0.0]))
        assert Matcher(45.0).match(QUERY, catalog).label == "AUD_10"
        assert Matcher(30.0).match(QUERY, catalog).label is None

    def test_rank(self):
        catalog = _catalog(("A_1", [0.8, 0.0]), ("B_1", [0.1, 0.0]), ("C_1", [0.0, 0.8]))
        ranked = Matcher().rank(QUERY, catalog)
        assert [label for label, _ in ranked] == ["B_1", "A_1", "C_1"]


class TestImageMatching:
    def test_recognises_reference_under_lighting_change(self, note_image):
        catalog = ReferenceCatalog.build([
            ("AUD_5", note_image(1)),
            ("AUD_10", note_image(2)),
            ("USD_20", note_image(3)),
        ])
        query = FeatureExtractor().extract(note_image(2, offset=8))
        result = Matcher().match(query, catalog)
        assert result.label == "AUD_10"

    def test_unknown_note_is_not_matched(self, note_image):
        catalog = ReferenceCatalog.build([
            ("AUD_5", note_image(1)),
            ("AUD_10", note_image(2)),
        ])
        query = FeatureExtractor().extract(note_image(9))
        assert Matcher().match(query, catalog).label is None
