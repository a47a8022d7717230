"""
Tests for the reference catalog.
"""

import numpy as np
import pytest

from features.catalog import ReferenceCatalog
from features.errors import CatalogBuildError, EntrySkipped
from features.extractor import FeatureExtractor


class TestBuild:
    def test_preserves_order(self, note_image):
        catalog = ReferenceCatalog.build([
            ("USD_20", note_image(3)),
            ("AUD_5", note_image(1)),
        ])
        assert catalog.labels == ["USD_20", "AUD_5"]
        assert len(catalog) == 2
        assert "AUD_5" in catalog

    def test_descriptor_matches_extractor(self, note_image):
        image = note_image(1)
        catalog = ReferenceCatalog.build([("AUD_5", image)])
        assert catalog.get("AUD_5").descriptor == FeatureExtractor().extract(image)

    def test_blank_and_missing_images_are_skipped(self, note_image, blank_image):
        catalog = ReferenceCatalog.build([
            ("AUD_5", note_image(1)),
            ("AUD_10", blank_image),
            ("AUD_20", None),
        ])
        assert catalog.labels == ["AUD_5"]
        assert [s.label for s in catalog.skipped] == ["AUD_10", "AUD_20"]

    def test_unrecognised_label_is_skipped(self, note_image):
        catalog = ReferenceCatalog.build([("logo", note_image(1))])
        assert len(catalog) == 0
        assert "unrecognized" in catalog.skipped[0].reason

    def test_duplicate_label_keeps_first(self, note_image):
        first = note_image(1)
        catalog = ReferenceCatalog.build([
            ("AUD_5", first),
            ("AUD_5", note_image(2)),
        ])
        assert len(catalog) == 1
        assert catalog.get("AUD_5").descriptor == FeatureExtractor().extract(first)
        assert catalog.skipped[0].reason == "duplicate label"

    def test_skips_are_logged(self, note_image, blank_image, caplog):
        with caplog.at_level("WARNING"):
            ReferenceCatalog.build([("AUD_5", blank_image)])
        assert "Reference 'AUD_5' skipped" in caplog.text

    def test_empty_catalog(self):
        catalog = ReferenceCatalog.build([])
        assert len(catalog) == 0
        assert catalog.get("AUD_5") is None
        assert list(catalog) == []


class TestEntrySkipped:
    def test_is_catalog_error(self):
        skipped = EntrySkipped("AUD_5", "no image data")
        assert isinstance(skipped, CatalogBuildError)
        assert str(skipped) == "Reference 'AUD_5' skipped: no image data"


class TestFromDirectory:
    def test_loads_sorted_by_stem(self, reference_dir):
        catalog = ReferenceCatalog.from_directory(reference_dir)
        assert catalog.labels == ["AUD_10", "AUD_5", "USD_20"]
        assert sorted(s.label for s in catalog.skipped) == ["EUR_50", "logo"]

    def test_explicit_labels(self, reference_dir):
        catalog = ReferenceCatalog.from_directory(reference_dir, labels=["USD_20", "AUD_5", "NZD_5"])
        assert catalog.labels == ["USD_20", "AUD_5"]
        assert [s.label for s in catalog.skipped] == ["NZD_5"]

    def test_png_round_trip_matches_memory(self, reference_dir, note_image):
        catalog = ReferenceCatalog.from_directory(reference_dir)
        assert catalog.get("AUD_5").descriptor == FeatureExtractor().extract(note_image(1))

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ReferenceCatalog.from_directory(tmp_path / "nope")

    def test_corrupt_file_is_skipped(self, tmp_path, note_image):
        (tmp_path / "AUD_5.jpg").write_bytes(b"not an image")
        catalog = ReferenceCatalog.from_directory(tmp_path)
        assert len(catalog) == 0
        assert catalog.skipped[0].label == "AUD_5"


def test_corrupt_reference_is_left_out(note_image):
    corrupt = np.frombuffer(b"\x00\x01garbage", dtype=np.uint8)
    catalog = ReferenceCatalog.build([("AUD_50", note_image(1)), ("AUD_100", corrupt)])
    assert catalog.labels == ["AUD_50"]
    assert [s.label for s in catalog.skipped] == ["AUD_100"]
