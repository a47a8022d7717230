"""
Reference catalog of known banknotes.

The catalog is built once at startup from bundled reference images and is
read-only afterwards, so detection sessions can share it without locking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import cv2
import numpy as np

from models.banknote import is_recognized_label
from .errors import EntrySkipped, ExtractionError
from .extractor import Descriptor, FeatureExtractor

DEFAULT_PATTERNS = ("*.jpg", "*.jpeg", "*.png")


@dataclass(frozen=True)
class ReferenceEntry:
    """A known note: its label and reference descriptor."""
    label: str
    descriptor: Descriptor


class ReferenceCatalog:
    """Ordered, immutable collection of reference entries."""

    def __init__(
        self,
        entries: Iterable[ReferenceEntry] = (),
        skipped: Iterable[EntrySkipped] = (),
    ):
        self._entries: Tuple[ReferenceEntry, ...] = tuple(entries)
        self._skipped: Tuple[EntrySkipped, ...] = tuple(skipped)

    @classmethod
    def build(
        cls,
        images: Iterable[Tuple[str, Optional[np.ndarray]]],
        extractor: Optional[FeatureExtractor] = None,
    ) -> "ReferenceCatalog":
        """
        Extract a descriptor for every (label, image) pair.

        Entries that cannot be used are skipped and reported once; building
        never fails because of a single bad reference.
        """
        extractor = extractor or FeatureExtractor()
        entries: List[ReferenceEntry] = []
        skipped: List[EntrySkipped] = []
        seen = set()

        for label, image in images:
            reason = None
            if not is_recognized_label(label):
                reason = "unrecognized label, expected <CURRENCY>_<DENOMINATION>"
            elif label in seen:
                reason = "duplicate label"
            else:
                try:
                    descriptor = extractor.extract(image)
                except ExtractionError as e:
                    reason = str(e)

            if reason is not None:
                entry_skipped = EntrySkipped(label, reason)
                logging.warning(str(entry_skipped))
                skipped.append(entry_skipped)
                continue

            seen.add(label)
            entries.append(ReferenceEntry(label=label, descriptor=descriptor))

        logging.info(
            f"Reference catalog built: {len(entries)} entries, {len(skipped)} skipped"
        )
        return cls(entries, skipped)

    @classmethod
    def from_directory(
        cls,
        directory: Union[str, Path],
        extractor: Optional[FeatureExtractor] = None,
        labels: Optional[Sequence[str]] = None,
        patterns: Sequence[str] = DEFAULT_PATTERNS,
    ) -> "ReferenceCatalog":
        """
        Build the catalog from a directory of reference images.

        The label of each image is its file stem (e.g. AUD_50.jpg). When
        `labels` is given, only those labels are loaded, in that order; a
        label without an image is skipped like a corrupt one.
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise FileNotFoundError(f"Reference directory not found: {directory}")

        paths: Dict[str, Path] = {}
        for pattern in patterns:
            for path in sorted(directory.glob(pattern)):
                paths.setdefault(path.stem, path)

        wanted = list(labels) if labels is not None else sorted(paths)
        logging.info(f"Loading {len(wanted)} reference image(s) from {directory}")
        return cls.build(
            ((label, _read_image(paths.get(label))) for label in wanted),
            extractor,
        )

    @property
    def entries(self) -> Tuple[ReferenceEntry, ...]:
        return self._entries

    @property
    def skipped(self) -> Tuple[EntrySkipped, ...]:
        """Entries left out while building, in input order."""
        return self._skipped

    @property
    def labels(self) -> List[str]:
        return [entry.label for entry in self._entries]

    def get(self, label: str) -> Optional[ReferenceEntry]:
        for entry in self._entries:
            if entry.label == label:
                return entry
        return None

    def __contains__(self, label: object) -> bool:
        return any(entry.label == label for entry in self._entries)

    def __iter__(self) -> Iterator[ReferenceEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ReferenceCatalog(labels={self.labels}, skipped={len(self._skipped)})"


def _read_image(path: Optional[Path]) -> Optional[np.ndarray]:
    if path is None:
        return None
    # imread returns None for unreadable files; the build step reports those.
    return cv2.imread(str(path), cv2.IMREAD_COLOR)
