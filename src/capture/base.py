"""
Frame sources feeding the detection runner.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator, Optional

from models.frame import FrameData


class SourceUnavailableError(RuntimeError):
    """The camera or video file could not be opened."""


class FrameSource(ABC):
    """
    Produces FrameData for the runner.

    open() must succeed before read(). read() returns None for a missed
    frame or the end of a video file; the runner decides how many misses it
    tolerates. close() may be called more than once.
    """

    def __init__(self, source_id: str = "camera"):
        self.source_id = source_id
        self._is_open = False
        self._frame_index = 0

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def frame_index(self) -> int:
        """Frames read since the last open()."""
        return self._frame_index

    @abstractmethod
    def open(self) -> None:
        """
        Raises:
            SourceUnavailableError: If the source cannot be opened.
        """

    @abstractmethod
    def read(self) -> Optional[FrameData]:
        ...

    @abstractmethod
    def close(self) -> None:
        ...

    def frames(self) -> Iterator[FrameData]:
        """Yield frames until the first missed read."""
        if not self._is_open:
            raise RuntimeError(f"Frame source {self.source_id} is not open")
        frame_data = self.read()
        while frame_data is not None:
            yield frame_data
            frame_data = self.read()

    def __enter__(self) -> "FrameSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
