"""
Amount overlay.

Shows the recognised note's currency and denomination while a note is
present and announces it once per appearance for screen-reader users.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

import cv2
import numpy as np

from models.banknote import Banknote, parse_label
from models.lifecycle_event import EventType, LifecycleEvent

# Colors (BGR)
COLOR_PANEL = (32, 32, 32)
COLOR_CURRENCY = (200, 200, 200)
COLOR_AMOUNT = (255, 255, 255)


class AmountOverlay:
    """
    Event subscriber holding the currently displayed note.

    handle_event() runs on the dispatcher thread; render() runs on the
    display thread. Both go through the same lock.
    """

    def __init__(self, announce: Optional[Callable[[str], None]] = None):
        self.announce = announce
        self._lock = threading.Lock()
        self._note: Optional[Banknote] = None

    @property
    def note(self) -> Optional[Banknote]:
        with self._lock:
            return self._note

    @property
    def visible(self) -> bool:
        return self.note is not None

    def __call__(self, event: LifecycleEvent) -> None:
        self.handle_event(event)

    def handle_event(self, event: LifecycleEvent) -> None:
        if event.type is EventType.DISAPPEARED:
            self.hide()
            return

        note = parse_label(event.label)
        if note is None:
            logging.debug(f"No amount for unrecognised label: {event.label!r}")
            self.hide()
            return
        self.show(note)

    def show(self, note: Banknote) -> None:
        with self._lock:
            if self._note == note:
                return
            self._note = note
        logging.info(f"Showing amount: {note.summary}")
        if self.announce is not None:
            self.announce(note.summary)

    def hide(self) -> None:
        with self._lock:
            if self._note is None:
                return
            self._note = None
        logging.info("Amount hidden")

    def render(self, frame: np.ndarray) -> np.ndarray:
        """Return a copy of the frame with the amount panel drawn on it."""
        out = frame.copy()
        note = self.note
        if note is None:
            return out

        h, w = out.shape[:2]
        font = cv2.FONT_HERSHEY_SIMPLEX
        scale = max(0.5, w / 640.0)
        thickness = max(1, int(round(2 * scale)))

        (aw, ah), _ = cv2.getTextSize(note.amount, font, 2.0 * scale, thickness + 1)
        (cw, ch), _ = cv2.getTextSize(note.currency, font, scale, thickness)
        pad = int(12 * scale)
        panel_w = max(aw, cw) + 2 * pad
        panel_h = ah + ch + 3 * pad
        x0 = max(0, (w - panel_w) // 2)
        y0 = max(0, h - panel_h - pad)

        cv2.rectangle(out, (x0, y0), (x0 + panel_w, y0 + panel_h), COLOR_PANEL, -1)
        cv2.putText(
            out, note.currency, (x0 + (panel_w - cw) // 2, y0 + pad + ch),
            font, scale, COLOR_CURRENCY, thickness,
        )
        cv2.putText(
            out, note.amount, (x0 + (panel_w - aw) // 2, y0 + 2 * pad + ch + ah),
            font, 2.0 * scale, COLOR_AMOUNT, thickness + 1,
        )
        return out
