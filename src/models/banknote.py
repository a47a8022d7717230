"""
Banknote label model.

Reference labels follow the "<CURRENCY>_<DENOMINATION>" convention used for
the bundled reference images (e.g. "AUD_50"). Anything else is treated as an
unrecognised label.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

LABEL_SEPARATOR = "_"


@dataclass(frozen=True)
class Banknote:
    """A recognised note: currency code plus denomination."""
    currency: str
    amount: str

    @property
    def label(self) -> str:
        return f"{self.currency}{LABEL_SEPARATOR}{self.amount}"

    @property
    def summary(self) -> str:
        """Text used for non-visual (accessibility) announcements."""
        return f"{self.currency} {self.amount}"

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "currency": self.currency,
            "amount": self.amount,
            "summary": self.summary,
        }


def parse_label(label: Optional[str]) -> Optional[Banknote]:
    """
    Split a label into currency and amount.

    Returns None unless the label has exactly two non-empty parts.
    """
    if not label:
        return None
    parts = label.split(LABEL_SEPARATOR)
    if len(parts) != 2 or not all(parts):
        return None
    return Banknote(currency=parts[0], amount=parts[1])


def is_recognized_label(label: Optional[str]) -> bool:
    return parse_label(label) is not None


def accessibility_summary(label: Optional[str]) -> Optional[str]:
    """Return "<currency> <amount>" for a recognised label, else None."""
    note = parse_label(label)
    return note.summary if note else None
