"""
Presentation layer: turns lifecycle events into what the user sees and hears.
"""

from .overlay import AmountOverlay

__all__ = ["AmountOverlay"]
