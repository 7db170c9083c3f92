"""
Rise content detection.

A document counts as Rise content when it contains any marker from the
vocabulary, in any letter case. There is no confidence score.
"""

from typing import Iterable, Optional

from .config import DEFAULT_RISE_MARKERS


class MarkerDetector:
    """Boolean gate deciding whether HTML came out of Articulate Rise."""

    def __init__(self, markers: Optional[Iterable[str]] = None):
        source = DEFAULT_RISE_MARKERS if markers is None else markers
        self.markers = [m.lower() for m in source]

    def is_rise_content(self, content: str) -> bool:
        content_lower = content.lower()
        return any(marker in content_lower for marker in self.markers)


def is_rise_content(content: str) -> bool:
    """Convenience function using the default marker vocabulary."""
    return MarkerDetector().is_rise_content(content)
