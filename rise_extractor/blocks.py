"""
Block extractors: content blocks, interactions, assessments, media.

Each category owns a fixed, ordered pattern list. Results come out pattern
by pattern (list order), left to right within a pattern. Categories are
scanned independently, so a span can show up more than once: an <img>
inside an image-block is part of that block's text AND a MediaReference.
"""

from typing import Optional

from .schemas import ContentBlock, Interaction, Assessment, MediaReference
from .scanner import RegionPattern, TextRegionScanner, RegexRegionScanner
from .sanitizer import clean_text

BLOCK_PATTERNS = [
    RegionPattern(kind="text", tag="div", class_contains="text-block"),
    RegionPattern(kind="image", tag="div", class_contains="image-block"),
    RegionPattern(kind="video", tag="div", class_contains="video-block"),
    RegionPattern(kind="audio", tag="div", class_contains="audio-block"),
]

# Only buttons styled by Rise count; their label must be plain text
INTERACTION_PATTERNS = [
    RegionPattern(kind="button", tag="button", class_contains="rise", body="text"),
    RegionPattern(kind="accordion", tag="div", class_contains="accordion"),
    RegionPattern(kind="tab", tag="div", class_contains="tab"),
    RegionPattern(kind="popup", tag="div", class_contains="popup"),
]

ASSESSMENT_PATTERNS = [
    RegionPattern(kind="quiz", tag="div", class_contains="quiz"),
    RegionPattern(kind="question", tag="div", class_contains="question"),
    RegionPattern(kind="knowledge-check", tag="div", class_contains="knowledge-check"),
]

MEDIA_PATTERNS = [
    RegionPattern(kind="image", tag="img", attr="src"),
    RegionPattern(kind="video", tag="video", attr="src"),
    RegionPattern(kind="audio", tag="audio", attr="src"),
]


class BlockExtractor:
    """Scans a lesson document for typed regions."""

    def __init__(self, scanner: Optional[TextRegionScanner] = None, dedupe_media: bool = False):
        self.scanner = scanner or RegexRegionScanner()
        self.dedupe_media = dedupe_media

    def extract_blocks(self, content: str) -> list[ContentBlock]:
        return [
            ContentBlock(type=m.kind, content=clean_text(m.inner), raw_html=m.raw)
            for m in self.scanner.scan(content, BLOCK_PATTERNS)
        ]

    def extract_interactions(self, content: str) -> list[Interaction]:
        return [
            Interaction(type=m.kind, content=clean_text(m.inner))
            for m in self.scanner.scan(content, INTERACTION_PATTERNS)
        ]

    def extract_assessments(self, content: str) -> list[Assessment]:
        return [
            Assessment(type=m.kind, content=clean_text(m.inner))
            for m in self.scanner.scan(content, ASSESSMENT_PATTERNS)
        ]

    def extract_media(self, content: str) -> list[MediaReference]:
        """Media source locators, kept raw (no cleaning, no URL resolution)."""
        media = []
        seen = set()

        for m in self.scanner.scan(content, MEDIA_PATTERNS):
            if self.dedupe_media:
                key = (m.kind, m.inner)
                if key in seen:
                    continue
                seen.add(key)
            media.append(MediaReference(type=m.kind, src=m.inner, element=m.raw))

        return media
